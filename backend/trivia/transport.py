"""Outbound side of the game: Socket.IO rooms and broadcasts."""


def room_name(session_id: str) -> str:
    return f"session:{session_id}"


class SocketIOBroadcaster:
    """Deliver session events to every connection in the session's room.

    Works outside a request context (round timers run as background tasks),
    so it talks to the underlying python-socketio server directly.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def enter(self, connection_id: str, session_id: str) -> None:
        self.socketio.server.enter_room(connection_id, room_name(session_id), namespace=self.namespace)

    def exit(self, connection_id: str, session_id: str) -> None:
        self.socketio.server.leave_room(connection_id, room_name(session_id), namespace=self.namespace)

    def emit(self, session_id: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=room_name(session_id), namespace=self.namespace)

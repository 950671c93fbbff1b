from flask import current_app, request
from flask_socketio import emit

from trivia import socketio
from trivia.errors import GameError


def _controller():
    return current_app.extensions['trivia']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _run(command, *args):
    """Invoke a controller command and turn its outcome into the ack payload."""
    try:
        return command(*args)
    except GameError as err:
        current_app.logger.info(f"[reject] sid={_get_sid()} {command.__name__} -> {err.kind.value}")
        return err.to_ack()


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'id': _get_sid()})


def handle_disconnect(*args):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    _controller().disconnect(sid)


def handle_join_session(data=None):
    data = _payload(data)
    return _run(_controller().join, data.get('sessionId'), _get_sid(), data.get('name'))


def handle_leave_session(data=None):
    data = _payload(data)
    _controller().leave(data.get('sessionId'), _get_sid())


def handle_set_question(data=None):
    data = _payload(data)
    return _run(
        _controller().set_question,
        data.get('sessionId'), _get_sid(), data.get('question'), data.get('answer'),
    )


def handle_start_game(data=None):
    data = _payload(data)
    return _run(_controller().start_game, data.get('sessionId'), _get_sid())


def handle_guess(data=None):
    data = _payload(data)
    return _run(_controller().guess, data.get('sessionId'), _get_sid(), data.get('guess'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the game's Socket.IO event handlers on ``namespace``.

    Handlers return the acknowledgement payload; Flask-SocketIO sends it
    back to the client's callback.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinSession', handle_join_session, namespace=namespace)
    socketio.on_event('leaveSession', handle_leave_session, namespace=namespace)
    socketio.on_event('setQuestion', handle_set_question, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('guess', handle_guess, namespace=namespace)

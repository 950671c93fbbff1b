import copy
import os
import random
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia import create_app, socketio
from trivia.services.sessions import GameRules, SessionController, SessionRegistry, TimerHandle


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROUND_DURATION_SEC = 60
    MIN_PLAYERS = 3
    MAX_ATTEMPTS = 3
    CORRECT_GUESS_POINTS = 10
    LOG_LEVEL = 'DEBUG'
    TIMER_HEARTBEAT_SEC = 0


class ManualScheduler:
    """Fake clock scheduler: nothing fires until the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.scheduled = []  # every (due, handle, callback) ever scheduled
        self._pending = []

    def schedule(self, delay, callback, label=''):
        handle = TimerHandle(delay, label)
        entry = (self.now + delay, handle, callback)
        self.scheduled.append(entry)
        self._pending.append(entry)
        return handle

    def advance(self, seconds):
        self.now += seconds
        due = [e for e in self._pending if e[0] <= self.now]
        self._pending = [e for e in self._pending if e[0] > self.now]
        for _, handle, callback in due:
            if not handle.cancelled:
                callback(handle)

    def fire_late(self, index=-1):
        """Run a callback as if its worker woke up just before it was cancelled."""
        _, handle, callback = self.scheduled[index]
        callback(handle)


class RecordingBroadcaster:
    def __init__(self):
        self.rooms = defaultdict(set)
        self.events = []

    def enter(self, connection_id, session_id):
        self.rooms[session_id].add(connection_id)

    def exit(self, connection_id, session_id):
        self.rooms[session_id].discard(connection_id)

    def emit(self, session_id, event, payload):
        self.events.append((session_id, event, copy.deepcopy(payload), frozenset(self.rooms[session_id])))

    def named(self, event, session_id=None):
        return [p for (sid, name, p, _) in self.events if name == event and (session_id is None or sid == session_id)]

    def clear(self):
        self.events = []


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def registry():
    return SessionRegistry()


@pytest.fixture()
def controller(registry, broadcaster, scheduler):
    return SessionController(registry, broadcaster, scheduler, rules=GameRules(), rng=random.Random(1234))


@pytest.fixture()
def room(controller, broadcaster):
    """Session 'r1' with A (master), B and C joined and a question set."""
    controller.join('r1', 'A', 'Alice')
    controller.join('r1', 'B', 'Bob')
    controller.join('r1', 'C', 'Cara')
    controller.set_question('r1', 'A', 'capital of France?', 'Paris')
    broadcaster.clear()
    return 'r1'


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler, rng=random.Random(1234))
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; returns (client, connection id)."""
    clients = []

    def _connect(app=None):
        test_client = socketio.test_client(app or flask_app, flask_test_client=(app or flask_app).test_client())
        clients.append(test_client)
        greeting = [e for e in test_client.get_received() if e['name'] == 'connected']
        return test_client, greeting[0]['args'][0]['id']

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass

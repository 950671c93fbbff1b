import random

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config, parse_seed

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, scheduler=None, rng=None):
    """Build the Flask app with a fresh, empty session registry.

    ``scheduler`` and ``rng`` replace the round timer backend and the
    master reassignment randomness (tests pass deterministic ones).
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from trivia.services.sessions import BackgroundScheduler, GameRules, SessionController, SessionRegistry
    from trivia.transport import SocketIOBroadcaster

    if scheduler is None:
        scheduler = BackgroundScheduler(
            socketio,
            heartbeat_sec=flask_app.config.get('TIMER_HEARTBEAT_SEC', 0),
            logger=flask_app.logger,
        )
    if rng is None:
        seed = parse_seed(flask_app.config.get('MASTER_RNG_SEED'))
        rng = random.Random(seed) if seed is not None else random.Random()

    flask_app.extensions['trivia'] = SessionController(
        SessionRegistry(logger=flask_app.logger),
        SocketIOBroadcaster(socketio, namespace=namespace),
        scheduler,
        rules=GameRules.from_config(flask_app.config),
        rng=rng,
        logger=flask_app.logger,
    )

    from trivia.main import main
    flask_app.register_blueprint(main)

    from trivia.api.sessions import sessions
    # Introspection only; the game itself runs over Socket.IO
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from trivia.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    return flask_app

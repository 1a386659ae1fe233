from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(config):
    raw = config.get('CORS_ORIGINS') or '*'
    if raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Ensure models are registered on the metadata before create_all
    from numberguessr import models  # noqa: F401
    if flask_app.config.get('CREATE_TABLES_ON_START'):
        with flask_app.app_context():
            db.create_all()

    # One engine per app; rooms live in memory for the lifetime of the process
    from numberguessr.services.game import (
        LeaderboardStore,
        RoomRegistry,
        SessionEngine,
    )
    from numberguessr.socketio_events import SocketIONotifier
    registry = RoomRegistry(code_length=flask_app.config.get('ROOM_CODE_LENGTH', 4))
    engine = SessionEngine(
        registry=registry,
        leaderboard=LeaderboardStore(db),
        notifier=SocketIONotifier(socketio, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/')),
        logger=flask_app.logger,
        default_range=(flask_app.config.get('DEFAULT_RANGE_MIN', 1), flask_app.config.get('DEFAULT_RANGE_MAX', 100)),
        max_name_length=flask_app.config.get('MAX_DISPLAY_NAME_LENGTH', 32),
    )
    flask_app.extensions['session_engine'] = engine

    from numberguessr.main import main
    flask_app.register_blueprint(main)

    from numberguessr.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the leaderboard tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    flask_app.logger.info(f"[startup] namespace={flask_app.config.get('SOCKETIO_NAMESPACE', '/')} code_length={registry.code_length}")
    return flask_app


def get_engine():
    """Return the SessionEngine bound to the current Flask app."""
    return current_app.extensions['session_engine']

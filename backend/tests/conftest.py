import os
import sys
import pytest

# Ensure the backend root (containing the `numberguessr` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from numberguessr import create_app, db, socketio
from numberguessr.services.game import LeaderboardStore, RoomRegistry, SessionEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CREATE_TABLES_ON_START = False
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_CODE_LENGTH = 4
    DEFAULT_RANGE_MIN = 1
    DEFAULT_RANGE_MAX = 100
    MAX_DISPLAY_NAME_LENGTH = 32


class RecordingNotifier:
    """Collects engine notifications instead of sending them."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []

    def send(self, connection_id, event, payload):
        self.sent.append((connection_id, event, payload))

    def broadcast(self, event, payload):
        self.broadcasts.append((event, payload))

    def to(self, connection_id, event=None):
        return [p for cid, e, p in self.sent if cid == connection_id and (event is None or e == event)]

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import numberguessr.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def leaderboard(flask_app):
    return LeaderboardStore(db)


@pytest.fixture()
def engine(flask_app, leaderboard, notifier):
    return SessionEngine(
        registry=RoomRegistry(code_length=4),
        leaderboard=leaderboard,
        notifier=notifier,
        logger=flask_app.logger,
    )


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients, optionally with a stable auth token."""
    created = []

    def _make(token=None):
        kwargs = {'flask_test_client': flask_app.test_client(), 'namespace': '/'}
        if token:
            kwargs['auth'] = {'token': token}
        test_client = socketio.test_client(flask_app, **kwargs)
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/'):
                test_client.disconnect(namespace='/')
        except RuntimeError:
            pass

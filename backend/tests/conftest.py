import os
import sys
import pytest

# Ensure the backend root (containing the `portal` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from portal import create_app, db


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    VERIFICATION_CODE_TTL_SEC = 900
    PLAYER_SESSION_MAX_AGE_SEC = 60 * 60 * 24 * 7
    PLAYER_SESSION_COOKIE_SECURE = False
    IDENTITY_EMAIL_DOMAIN = 'game.local'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import portal.models  # noqa: F401
        db.create_all()
    # Requests push their own app context so the logged-in player is not cached between them
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_context(flask_app):
    with flask_app.app_context():
        yield flask_app
        db.session.remove()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def verified_client(flask_app):
    """Return a factory producing a test client holding a player_session for player_id."""
    def _make(player_id):
        c = flask_app.test_client()
        code = c.post('/verification', json={'playerId': player_id}).get_json()['code']
        res = c.post('/verify', json={'code': code})
        assert res.status_code == 200
        return c
    return _make

import os
import sys
import pytest

# Ensure the backend root (containing the `liao` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from liao import create_app, db


LOGIN_CODE = 'abc1234'
TEAM_NAMES = ['Alpha', 'Bravo', 'Charlie', 'Delta']


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Fast hashing for tests
    BCRYPT_LOG_ROUNDS = 4


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import liao.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def teams(flask_app):
    from liao.models import Team
    rows = [Team(name=name) for name in TEAM_NAMES]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture()
def login_code(flask_app):
    from liao.models import LoginCode
    row = LoginCode()
    row.set_code(LOGIN_CODE)
    db.session.add(row)
    db.session.commit()
    return LOGIN_CODE


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def auth_client(client, login_code, teams):
    res = client.post('/login', json={'code': login_code})
    assert res.status_code == 200
    return client

import os
import random
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, db, socketio
from bingo.models import DEFAULT_AIRLINES, seed_airlines

NAMESPACE = '/ws'
# Exactly one card's worth of airlines (24 + free centre), so every card
# holds every airline once
TEST_POOL = DEFAULT_AIRLINES[:24]


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = NAMESPACE
    LOG_LEVEL = 'DEBUG'
    DATA_SERVICE_BACKEND = 'local'
    DATA_SERVICE_TIMEOUT_SEC = 2
    ROOM_CODE_LENGTH = 6
    CARD_SIZE = 5


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import bingo.models  # noqa: F401
        db.create_all()
        seed_airlines(TEST_POOL)
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['bingo_actions'].registry


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def make():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        created.append(test_client)
        return test_client

    yield make
    for test_client in created:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)


@pytest.fixture()
def force_draw(monkeypatch):
    """Make the next draws pick the named airline."""

    def pick(name):
        monkeypatch.setattr(
            random, 'choice',
            lambda seq: next((a for a in seq if getattr(a, 'name', None) == name), seq[0]),
        )

    return pick


def event_names(packets):
    return [p['name'] for p in packets]


def events_named(packets, name):
    return [p['args'][0] for p in packets if p['name'] == name]

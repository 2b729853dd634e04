import os
import sys
import pytest

# Ensure the backend root (containing the `ito` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from ito import create_app, socketio
from ito.services.games.coordinator import Coordinator
from ito.services.games.registry import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']
    MAX_PLAYERS = 10
    MIN_PLAYERS = 2
    ROOM_CODE_LENGTH = 4
    ROOM_TIMEOUT_SEC = 3600
    SWEEP_INTERVAL_SEC = 60
    NUMBER_LOW = 1
    NUMBER_HIGH = 100
    MAX_NAME_LENGTH = 24
    MAX_CATEGORY_LENGTH = 100
    LOG_LEVEL = 'INFO'


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FixedDealer:
    """Deals the given numbers in seat order."""

    def __init__(self, *numbers):
        self.numbers = list(numbers)

    def __call__(self, count):
        return self.numbers[:count]


class CodeSequence:
    def __init__(self, *codes):
        self.codes = list(codes)

    def __call__(self):
        return self.codes.pop(0)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return RoomRegistry(clock=clock)


@pytest.fixture()
def coordinator(registry):
    return Coordinator(registry=registry, dealer=FixedDealer(12, 47, 3, 80, 55))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Builds Socket.IO test clients on /ws; all are disconnected on teardown."""
    created = []

    def make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        test_client.get_received('/ws')  # flush 'connected'
        created.append(test_client)
        return test_client

    yield make
    for test_client in created:
        try:
            test_client.disconnect(namespace='/ws')
        except Exception:
            pass

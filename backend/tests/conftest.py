import os
import sys
import random
import pytest

# Ensure the backend root (containing the `simon` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from simon import create_app, db, socketio
from simon.services.game import GameEngine, ManualScheduler, MemoryStatsStore, get_engine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    START_DELAY_MS = 1000
    NEXT_ROUND_DELAY_MS = 1000
    INPUT_ACK_MS = 0
    DEFAULT_DIFFICULTY = 'medium'
    STATS_KEY = 'simonGameStats'
    SOUND_ENABLED = True
    CONTROLLER_DEBOUNCE_MS = 0


class FakePresenter:
    """Records every presentation request in call order."""

    def __init__(self):
        self.calls = []
        self.sound_enabled = True

    def show_message(self, text, kind):
        self.calls.append(('show_message', text, kind))

    def play_signal(self, signal):
        self.calls.append(('play_signal', signal))

    def play_sequence(self, sequence, interval_ms, generation):
        self.calls.append(('play_sequence', list(sequence), interval_ms, generation))

    def set_input_enabled(self, enabled):
        self.calls.append(('set_input_enabled', enabled))

    def play_game_over(self):
        self.calls.append(('play_game_over',))

    def show_stats(self, stats):
        self.calls.append(('show_stats', stats))

    def state_changed(self, snapshot):
        self.calls.append(('state_changed', snapshot))

    def toggle_sound(self):
        self.sound_enabled = not self.sound_enabled
        return self.sound_enabled

    def named(self, name):
        return [c for c in self.calls if c[0] == name]

    def messages(self):
        return [(c[1], c[2]) for c in self.named('show_message')]


@pytest.fixture()
def presenter():
    return FakePresenter()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def store():
    return MemoryStatsStore()


@pytest.fixture()
def make_engine(presenter, scheduler, store):
    def _make(**kwargs):
        kwargs.setdefault('rng', random.Random(1234))
        kwargs.setdefault('input_ack_ms', 0)
        return GameEngine(presenter=presenter, store=store, scheduler=scheduler, **kwargs)
    return _make


@pytest.fixture()
def game(make_engine):
    return make_engine()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import simon.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_engine(flask_app):
    return get_engine(flask_app)


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass

import os
import sys
import random
import pytest

# Ensure the backend root (containing the `onenight` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from onenight import create_app, socketio
from onenight.services.games.messages import Timer, Transport
from onenight.services.games.registry import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    NIGHT_IDLE_MIN_SEC = 0
    NIGHT_IDLE_MAX_SEC = 0


class RecordingTransport(Transport):
    """Keeps every outbound event as (kind, target, event, payload)."""

    def __init__(self):
        self.log = []

    def send(self, player_id, event, payload):
        self.log.append(('send', player_id, event, payload))

    def broadcast(self, room_id, event, payload):
        self.log.append(('broadcast', room_id, event, payload))

    def sent_to(self, player_id, event):
        return [p for kind, target, name, p in self.log
                if kind == 'send' and target == player_id and name == event]

    def broadcasts(self, event):
        return [p for kind, _, name, p in self.log if kind == 'broadcast' and name == event]

    def clear(self):
        self.log.clear()


class ManualTimer(Timer):
    """Holds delayed callbacks until the test fires them."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback):
        self.pending.append((delay, callback))

    def fire_next(self):
        _, callback = self.pending.pop(0)
        callback()

    def fire_all(self):
        fired = 0
        while self.pending:
            self.fire_next()
            fired += 1
        return fired


class ScriptedRandom(random.Random):
    """A Random whose shuffle lays the deck out in a chosen order.

    ``pick`` fixes the index used by choice()/randrange() for center cards.
    """

    def __init__(self, deck_order=None, pick=None, seed=1234):
        super().__init__(seed)
        self.deck_order = deck_order
        self.pick = pick

    def shuffle(self, x):
        if self.deck_order is None:
            return super().shuffle(x)
        assert sorted(x) == sorted(self.deck_order)
        x[:] = list(self.deck_order)

    def randrange(self, *args, **kwargs):
        if self.pick is not None:
            return self.pick
        return super().randrange(*args, **kwargs)

    def choice(self, seq):
        if self.pick is not None:
            return seq[self.pick]
        return super().choice(seq)


class Table:
    """A registry wired to recording doubles, with helpers to seat and deal."""

    def __init__(self, deck_order=None, pick=None, room_id='R1'):
        self.transport = RecordingTransport()
        self.timer = ManualTimer()
        self.rng = ScriptedRandom(deck_order=deck_order, pick=pick)
        self.store = {}
        self.registry = RoomRegistry(self.transport, self.timer, store=self.store,
                                     rng=self.rng, idle_delay=(3, 7))
        self.room_id = room_id

    @property
    def session(self):
        return self.registry.get(self.room_id)

    def seat(self, *names):
        ids = []
        for name in names:
            pid = f"sid-{name.lower()}"
            self.registry.join(self.room_id, pid, name)
            ids.append(pid)
        return ids

    def deal(self, player_roles, center_roles):
        """Seat one player per role and start with the deck in exactly this order."""
        names = ['Alice', 'Bob', 'Cara', 'Dan', 'Eve', 'Finn', 'Gus'][:len(player_roles)]
        ids = self.seat(*names)
        self.rng.deck_order = list(player_roles) + list(center_roles)
        counts = {}
        for role in self.rng.deck_order:
            counts[role] = counts.get(role, 0) + 1
        self.session.start(counts)
        return ids

    def route(self, message):
        self.registry.route(self.room_id, message)


@pytest.fixture()
def table():
    return Table()


@pytest.fixture()
def make_table():
    return Table


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


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

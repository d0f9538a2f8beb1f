"""Pytest fixtures for Pitch tests."""
import sys
import os
import random
import pytest

# Add server directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'server'))

from app import app as flask_app
from db import MemoryRoomStore
from rooms import RoomService


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryRoomStore()


@pytest.fixture
def service(store, clock):
    """Room service on an in-memory store with a seeded rng and a fake clock."""
    return RoomService(store, rng=random.Random(7), clock=clock, log_dir='')


@pytest.fixture
def app(service):
    """Create Flask app for testing."""
    flask_app.config.update({
        'TESTING': True,
        'ROOM_SERVICE': service,
    })
    yield flask_app
    flask_app.config['ROOM_SERVICE'] = None


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()

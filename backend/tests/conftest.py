import pytest
import sys
import os

# Add the parent directory to Python path so we can import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from collab.registry import ConnectionRegistry
from collab.rooms import RoomDirectory
from collab.router import EventRouter
from collab.session import SessionController
from collab.transport import Transport


class RecordingTransport(Transport):
    """Transport that keeps every delivered message in memory."""

    def __init__(self):
        self.messages = []
        self.closed = False

    def deliver(self, message):
        if self.closed:
            return False
        self.messages.append(message)
        return True

    async def close(self):
        self.closed = True

    def of_type(self, event_type):
        return [m for m in self.messages if m.get("type") == event_type]


@pytest.fixture
def make_transport():
    """Factory for recording transports"""
    return RecordingTransport


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def rooms():
    return RoomDirectory()


@pytest.fixture
def router(registry, rooms):
    return EventRouter(registry, rooms)


@pytest.fixture
def controller(registry, rooms, router):
    return SessionController(registry, rooms, router)


@pytest.fixture
def open_client(controller, make_transport):
    """Open a connection on the controller and return its transport"""
    def _open(connection_id):
        transport = make_transport()
        controller.open(connection_id, transport)
        transport.messages.clear()  # drop the greeting
        return transport
    return _open

"""
Connection registry - authoritative store of live client links.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """One live client link."""
    id: str
    transport: Transport
    room_id: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def joined(self) -> bool:
        return self.room_id is not None


class ConnectionRegistry:
    """Tracks live connections and the room each one currently occupies."""

    def __init__(self):
        # connection_id -> Connection
        self._connections: Dict[str, Connection] = {}

    def register(self, connection_id: str, transport: Transport,
                 display_name: Optional[str] = None) -> Connection:
        connection = Connection(id=connection_id, transport=transport, display_name=display_name)
        self._connections[connection_id] = connection
        return connection

    def unregister(self, connection_id: str) -> Optional[Connection]:
        """Remove a connection. Returns None if it was already gone."""
        return self._connections.pop(connection_id, None)

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def room_of(self, connection_id: str) -> Optional[str]:
        connection = self._connections.get(connection_id)
        return connection.room_id if connection else None

    def send(self, connection_id: str, message: Dict[str, Any]) -> bool:
        """Deliver one message; dropped silently if the connection is gone."""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug(f"Dropping {message.get('type')} for unknown connection {connection_id}")
            return False
        return connection.transport.deliver(message)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

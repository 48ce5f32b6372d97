"""
Room directory - membership bookkeeping, independent of event semantics.

Rooms are created on first join and deleted as soon as their last member
leaves, so an empty member set is never stored.
"""

import logging
from typing import Dict, Set

logger = logging.getLogger(__name__)


class RoomDirectory:

    def __init__(self):
        # room_id -> set of connection_ids
        self._rooms: Dict[str, Set[str]] = {}

    def join(self, room_id: str, connection_id: str):
        if room_id not in self._rooms:
            self._rooms[room_id] = set()
            logger.debug(f"Room {room_id} opened")
        self._rooms[room_id].add(connection_id)

    def leave(self, room_id: str, connection_id: str):
        members = self._rooms.get(room_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._rooms[room_id]
            logger.info(f"Room {room_id}: no active clients, room closed")

    def members(self, room_id: str) -> Set[str]:
        return self._rooms.get(room_id, set()).copy()

    def members_except(self, room_id: str, connection_id: str) -> Set[str]:
        """Other members of a room; empty for an unknown room."""
        return self.members(room_id) - {connection_id}

    def is_member(self, room_id: str, connection_id: str) -> bool:
        return connection_id in self._rooms.get(room_id, ())

    def summary(self) -> Dict[str, int]:
        """All active rooms with their member counts."""
        return {room: len(members) for room, members in self._rooms.items()}

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

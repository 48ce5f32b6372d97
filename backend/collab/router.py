"""
Event router - forwards in-room events to the other members of the room.

Payloads are passed through untouched. Recipients are the members present
at routing time; nothing is buffered, retried or acknowledged.
"""

import logging
from typing import Any, Dict, Optional

from .events import BroadcastEvent, EventKind
from .registry import ConnectionRegistry
from .rooms import RoomDirectory

logger = logging.getLogger(__name__)


class EventRouter:

    def __init__(self, registry: ConnectionRegistry, rooms: RoomDirectory):
        self.registry = registry
        self.rooms = rooms

    def route(self, sender_id: str, room_id: str, kind: EventKind,
              payload: Optional[Dict[str, Any]] = None) -> int:
        """Forward an event from a room member to its peers.

        Returns the number of peers the event was handed to. Events from a
        connection that is not a member of room_id are dropped.
        """
        if not self.rooms.is_member(room_id, sender_id):
            logger.debug(f"Dropping {kind.value} from {sender_id}: not a member of {room_id}")
            return 0

        event = BroadcastEvent(kind=kind, room_id=room_id, payload=payload or {}, sender_id=sender_id)
        return self.broadcast(event, exclude=sender_id)

    def broadcast(self, event: BroadcastEvent, exclude: Optional[str] = None) -> int:
        """Send an event to every member of its room except `exclude`."""
        message = event.to_message()
        delivered = 0
        for member_id in self.rooms.members_except(event.room_id, exclude):
            if self.registry.send(member_id, message):
                delivered += 1
        return delivered

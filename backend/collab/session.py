"""
Session lifecycle controller.

Handles:
- Opening a connection (register + greeting)
- join-room / leave-room transitions
- Transport disconnects
- Dispatch of inbound events to the router

Every method is synchronous, so each inbound event is applied to the
registry and room directory as one uninterrupted step on the event loop.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .events import (
    ROUTED_KINDS,
    EventKind,
    JoinRoomPayload,
    LeaveRoomPayload,
    parse_kind,
    peer_joined,
    peer_left,
    routed_payload,
)
from .registry import ConnectionRegistry
from .rooms import RoomDirectory
from .router import EventRouter
from .transport import Transport

logger = logging.getLogger(__name__)


class SessionController:
    """Keeps the connection registry and room directory mutually consistent."""

    def __init__(self, registry: ConnectionRegistry, rooms: RoomDirectory, router: EventRouter):
        self.registry = registry
        self.rooms = rooms
        self.router = router

        self._handlers: Dict[EventKind, Callable[[str, Dict[str, Any]], None]] = {
            EventKind.JOIN_ROOM: self._on_join_room,
            EventKind.LEAVE_ROOM: self._on_leave_room,
        }
        for kind in ROUTED_KINDS:
            self._handlers[kind] = self._on_routed

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def open(self, connection_id: str, transport: Transport):
        """Register a new link and tell the client its connection id."""
        self.registry.register(connection_id, transport)
        self.registry.send(connection_id, {
            "type": EventKind.CONNECTED.value,
            "connectionId": connection_id,
        })
        logger.info(f"User connected: {connection_id} ({len(self.registry)} live)")

    def join(self, connection_id: str, room_id: str, display_name: Optional[str] = None):
        """Move a connection into room_id, leaving any previous room first."""
        connection = self.registry.get(connection_id)
        if connection is None:
            logger.debug(f"join-room from unknown connection {connection_id}")
            return

        if display_name is not None:
            connection.display_name = display_name

        if connection.room_id == room_id:
            return
        if connection.room_id is not None:
            self.leave(connection_id)

        connection.room_id = room_id
        self.rooms.join(room_id, connection_id)
        logger.info(f"User {connection_id} ({connection.display_name}) joined room {room_id}")

        self.router.broadcast(peer_joined(room_id, connection_id, connection.display_name),
                              exclude=connection_id)

    def leave(self, connection_id: str, room_id: Optional[str] = None):
        """Take a connection out of its room and notify the remaining members.

        A room_id that is not the connection's current room is ignored.
        """
        connection = self.registry.get(connection_id)
        if connection is None or connection.room_id is None:
            return
        if room_id is not None and room_id != connection.room_id:
            logger.debug(f"leave-room for {room_id} ignored, {connection_id} is in {connection.room_id}")
            return

        current = connection.room_id
        self.rooms.leave(current, connection_id)
        connection.room_id = None
        logger.info(f"User {connection_id} left room {current}")

        self.router.broadcast(peer_left(current, connection_id), exclude=connection_id)

    def disconnect(self, connection_id: str):
        """Tear down a connection. Safe to call any number of times."""
        if connection_id not in self.registry:
            return
        self.leave(connection_id)
        self.registry.unregister(connection_id)
        logger.info(f"User disconnected: {connection_id}")

    # ─────────────────────────────────────────────────────────────────────────
    # Inbound events
    # ─────────────────────────────────────────────────────────────────────────

    def handle(self, connection_id: str, message: Any):
        """Apply one inbound event. Malformed events are logged and dropped."""
        if not isinstance(message, dict):
            logger.warning(f"Dropping non-object event from {connection_id}")
            return

        kind = parse_kind(message.get("type"))
        handler = self._handlers.get(kind) if kind else None
        if handler is None:
            logger.warning(f"Dropping unknown event type {message.get('type')!r} from {connection_id}")
            return

        handler(connection_id, message)

    def _on_join_room(self, connection_id: str, message: Dict[str, Any]):
        try:
            payload = JoinRoomPayload.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed join-room from {connection_id}: {e.error_count()} error(s)")
            return
        self.join(connection_id, payload.room_id, payload.display_name)

    def _on_leave_room(self, connection_id: str, message: Dict[str, Any]):
        try:
            payload = LeaveRoomPayload.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed leave-room from {connection_id}: {e.error_count()} error(s)")
            return
        self.leave(connection_id, payload.room_id)

    def _on_routed(self, connection_id: str, message: Dict[str, Any]):
        room_id = message.get("roomId")
        if not isinstance(room_id, str) or not room_id:
            logger.warning(f"Dropping {message.get('type')} from {connection_id}: missing roomId")
            return
        self.router.route(connection_id, room_id, EventKind(message["type"]), routed_payload(message))

"""
Event vocabulary for workspace collaboration rooms.

Inbound events arrive as JSON objects whose "type" field names the kind.
Outbound events use the same shape so clients can switch on "type".
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    # Lifecycle (client -> server)
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"

    # Routed to room peers
    CURSOR_UPDATE = "cursor-update"
    CODE_UPDATE = "code-update"
    FILE_CREATED = "file-created"
    FILE_DELETED = "file-deleted"
    FILE_SELECTED = "file-selected"

    # Server -> client
    CONNECTED = "connected"
    USER_JOINED = "user-joined"
    USER_LEFT = "user-left"
    ERROR = "error"


ROUTED_KINDS = frozenset({
    EventKind.CURSOR_UPDATE,
    EventKind.CODE_UPDATE,
    EventKind.FILE_CREATED,
    EventKind.FILE_DELETED,
    EventKind.FILE_SELECTED,
})

# Fields that address the event and are not echoed to peers
ENVELOPE_FIELDS = ("type", "roomId")


def room_id_for_workspace(workspace_id: str) -> str:
    """Room name used by the editor for a workspace."""
    return f"workspace-{workspace_id}"


def parse_kind(value: Any) -> Optional[EventKind]:
    """Return the EventKind for a raw "type" value, or None if unknown."""
    try:
        return EventKind(value)
    except ValueError:
        return None


class JoinRoomPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId", min_length=1)
    display_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "username"),
    )


class LeaveRoomPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId", min_length=1)


@dataclass
class BroadcastEvent:
    """A transient message fanned out to the members of one room."""
    kind: EventKind
    room_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    sender_id: Optional[str] = None

    def to_message(self) -> Dict[str, Any]:
        """Wire form sent to each recipient.

        The sender's connection id is written last so a client cannot
        spoof it through the payload.
        """
        message = {"type": self.kind.value}
        message.update(self.payload)
        if self.sender_id is not None:
            message["connectionId"] = self.sender_id
            if self.kind == EventKind.CURSOR_UPDATE:
                # Older editor builds key cursors by userId
                message["userId"] = self.sender_id
        return message


def routed_payload(message: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the addressing fields from an inbound routed event."""
    return {k: v for k, v in message.items() if k not in ENVELOPE_FIELDS}


def peer_joined(room_id: str, connection_id: str, display_name: Optional[str]) -> BroadcastEvent:
    return BroadcastEvent(
        kind=EventKind.USER_JOINED,
        room_id=room_id,
        payload={
            "connectionId": connection_id,
            "displayName": display_name,
            "userId": connection_id,
            "username": display_name,
        },
    )


def peer_left(room_id: str, connection_id: str) -> BroadcastEvent:
    return BroadcastEvent(
        kind=EventKind.USER_LEFT,
        room_id=room_id,
        payload={"connectionId": connection_id, "userId": connection_id},
    )

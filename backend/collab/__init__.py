"""
Real-time collaboration for shared coding workspaces.

This module provides:
- ConnectionRegistry / RoomDirectory: the shared session state
- EventRouter: fan-out of cursor, code and file events to room peers
- SessionController: join / leave / disconnect lifecycle
- CollaborationManager: serves one WebSocket per client over the above
"""

from .events import EventKind, BroadcastEvent, room_id_for_workspace
from .registry import Connection, ConnectionRegistry
from .rooms import RoomDirectory
from .router import EventRouter
from .session import SessionController
from .transport import Transport, WebSocketOutbox
from .manager import CollaborationManager

__all__ = [
    'EventKind',
    'BroadcastEvent',
    'room_id_for_workspace',
    'Connection',
    'ConnectionRegistry',
    'RoomDirectory',
    'EventRouter',
    'SessionController',
    'Transport',
    'WebSocketOutbox',
    'CollaborationManager',
]

"""
Collaboration Manager - serves workspace rooms over WebSocket.

Owns the connection registry / room directory pair and the router and
session controller built on top of them. One instance per process, kept on
the FastAPI app state; nothing else touches the shared state directly.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect

from .events import EventKind
from .registry import ConnectionRegistry
from .rooms import RoomDirectory
from .router import EventRouter
from .session import SessionController
from .transport import WebSocketOutbox

logger = logging.getLogger(__name__)

# Close codes sent when the server cuts a client off
CLOSE_GOING_AWAY = 1001
CLOSE_SEND_FAILED = 1011


@dataclass
class ClientSession:
    """Transport-side state of one served connection."""
    websocket: WebSocket
    outbox: WebSocketOutbox
    task: asyncio.Task


class CollaborationManager:
    """
    Manages collaborative workspace sessions.

    Features:
    - One room per workspace, joined and left through in-band events
    - Cursor, code and file events rebroadcast to the other room members
    - Peer join/leave notices, including on abrupt disconnect
    """

    def __init__(self, outbox_size: int = 0):
        self.outbox_size = outbox_size
        self.registry = ConnectionRegistry()
        self.rooms = RoomDirectory()
        self.router = EventRouter(self.registry, self.rooms)
        self.controller = SessionController(self.registry, self.rooms, self.router)
        self._running = False
        # connection_id -> ClientSession, for shutdown and eviction
        self._sessions: Dict[str, ClientSession] = {}
        # connection_id -> close code, for sessions being cut off by the server
        self._evicted: Dict[str, int] = {}

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start accepting connections."""
        if self._running:
            return
        self._running = True
        logger.info("Collaboration manager started")

    async def stop(self):
        """Disconnect every live client and stop accepting connections."""
        self._running = False
        tasks = [session.task for session in self._sessions.values()]
        for connection_id in list(self._sessions):
            self._evict(connection_id, CLOSE_GOING_AWAY)
        if tasks:
            await asyncio.wait(tasks, timeout=5)
        logger.info("Collaboration manager stopped")

    def _evict(self, connection_id: str, code: int):
        """
        Cut a connection off from outside its receive loop.

        Peers are notified right away; the serving task is cancelled and
        closes the socket with `code` on its way out.
        """
        session = self._sessions.get(connection_id)
        if session is None or connection_id in self._evicted:
            return
        self._evicted[connection_id] = code
        self.controller.disconnect(connection_id)
        session.task.cancel()
        logger.info(f"Evicting {connection_id} (close code {code})")

    def get_active_rooms(self) -> Dict[str, int]:
        """Get all active rooms with their client counts."""
        return self.rooms.summary()

    def get_room_clients(self, room_id: str) -> Set[str]:
        """Get connection ids in a specific room."""
        return self.rooms.members(room_id)

    def get_room_peers(self, room_id: str) -> List[Dict[str, Optional[str]]]:
        """Connection ids and display names of a room's members."""
        peers = []
        for connection_id in sorted(self.rooms.members(room_id)):
            connection = self.registry.get(connection_id)
            if connection:
                peers.append({"connectionId": connection.id, "displayName": connection.display_name})
        return peers

    async def connect(self, websocket: WebSocket):
        """
        Serve one client link until it closes.

        The connection id is generated here; the client learns it from the
        "connected" greeting. All exits go through disconnect().
        """
        if not self._running:
            await websocket.close(code=1011, reason="Server not initialized")
            return

        await websocket.accept()

        connection_id = uuid.uuid4().hex
        outbox = WebSocketOutbox(
            websocket,
            max_size=self.outbox_size,
            name=connection_id,
            on_failure=lambda: self._evict(connection_id, CLOSE_SEND_FAILED),
        )
        self._sessions[connection_id] = ClientSession(websocket, outbox, asyncio.current_task())
        outbox.start()
        self.controller.open(connection_id, outbox)

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    outbox.deliver({"type": EventKind.ERROR.value, "message": "Invalid JSON format"})
                    continue
                self.controller.handle(connection_id, message)
        except WebSocketDisconnect:
            logger.debug(f"Client {connection_id} closed the connection")
        except asyncio.CancelledError:
            code = self._evicted.get(connection_id)
            if code is None:
                raise
            # Cancelled by _evict, not by the server
            asyncio.current_task().uncancel()
            await self._close_socket(websocket, connection_id, code)
        except Exception:
            logger.exception(f"Error in collab connection for {connection_id}")
        finally:
            self._sessions.pop(connection_id, None)
            self._evicted.pop(connection_id, None)
            self.controller.disconnect(connection_id)
            await outbox.close()

    async def _close_socket(self, websocket: WebSocket, connection_id: str, code: int):
        try:
            await websocket.close(code=code)
        except Exception as e:
            logger.debug(f"Close of {connection_id} failed: {e}")


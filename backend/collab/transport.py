"""
Transport handles used by the connection registry.

Delivery is fire-and-forget: deliver() only enqueues, and a writer task per
connection drains the queue onto the WebSocket in FIFO order.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Outbound side of one live client link."""

    @abstractmethod
    def deliver(self, message: Dict[str, Any]) -> bool:
        """Hand a message to the link without waiting. False means dropped."""

    @abstractmethod
    async def close(self) -> None:
        """Stop delivering; undelivered messages are discarded."""


class WebSocketOutbox(Transport):
    """Queue + writer task in front of a FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket, max_size: int = 0, name: str = "",
                 on_failure: Optional[Callable[[], None]] = None):
        self._websocket = websocket
        # Called once, from the writer task, when a send fails
        self._on_failure = on_failure
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._name = name
        self._closed = False
        self._writer: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self):
        """Start the writer task. Must be called from the event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def deliver(self, message: Dict[str, Any]) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Outbox for {self._name} full, dropping {message.get('type')}")
            return False
        return True

    async def _drain(self):
        while not self._closed:
            message = await self._queue.get()
            try:
                await self._websocket.send_json(message)
            except Exception as e:
                logger.debug(f"Send to {self._name} failed, closing outbox: {e}")
                self._closed = True
                if self._on_failure:
                    self._on_failure()

    async def close(self) -> None:
        self._closed = True
        if self._writer:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None

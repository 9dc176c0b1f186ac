"""Schedule websocket sends from whichever thread produced the message."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketSender:
    """Deliver JSON messages to one websocket owned by ``loop``.

    Feed callbacks run on the thread that committed the change, which is
    usually a threadpool worker rather than the event loop serving the socket.
    A sender created with ``paused=True`` holds messages until :meth:`release`
    is awaited, so they cannot overtake a snapshot the caller sends first.
    """

    def __init__(
        self,
        websocket: WebSocket,
        loop: asyncio.AbstractEventLoop,
        *,
        paused: bool = False,
    ) -> None:
        self._websocket = websocket
        self._loop = loop
        self._closed = False
        self._paused = paused
        self._held: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def close(self) -> None:
        self._closed = True
        with self._lock:
            self._held.clear()

    def send(self, message: dict[str, Any]) -> None:
        """Schedule ``message`` for delivery without blocking the caller."""

        if self._closed or self._loop.is_closed():
            return
        with self._lock:
            if self._paused:
                self._held.append(message.copy())
                return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._loop.create_task(self._send(message.copy()))
        else:
            asyncio.run_coroutine_threadsafe(self._send(message.copy()), self._loop)

    async def release(self) -> None:
        """Deliver held messages in arrival order, then stop holding new ones."""

        while True:
            with self._lock:
                if not self._held:
                    self._paused = False
                    return
                message = self._held.pop(0)
            await self._send(message)

    async def _send(self, message: dict[str, Any]) -> None:
        if self._closed:
            return
        try:
            await self._websocket.send_json(message)
        except Exception:  # pragma: no cover - connection already gone
            logger.debug("Dropping websocket message %s for a closed socket", message.get("type"))
            self._closed = True


__all__ = ["WebSocketSender"]

"""Connection abstraction over a live WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from .encoder import PING_MESSAGE
from .errors import TransientIOError

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000


class Connection(Protocol):
    """What the hub and session need from a subscriber connection."""

    @property
    def closed(self) -> bool: ...

    async def send_text(self, data: str, timeout: float | None = None) -> None: ...

    async def ping(self, timeout: float | None = None) -> None: ...

    async def receive(self) -> str | bytes | None: ...

    async def close(self, code: int = NORMAL_CLOSURE) -> None: ...


class WebSocketConnection:
    """Starlette WebSocket wrapped with serialized, time-bounded writes.

    Every transport failure surfaces as TransientIOError. ``close()`` may be
    called any number of times from any task.
    """

    def __init__(self, websocket: WebSocket, write_timeout: float = 10.0) -> None:
        self.websocket = websocket
        self.write_timeout = write_timeout
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_text(self, data: str, timeout: float | None = None) -> None:
        if self._closed:
            raise TransientIOError("connection already closed")
        timeout = self.write_timeout if timeout is None else timeout
        try:
            async with self._write_lock:
                await asyncio.wait_for(self.websocket.send_text(data), timeout=timeout)
        except TimeoutError as e:
            raise TransientIOError(f"write timed out after {timeout}s") from e
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise TransientIOError(f"write failed: {e!r}") from e

    async def ping(self, timeout: float | None = None) -> None:
        # ASGI gives the app no access to protocol-level ping/pong frames,
        # so the keep-alive is an application-level text frame. Protocol pings
        # are left to the server (see ``ws_ping_interval`` in cli.serve).
        await self.send_text(PING_MESSAGE, timeout=timeout)

    async def receive(self) -> str | bytes | None:
        try:
            message = await self.websocket.receive()
        except (RuntimeError, OSError) as e:
            raise TransientIOError(f"read failed: {e!r}") from e
        if message["type"] == "websocket.disconnect":
            raise TransientIOError(f"client disconnected (code {message.get('code')})")
        return message.get("text") or message.get("bytes")

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        if self._closed:
            return
        self._closed = True
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        with contextlib.suppress(RuntimeError, OSError, WebSocketDisconnect):
            await self.websocket.close(code=code)

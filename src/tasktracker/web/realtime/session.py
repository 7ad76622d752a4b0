"""ConnectionSession - liveness management for one subscriber."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from .connection import Connection
from .errors import TransientIOError
from .hub import Hub

logger = logging.getLogger(__name__)

READ_TIMEOUT = 60.0
PING_INTERVAL = 30.0
PING_WRITE_TIMEOUT = 10.0


class ConnectionSession:
    """Owns one registered connection until it dies.

    Runs a read loop and a keep-alive loop side by side. The read loop drains
    inbound frames and fails once the read deadline passes. The keep-alive
    loop sends a ping every ``ping_interval`` seconds; a ping that is written
    within ``ping_write_timeout`` proves the peer is still draining the
    socket, so it pushes the deadline forward through ``extend_deadline``, as
    does any inbound frame. Listen-only clients therefore stay subscribed for
    as long as their pings go through. When either loop stops, the session
    unregisters from the hub and closes the connection, exactly once.
    """

    def __init__(
        self,
        hub: Hub,
        board_id: str,
        conn: Connection,
        *,
        read_timeout: float = READ_TIMEOUT,
        ping_interval: float = PING_INTERVAL,
        ping_write_timeout: float = PING_WRITE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.hub = hub
        self.board_id = board_id
        self.conn = conn
        self.read_timeout = read_timeout
        self.ping_interval = ping_interval
        self.ping_write_timeout = ping_write_timeout
        self._clock = clock
        self._read_deadline = self._clock() + read_timeout
        self._torn_down = False
        self.close_reason = ""

    @property
    def read_deadline(self) -> float:
        return self._read_deadline

    @property
    def closed(self) -> bool:
        return self._torn_down

    def extend_deadline(self) -> None:
        """Liveness confirmed: allow another full read timeout."""
        self._read_deadline = self._clock() + self.read_timeout

    async def run(self) -> None:
        """Run both loops until one of them ends, then tear down."""
        reader = asyncio.create_task(self._read_loop(), name=f"ws-read:{self.board_id}")
        pinger = asyncio.create_task(self._keepalive_loop(), name=f"ws-ping:{self.board_id}")
        reason = "session cancelled"
        try:
            done, _ = await asyncio.wait({reader, pinger}, return_when=asyncio.FIRST_COMPLETED)
            reason = next(iter(done)).result()
        finally:
            for task in (reader, pinger):
                task.cancel()
            # A cancelled run() must still unregister from the hub.
            await asyncio.shield(self._shutdown(reader, pinger, reason))

    async def _shutdown(self, reader: asyncio.Task, pinger: asyncio.Task, reason: str) -> None:
        await asyncio.gather(reader, pinger, return_exceptions=True)
        await self.teardown(reason)

    async def teardown(self, reason: str = "") -> None:
        """Unregister and close the connection. Safe to call repeatedly."""
        if self._torn_down:
            return
        self._torn_down = True
        self.close_reason = reason
        await self.hub.unregister(self.board_id, self.conn)
        await self.conn.close()
        logger.info("WebSocket closed on board %s: %s", self.board_id, reason or "closed")

    async def _read_loop(self) -> str:
        while True:
            remaining = self._read_deadline - self._clock()
            if remaining <= 0:
                return "read deadline exceeded"
            try:
                await asyncio.wait_for(self.conn.receive(), timeout=remaining)
            except TimeoutError:
                # Deadline may have moved while we waited; re-check.
                continue
            except TransientIOError as e:
                return str(e)
            self.extend_deadline()

    async def _keepalive_loop(self) -> str:
        while True:
            await asyncio.sleep(self.ping_interval)
            try:
                await self.conn.ping(timeout=self.ping_write_timeout)
            except TransientIOError as e:
                return f"ping failed: {e}"
            self.extend_deadline()

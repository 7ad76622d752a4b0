"""Fixed-window per-key rate limiter.

Every key (usually a client IP) gets ``limit`` attempts per window. A
background loop clears the whole counter map every ``window`` seconds, so all
keys regain their quota at the same moment.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-key attempt counter with a periodic global reset."""

    def __init__(self, limit: int, window: float) -> None:
        self.limit = limit
        self.window = window
        self._attempts: dict[str, int] = {}
        # allow() may be called from worker threads.
        self._lock = threading.Lock()
        self._reset_task: asyncio.Task | None = None

    def allow(self, key: str) -> bool:
        """Record an attempt for ``key``; False once the quota is used up."""
        with self._lock:
            count = self._attempts.get(key, 0)
            if count >= self.limit:
                return False
            self._attempts[key] = count + 1
            return True

    def attempts(self, key: str) -> int:
        with self._lock:
            return self._attempts.get(key, 0)

    def reset(self) -> None:
        """Forget every key."""
        with self._lock:
            self._attempts = {}

    def start(self) -> asyncio.Task:
        """Start the reset loop on the running event loop (idempotent)."""
        if self._reset_task is None or self._reset_task.done():
            self._reset_task = asyncio.create_task(self._reset_loop())
        return self._reset_task

    async def stop(self) -> None:
        if self._reset_task is None:
            return
        self._reset_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._reset_task
        self._reset_task = None

    async def _reset_loop(self) -> None:
        while True:
            await asyncio.sleep(self.window)
            self.reset()
            logger.debug("Rate limiter window elapsed, counters cleared")

"""Hub - board id to live subscriber connections, with fan-out."""

from __future__ import annotations

import asyncio
import logging

from .connection import Connection
from .encoder import encode_task_event
from .errors import EncodeError, TransientIOError
from .models import TaskChangeEvent

logger = logging.getLogger(__name__)


class Hub:
    """In-memory registry of board subscribers.

    One lock guards the whole board -> connections mapping. It is never held
    across network I/O: ``publish`` snapshots the subscribers under the lock,
    releases it, then writes. A connection whose write fails is removed
    (re-taking the lock) and closed, and delivery carries on with the rest.

    Connections are kept in insertion-ordered dicts so every snapshot of a
    board visits subscribers in the same order.
    """

    def __init__(self, write_timeout: float = 10.0) -> None:
        self.write_timeout = write_timeout
        self._boards: dict[str, dict[Connection, None]] = {}
        self._lock = asyncio.Lock()

    async def register(self, board_id: str, conn: Connection) -> None:
        async with self._lock:
            self._boards.setdefault(board_id, {})[conn] = None
        logger.debug("Registered subscriber on board %s", board_id)

    async def unregister(self, board_id: str, conn: Connection) -> bool:
        """Remove ``conn`` from the board. Returns False if it was not there."""
        async with self._lock:
            return self._remove(board_id, conn)

    def _remove(self, board_id: str, conn: Connection) -> bool:
        subscribers = self._boards.get(board_id)
        if subscribers is None or conn not in subscribers:
            return False
        del subscribers[conn]
        if not subscribers:
            del self._boards[board_id]
        return True

    async def subscribers(self, board_id: str) -> list[Connection]:
        async with self._lock:
            return list(self._boards.get(board_id, ()))

    async def board_count(self) -> int:
        async with self._lock:
            return len(self._boards)

    async def broadcast(self, board_id: str, task_id: str, title: str, status: str) -> int:
        """Push a task_updated event to every subscriber of ``board_id``."""
        return await self.publish(
            board_id, TaskChangeEvent(task_id=task_id, title=title, status=status)
        )

    async def publish(self, board_id: str, event: TaskChangeEvent) -> int:
        """Encode ``event`` once and write it to the board's subscribers.

        Returns the number of connections that received the message.
        """
        try:
            message = encode_task_event(event)
        except EncodeError:
            logger.exception("Dropping broadcast for board %s", board_id)
            return 0

        targets = await self.subscribers(board_id)
        if not targets:
            return 0

        delivered = 0
        for conn in targets:
            try:
                await conn.send_text(message, timeout=self.write_timeout)
            except TransientIOError as e:
                logger.info("Pruning subscriber on board %s: %s", board_id, e)
                await self.unregister(board_id, conn)
                await conn.close()
                continue
            delivered += 1
        return delivered

"""Shared fakes for realtime tests."""

from __future__ import annotations

import asyncio

import pytest

from tasktracker.web.realtime.errors import TransientIOError


class FakeConnection:
    """In-memory stand-in for a WebSocketConnection."""

    def __init__(self, name: str = "conn", fail_writes: bool = False) -> None:
        self.name = name
        self.fail_writes = fail_writes
        self.fail_pings = False
        self.sent: list[str] = []
        self.pings = 0
        self.close_calls = 0
        self.inbound: asyncio.Queue = asyncio.Queue()

    def __repr__(self) -> str:
        return f"FakeConnection({self.name!r})"

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def send_text(self, data: str, timeout: float | None = None) -> None:
        # Yield like a real socket write so overlapping broadcasts interleave.
        await asyncio.sleep(0)
        if self.fail_writes or self.closed:
            raise TransientIOError(f"{self.name}: broken pipe")
        self.sent.append(data)

    async def ping(self, timeout: float | None = None) -> None:
        if self.fail_pings or self.closed:
            raise TransientIOError(f"{self.name}: ping failed")
        self.pings += 1

    async def receive(self):
        item = await self.inbound.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self, code: int = 1000) -> None:
        self.close_calls += 1


@pytest.fixture
def make_conn():
    return FakeConnection

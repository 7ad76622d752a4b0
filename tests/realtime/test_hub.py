"""Tests for Hub registration and fan-out."""

from __future__ import annotations

import asyncio
import json

import pytest

from tasktracker.web.realtime.hub import Hub
from tasktracker.web.realtime.models import TaskChangeEvent

B1 = "11111111-1111-1111-1111-111111111111"
B2 = "22222222-2222-2222-2222-222222222222"


@pytest.fixture
def hub():
    return Hub(write_timeout=1.0)


def _decoded(conn) -> list[dict]:
    return [json.loads(m) for m in conn.sent]


class TestRegistration:
    async def test_register_creates_board_lazily(self, hub, make_conn):
        assert await hub.subscribers(B1) == []
        conn = make_conn("a")
        await hub.register(B1, conn)
        assert await hub.subscribers(B1) == [conn]
        assert await hub.board_count() == 1

    async def test_register_twice_is_idempotent(self, hub, make_conn):
        conn = make_conn("a")
        await hub.register(B1, conn)
        await hub.register(B1, conn)
        assert await hub.subscribers(B1) == [conn]

    async def test_unregister_twice_is_harmless(self, hub, make_conn):
        conn = make_conn("a")
        await hub.register(B1, conn)
        assert await hub.unregister(B1, conn) is True
        assert await hub.unregister(B1, conn) is False
        assert await hub.subscribers(B1) == []

    async def test_unregister_unknown_board(self, hub, make_conn):
        assert await hub.unregister(B2, make_conn("ghost")) is False

    async def test_last_unregister_drops_board(self, hub, make_conn):
        a, b = make_conn("a"), make_conn("b")
        await hub.register(B1, a)
        await hub.register(B1, b)
        await hub.unregister(B1, a)
        assert await hub.board_count() == 1
        await hub.unregister(B1, b)
        assert await hub.board_count() == 0


class TestBroadcast:
    async def test_no_subscribers_is_noop(self, hub):
        assert await hub.broadcast(B2, "t1", "X", "done") == 0
        assert await hub.board_count() == 0

    async def test_message_fields(self, hub, make_conn):
        conn = make_conn("a")
        await hub.register(B1, conn)
        await hub.broadcast(B1, "t1", "X", "done")
        assert _decoded(conn) == [
            {"event": "task_updated", "task_id": "t1", "title": "X", "status": "done"}
        ]

    async def test_other_board_never_receives(self, hub, make_conn):
        on_a, on_b = make_conn("a"), make_conn("b")
        await hub.register(B1, on_a)
        await hub.register(B2, on_b)
        await hub.broadcast(B2, "t9", "Other", "todo")
        assert on_a.sent == []
        assert len(on_b.sent) == 1

    async def test_failing_connection_is_pruned_and_others_still_receive(self, hub, make_conn):
        conns = [make_conn(f"c{i}") for i in range(5)]
        conns[2].fail_writes = True
        for conn in conns:
            await hub.register(B1, conn)

        delivered = await hub.broadcast(B1, "t1", "X", "done")

        assert delivered == 4
        for i, conn in enumerate(conns):
            assert len(conn.sent) == (0 if i == 2 else 1)
        assert conns[2].close_calls == 1
        assert conns[2] not in await hub.subscribers(B1)

        # A second broadcast reaches only the survivors.
        assert await hub.broadcast(B1, "t1", "X", "in-progress") == 4
        assert all(len(c.sent) == 2 for i, c in enumerate(conns) if i != 2)

    async def test_all_failing_drops_board(self, hub, make_conn):
        await hub.register(B1, make_conn("a", fail_writes=True))
        await hub.register(B1, make_conn("b", fail_writes=True))
        assert await hub.broadcast(B1, "t1", "X", "done") == 0
        assert await hub.board_count() == 0

    async def test_unencodable_event_is_dropped(self, hub, make_conn):
        conn = make_conn("a")
        await hub.register(B1, conn)
        bad = TaskChangeEvent(task_id=object(), title="X", status="done")  # type: ignore[arg-type]
        assert await hub.publish(B1, bad) == 0
        assert conn.sent == []
        # the subscriber is untouched and later broadcasts still work
        assert await hub.broadcast(B1, "t1", "X", "done") == 1

    async def test_send_order_follows_broadcast_order(self, hub, make_conn):
        conns = [make_conn(f"c{i}") for i in range(3)]
        for conn in conns:
            await hub.register(B1, conn)

        await asyncio.gather(*(hub.broadcast(B1, f"t{n}", "X", "todo") for n in range(10)))

        expected = [f"t{n}" for n in range(10)]
        for conn in conns:
            assert [m["task_id"] for m in _decoded(conn)] == expected

    async def test_unregister_during_broadcast_is_safe(self, hub, make_conn):
        """A session tearing down mid-broadcast must not break iteration."""
        first, second = make_conn("first"), make_conn("second")

        real_send = first.send_text

        async def send_and_drop_second(data, timeout=None):
            await real_send(data, timeout)
            await hub.unregister(B1, second)
            await second.close()

        first.send_text = send_and_drop_second
        await hub.register(B1, first)
        await hub.register(B1, second)

        delivered = await hub.broadcast(B1, "t1", "X", "done")
        assert delivered == 1
        assert await hub.subscribers(B1) == [first]
        assert second.closed


class TestEndToEndScenario:
    async def test_three_subscribers_with_one_dying(self, hub, make_conn):
        c1, c2, c3 = make_conn("c1"), make_conn("c2"), make_conn("c3")
        for conn in (c1, c2, c3):
            await hub.register(B1, conn)

        await hub.broadcast(B1, "t1", "X", "done")
        for conn in (c1, c2, c3):
            assert _decoded(conn) == [
                {"event": "task_updated", "task_id": "t1", "title": "X", "status": "done"}
            ]

        assert await hub.broadcast(B2, "t1", "X", "done") == 0

        c2.fail_writes = True
        await hub.broadcast(B1, "t1", "X", "done")

        assert len(c1.sent) == 2
        assert len(c3.sent) == 2
        assert len(c2.sent) == 1
        assert await hub.subscribers(B1) == [c1, c3]

"""Tests for WebSocketConnection write serialization and error handling."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from starlette.websockets import WebSocketDisconnect, WebSocketState

from tasktracker.web.realtime.connection import WebSocketConnection
from tasktracker.web.realtime.errors import TransientIOError
from tasktracker.web.realtime.hub import Hub

BOARD = "66666666-6666-6666-6666-666666666666"


def _websocket() -> AsyncMock:
    ws = AsyncMock()
    ws.application_state = WebSocketState.CONNECTED
    return ws


class TestSend:
    async def test_overlapping_writes_do_not_interleave(self):
        ws = _websocket()
        events: list[tuple[str, str]] = []

        async def slow_send(data):
            events.append(("start", data))
            await asyncio.sleep(0.01)
            events.append(("end", data))

        ws.send_text.side_effect = slow_send
        conn = WebSocketConnection(ws)

        await asyncio.gather(*(conn.send_text(f"m{n}") for n in range(3)))

        assert events == [
            ("start", "m0"), ("end", "m0"),
            ("start", "m1"), ("end", "m1"),
            ("start", "m2"), ("end", "m2"),
        ]

    async def test_overlapping_broadcasts_keep_call_order(self):
        sent: list[str] = []

        async def slow_send(data):
            await asyncio.sleep(0.001)
            sent.append(json.loads(data)["task_id"])

        ws = _websocket()
        ws.send_text.side_effect = slow_send
        hub = Hub(write_timeout=1.0)
        await hub.register(BOARD, WebSocketConnection(ws))

        await asyncio.gather(*(hub.broadcast(BOARD, f"t{n}", "X", "todo") for n in range(5)))

        assert sent == [f"t{n}" for n in range(5)]

    async def test_write_timeout(self):
        ws = _websocket()

        async def stuck_send(data):
            await asyncio.sleep(5)

        ws.send_text.side_effect = stuck_send
        conn = WebSocketConnection(ws, write_timeout=0.05)

        with pytest.raises(TransientIOError, match="timed out"):
            await conn.send_text("hello")

    @pytest.mark.parametrize(
        "error", [WebSocketDisconnect(1001), RuntimeError("closed"), OSError("reset")]
    )
    async def test_transport_errors_are_normalized(self, error):
        ws = _websocket()
        ws.send_text.side_effect = error
        with pytest.raises(TransientIOError):
            await WebSocketConnection(ws).send_text("hello")

    async def test_send_after_close_fails(self):
        conn = WebSocketConnection(_websocket())
        await conn.close()
        with pytest.raises(TransientIOError):
            await conn.send_text("hello")

    async def test_ping_is_an_event_frame(self):
        ws = _websocket()
        await WebSocketConnection(ws).ping()
        (data,) = ws.send_text.await_args.args
        assert json.loads(data) == {"event": "ping"}


class TestReceive:
    async def test_text_and_bytes(self):
        ws = _websocket()
        ws.receive.side_effect = [
            {"type": "websocket.receive", "text": "hi"},
            {"type": "websocket.receive", "bytes": b"\x01"},
        ]
        conn = WebSocketConnection(ws)
        assert await conn.receive() == "hi"
        assert await conn.receive() == b"\x01"

    async def test_disconnect_raises(self):
        ws = _websocket()
        ws.receive.return_value = {"type": "websocket.disconnect", "code": 1001}
        with pytest.raises(TransientIOError, match="1001"):
            await WebSocketConnection(ws).receive()


class TestClose:
    async def test_close_is_idempotent(self):
        ws = _websocket()
        conn = WebSocketConnection(ws)
        await conn.close()
        await conn.close()
        assert conn.closed
        ws.close.assert_awaited_once()

    async def test_already_disconnected_socket_is_not_closed_again(self):
        ws = _websocket()
        ws.application_state = WebSocketState.DISCONNECTED
        conn = WebSocketConnection(ws)
        await conn.close()
        assert conn.closed
        ws.close.assert_not_awaited()

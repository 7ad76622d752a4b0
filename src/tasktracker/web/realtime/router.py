"""WebSocket endpoint for live board updates."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from ..auth.service import bearer_token
from ..deps import client_ip
from .errors import RateLimited, UpgradeRejected
from .session import ConnectionSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def board_updates(websocket: WebSocket):
    """Subscribe to ``task_updated`` events of one board.

    The token comes from the Authorization header, or from the ``token``
    query parameter for browser clients that cannot set headers.
    """
    state = websocket.app.state
    ip = client_ip(websocket)
    if not state.ws_limiter.allow(ip):
        rejection = RateLimited("too many WebSocket connection attempts")
        logger.warning("WebSocket rate limit exceeded for %s", ip)
        await websocket.close(code=rejection.close_code)
        return

    token = bearer_token(websocket.headers.get("Authorization")) or websocket.query_params.get(
        "token", ""
    )
    try:
        conn, board_id = await state.authorizer.accept(
            websocket, websocket.query_params.get("board_id"), token
        )
    except UpgradeRejected:
        return

    hub = state.hub
    await hub.register(board_id, conn)
    config = state.config
    session = ConnectionSession(
        hub,
        board_id,
        conn,
        read_timeout=config.ws_read_timeout,
        ping_interval=config.ws_ping_interval,
        ping_write_timeout=config.ws_write_timeout,
    )
    logger.info("WebSocket subscribed to board %s from %s", board_id, ip)
    await session.run()

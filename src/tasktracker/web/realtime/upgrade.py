"""Upgrade authorization for board subscriptions.

A WebSocket handshake is only accepted once the origin, board id, caller
token and board ownership all check out. Rejected handshakes are closed
before acceptance (the ASGI server answers them with HTTP 403), so an
unauthenticated socket is never left open and the hub is never touched.
"""

from __future__ import annotations

import logging
from typing import Protocol

from starlette.websockets import WebSocket

from ..auth.service import AuthError
from ..boards.service import parse_board_id
from .connection import WebSocketConnection
from .errors import UpgradeRejected

logger = logging.getLogger(__name__)


class TokenVerifier(Protocol):
    def verify(self, token: str) -> str: ...


class BoardLookup(Protocol):
    async def get_by_id(self, board_id: str) -> dict | None: ...


class UpgradeAuthorizer:
    def __init__(
        self,
        authenticator: TokenVerifier,
        boards: BoardLookup,
        allowed_origins: list[str] | None = None,
        write_timeout: float = 10.0,
    ) -> None:
        self.authenticator = authenticator
        self.boards = boards
        self.allowed_origins = [o.strip() for o in allowed_origins or [] if o.strip()]
        self.write_timeout = write_timeout

    def check_origin(self, origin: str | None) -> bool:
        """Empty allow-list admits every origin."""
        if not self.allowed_origins:
            return True
        return (origin or "") in self.allowed_origins

    async def authorize(self, board_id: str | None, token: str, origin: str | None = None) -> str:
        """Run every check and return the canonical board id.

        Raises UpgradeRejected naming the first check that failed.
        """
        if not self.check_origin(origin):
            raise UpgradeRejected(f"origin {origin!r} not allowed")

        canonical = parse_board_id(board_id)
        if canonical is None:
            raise UpgradeRejected("invalid board id")

        try:
            user_id = self.authenticator.verify(token)
        except AuthError as e:
            raise UpgradeRejected(f"unauthorized: {e}") from None

        board = await self.boards.get_by_id(canonical)
        if board is None:
            raise UpgradeRejected("board not found")
        if str(board["owner_id"]) != user_id:
            raise UpgradeRejected("forbidden")
        return canonical

    async def accept(
        self, websocket: WebSocket, board_id: str | None, token: str
    ) -> tuple[WebSocketConnection, str]:
        """Authorize, then complete the handshake.

        On rejection the handshake is closed and UpgradeRejected re-raised.
        """
        try:
            canonical = await self.authorize(board_id, token, websocket.headers.get("Origin"))
        except UpgradeRejected as e:
            logger.info("WebSocket upgrade rejected: %s", e.reason)
            await websocket.close(code=e.close_code)
            raise

        conn = WebSocketConnection(websocket, write_timeout=self.write_timeout)
        try:
            await websocket.accept()
        except Exception:
            await conn.close()
            raise
        return conn, canonical

"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

import aiosqlite
from fastapi import Depends, HTTPException, Request
from starlette.requests import HTTPConnection

from .auth.service import Authenticator, AuthError, bearer_token
from .boards.service import get_board, parse_board_id
from .db.database import get_db
from .ratelimit import RateLimiter
from .realtime.hub import Hub


async def _get_db() -> aiosqlite.Connection:
    return await get_db()


Db = Annotated[aiosqlite.Connection, Depends(_get_db)]


def client_ip(conn: HTTPConnection) -> str:
    """First X-Forwarded-For hop, else the peer address."""
    forwarded = conn.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return conn.client.host if conn.client else ""


def _get_hub(request: Request) -> Hub:
    return request.app.state.hub


def _get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def _get_auth_limiter(request: Request) -> RateLimiter:
    return request.app.state.auth_limiter


HubDep = Annotated[Hub, Depends(_get_hub)]
AuthenticatorDep = Annotated[Authenticator, Depends(_get_authenticator)]
AuthLimiter = Annotated[RateLimiter, Depends(_get_auth_limiter)]


async def _get_current_user(request: Request, authenticator: AuthenticatorDep) -> str:
    """Validate the bearer token and return the caller's user id."""
    if not request.headers.get("Authorization"):
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    try:
        return authenticator.verify(bearer_token(request.headers.get("Authorization")))
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from None


CurrentUser = Annotated[str, Depends(_get_current_user)]


async def get_owned_board(db: aiosqlite.Connection, board_id: str, user_id: str) -> dict:
    """Load a board the caller owns: 400 bad id, 404 missing, 403 not owner."""
    canonical = parse_board_id(board_id)
    if canonical is None:
        raise HTTPException(status_code=400, detail="Invalid board ID")
    board = await get_board(db, canonical)
    if board is None:
        raise HTTPException(status_code=404, detail="Board not found")
    if board["owner_id"] != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return board

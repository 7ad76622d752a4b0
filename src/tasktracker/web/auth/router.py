"""Auth routes."""

from __future__ import annotations

import asyncio
import logging
import re
import uuid

import aiosqlite
from fastapi import APIRouter, HTTPException, Request

from ..deps import AuthenticatorDep, AuthLimiter, CurrentUser, Db, client_ip
from .models import Credentials, LoginResponse, RegisterResponse, UserResponse
from .passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PASSWORD_MIN = 4


def _validate_credentials(body: Credentials) -> None:
    if not EMAIL_RE.match(body.email):
        raise HTTPException(status_code=400, detail="Invalid email")
    if len(body.password) < PASSWORD_MIN:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {PASSWORD_MIN} characters long",
        )


def _check_rate_limit(request: Request, limiter, action: str) -> None:
    ip = client_ip(request)
    if not limiter.allow(ip):
        logger.warning("Rate limit exceeded for %s from %s", action, ip)
        raise HTTPException(
            status_code=429,
            detail=f"Too many {action} attempts. Please try again later.",
        )


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: Credentials, request: Request, db: Db, limiter: AuthLimiter):
    _check_rate_limit(request, limiter, "register")
    _validate_credentials(body)

    user_id = str(uuid.uuid4())
    # bcrypt blocks for tens of milliseconds.
    password_hash = await asyncio.to_thread(hash_password, body.password)
    try:
        await db.execute(
            "INSERT INTO users (id, email, password_hash) VALUES (?, ?, ?)",
            (user_id, body.email, password_hash),
        )
        await db.commit()
    except aiosqlite.IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered") from None

    logger.info("User registered: %s", body.email)
    return RegisterResponse(user_id=user_id, email=body.email)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: Credentials,
    request: Request,
    db: Db,
    limiter: AuthLimiter,
    authenticator: AuthenticatorDep,
):
    """Check email/password and return a signed JWT."""
    _check_rate_limit(request, limiter, "login")
    _validate_credentials(body)

    cursor = await db.execute(
        "SELECT id, email, password_hash FROM users WHERE email = ?", (body.email,)
    )
    row = await cursor.fetchone()
    if row is None or not await asyncio.to_thread(
        verify_password, body.password, row["password_hash"]
    ):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = authenticator.create_token(row["id"])
    logger.info("User logged in: %s", body.email)
    return LoginResponse(user_id=row["id"], user_email=row["email"], token=token)


@router.get("/me", response_model=UserResponse)
async def get_me(user: CurrentUser, db: Db):
    cursor = await db.execute("SELECT id, email, created_at FROM users WHERE id = ?", (user,))
    row = await cursor.fetchone()
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(id=row["id"], email=row["email"], created_at=row["created_at"])

"""Fixtures for HTTP route tests."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from tasktracker.web.app import create_app, lifespan
from tasktracker.web.config import WebConfig

SECRET = "route-test-secret-that-is-32-chars-long"


@pytest.fixture
def config(tmp_path):
    return WebConfig(
        db_path=str(tmp_path / "test.db"),
        jwt_secret=SECRET,
        auth_rate_limit=100,
        ws_rate_limit=100,
    )


@pytest.fixture
def app(config):
    return create_app(config)


@pytest_asyncio.fixture
async def client(app):
    """An HTTP client against the app with its lifespan running."""
    async with lifespan(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


@pytest.fixture
def signup(client):
    """Register and log in a user; returns (user_id, auth headers)."""

    async def _signup(email: str, password: str = "secret") -> tuple[str, dict]:
        resp = await client.post("/api/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["user_id"], {"Authorization": f"Bearer {body['token']}"}

    return _signup

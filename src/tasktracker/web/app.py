"""FastAPI app factory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import WebConfig

logger = logging.getLogger(__name__)

SERVICES = ("auth", "tasks")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the DB and build the process-wide realtime objects.

    Everything lives on ``app.state`` so each app instance (and each test)
    gets its own hub and limiters.
    """
    from .auth.service import Authenticator
    from .boards.service import BoardStore
    from .db.database import close_db, get_db, init_db
    from .ratelimit import RateLimiter
    from .realtime.hub import Hub
    from .realtime.upgrade import UpgradeAuthorizer

    config: WebConfig = app.state.config

    await init_db(config.db_path)
    db = await get_db()

    authenticator = Authenticator.from_config(config)
    app.state.authenticator = authenticator
    app.state.hub = Hub(write_timeout=config.ws_write_timeout)
    app.state.authorizer = UpgradeAuthorizer(
        authenticator,
        BoardStore(db),
        allowed_origins=config.ws_allowed_origins,
        write_timeout=config.ws_write_timeout,
    )
    app.state.auth_limiter = RateLimiter(config.auth_rate_limit, config.auth_rate_window)
    app.state.ws_limiter = RateLimiter(config.ws_rate_limit, config.ws_rate_window)
    app.state.auth_limiter.start()
    app.state.ws_limiter.start()

    logger.info("Services started: %s", ", ".join(app.state.services))

    yield

    await app.state.auth_limiter.stop()
    await app.state.ws_limiter.stop()
    await close_db()


def create_app(config: WebConfig | None = None, services: Iterable[str] = SERVICES) -> FastAPI:
    """Create and configure the FastAPI application.

    ``services`` picks which route groups to mount: ``auth`` (register,
    login, profile) and/or ``tasks`` (boards, tasks, live updates).
    """
    config = config or WebConfig.load()
    services = tuple(services)
    unknown = set(services) - set(SERVICES)
    if unknown:
        raise ValueError(f"Unknown service(s): {', '.join(sorted(unknown))}")

    app = FastAPI(
        title="Task Tracker",
        description="Boards and tasks with real-time WebSocket updates",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.services = services

    origins = config.cors_origins or [
        "http://localhost",
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if "auth" in services:
        from .auth.router import router as auth_router

        app.include_router(auth_router)

    if "tasks" in services:
        from .boards.router import router as boards_router
        from .realtime.router import router as realtime_router
        from .tasks.router import router as tasks_router

        app.include_router(boards_router)
        app.include_router(tasks_router)
        app.include_router(realtime_router)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "services": list(services)}

    return app

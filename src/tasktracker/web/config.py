"""Web server configuration."""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_JWT_SECRET_LENGTH = 32


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class WebConfig:
    """Configuration for the web server."""

    host: str = "0.0.0.0"
    port: int = 8000
    db_path: str = ".tasktracker/tasks.db"
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    cors_origins: list[str] | None = None
    # Origins allowed to open /ws. Empty list allows any origin.
    ws_allowed_origins: list[str] | None = None
    debug: bool = False

    # Login/register: 5 attempts per 15 minutes per client IP
    auth_rate_limit: int = 5
    auth_rate_window: float = 15 * 60.0
    # WebSocket upgrades: 5 attempts per second per client IP
    ws_rate_limit: int = 5
    ws_rate_window: float = 1.0

    ws_read_timeout: float = 60.0
    ws_ping_interval: float = 30.0
    ws_write_timeout: float = 10.0
    # Largest inbound WebSocket frame the server accepts (1 MiB)
    ws_max_size: int = 1 << 20

    @classmethod
    def load(cls) -> WebConfig:
        config = cls()
        env = os.environ
        config.host = env.get("TASKTRACKER_HOST", config.host)
        config.port = int(env.get("TASKTRACKER_PORT", config.port))
        config.db_path = env.get("TASKTRACKER_DB_PATH", config.db_path)
        config.jwt_secret = env.get("TASKTRACKER_JWT_SECRET", "")
        config.jwt_expire_hours = int(
            env.get("TASKTRACKER_JWT_EXPIRE_HOURS", config.jwt_expire_hours)
        )
        config.debug = env.get("TASKTRACKER_DEBUG", "").lower() in ("1", "true")

        origins = env.get("TASKTRACKER_CORS_ORIGINS")
        if origins:
            config.cors_origins = _split_list(origins)
        config.ws_allowed_origins = _split_list(env.get("TASKTRACKER_ALLOWED_ORIGINS", ""))

        config.auth_rate_limit = int(env.get("TASKTRACKER_AUTH_RATE_LIMIT", config.auth_rate_limit))
        config.auth_rate_window = float(
            env.get("TASKTRACKER_AUTH_RATE_WINDOW", config.auth_rate_window)
        )
        config.ws_rate_limit = int(env.get("TASKTRACKER_WS_RATE_LIMIT", config.ws_rate_limit))
        config.ws_rate_window = float(env.get("TASKTRACKER_WS_RATE_WINDOW", config.ws_rate_window))
        config.ws_read_timeout = float(
            env.get("TASKTRACKER_WS_READ_TIMEOUT", config.ws_read_timeout)
        )
        config.ws_ping_interval = float(
            env.get("TASKTRACKER_WS_PING_INTERVAL", config.ws_ping_interval)
        )
        config.ws_write_timeout = float(
            env.get("TASKTRACKER_WS_WRITE_TIMEOUT", config.ws_write_timeout)
        )
        config.ws_max_size = int(env.get("TASKTRACKER_WS_MAX_SIZE", config.ws_max_size))

        config.ensure_jwt_secret()
        return config

    def ensure_jwt_secret(self) -> None:
        """Fail closed on a weak or missing JWT secret outside debug mode."""
        if len(self.jwt_secret) >= MIN_JWT_SECRET_LENGTH:
            return
        if not self.debug:
            raise RuntimeError(
                f"TASKTRACKER_JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters. "
                "Generate one with: "
                "python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        # Debug mode: random per-process secret, tokens won't survive restarts.
        self.jwt_secret = secrets.token_hex(32)
        logger.warning(
            "TASKTRACKER_JWT_SECRET not set -- using random ephemeral secret. "
            "Set TASKTRACKER_JWT_SECRET for persistent sessions."
        )

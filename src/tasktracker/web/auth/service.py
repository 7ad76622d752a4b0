"""Auth service: JWT issuance and verification."""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta

import jwt

from ..config import WebConfig

REQUIRED_CLAIMS = ["exp", "sub"]


class AuthError(jwt.InvalidTokenError):
    """A bearer token was missing, malformed, expired or badly signed."""

    def __init__(self, message: str, *, expired: bool = False) -> None:
        super().__init__(message)
        self.expired = expired


class Authenticator:
    """Issues and verifies HS256 JWTs carrying the user id in ``sub``."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_hours: int = 24) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expire_hours = expire_hours

    @classmethod
    def from_config(cls, config: WebConfig) -> Authenticator:
        return cls(config.jwt_secret, config.jwt_algorithm, config.jwt_expire_hours)

    def create_token(self, user_id: str) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "exp": now + timedelta(hours=self.expire_hours),
            "iat": now,
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the caller's user id. Raises AuthError on any failure."""
        if not token:
            raise AuthError("Missing token")
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired", expired=True) from None
        except jwt.MissingRequiredClaimError as e:
            raise AuthError(f"Token missing {e.claim}") from None
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token") from None

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise AuthError("Invalid token claims")
        return user_id


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer ...`` header value."""
    if not authorization or not authorization.startswith("Bearer "):
        return ""
    return authorization.removeprefix("Bearer ").strip()

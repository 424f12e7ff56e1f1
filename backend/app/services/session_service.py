from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from app.core.config import settings

TOKEN_TYPE = "session"


class SessionTokenService:
    """Issues and verifies the signed session tokens that identify storefront users."""

    @staticmethod
    def generate_token(user_id: UUID, ttl: timedelta | None = None) -> str:
        """Generate a session JWT, valid for SESSION_TOKEN_TTL_HOURS by default."""
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "type": TOKEN_TYPE,
            "iat": now,
            "exp": now + (ttl or timedelta(hours=settings.SESSION_TOKEN_TTL_HOURS)),
        }
        return jwt.encode(payload, settings.SESSION_JWT_SECRET, algorithm="HS256")

    @staticmethod
    def verify_token(token: str) -> UUID:
        """Decode and validate a session JWT and return the user id.

        Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
        """
        payload = jwt.decode(token, settings.SESSION_JWT_SECRET, algorithms=["HS256"])
        if payload.get("type") != TOKEN_TYPE:
            raise jwt.InvalidTokenError("Invalid token type")
        return UUID(payload["sub"])

"""JWT token service for member authentication."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Request
from jose import JWTError, jwt
from pydantic import BaseModel

from community_rewards.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload."""

    sub: str  # Member ID
    exp: datetime
    iat: datetime
    type: str = "access"

    @property
    def member_id(self) -> int | None:
        try:
            return int(self.sub)
        except ValueError:
            return None


class JWTService:
    """Issues and verifies member access tokens."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str = "HS256",
        access_token_expire_minutes: int | None = None,
        settings: Settings | None = None,
    ):
        """Initialize JWT service.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token expiration in minutes
            settings: Settings supplying the defaults
        """
        settings = settings or get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = (
            access_token_expire_minutes or settings.access_token_expire_minutes
        )

    def create_access_token(
        self,
        member_id: int,
        extra_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create an access token for a member.

        Args:
            member_id: Member the token identifies
            extra_claims: Additional claims to include
            expires_delta: Lifetime override

        Returns:
            Encoded JWT access token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        payload = {
            "sub": str(member_id),
            "exp": expire,
            "iat": now,
            "type": "access",
        }
        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> TokenPayload | None:
        """Verify and decode an access token.

        Args:
            token: JWT token to verify

        Returns:
            TokenPayload if valid, None if invalid, expired or not an access token
        """
        try:
            payload = TokenPayload(
                **jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            )
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return None

        if payload.type != "access" or payload.member_id is None:
            logger.warning(f"Rejected token with type={payload.type} sub={payload.sub}")
            return None
        return payload


def get_jwt_service(request: Request) -> JWTService:
    """Get the application's JWT service, creating it on first use."""
    service = getattr(request.app.state, "jwt_service", None)
    if service is None:
        service = JWTService()
        request.app.state.jwt_service = service
    return service

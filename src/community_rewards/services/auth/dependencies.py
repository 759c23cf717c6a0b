"""Authentication dependencies for FastAPI."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from community_rewards.services.auth.jwt_service import JWTService, get_jwt_service
from community_rewards.services.privileges import (
    DatabasePrivilegeResolver,
    Privilege,
)

logger = logging.getLogger(__name__)

# Security scheme
bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticatedMember:
    """Represents an authenticated member."""

    def __init__(self, member_id: int, privilege: Privilege | None = None):
        self.member_id = member_id
        self.privilege = privilege

    @property
    def is_admin(self) -> bool:
        return self.privilege == Privilege.ADMIN


async def get_current_member(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
) -> AuthenticatedMember:
    """Get current authenticated member from JWT token.

    Args:
        credentials: Bearer token from request
        jwt_service: JWT service for token verification

    Returns:
        AuthenticatedMember if token is valid

    Raises:
        HTTPException: If token is missing or invalid
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = jwt_service.verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedMember(member_id=payload.member_id)


def require_privilege(required: Privilege):
    """Dependency factory gating an endpoint on a privilege tier.

    The tier is resolved from the store on every request, so revoked or
    expired grants take effect immediately.

    Args:
        required: Minimum tier

    Returns:
        Dependency function
    """

    async def privilege_checker(
        request: Request,
        member: Annotated[AuthenticatedMember, Depends(get_current_member)],
    ) -> AuthenticatedMember:
        """Check if member holds the required tier."""
        database = request.app.state.database
        async with database.session() as session:
            member.privilege = await DatabasePrivilegeResolver().resolve(
                session, member.member_id
            )
        if not member.privilege.satisfies(required):
            logger.warning(
                f"Member {member.member_id} ({member.privilege.value}) denied, "
                f"requires {required.value}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{required.display_name} access required",
            )
        return member

    return privilege_checker


require_admin = require_privilege(Privilege.ADMIN)

# Type aliases for dependency injection
CurrentMember = Annotated[AuthenticatedMember, Depends(get_current_member)]
AdminMember = Annotated[AuthenticatedMember, Depends(require_admin)]

"""Authentication services module."""

from community_rewards.services.auth.dependencies import (
    AdminMember,
    AuthenticatedMember,
    CurrentMember,
    get_current_member,
    require_admin,
    require_privilege,
)
from community_rewards.services.auth.jwt_service import (
    JWTService,
    TokenPayload,
    get_jwt_service,
)

__all__ = [
    # JWT
    "JWTService",
    "TokenPayload",
    "get_jwt_service",
    # Dependencies
    "AuthenticatedMember",
    "get_current_member",
    "require_privilege",
    "require_admin",
    # Type aliases
    "CurrentMember",
    "AdminMember",
]

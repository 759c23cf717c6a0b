"""Privilege tiers and resolution."""

from community_rewards.services.privileges.definitions import (
    Privilege,
    highest_privilege,
)
from community_rewards.services.privileges.resolver import (
    DatabasePrivilegeResolver,
    PrivilegeResolver,
)

__all__ = [
    "Privilege",
    "highest_privilege",
    "PrivilegeResolver",
    "DatabasePrivilegeResolver",
]

"""Privilege resolution for members."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from community_rewards.repositories.member import PrivilegeRepository
from community_rewards.services.privileges.definitions import (
    Privilege,
    highest_privilege,
)


class PrivilegeResolver(Protocol):
    """Resolves a member's current privilege tier."""

    async def resolve(self, session: AsyncSession, member_id: int) -> Privilege: ...


class DatabasePrivilegeResolver:
    """Reads grants from the user_privileges table.

    Members without any grant in force resolve to the lowest tier; members
    holding several grants resolve to the highest one.
    """

    async def resolve(self, session: AsyncSession, member_id: int) -> Privilege:
        repo = PrivilegeRepository(session)
        privileges = await repo.get_active_privileges(member_id)
        return highest_privilege(list(privileges))

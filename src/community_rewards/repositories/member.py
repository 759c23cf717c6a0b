"""Repositories for members and privilege grants."""

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import or_, select

from community_rewards.models.member import Member, UserPrivilege
from community_rewards.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Repository for Member database operations."""

    model = Member


class PrivilegeRepository(BaseRepository[UserPrivilege]):
    """Repository for UserPrivilege grants."""

    model = UserPrivilege

    async def get_active_privileges(
        self, member_id: int, *, now: datetime | None = None
    ) -> Sequence[str]:
        """Get privilege names currently in force for a member.

        A grant is in force when it is active and either never expires or
        expires in the future.

        @param member_id - Member ID
        @param now - Reference time (default: current UTC time)
        @returns Privilege names, possibly empty
        """
        if now is None:
            now = datetime.now(timezone.utc)
        stmt = select(self.model.privilege).where(
            self.model.member_id == member_id,
            self.model.is_active.is_(True),
            or_(self.model.expires_at.is_(None), self.model.expires_at > now),
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

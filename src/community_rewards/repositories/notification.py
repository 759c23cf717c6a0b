"""Repository for member notifications."""

from typing import Sequence

from sqlalchemy import desc, select

from community_rewards.models.notification import Notification
from community_rewards.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification database operations."""

    model = Notification

    async def get_by_member(
        self, member_id: int, *, unread_only: bool = False
    ) -> Sequence[Notification]:
        """Get a member's notifications, newest first.

        @param member_id - Member ID
        @param unread_only - Only return unread notifications
        @returns List of notifications
        """
        stmt = select(self.model).where(self.model.member_id == member_id)
        if unread_only:
            stmt = stmt.where(self.model.is_read.is_(False))
        stmt = stmt.order_by(desc(self.model.id))
        result = await self.session.execute(stmt)
        return result.scalars().all()

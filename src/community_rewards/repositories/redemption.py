"""Repository for reward redemption operations."""

from typing import Any, Sequence

from sqlalchemy import desc, select

from community_rewards.models.member import Member
from community_rewards.models.redemption import RewardRedemption
from community_rewards.models.reward import Reward
from community_rewards.repositories.base import BaseRepository


class RedemptionRepository(BaseRepository[RewardRedemption]):
    """Repository for RewardRedemption database operations.

    Handles redemption queries including:
    - Member history with status filter and pagination
    - Detail rows joined with member and reward names
    """

    model = RewardRedemption

    async def get_by_member(
        self,
        member_id: int,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Sequence[Any]:
        """Get a member's redemptions, newest first, with reward names.

        @param member_id - Member ID
        @param status - Optional status filter
        @param skip - Pagination offset
        @param limit - Maximum results
        @returns Rows of (RewardRedemption, reward_name)
        """
        stmt = (
            select(self.model, Reward.reward_name)
            .join(Reward, Reward.id == self.model.reward_id)
            .where(self.model.member_id == member_id)
        )
        if status:
            stmt = stmt.where(self.model.status == status)
        stmt = (
            stmt.order_by(desc(self.model.redeemed_at), desc(self.model.id))
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.all()

    async def get_detail(self, id: int) -> Any | None:
        """Get a redemption together with member and reward names.

        @param id - Redemption ID
        @returns Row of (RewardRedemption, full_name, reward_name) or None
        """
        stmt = (
            select(self.model, Member.full_name, Reward.reward_name)
            .join(Member, Member.id == self.model.member_id)
            .join(Reward, Reward.id == self.model.reward_id)
            .where(self.model.id == id)
        )
        result = await self.session.execute(stmt)
        return result.first()

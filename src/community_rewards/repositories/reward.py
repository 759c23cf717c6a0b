"""Repository for reward catalog operations."""

from typing import Sequence

from sqlalchemy import select

from community_rewards.models.reward import Reward
from community_rewards.repositories.base import BaseRepository


class RewardRepository(BaseRepository[Reward]):
    """Repository for Reward database operations."""

    model = Reward

    async def get_available(self) -> Sequence[Reward]:
        """Get active rewards that still have stock, cheapest first.

        @returns List of rewards
        """
        stmt = (
            select(self.model)
            .where(self.model.is_active.is_(True), self.model.stock > 0)
            .order_by(self.model.point_cost.asc(), self.model.id.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

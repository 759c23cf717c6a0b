"""Reward catalog as seen by a member."""

import logging

from community_rewards.core.errors import NotFoundError
from community_rewards.infrastructure.database import Database
from community_rewards.repositories.member import MemberRepository
from community_rewards.repositories.reward import RewardRepository
from community_rewards.services.privileges import (
    DatabasePrivilegeResolver,
    Privilege,
    PrivilegeResolver,
)
from community_rewards.services.rewards.schemas import (
    MemberBalance,
    RewardAvailability,
    RewardCatalogResponse,
)

logger = logging.getLogger(__name__)


class RewardCatalogService:
    """Lists redeemable rewards with per-member affordability."""

    def __init__(
        self,
        database: Database,
        privilege_resolver: PrivilegeResolver | None = None,
    ):
        """Initialize catalog service.

        @param database - Open database handle
        @param privilege_resolver - Privilege lookup (default: user_privileges table)
        """
        self._database = database
        self._privilege_resolver = privilege_resolver or DatabasePrivilegeResolver()

    async def list_available_rewards(self, member_id: int) -> RewardCatalogResponse:
        """Get active in-stock rewards annotated for a member.

        @param member_id - Requesting member
        @returns RewardCatalogResponse
        """
        async with self._database.session() as session:
            member = await MemberRepository(session).get_by_id(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)

            privilege = await self._privilege_resolver.resolve(session, member_id)
            rewards = await RewardRepository(session).get_available()

        items = []
        for reward in rewards:
            required = (
                Privilege.parse(reward.required_privilege)
                if reward.required_privilege
                else None
            )
            items.append(
                RewardAvailability(
                    id=reward.id,
                    reward_name=reward.reward_name,
                    description=reward.description,
                    point_cost=reward.point_cost,
                    stock=reward.stock,
                    required_privilege=required.value if required else None,
                    is_affordable=member.coin >= reward.point_cost,
                    coins_needed=max(0, reward.point_cost - member.coin),
                    meets_privilege=privilege.satisfies(required),
                )
            )

        logger.debug(f"Catalog for member {member_id}: {len(items)} rewards")
        return RewardCatalogResponse(
            member=MemberBalance(
                member_id=member.id,
                coin=member.coin,
                loyalty_point=member.loyalty_point,
                privilege=privilege.value,
                privilege_display_name=privilege.display_name,
            ),
            rewards=items,
            total_rewards=len(items),
            affordable_rewards=sum(
                1 for item in items if item.is_affordable and item.meets_privilege
            ),
        )

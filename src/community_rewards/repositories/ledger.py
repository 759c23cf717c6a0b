"""Repository for point history (ledger) operations."""

from typing import Sequence

from sqlalchemy import func, select

from community_rewards.models.ledger import LedgerEntry
from community_rewards.repositories.base import BaseRepository


class LedgerRepository(BaseRepository[LedgerEntry]):
    """Repository for append-only LedgerEntry rows.

    Entries are only ever inserted; there is deliberately no update or
    delete helper here.
    """

    model = LedgerEntry

    async def get_by_member(
        self,
        member_id: int,
        *,
        event_type: str | None = None,
    ) -> Sequence[LedgerEntry]:
        """Get a member's entries in insertion order.

        @param member_id - Member ID
        @param event_type - Optional event type filter
        @returns List of ledger entries
        """
        stmt = select(self.model).where(self.model.member_id == member_id)
        if event_type:
            stmt = stmt.where(self.model.event_type == event_type)
        stmt = stmt.order_by(self.model.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def sum_for_member(self, member_id: int) -> int:
        """Net point delta recorded for a member.

        @param member_id - Member ID
        @returns Sum of all entry deltas (0 when none)
        """
        stmt = select(func.coalesce(func.sum(self.model.point), 0)).where(
            self.model.member_id == member_id
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

"""Point history (ledger) model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from community_rewards.models.base import Base, utcnow


class LedgerEntry(Base):
    """Append-only record of every balance-affecting event."""

    __tablename__ = "point_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="RESTRICT"), nullable=False
    )
    redemption_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("reward_redemptions.id", ondelete="RESTRICT"), nullable=True
    )

    event: Mapped[str] = mapped_column(Text, nullable=False)
    point: Mapped[int] = mapped_column(Integer, nullable=False)  # + or -
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_point_history_member", "member_id"),
        Index("ix_point_history_event_type", "event_type"),
    )

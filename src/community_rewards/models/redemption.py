"""Reward redemption model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from community_rewards.models.base import Base, utcnow


class RewardRedemption(Base):
    """Reward redemption table.

    Rows are created once by a redemption and afterwards only change through
    status updates; they are never deleted.
    """

    __tablename__ = "reward_redemptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    reward_id: Mapped[int] = mapped_column(
        ForeignKey("rewards.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Cost snapshot at redemption time; later price changes never touch it
    points_spent: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(30), default="awaiting_verification", nullable=False, index=True
    )

    # Member-facing shipping notes and admin-facing explanation
    shipping_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    redemption_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    shipped_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('awaiting_verification', 'shipped', 'delivered', 'rejected', 'cancelled')",
            name="status",
        ),
        CheckConstraint("quantity >= 1", name="quantity_positive"),
        CheckConstraint("points_spent >= 0", name="points_spent_non_negative"),
    )

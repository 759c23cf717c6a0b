"""Member and privilege models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from community_rewards.models.base import Base, TimestampMixin, utcnow


class Member(Base, TimestampMixin):
    """Community member table."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)

    # Balances
    coin: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # spendable
    loyalty_point: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # permanent

    __table_args__ = (
        CheckConstraint("coin >= 0", name="coin_non_negative"),
    )


class UserPrivilege(Base):
    """Privilege grants; a member may hold several over time."""

    __tablename__ = "user_privileges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False
    )
    privilege: Mapped[str] = mapped_column(String(30), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_user_privileges_member_active", "member_id", "is_active"),
    )

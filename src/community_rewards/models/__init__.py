"""Database models for the community rewards backend."""

from community_rewards.models.base import Base, TimestampMixin
from community_rewards.models.ledger import LedgerEntry
from community_rewards.models.member import Member, UserPrivilege
from community_rewards.models.notification import Notification
from community_rewards.models.redemption import RewardRedemption
from community_rewards.models.reward import Reward

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Members
    "Member",
    "UserPrivilege",
    # Catalog and redemptions
    "Reward",
    "RewardRedemption",
    "LedgerEntry",
    # Notifications
    "Notification",
]

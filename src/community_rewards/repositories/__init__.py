"""Repository layer for database operations.

This module provides async repository implementations using SQLAlchemy 2.x.
All repositories follow the Repository pattern with consistent operations.
"""

from community_rewards.repositories.base import BaseRepository
from community_rewards.repositories.ledger import LedgerRepository
from community_rewards.repositories.member import MemberRepository, PrivilegeRepository
from community_rewards.repositories.notification import NotificationRepository
from community_rewards.repositories.redemption import RedemptionRepository
from community_rewards.repositories.reward import RewardRepository

__all__ = [
    "BaseRepository",
    "MemberRepository",
    "PrivilegeRepository",
    "RewardRepository",
    "RedemptionRepository",
    "LedgerRepository",
    "NotificationRepository",
]

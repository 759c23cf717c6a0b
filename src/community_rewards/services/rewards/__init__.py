"""Reward catalog."""

from community_rewards.services.rewards.catalog import RewardCatalogService
from community_rewards.services.rewards.schemas import (
    MemberBalance,
    RewardAvailability,
    RewardCatalogResponse,
)

__all__ = [
    "RewardCatalogService",
    "RewardCatalogResponse",
    "RewardAvailability",
    "MemberBalance",
]

"""Reward redemption workflows."""

from community_rewards.services.redemption.engine import RedemptionEngine
from community_rewards.services.redemption.schemas import (
    RedemptionDetail,
    RedemptionListResponse,
    RedemptionResult,
    RedemptionStatus,
    StatusUpdateResult,
)

__all__ = [
    "RedemptionEngine",
    "RedemptionStatus",
    "RedemptionResult",
    "StatusUpdateResult",
    "RedemptionDetail",
    "RedemptionListResponse",
]

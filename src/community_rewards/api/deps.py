"""Service dependencies resolved from application state."""

from fastapi import Request

from community_rewards.services.redemption import RedemptionEngine
from community_rewards.services.rewards import RewardCatalogService


def get_redemption_engine(request: Request) -> RedemptionEngine:
    """Get the redemption engine installed on the application."""
    return request.app.state.redemption_engine


def get_catalog_service(request: Request) -> RewardCatalogService:
    """Get the reward catalog service installed on the application."""
    return request.app.state.catalog_service

"""API v1 module."""

from fastapi import APIRouter

from community_rewards.api.v1.endpoints import admin_redemptions, rewards

api_router = APIRouter()

# Include routers
api_router.include_router(rewards.router)
api_router.include_router(admin_redemptions.router)

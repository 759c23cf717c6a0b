"""Member-facing reward catalog and redemption endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status

from community_rewards.api.deps import get_catalog_service, get_redemption_engine
from community_rewards.services.auth import CurrentMember
from community_rewards.services.redemption import (
    RedemptionEngine,
    RedemptionListResponse,
    RedemptionResult,
    StatusUpdateResult,
)
from community_rewards.services.redemption.schemas import (
    ConfirmReceiptRequest,
    RedeemRequest,
)
from community_rewards.services.rewards import (
    RewardCatalogResponse,
    RewardCatalogService,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/rewards", tags=["Rewards"])


@router.get("", response_model=RewardCatalogResponse)
async def list_rewards(
    member: CurrentMember,
    catalog: Annotated[RewardCatalogService, Depends(get_catalog_service)],
) -> RewardCatalogResponse:
    """List rewards the current member can see, with affordability."""
    return await catalog.list_available_rewards(member.member_id)


@router.post(
    "/redeem",
    response_model=RedemptionResult,
    status_code=status.HTTP_201_CREATED,
)
async def redeem_reward(
    member: CurrentMember,
    engine: Annotated[RedemptionEngine, Depends(get_redemption_engine)],
    request: RedeemRequest,
) -> RedemptionResult:
    """Redeem a reward with the current member's coins.

    The redemption starts as awaiting_verification until an admin ships,
    delivers, rejects or cancels it.
    """
    return await engine.redeem(
        member_id=member.member_id,
        reward_id=request.reward_id,
        quantity=request.quantity,
        shipping_notes=request.shipping_notes,
    )


@router.get("/redemptions", response_model=RedemptionListResponse)
async def list_my_redemptions(
    member: CurrentMember,
    engine: Annotated[RedemptionEngine, Depends(get_redemption_engine)],
    status: str | None = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
) -> RedemptionListResponse:
    """List the current member's redemption history."""
    return await engine.list_member_redemptions(
        member.member_id,
        status=status,
        page=page,
        page_size=page_size,
    )


@router.post("/redemptions/{redemption_id}/confirm", response_model=StatusUpdateResult)
async def confirm_receipt(
    redemption_id: int,
    member: CurrentMember,
    engine: Annotated[RedemptionEngine, Depends(get_redemption_engine)],
    request: Annotated[ConfirmReceiptRequest | None, Body()] = None,
) -> StatusUpdateResult:
    """Confirm that a shipped reward has arrived."""
    return await engine.confirm_receipt(
        member.member_id,
        redemption_id,
        notes=request.notes if request else None,
    )

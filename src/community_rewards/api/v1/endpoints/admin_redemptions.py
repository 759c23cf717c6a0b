"""Admin redemption management endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from community_rewards.api.deps import get_redemption_engine
from community_rewards.services.auth import AdminMember
from community_rewards.services.redemption import (
    RedemptionDetail,
    RedemptionEngine,
    StatusUpdateResult,
)
from community_rewards.services.redemption.schemas import StatusUpdateRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/redemptions", tags=["Admin Redemptions"])


@router.get("/{redemption_id}", response_model=RedemptionDetail)
async def get_redemption(
    redemption_id: int,
    admin: AdminMember,
    engine: Annotated[RedemptionEngine, Depends(get_redemption_engine)],
) -> RedemptionDetail:
    """Get redemption detail.

    Requires: admin privilege
    """
    return await engine.get_redemption(redemption_id)


@router.put("/{redemption_id}/status", response_model=StatusUpdateResult)
async def update_redemption_status(
    redemption_id: int,
    request: StatusUpdateRequest,
    admin: AdminMember,
    engine: Annotated[RedemptionEngine, Depends(get_redemption_engine)],
) -> StatusUpdateResult:
    """Change a redemption's status.

    Final statuses (delivered, rejected, cancelled) require confirm_final.
    Rejected and cancelled redemptions are refunded automatically.

    Requires: admin privilege
    """
    logger.info(
        f"Admin {admin.member_id} updating redemption {redemption_id} to {request.status}"
    )
    return await engine.update_status(
        redemption_id,
        request.status,
        request.admin_notes,
        shipping_notes=request.shipping_notes,
        confirm_final=request.confirm_final,
        tracking_number=request.tracking_number,
    )

"""Redemption schemas and status state machine."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RedemptionStatus(str, Enum):
    """Redemption lifecycle status.

    awaiting_verification -> shipped -> delivered
    any non-final status  -> rejected | cancelled (coins and stock refunded)
    """

    AWAITING_VERIFICATION = "awaiting_verification"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_final(self) -> bool:
        return self in FINAL_STATUSES

    @property
    def is_refund(self) -> bool:
        return self in REFUND_STATUSES

    def can_transition_to(self, target: "RedemptionStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


FINAL_STATUSES = frozenset({
    RedemptionStatus.DELIVERED,
    RedemptionStatus.REJECTED,
    RedemptionStatus.CANCELLED,
})

REFUND_STATUSES = frozenset({
    RedemptionStatus.REJECTED,
    RedemptionStatus.CANCELLED,
})

# Same-status moves are allowed so admins can amend notes and tracking data
ALLOWED_TRANSITIONS: dict[RedemptionStatus, frozenset[RedemptionStatus]] = {
    RedemptionStatus.AWAITING_VERIFICATION: frozenset(RedemptionStatus),
    RedemptionStatus.SHIPPED: frozenset(RedemptionStatus) - {
        RedemptionStatus.AWAITING_VERIFICATION
    },
    RedemptionStatus.DELIVERED: frozenset(),
    RedemptionStatus.REJECTED: frozenset(),
    RedemptionStatus.CANCELLED: frozenset(),
}


class LedgerEventType(str, Enum):
    """Point history event types written by redemptions."""

    REWARD_REDEMPTION = "reward_redemption"
    REWARD_REFUND = "reward_refund"


class RedeemRequest(BaseModel):
    """Request body for redeeming a reward."""

    reward_id: int = Field(..., description="Reward to redeem")
    quantity: int = Field(1, description="Units to redeem (1-10)")
    shipping_notes: str | None = Field(
        None, description="Free-text shipping notes, truncated to 500 characters"
    )


class RedemptionResult(BaseModel):
    """Outcome of a successful redemption."""

    redemption_id: int = Field(..., description="Created redemption ID")
    reward_id: int = Field(..., description="Redeemed reward ID")
    reward_name: str = Field(..., description="Redeemed reward name")
    quantity: int = Field(..., description="Units redeemed")
    points_spent: int = Field(..., description="Coins debited")
    remaining_balance: int = Field(..., description="Spendable coins after the debit")
    remaining_loyalty_points: int = Field(..., description="Loyalty points (unchanged)")
    remaining_stock: int = Field(..., description="Reward stock after the redemption")
    status: RedemptionStatus = Field(..., description="Initial status")
    redeemed_at: datetime = Field(..., description="Redemption time")


class StatusUpdateRequest(BaseModel):
    """Request body for an admin status change."""

    status: str = Field(..., description="Target status")
    notes: str | None = Field(None, description="Admin explanation (required)")
    redemption_notes: str | None = Field(None, description="Alias of notes")
    shipping_notes: str | None = Field(None, description="Replacement shipping notes")
    tracking_number: str | None = Field(None, max_length=100, description="Courier tracking number")
    confirm_final: bool = Field(False, description="Confirms an irreversible final status")

    @property
    def admin_notes(self) -> str:
        return self.notes or self.redemption_notes or ""


class StatusUpdateResult(BaseModel):
    """Outcome of a status change."""

    redemption_id: int = Field(..., description="Redemption ID")
    status: RedemptionStatus = Field(..., description="New status")
    previous_status: RedemptionStatus = Field(..., description="Status before the change")
    refunded_amount: int | None = Field(
        None, description="Coins refunded by this change, if any"
    )


class ConfirmReceiptRequest(BaseModel):
    """Request body for a member confirming delivery."""

    notes: str | None = Field(None, description="Optional review or note")


class RedemptionListItem(BaseModel):
    """Redemption item in a member's history."""

    id: int = Field(..., description="Redemption ID")
    reward_id: int = Field(..., description="Reward ID")
    reward_name: str = Field(..., description="Reward name")
    quantity: int = Field(..., description="Units redeemed")
    points_spent: int = Field(..., description="Coins spent")
    status: RedemptionStatus = Field(..., description="Current status")
    shipping_notes: str | None = Field(None, description="Shipping notes")
    redemption_notes: str | None = Field(None, description="Admin notes")
    tracking_number: str | None = Field(None, description="Tracking number")
    redeemed_at: datetime = Field(..., description="Redemption time")
    shipped_at: datetime | None = Field(None, description="Shipping time")
    delivered_at: datetime | None = Field(None, description="Delivery time")

    class Config:
        from_attributes = True


class PaginationMeta(BaseModel):
    """Pagination metadata."""

    page: int = Field(..., ge=1, description="Current page")
    page_size: int = Field(..., ge=1, le=100, description="Page size")
    total_items: int = Field(..., ge=0, description="Total items")
    total_pages: int = Field(..., ge=0, description="Total pages")


class RedemptionListResponse(BaseModel):
    """Paginated redemption history."""

    items: list[RedemptionListItem] = Field(..., description="Redemption items")
    meta: PaginationMeta = Field(..., description="Pagination metadata")


class RedemptionDetail(RedemptionListItem):
    """Admin view of a single redemption."""

    member_id: int = Field(..., description="Member ID")
    member_name: str = Field(..., description="Member full name")
    updated_at: datetime = Field(..., description="Last change")

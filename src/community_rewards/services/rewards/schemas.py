"""Reward catalog schemas."""

from pydantic import BaseModel, Field


class MemberBalance(BaseModel):
    """Member balances shown alongside the catalog."""

    member_id: int = Field(..., description="Member ID")
    coin: int = Field(..., description="Spendable coins")
    loyalty_point: int = Field(..., description="Permanent loyalty points")
    privilege: str = Field(..., description="Resolved privilege tier")
    privilege_display_name: str = Field(..., description="Privilege display name")


class RewardAvailability(BaseModel):
    """Catalog entry annotated for the requesting member."""

    id: int = Field(..., description="Reward ID")
    reward_name: str = Field(..., description="Reward name")
    description: str | None = Field(None, description="Reward description")
    point_cost: int = Field(..., description="Coins per unit")
    stock: int = Field(..., description="Units in stock")
    required_privilege: str | None = Field(None, description="Minimum privilege tier")
    is_affordable: bool = Field(..., description="Member can pay for one unit")
    coins_needed: int = Field(..., description="Coins missing for one unit (0 if affordable)")
    meets_privilege: bool = Field(..., description="Member passes the privilege gate")


class RewardCatalogResponse(BaseModel):
    """Available rewards for a member."""

    member: MemberBalance = Field(..., description="Member balances")
    rewards: list[RewardAvailability] = Field(..., description="Rewards, cheapest first")
    total_rewards: int = Field(..., description="Number of rewards listed")
    affordable_rewards: int = Field(
        ..., description="Rewards the member can afford and is allowed to redeem"
    )

"""Member-facing notification texts for redemption events."""

from community_rewards.services.redemption.schemas import RedemptionStatus


def redemption_submitted_message(reward_name: str) -> str:
    return f"Your redemption of {reward_name} was received and is awaiting admin verification"


def status_update_message(
    reward_name: str,
    status: RedemptionStatus,
    refunded_amount: int = 0,
) -> str:
    """Build the notification text for a status change.

    @param reward_name - Redeemed reward name
    @param status - New redemption status
    @param refunded_amount - Coins refunded by this change (0 if none)
    @returns Message text
    """
    if status == RedemptionStatus.AWAITING_VERIFICATION:
        return redemption_submitted_message(reward_name)
    if status == RedemptionStatus.SHIPPED:
        return f"{reward_name} is on its way"
    if status == RedemptionStatus.DELIVERED:
        return f"{reward_name} has been delivered"
    if status in (RedemptionStatus.REJECTED, RedemptionStatus.CANCELLED):
        verb = "rejected" if status == RedemptionStatus.REJECTED else "cancelled"
        if refunded_amount:
            return (
                f"Your redemption of {reward_name} was {verb}; "
                f"{refunded_amount} coins have been returned to your balance"
            )
        return f"Your redemption of {reward_name} was {verb}"
    return f"The status of your {reward_name} redemption was updated"

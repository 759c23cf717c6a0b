"""Reward redemption engine.

Owns the two balance-affecting workflows of the rewards programme:
- redeem: debit coins and stock, record the redemption and its ledger entry
- update_status: move a redemption through its lifecycle, refunding coins
  and stock exactly once when it is rejected or cancelled

Plus the member receipt confirmation and the read-only history/detail views.

Each workflow runs in a single store transaction and locks rows in the order
redemption -> member -> reward. Notifications go out after commit and never
affect the outcome.
"""

import logging
from datetime import datetime
from typing import Any, Protocol

from community_rewards.core.config import Settings, get_settings
from community_rewards.core.errors import (
    ConfirmationRequiredError,
    FinalStatusError,
    InsufficientBalanceError,
    InsufficientPrivilegeError,
    InsufficientStockError,
    NotFoundError,
    RedemptionValidationError,
    RewardUnavailableError,
)
from community_rewards.infrastructure.database import Database
from community_rewards.models.base import utcnow
from community_rewards.models.redemption import RewardRedemption
from community_rewards.repositories.ledger import LedgerRepository
from community_rewards.repositories.member import MemberRepository
from community_rewards.repositories.redemption import RedemptionRepository
from community_rewards.repositories.reward import RewardRepository
from community_rewards.services.privileges import (
    DatabasePrivilegeResolver,
    Privilege,
    PrivilegeResolver,
)
from community_rewards.services.redemption.messages import (
    redemption_submitted_message,
    status_update_message,
)
from community_rewards.services.redemption.schemas import (
    LedgerEventType,
    PaginationMeta,
    RedemptionDetail,
    RedemptionListItem,
    RedemptionListResponse,
    RedemptionResult,
    RedemptionStatus,
    StatusUpdateResult,
)

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a member notification."""

    async def notify(self, member_id: int, message: str, link_url: str | None = None) -> Any: ...


def _list_item_fields(redemption: RewardRedemption, reward_name: str) -> dict[str, Any]:
    return {
        "id": redemption.id,
        "reward_id": redemption.reward_id,
        "reward_name": reward_name,
        "quantity": redemption.quantity,
        "points_spent": redemption.points_spent,
        "status": redemption.status,
        "shipping_notes": redemption.shipping_notes,
        "redemption_notes": redemption.redemption_notes,
        "tracking_number": redemption.tracking_number,
        "redeemed_at": redemption.redeemed_at,
        "shipped_at": redemption.shipped_at,
        "delivered_at": redemption.delivered_at,
    }


class RedemptionEngine:
    """Redemption and status workflows over the store.

    Example:
        engine = RedemptionEngine(database, notification_service)
        result = await engine.redeem(member_id=1, reward_id=7, quantity=2)
        await engine.update_status(result.redemption_id, "shipped", "Sent via JNE")
    """

    def __init__(
        self,
        database: Database,
        notifier: Notifier,
        privilege_resolver: PrivilegeResolver | None = None,
        settings: Settings | None = None,
    ):
        """Initialize redemption engine.

        @param database - Open database handle
        @param notifier - Best-effort member notifier
        @param privilege_resolver - Privilege lookup (default: user_privileges table)
        @param settings - Application settings (default: cached settings)
        """
        self._database = database
        self._notifier = notifier
        self._privilege_resolver = privilege_resolver or DatabasePrivilegeResolver()
        self._settings = settings or get_settings()

    # =========================================================================
    # Redeem
    # =========================================================================

    async def redeem(
        self,
        member_id: int,
        reward_id: int,
        quantity: int = 1,
        shipping_notes: str | None = None,
    ) -> RedemptionResult:
        """Redeem a reward for coins.

        Checks run in a fixed order and nothing is written unless all pass:
        member exists, reward exists, reward active, privilege, stock, coins.

        @param member_id - Redeeming member
        @param reward_id - Reward to redeem
        @param quantity - Units to redeem
        @param shipping_notes - Optional free-text notes (truncated)
        @returns RedemptionResult with the new balances
        @raises RedemptionError - On any rejected or failed redemption
        """
        self._validate_quantity(quantity)
        notes = self._clean_notes(shipping_notes)

        async with self._database.transaction() as session:
            member = await MemberRepository(session).lock_and_load(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)

            privilege = await self._privilege_resolver.resolve(session, member_id)

            reward_repo = RewardRepository(session)
            reward = await reward_repo.lock_and_load(reward_id)
            if reward is None:
                raise NotFoundError("Reward", reward_id)

            if not reward.is_active:
                raise RewardUnavailableError(
                    f"Reward {reward.reward_name} is not available",
                    reward_id=reward_id,
                )

            required = (
                Privilege.parse(reward.required_privilege)
                if reward.required_privilege
                else None
            )
            if not privilege.satisfies(required):
                logger.info(
                    f"Member {member_id} ({privilege.value}) denied reward {reward_id} "
                    f"requiring {required.value}"
                )
                raise InsufficientPrivilegeError(
                    f"This reward requires {required.display_name} privilege",
                    required_privilege=required.value,
                    current_privilege=privilege.value,
                )

            if reward.stock < quantity:
                raise InsufficientStockError(available=reward.stock, requested=quantity)

            total_cost = reward.point_cost * quantity
            if member.coin < total_cost:
                raise InsufficientBalanceError(required=total_cost, available=member.coin)

            reward.stock -= quantity

            redeemed_at = utcnow()
            redemption = await RedemptionRepository(session).create({
                "member_id": member_id,
                "reward_id": reward_id,
                "quantity": quantity,
                "points_spent": total_cost,
                "status": RedemptionStatus.AWAITING_VERIFICATION.value,
                "shipping_notes": notes,
                "redeemed_at": redeemed_at,
                "updated_at": redeemed_at,
            })

            event = f"Reward redemption: {reward.reward_name}"
            if quantity > 1:
                event += f" ({quantity}x)"
            await LedgerRepository(session).create({
                "member_id": member_id,
                "redemption_id": redemption.id,
                "event": event,
                "point": -total_cost,
                "event_type": LedgerEventType.REWARD_REDEMPTION.value,
                "created_at": redeemed_at,
            })

            member.coin -= total_cost

            result = RedemptionResult(
                redemption_id=redemption.id,
                reward_id=reward.id,
                reward_name=reward.reward_name,
                quantity=quantity,
                points_spent=total_cost,
                remaining_balance=member.coin,
                remaining_loyalty_points=member.loyalty_point,
                remaining_stock=reward.stock,
                status=RedemptionStatus.AWAITING_VERIFICATION,
                redeemed_at=redeemed_at,
            )

        logger.info(
            f"Redemption {result.redemption_id} created: member={member_id}, "
            f"reward={reward_id}, quantity={quantity}, cost={total_cost}"
        )
        await self._notify(member_id, redemption_submitted_message(result.reward_name))
        return result

    # =========================================================================
    # Status updates
    # =========================================================================

    async def update_status(
        self,
        redemption_id: int,
        new_status: str | RedemptionStatus,
        admin_notes: str | None,
        shipping_notes: str | None = None,
        confirm_final: bool = False,
        tracking_number: str | None = None,
    ) -> StatusUpdateResult:
        """Change a redemption's status as an admin.

        Rejecting or cancelling returns the coins and stock taken by the
        redemption; since both statuses are final this happens at most once.

        @param redemption_id - Redemption to update
        @param new_status - Target status
        @param admin_notes - Required explanation, stored as redemption_notes
        @param shipping_notes - Replacement shipping notes (kept when None)
        @param confirm_final - Must be True to move into a final status
        @param tracking_number - Courier tracking number (kept when None)
        @returns StatusUpdateResult with the refunded amount, if any
        @raises RedemptionError - On any rejected or failed update
        """
        if not admin_notes or not admin_notes.strip():
            raise RedemptionValidationError("Admin notes are required", field="notes")
        target = self._parse_status(new_status)

        async with self._database.transaction() as session:
            redemption = await RedemptionRepository(session).lock_and_load(redemption_id)
            if redemption is None:
                raise NotFoundError("Redemption", redemption_id)

            current = RedemptionStatus(redemption.status)
            if current.is_final:
                raise FinalStatusError(current.value)
            if not current.can_transition_to(target):
                raise RedemptionValidationError(
                    f"Cannot change status from {current.value} to {target.value}",
                    current_status=current.value,
                    status=target.value,
                )
            if target.is_final and not confirm_final:
                raise ConfirmationRequiredError(target.value)

            now = utcnow()
            self._stamp_timestamps(redemption, target, now)

            refunded_amount = None
            reward_repo = RewardRepository(session)
            if target.is_refund and not current.is_refund:
                member = await MemberRepository(session).lock_and_load(redemption.member_id)
                if member is None:
                    raise NotFoundError("Member", redemption.member_id)
                reward = await reward_repo.lock_and_load(redemption.reward_id)
                if reward is None:
                    raise NotFoundError("Reward", redemption.reward_id)

                member.coin += redemption.points_spent
                reward.stock += redemption.quantity
                await LedgerRepository(session).create({
                    "member_id": member.id,
                    "redemption_id": redemption.id,
                    "event": f"Refund for {target.value} redemption: {reward.reward_name}",
                    "point": redemption.points_spent,
                    "event_type": LedgerEventType.REWARD_REFUND.value,
                    "created_at": now,
                })
                refunded_amount = redemption.points_spent
            else:
                reward = await reward_repo.get_by_id(redemption.reward_id)

            redemption.status = target.value
            redemption.redemption_notes = admin_notes.strip()
            if shipping_notes is not None:
                redemption.shipping_notes = self._clean_notes(shipping_notes)
            if tracking_number is not None:
                redemption.tracking_number = tracking_number.strip() or None
            redemption.updated_at = now

            member_id = redemption.member_id
            reward_name = reward.reward_name if reward else f"reward #{redemption.reward_id}"

        logger.info(
            f"Redemption {redemption_id} status {current.value} -> {target.value}"
            + (f", refunded {refunded_amount} coins" if refunded_amount else "")
        )
        await self._notify(
            member_id,
            status_update_message(reward_name, target, refunded_amount or 0),
        )
        return StatusUpdateResult(
            redemption_id=redemption_id,
            status=target,
            previous_status=current,
            refunded_amount=refunded_amount,
        )

    async def confirm_receipt(
        self,
        member_id: int,
        redemption_id: int,
        notes: str | None = None,
    ) -> StatusUpdateResult:
        """Mark a shipped redemption as delivered on behalf of its member.

        @param member_id - Member confirming receipt (must own the redemption)
        @param redemption_id - Redemption to confirm
        @param notes - Optional note replacing redemption_notes
        @returns StatusUpdateResult
        """
        async with self._database.transaction() as session:
            redemption = await RedemptionRepository(session).lock_and_load(redemption_id)
            if redemption is None or redemption.member_id != member_id:
                raise NotFoundError("Redemption", redemption_id)

            current = RedemptionStatus(redemption.status)
            if current.is_final:
                raise FinalStatusError(current.value)
            if current != RedemptionStatus.SHIPPED:
                raise RedemptionValidationError(
                    "Only shipped redemptions can be confirmed as received",
                    current_status=current.value,
                )

            now = utcnow()
            self._stamp_timestamps(redemption, RedemptionStatus.DELIVERED, now)
            redemption.status = RedemptionStatus.DELIVERED.value
            if notes and notes.strip():
                redemption.redemption_notes = notes.strip()
            redemption.updated_at = now

        logger.info(f"Redemption {redemption_id} receipt confirmed by member {member_id}")
        return StatusUpdateResult(
            redemption_id=redemption_id,
            status=RedemptionStatus.DELIVERED,
            previous_status=current,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_redemption(self, redemption_id: int) -> RedemptionDetail:
        """Get redemption detail with member and reward names.

        @param redemption_id - Redemption ID
        @returns RedemptionDetail
        """
        async with self._database.session() as session:
            row = await RedemptionRepository(session).get_detail(redemption_id)
            if row is None:
                raise NotFoundError("Redemption", redemption_id)

            redemption, member_name, reward_name = row
            return RedemptionDetail(
                **_list_item_fields(redemption, reward_name),
                member_id=redemption.member_id,
                member_name=member_name,
                updated_at=redemption.updated_at,
            )

    async def list_member_redemptions(
        self,
        member_id: int,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> RedemptionListResponse:
        """List a member's redemptions, newest first.

        @param member_id - Member ID
        @param status - Optional status filter
        @param page - Page number (1-indexed)
        @param page_size - Items per page (max 100)
        @returns Paginated redemption history
        """
        status_value = self._parse_status(status).value if status else None
        if page < 1:
            raise RedemptionValidationError("Page must be at least 1", page=page)
        if not 1 <= page_size <= 100:
            raise RedemptionValidationError(
                "Page size must be between 1 and 100", page_size=page_size
            )

        async with self._database.session() as session:
            repo = RedemptionRepository(session)
            total = await repo.count(member_id=member_id, status=status_value)
            rows = await repo.get_by_member(
                member_id,
                status=status_value,
                skip=(page - 1) * page_size,
                limit=page_size,
            )
            items = [
                RedemptionListItem(**_list_item_fields(redemption, reward_name))
                for redemption, reward_name in rows
            ]

        return RedemptionListResponse(
            items=items,
            meta=PaginationMeta(
                page=page,
                page_size=page_size,
                total_items=total,
                total_pages=(total + page_size - 1) // page_size,
            ),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate_quantity(self, quantity: Any) -> None:
        low = self._settings.redemption_min_quantity
        high = self._settings.redemption_max_quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise RedemptionValidationError(
                f"Quantity must be a whole number between {low} and {high}",
                quantity=quantity,
            )
        if not low <= quantity <= high:
            raise RedemptionValidationError(
                f"Quantity must be between {low} and {high}",
                quantity=quantity,
            )

    def _clean_notes(self, notes: str | None) -> str | None:
        if notes is None or not notes.strip():
            return None
        return notes[: self._settings.shipping_notes_max_length]

    @staticmethod
    def _parse_status(value: str | RedemptionStatus) -> RedemptionStatus:
        try:
            return RedemptionStatus(value)
        except ValueError:
            raise RedemptionValidationError(
                f"Invalid status: {value}",
                status=value,
                allowed=[status.value for status in RedemptionStatus],
            ) from None

    @staticmethod
    def _stamp_timestamps(
        redemption: RewardRedemption, target: RedemptionStatus, now: datetime
    ) -> None:
        if target == RedemptionStatus.SHIPPED and redemption.shipped_at is None:
            redemption.shipped_at = now
        elif target == RedemptionStatus.DELIVERED:
            redemption.delivered_at = now
            if redemption.shipped_at is None:
                redemption.shipped_at = now

    async def _notify(self, member_id: int, message: str) -> None:
        try:
            await self._notifier.notify(
                member_id, message, self._settings.notification_link_url
            )
        except Exception:
            logger.exception(f"Failed to notify member {member_id}")

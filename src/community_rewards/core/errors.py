"""Structured errors raised by the redemption core.

Every error carries a machine-readable ``kind``, a human message and optional
details. ``status_code`` is the HTTP status the API layer answers with;
business rejections are 4xx, store failures are 503 and flagged retryable.
"""

from enum import Enum
from typing import Any


class RedemptionErrorKind(str, Enum):
    """Error kinds."""

    NOT_FOUND = "NOT_FOUND"
    REWARD_UNAVAILABLE = "REWARD_UNAVAILABLE"
    INSUFFICIENT_PRIVILEGE = "INSUFFICIENT_PRIVILEGE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FINAL_STATUS = "FINAL_STATUS"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    STORE_TIMEOUT = "STORE_TIMEOUT"
    STORE_CONFLICT = "STORE_CONFLICT"


class RedemptionError(Exception):
    """Base class for redemption failures."""

    kind: RedemptionErrorKind = RedemptionErrorKind.VALIDATION_ERROR
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class NotFoundError(RedemptionError):
    kind = RedemptionErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found", entity=entity, id=entity_id)


class RewardUnavailableError(RedemptionError):
    kind = RedemptionErrorKind.REWARD_UNAVAILABLE


class InsufficientPrivilegeError(RedemptionError):
    kind = RedemptionErrorKind.INSUFFICIENT_PRIVILEGE
    status_code = 403


class InsufficientStockError(RedemptionError):
    kind = RedemptionErrorKind.INSUFFICIENT_STOCK
    status_code = 409

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}",
            available=available,
            requested=requested,
        )


class InsufficientBalanceError(RedemptionError):
    kind = RedemptionErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient coins. You need {required} coins but only have {available} coins",
            required=required,
            available=available,
        )


class RedemptionValidationError(RedemptionError):
    kind = RedemptionErrorKind.VALIDATION_ERROR


class FinalStatusError(RedemptionError):
    kind = RedemptionErrorKind.FINAL_STATUS
    status_code = 409

    def __init__(self, status: str) -> None:
        super().__init__(
            f'Status "{status}" is final and can no longer be changed',
            status=status,
        )


class ConfirmationRequiredError(RedemptionError):
    kind = RedemptionErrorKind.CONFIRMATION_REQUIRED
    status_code = 409

    def __init__(self, status: str) -> None:
        super().__init__(
            f'Confirmation required: status "{status}" is final and cannot be undone',
            status=status,
        )


class StoreTimeoutError(RedemptionError):
    kind = RedemptionErrorKind.STORE_TIMEOUT
    status_code = 503
    retryable = True


class StoreConflictError(RedemptionError):
    kind = RedemptionErrorKind.STORE_CONFLICT
    status_code = 503
    retryable = True


class StoreConstraintError(StoreConflictError):
    """A write violated a CHECK, FK or unique constraint; retrying cannot help."""

    status_code = 409
    retryable = False

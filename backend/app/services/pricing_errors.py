"""Error taxonomy for order pricing and coupon redemption.

Callers branch on ``kind`` (and, for coupons, ``reason``) rather than on the
message text. Business validation errors subclass ``ValueError``.
"""

from enum import Enum


class OrderErrorKind(str, Enum):
    INVALID_AMOUNT = "invalid_amount"
    INVALID_COUPON = "invalid_coupon"
    INVALID_PLAN = "invalid_plan"
    PERSISTENCE_FAILURE = "persistence_failure"


class CouponRejection(str, Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_YET_ACTIVE = "not_yet_active"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    MINIMUM_NOT_MET = "minimum_not_met"


class OrderError(Exception):
    """Base class for failures of the pricing core."""

    kind: OrderErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(OrderError, ValueError):
    kind = OrderErrorKind.INVALID_AMOUNT


class InvalidCouponError(OrderError, ValueError):
    kind = OrderErrorKind.INVALID_COUPON

    def __init__(self, reason: CouponRejection, message: str):
        super().__init__(message)
        self.reason = reason


class InvalidPlanError(OrderError, ValueError):
    """The referenced plan does not exist or is no longer offered."""

    kind = OrderErrorKind.INVALID_PLAN


class PersistenceFailureError(OrderError):
    """Storage failed; the transaction was rolled back and nothing is visible."""

    kind = OrderErrorKind.PERSISTENCE_FAILURE

    def __init__(self, message: str = "Failed to create order"):
        super().__init__(message)

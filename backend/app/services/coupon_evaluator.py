"""Coupon evaluation: validity checks and discount computation.

Evaluation never mutates state. ``evaluate_coupon`` is a pure function of a
loaded coupon, the order amount and the evaluation time; ``CouponEvaluator``
adds the lookup by code.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.coupon import Coupon, CouponType
from app.models.shared import as_utc, utc_now
from app.repositories.coupon_repository import CouponRepository
from app.schemas.coupon import CouponPreviewResponse, CouponSummary
from app.services.money import format_amount, parse_amount
from app.services.pricing_errors import CouponRejection, InvalidCouponError


@dataclass(frozen=True)
class CouponEvaluation:
    """Outcome of evaluating a coupon against an order amount."""

    valid: bool
    order_amount: Decimal
    discount_amount: Decimal = Decimal("0")
    final_price: Decimal | None = None
    coupon_id: UUID | None = None
    rejection: CouponRejection | None = None
    message: str | None = None

    def raise_if_invalid(self) -> None:
        """Raise InvalidCouponError carrying the rejection reason."""
        if not self.valid:
            raise InvalidCouponError(
                self.rejection or CouponRejection.NOT_FOUND,
                self.message or "Invalid coupon",
            )


def _rejected(order_amount: Decimal, reason: CouponRejection, message: str) -> CouponEvaluation:
    return CouponEvaluation(
        valid=False,
        order_amount=order_amount,
        final_price=order_amount,
        rejection=reason,
        message=message,
    )


def calculate_discount(coupon_type: str, value: Decimal, order_amount: Decimal) -> Decimal:
    """Raw discount clamped to the order amount, so the price never goes negative."""
    if coupon_type == CouponType.PERCENTAGE.value:
        raw = order_amount * value / Decimal("100")
    else:
        raw = value
    return min(max(raw, Decimal("0")), order_amount)


def evaluate_coupon(
    coupon: Coupon | None, order_amount: Decimal, now: datetime
) -> CouponEvaluation:
    """Evaluate a coupon for an order amount at a point in time.

    Checks run in order: existence, active flag, validity window, usage
    limit, minimum purchase. A missing ``start_date`` or ``end_date`` leaves
    that side of the window unbounded.

    Args:
        coupon: The coupon, or None if the code did not match.
        order_amount: Finite, non-negative amount before discount.
        now: Timezone-aware evaluation time.

    Returns:
        A CouponEvaluation; invalid results carry a rejection reason.
    """
    if coupon is None:
        return _rejected(order_amount, CouponRejection.NOT_FOUND, "Coupon not found")

    if not coupon.is_active:
        return _rejected(order_amount, CouponRejection.INACTIVE, "Coupon is inactive")

    start_date = as_utc(coupon.start_date)  # type: ignore[arg-type]
    end_date = as_utc(coupon.end_date)  # type: ignore[arg-type]
    if start_date is not None and now < start_date:
        return _rejected(order_amount, CouponRejection.NOT_YET_ACTIVE, "Coupon is not yet active")
    if end_date is not None and now > end_date:
        return _rejected(order_amount, CouponRejection.EXPIRED, "Coupon has expired")

    if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
        return _rejected(
            order_amount, CouponRejection.EXHAUSTED, "Coupon usage limit has been exhausted"
        )

    min_purchase = Decimal(str(coupon.min_purchase or 0))
    if min_purchase > order_amount:
        return _rejected(
            order_amount,
            CouponRejection.MINIMUM_NOT_MET,
            f"Minimum purchase of ${format_amount(min_purchase)} required for this coupon",
        )

    discount = calculate_discount(
        str(coupon.coupon_type), Decimal(str(coupon.value)), order_amount
    )
    return CouponEvaluation(
        valid=True,
        order_amount=order_amount,
        discount_amount=discount,
        final_price=order_amount - discount,
        coupon_id=coupon.id,  # type: ignore[arg-type]
    )


class CouponEvaluator:
    """Looks up coupons by code and evaluates them. Read-only."""

    def __init__(self, db: Session):
        self.db = db
        self.coupon_repo = CouponRepository(db)

    def evaluate(
        self,
        code: str,
        order_amount: Any,
        now: datetime | None = None,
    ) -> tuple[Coupon | None, CouponEvaluation]:
        """Evaluate ``code`` against ``order_amount``.

        Raises:
            InvalidAmountError: If the order amount is not a finite value >= 0.
        """
        amount = parse_amount(order_amount)
        coupon = self.coupon_repo.get_by_code(code or "")
        return coupon, evaluate_coupon(coupon, amount, as_utc(now) or utc_now())

    def preview_discount(
        self, code: str, order_amount: Any, now: datetime | None = None
    ) -> CouponPreviewResponse:
        """Show the discount a coupon would give, without reserving a use.

        The result can be stale by checkout time if another order consumes
        the last remaining use in between.
        """
        coupon, evaluation = self.evaluate(code, order_amount, now)
        if not evaluation.valid or coupon is None:
            return CouponPreviewResponse(
                valid=False,
                message=evaluation.message,
                reason=evaluation.rejection.value if evaluation.rejection else None,
            )
        return CouponPreviewResponse(
            valid=True,
            discount_amount=format_amount(evaluation.discount_amount),
            final_price=format_amount(evaluation.final_price),  # type: ignore[arg-type]
            coupon=CouponSummary(
                code=str(coupon.code),
                coupon_type=str(coupon.coupon_type),
                value=Decimal(str(coupon.value)),
                description=coupon.description,  # type: ignore[arg-type]
            ),
        )

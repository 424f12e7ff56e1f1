"""Order service: pricing, coupon redemption and order lifecycle."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.order import Order, OrderStatus
from app.models.shared import as_utc, utc_now
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_usage_repository import CouponUsageRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.plan_repository import PlanRepository
from app.services.coupon_evaluator import CouponEvaluator, evaluate_coupon
from app.services.money import parse_amount, round_currency
from app.services.pricing_errors import (
    CouponRejection,
    InvalidCouponError,
    InvalidPlanError,
    PersistenceFailureError,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.FAILED}),
    OrderStatus.PAID: frozenset(
        {OrderStatus.PROVISIONED, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
}

# Set by the provisioning callback, never by the purchaser
ADMIN_ONLY_STATUSES = frozenset({OrderStatus.PROVISIONED})


@dataclass(frozen=True)
class PlanSelection:
    """Plan reference and the resource configuration actually ordered."""

    plan_id: UUID | None = None
    cpu: int = 0
    ram: int = 0
    disk: int = 0
    databases: int = 0
    backups: int = 0

    def resources(self) -> dict[str, int]:
        return {
            "cpu": self.cpu,
            "ram": self.ram,
            "disk": self.disk,
            "databases": self.databases,
            "backups": self.backups,
        }


@dataclass(frozen=True)
class OrderResult:
    """A committed order. Amounts keep full precision; use the rounded_* views for display."""

    order_id: UUID
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    coupon_id: UUID | None = None

    @property
    def rounded_final_price(self) -> Decimal:
        return round_currency(self.final_price)

    @property
    def rounded_discount_amount(self) -> Decimal:
        return round_currency(self.discount_amount)


class OrderService:
    """Service for creating orders and moving them through their lifecycle."""

    def __init__(self, db: Session):
        self.db = db
        self.order_repo = OrderRepository(db)
        self.coupon_repo = CouponRepository(db)
        self.plan_repo = PlanRepository(db)
        self.usage_repo = CouponUsageRepository(db)
        self.evaluator = CouponEvaluator(db)

    def create_order(
        self,
        user_id: UUID,
        selection: PlanSelection,
        node_location: str,
        price_before_discount: Any,
        coupon_code: str | None = None,
        now: datetime | None = None,
    ) -> OrderResult:
        """Price an order, redeem its coupon and persist both atomically.

        The order row, the coupon usage row and the coupon's usage counter
        increment are committed together or not at all.

        Args:
            user_id: The authenticated purchaser.
            selection: Plan reference and resource configuration.
            node_location: Where the server will be provisioned.
            price_before_discount: Positive, finite order amount.
            coupon_code: Optional coupon code, matched case-insensitively.
            now: Evaluation time for the coupon window (defaults to now).

        Returns:
            The committed OrderResult.

        Raises:
            InvalidAmountError: If the price is not a positive finite number.
            InvalidPlanError: If plan_id does not reference an active plan.
            InvalidCouponError: If the coupon is unknown, inactive, outside its
                window, exhausted or its minimum purchase is not met.
            PersistenceFailureError: If storage fails; nothing is persisted.
        """
        original_price = parse_amount(price_before_discount, allow_zero=False)
        evaluated_at = as_utc(now) or utc_now()

        try:
            result = self._price_and_persist(
                user_id, selection, node_location, original_price, coupon_code, evaluated_at
            )
            self.db.commit()
        except InvalidCouponError as exc:
            self.db.rollback()
            logger.info(
                "Rejected coupon %r for user %s: %s", coupon_code, user_id, exc.reason.value
            )
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create order for user %s", user_id)
            raise PersistenceFailureError() from None
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Created order %s for user %s (original=%s discount=%s final=%s coupon=%s)",
            result.order_id,
            user_id,
            result.original_price,
            result.discount_amount,
            result.final_price,
            result.coupon_id,
        )
        return result

    def _check_plan(self, plan_id: UUID | None, user_id: UUID) -> None:
        if plan_id is None:
            return
        plan = self.plan_repo.get_by_id(plan_id)
        if plan is None or not plan.is_active:
            logger.info("Rejected order for user %s: plan %s is not available", user_id, plan_id)
            raise InvalidPlanError("Plan not found")

    def _price_and_persist(
        self,
        user_id: UUID,
        selection: PlanSelection,
        node_location: str,
        original_price: Decimal,
        coupon_code: str | None,
        now: datetime,
    ) -> OrderResult:
        self._check_plan(selection.plan_id, user_id)
        discount = Decimal("0")
        coupon_id: UUID | None = None

        if coupon_code:
            coupon, evaluation = self.evaluator.evaluate(coupon_code, original_price, now)
            evaluation.raise_if_invalid()

            if not self.coupon_repo.claim_usage(evaluation.coupon_id):  # type: ignore[arg-type]
                # Another order took the last use (or the coupon was disabled)
                # after evaluation; report the coupon's current state.
                self.db.refresh(coupon)
                current = evaluate_coupon(coupon, original_price, now)
                current.raise_if_invalid()
                raise InvalidCouponError(
                    CouponRejection.EXHAUSTED, "Coupon usage limit has been exhausted"
                )

            discount = evaluation.discount_amount
            coupon_id = evaluation.coupon_id

        final_price = original_price - discount
        order = self.order_repo.add(
            user_id=user_id,
            plan_id=selection.plan_id,
            node_location=node_location,
            resources=selection.resources(),
            original_price=original_price,
            discount_amount=discount,
            final_price=final_price,
            coupon_id=coupon_id,
        )

        if coupon_id is not None:
            self.usage_repo.record(
                coupon_id=coupon_id,
                user_id=user_id,
                order_id=order.id,  # type: ignore[arg-type]
                discount_amount=discount,
            )

        return OrderResult(
            order_id=order.id,  # type: ignore[arg-type]
            original_price=original_price,
            discount_amount=discount,
            final_price=final_price,
            coupon_id=coupon_id,
        )

    def update_status(
        self,
        order_id: UUID,
        status: OrderStatus,
        payment_reference: str | None = None,
        user_id: UUID | None = None,
        as_admin: bool = False,
    ) -> Order | None:
        """Apply a lifecycle transition (payment confirmation, provisioning, cancellation).

        Returns:
            The updated order, or None if no such order exists for the user.

        Raises:
            ValueError: If the transition is not allowed from the current status.
            PermissionError: If a non-administrator requests an admin-only status.
        """
        order = self.order_repo.get_by_id(order_id, user_id)
        if not order:
            return None

        current = OrderStatus(order.status)
        if status not in ALLOWED_TRANSITIONS.get(current, frozenset()):
            raise ValueError(
                f"Cannot change order status from '{current.value}' to '{status.value}'"
            )
        if status in ADMIN_ONLY_STATUSES and not as_admin:
            raise PermissionError(f"Only administrators can mark an order as {status.value}")

        return self.order_repo.set_status(order, status, payment_reference)

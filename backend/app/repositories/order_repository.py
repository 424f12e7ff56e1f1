"""Order repository for data access."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.core.sorting import apply_order_by
from app.models.coupon import Coupon
from app.models.order import Order, OrderStatus
from app.models.plan import Plan

# (order, plan name, coupon code)
OrderDetail = tuple[Order, str | None, str | None]


class OrderRepository:
    """Repository for Order model."""

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        user_id: UUID,
        plan_id: UUID | None,
        node_location: str,
        resources: dict[str, int],
        original_price: Decimal,
        discount_amount: Decimal,
        final_price: Decimal,
        coupon_id: UUID | None,
    ) -> Order:
        """Add a pending order to the current transaction without committing."""
        order = Order(
            user_id=user_id,
            plan_id=plan_id,
            node_location=node_location,
            original_price=original_price,
            discount_amount=discount_amount,
            final_price=final_price,
            coupon_id=coupon_id,
            status=OrderStatus.PENDING.value,
            **resources,
        )
        self.db.add(order)
        self.db.flush()
        return order

    def get_by_id(self, order_id: UUID, user_id: UUID | None = None) -> Order | None:
        """Get an order by ID, optionally restricted to its owner."""
        query = self.db.query(Order).filter(Order.id == order_id)
        if user_id is not None:
            query = query.filter(Order.user_id == user_id)
        return query.first()

    def _filtered(
        self, user_id: UUID | None = None, status: OrderStatus | None = None
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Order)
        if user_id is not None:
            query = query.filter(Order.user_id == user_id)
        if status:
            query = query.filter(Order.status == status.value)
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        user_id: UUID | None = None,
        status: OrderStatus | None = None,
        order_by: str | None = None,
    ) -> list[Order]:
        """Get orders, newest first by default."""
        query = apply_order_by(self._filtered(user_id, status), Order, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, user_id: UUID | None = None, status: OrderStatus | None = None) -> int:
        return self._filtered(user_id, status).with_entities(func.count(Order.id)).scalar() or 0

    def get_details(self, orders: list[Order]) -> list[OrderDetail]:
        """Attach plan names and coupon codes to already loaded orders."""
        plan_ids = {o.plan_id for o in orders if o.plan_id is not None}
        coupon_ids = {o.coupon_id for o in orders if o.coupon_id is not None}
        plan_names: dict[Any, str] = {}
        coupon_codes: dict[Any, str] = {}
        if plan_ids:
            plan_names = dict(
                self.db.query(Plan.id, Plan.name).filter(Plan.id.in_(plan_ids)).all()
            )
        if coupon_ids:
            coupon_codes = dict(
                self.db.query(Coupon.id, Coupon.code).filter(Coupon.id.in_(coupon_ids)).all()
            )
        return [(o, plan_names.get(o.plan_id), coupon_codes.get(o.coupon_id)) for o in orders]

    def set_status(
        self, order: Order, status: OrderStatus, payment_reference: str | None = None
    ) -> Order:
        """Persist a status transition. Pricing columns are left untouched."""
        order.status = status.value  # type: ignore[assignment]
        if payment_reference is not None:
            order.payment_reference = payment_reference  # type: ignore[assignment]
        order.updated_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(order)
        return order

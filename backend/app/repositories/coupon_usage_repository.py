"""CouponUsage repository: append-only access to the redemption ledger."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.coupon_usage import CouponUsage


class CouponUsageRepository:
    """Repository for CouponUsage model. Rows are never updated."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        coupon_id: UUID,
        user_id: UUID,
        order_id: UUID,
        discount_amount: Decimal,
    ) -> CouponUsage:
        """Add a ledger row to the current transaction without committing."""
        usage = CouponUsage(
            coupon_id=coupon_id,
            user_id=user_id,
            order_id=order_id,
            discount_amount=discount_amount,
        )
        self.db.add(usage)
        self.db.flush()
        return usage

    def get_by_order_id(self, order_id: UUID) -> CouponUsage | None:
        return self.db.query(CouponUsage).filter(CouponUsage.order_id == order_id).first()

    def get_all_by_coupon_id(
        self, coupon_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[CouponUsage]:
        return (
            self.db.query(CouponUsage)
            .filter(CouponUsage.coupon_id == coupon_id)
            .order_by(CouponUsage.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_coupon_id(self, coupon_id: UUID) -> int:
        return (
            self.db.query(func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id == coupon_id)
            .scalar()
            or 0
        )

    def count_by_coupon_ids(self, coupon_ids: list[UUID]) -> dict[UUID, int]:
        """Redemption counts keyed by coupon id; coupons without rows are omitted."""
        if not coupon_ids:
            return {}
        rows = (
            self.db.query(CouponUsage.coupon_id, func.count(CouponUsage.id))
            .filter(CouponUsage.coupon_id.in_(coupon_ids))
            .group_by(CouponUsage.coupon_id)
            .all()
        )
        return {coupon_id: count for coupon_id, count in rows}

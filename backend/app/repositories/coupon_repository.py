"""Coupon repository for data access."""

from uuid import UUID

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.coupon import Coupon
from app.schemas.coupon import CouponCreate, CouponUpdate, normalize_coupon_code


class CouponRepository:
    """Repository for Coupon model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        is_active: bool | None = None,
        order_by: str | None = None,
    ) -> list[Coupon]:
        """Get all coupons with optional filters."""
        query = self.db.query(Coupon)

        if is_active is not None:
            query = query.filter(Coupon.is_active.is_(is_active))

        query = apply_order_by(query, Coupon, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, is_active: bool | None = None) -> int:
        """Count coupons with optional active filter."""
        query = self.db.query(func.count(Coupon.id))
        if is_active is not None:
            query = query.filter(Coupon.is_active.is_(is_active))
        return query.scalar() or 0

    def get_by_id(self, coupon_id: UUID) -> Coupon | None:
        """Get a coupon by ID."""
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by code, matched case-insensitively."""
        normalized = normalize_coupon_code(code)
        if not normalized:
            return None
        return self.db.query(Coupon).filter(Coupon.code == normalized).first()

    def create(self, data: CouponCreate) -> Coupon:
        """Create a new coupon."""
        coupon = Coupon(
            code=normalize_coupon_code(data.code),
            description=data.description,
            coupon_type=data.coupon_type.value,
            value=data.value,
            start_date=data.start_date,
            end_date=data.end_date,
            usage_limit=data.usage_limit,
            usage_count=0,
            min_purchase=data.min_purchase,
            is_active=data.is_active,
        )
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def update(self, code: str, data: CouponUpdate) -> Coupon | None:
        """Update a coupon by code. Never touches usage_count."""
        coupon = self.get_by_code(code)
        if not coupon:
            return None

        update_data = data.model_dump(exclude_unset=True)

        if "coupon_type" in update_data and update_data["coupon_type"]:
            update_data["coupon_type"] = update_data["coupon_type"].value

        for key, value in update_data.items():
            setattr(coupon, key, value)

        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete(self, code: str) -> bool:
        """Delete a coupon by code."""
        coupon = self.get_by_code(code)
        if not coupon:
            return False

        self.db.delete(coupon)
        self.db.commit()
        return True

    def claim_usage(self, coupon_id: UUID) -> bool:
        """Consume one use of a coupon inside the caller's transaction.

        The limit check and the increment are a single conditional UPDATE, so
        concurrent claims on the last remaining use cannot both succeed. Does
        not commit.

        Returns:
            True if a use was claimed, False if the coupon is inactive or
            its usage limit has been reached.
        """
        result = self.db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                Coupon.is_active.is_(True),
                or_(Coupon.usage_limit.is_(None), Coupon.usage_count < Coupon.usage_limit),
            )
            .values(usage_count=Coupon.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

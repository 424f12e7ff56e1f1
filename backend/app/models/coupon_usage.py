"""CouponUsage model: the redemption ledger linking coupons to orders."""

from sqlalchemy import Column, DateTime, ForeignKey, func

from app.core.database import Base
from app.models.shared import MoneyType, UUIDType, generate_uuid


class CouponUsage(Base):
    """One row per order that redeemed a coupon. Never updated."""

    __tablename__ = "coupon_usage"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    coupon_id = Column(
        UUIDType, ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    order_id = Column(
        UUIDType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    discount_amount = Column(MoneyType, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

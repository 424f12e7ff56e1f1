"""Order model for server plan purchases."""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)

from app.core.database import Base
from app.models.shared import MoneyType, UUIDType, generate_uuid


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROVISIONED = "provisioned"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("discount_amount >= 0", name="ck_orders_discount_non_negative"),
        CheckConstraint("final_price >= 0", name="ck_orders_final_price_non_negative"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    plan_id = Column(
        UUIDType, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True, index=True
    )
    node_location = Column(String(255), nullable=False)

    cpu = Column(Integer, nullable=False, default=0)
    ram = Column(Integer, nullable=False, default=0)
    disk = Column(Integer, nullable=False, default=0)
    databases = Column(Integer, nullable=False, default=0)
    backups = Column(Integer, nullable=False, default=0)

    original_price = Column(MoneyType, nullable=False)
    discount_amount = Column(MoneyType, nullable=False, default=0)
    final_price = Column(MoneyType, nullable=False)
    coupon_id = Column(
        UUIDType, ForeignKey("coupons.id", ondelete="RESTRICT"), nullable=True, index=True
    )

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_reference = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

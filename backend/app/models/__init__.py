from app.models.coupon import Coupon, CouponType
from app.models.coupon_usage import CouponUsage
from app.models.order import Order, OrderStatus
from app.models.plan import Plan
from app.models.user import User, UserRole

__all__ = [
    "Coupon",
    "CouponType",
    "CouponUsage",
    "Order",
    "OrderStatus",
    "Plan",
    "User",
    "UserRole",
]

from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_usage_repository import CouponUsageRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.plan_repository import PlanRepository
from app.repositories.report_repository import ReportRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "CouponRepository",
    "CouponUsageRepository",
    "OrderRepository",
    "PlanRepository",
    "ReportRepository",
    "UserRepository",
]

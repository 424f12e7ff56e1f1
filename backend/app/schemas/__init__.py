from app.schemas.coupon import (
    CouponCreate,
    CouponPreviewRequest,
    CouponPreviewResponse,
    CouponResponse,
    CouponUpdate,
    CouponUsageResponse,
    CouponWithUsageResponse,
)
from app.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderErrorResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from app.schemas.plan import PlanCreate, PlanResponse
from app.schemas.user import UserCreate

__all__ = [
    "CouponCreate",
    "CouponPreviewRequest",
    "CouponPreviewResponse",
    "CouponResponse",
    "CouponUpdate",
    "CouponUsageResponse",
    "CouponWithUsageResponse",
    "OrderCreate",
    "OrderCreatedResponse",
    "OrderErrorResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "PlanCreate",
    "PlanResponse",
    "UserCreate",
]

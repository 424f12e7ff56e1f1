from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin
from app.core.config import settings
from app.core.database import get_db
from app.models.order import OrderStatus
from app.models.user import User
from app.repositories.report_repository import ReportRepository
from app.schemas.report import (
    CouponUsageStat,
    MonthlyRevenuePoint,
    PlanOrderStat,
    ReportSummaryResponse,
    RevenueReportResponse,
)

router = APIRouter()

_ADMIN_RESPONSES: dict[int | str, dict[str, str]] = {
    401: {"description": "Unauthorized"},
    403: {"description": "Administrator access required"},
}


@router.get(
    "/summary",
    response_model=ReportSummaryResponse,
    summary="Get sales summary",
    responses=_ADMIN_RESPONSES,
)
async def get_summary(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> ReportSummaryResponse:
    repo = ReportRepository(db)
    return ReportSummaryResponse(
        total_orders=repo.count_orders(),
        pending_orders=repo.count_orders(OrderStatus.PENDING),
        total_revenue=repo.total_revenue(),
        total_discount=repo.total_discount(),
        active_coupons=repo.count_active_coupons(),
        currency=settings.CURRENCY,
    )


@router.get(
    "/coupons",
    response_model=list[CouponUsageStat],
    summary="Get coupon usage statistics",
    responses=_ADMIN_RESPONSES,
)
async def get_coupon_stats(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[CouponUsageStat]:
    """Most redeemed coupons with the total discount they granted."""
    stats = ReportRepository(db).coupon_usage_stats(limit=limit)
    return [
        CouponUsageStat(code=s.code, usage_count=s.usage_count, total_discount=s.total_discount)
        for s in stats
    ]


@router.get(
    "/revenue",
    response_model=RevenueReportResponse,
    summary="Get monthly revenue",
    responses=_ADMIN_RESPONSES,
)
async def get_revenue(
    months: int = Query(default=12, ge=1, le=36),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> RevenueReportResponse:
    """Revenue from paid and provisioned orders per month, oldest first."""
    trend = ReportRepository(db).monthly_revenue_trend(months=months)
    return RevenueReportResponse(
        currency=settings.CURRENCY,
        months=[
            MonthlyRevenuePoint(
                month=m.month, revenue=m.revenue, discount=m.discount, orders=m.orders
            )
            for m in trend
        ],
    )


@router.get(
    "/plans",
    response_model=list[PlanOrderStat],
    summary="Get orders by plan",
    responses=_ADMIN_RESPONSES,
)
async def get_plan_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[PlanOrderStat]:
    stats = ReportRepository(db).orders_by_plan()
    return [PlanOrderStat(plan_name=s.plan_name, orders=s.orders, revenue=s.revenue) for s in stats]

from decimal import Decimal

from pydantic import BaseModel


class CouponUsageStat(BaseModel):
    code: str
    usage_count: int
    total_discount: Decimal


class MonthlyRevenuePoint(BaseModel):
    month: str
    revenue: Decimal
    discount: Decimal
    orders: int


class RevenueReportResponse(BaseModel):
    currency: str
    months: list[MonthlyRevenuePoint]


class PlanOrderStat(BaseModel):
    plan_name: str
    orders: int
    revenue: Decimal


class ReportSummaryResponse(BaseModel):
    total_orders: int
    pending_orders: int
    total_revenue: Decimal
    total_discount: Decimal
    active_coupons: int
    currency: str

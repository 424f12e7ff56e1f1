from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import and_
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from app.models.coupon import Coupon
from app.models.coupon_usage import CouponUsage
from app.models.order import Order, OrderStatus
from app.models.plan import Plan

# Orders that count towards revenue
REVENUE_STATUSES = (OrderStatus.PAID.value, OrderStatus.PROVISIONED.value)


def _decimal(value: object) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.000001"))


@dataclass
class CouponStat:
    code: str
    usage_count: int
    total_discount: Decimal


@dataclass
class MonthlyRevenue:
    month: str
    revenue: Decimal
    discount: Decimal
    orders: int


@dataclass
class PlanStat:
    plan_name: str
    orders: int
    revenue: Decimal


class ReportRepository:
    """Read-only aggregations over orders and the coupon usage ledger."""

    def __init__(self, db: Session):
        self.db = db

    def count_orders(self, status: OrderStatus | None = None) -> int:
        query = self.db.query(sa_func.count(Order.id))
        if status:
            query = query.filter(Order.status == status.value)
        return query.scalar() or 0

    def total_revenue(self) -> Decimal:
        result = (
            self.db.query(sa_func.coalesce(sa_func.sum(Order.final_price), 0))
            .filter(Order.status.in_(REVENUE_STATUSES))
            .scalar()
        )
        return _decimal(result)

    def total_discount(self) -> Decimal:
        """Sum of all discounts recorded in the ledger."""
        result = self.db.query(
            sa_func.coalesce(sa_func.sum(CouponUsage.discount_amount), 0)
        ).scalar()
        return _decimal(result)

    def count_active_coupons(self) -> int:
        return (
            self.db.query(sa_func.count(Coupon.id)).filter(Coupon.is_active.is_(True)).scalar()
            or 0
        )

    def coupon_usage_stats(self, limit: int = 10) -> list[CouponStat]:
        """Coupons ordered by ledger redemptions, most used first."""
        redemptions = sa_func.count(CouponUsage.id).label("redemptions")
        rows = (
            self.db.query(
                Coupon.code,
                redemptions,
                sa_func.coalesce(sa_func.sum(CouponUsage.discount_amount), 0).label("total"),
            )
            .outerjoin(CouponUsage, CouponUsage.coupon_id == Coupon.id)
            .group_by(Coupon.id, Coupon.code)
            .order_by(redemptions.desc(), Coupon.code.asc())
            .limit(limit)
            .all()
        )
        return [
            CouponStat(
                code=row.code, usage_count=row.redemptions, total_discount=_decimal(row.total)
            )
            for row in rows
        ]

    def monthly_revenue_trend(self, months: int = 12) -> list[MonthlyRevenue]:
        """Revenue and discount per month for the last N months, oldest first."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(days=months * 31)
        # Build a year-month expression compatible with both SQLite and PostgreSQL
        dialect = self.db.bind.dialect.name if self.db.bind else ""
        if dialect == "postgresql":
            month_expr = sa_func.to_char(Order.created_at, "YYYY-MM")
        else:
            month_expr = sa_func.strftime("%Y-%m", Order.created_at)

        rows = (
            self.db.query(
                month_expr.label("month"),
                sa_func.coalesce(sa_func.sum(Order.final_price), 0).label("revenue"),
                sa_func.coalesce(sa_func.sum(Order.discount_amount), 0).label("discount"),
                sa_func.count(Order.id).label("orders"),
            )
            .filter(
                Order.status.in_(REVENUE_STATUSES),
                Order.created_at >= cutoff,
            )
            .group_by(month_expr)
            .order_by(month_expr)
            .all()
        )

        by_month = {row.month: row for row in rows}
        result: list[MonthlyRevenue] = []
        for i in range(months - 1, -1, -1):
            year, month = divmod(now.year * 12 + now.month - 1 - i, 12)
            key = f"{year:04d}-{month + 1:02d}"
            row = by_month.get(key)
            result.append(
                MonthlyRevenue(
                    month=key,
                    revenue=_decimal(row.revenue) if row else Decimal("0"),
                    discount=_decimal(row.discount) if row else Decimal("0"),
                    orders=row.orders if row else 0,
                )
            )
        return result

    def orders_by_plan(self) -> list[PlanStat]:
        """Paid order count and revenue per plan, including plans without orders.

        Paid custom builds that reference no plan are appended as one extra row.
        """
        orders = sa_func.count(Order.id).label("orders")
        revenue = sa_func.coalesce(sa_func.sum(Order.final_price), 0).label("revenue")
        rows = (
            self.db.query(Plan.name, orders, revenue)
            .outerjoin(
                Order, and_(Order.plan_id == Plan.id, Order.status.in_(REVENUE_STATUSES))
            )
            .group_by(Plan.id, Plan.name)
            .order_by(orders.desc(), Plan.name.asc())
            .all()
        )
        stats = [
            PlanStat(plan_name=row.name, orders=row.orders, revenue=_decimal(row.revenue))
            for row in rows
        ]

        custom_orders, custom_revenue = (
            self.db.query(
                sa_func.count(Order.id), sa_func.coalesce(sa_func.sum(Order.final_price), 0)
            )
            .filter(Order.plan_id.is_(None), Order.status.in_(REVENUE_STATUSES))
            .one()
        )
        if custom_orders:
            stats.append(
                PlanStat(
                    plan_name="Custom configuration",
                    orders=custom_orders,
                    revenue=_decimal(custom_revenue),
                )
            )
        return stats

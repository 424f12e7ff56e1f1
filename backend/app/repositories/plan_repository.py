from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.plan import Plan
from app.schemas.plan import PlanCreate

DEFAULT_PLANS: list[PlanCreate] = [
    PlanCreate(
        name="Starter",
        description="Perfect for small projects and testing",
        cpu=1,
        ram=2048,
        disk=20,
        databases=1,
        backups=2,
        price_monthly=Decimal("5.99"),
    ),
    PlanCreate(
        name="Basic",
        description="Ideal for small websites and applications",
        cpu=2,
        ram=4096,
        disk=40,
        databases=2,
        backups=5,
        price_monthly=Decimal("12.99"),
    ),
    PlanCreate(
        name="Professional",
        description="Great for growing businesses",
        cpu=4,
        ram=8192,
        disk=80,
        databases=5,
        backups=10,
        price_monthly=Decimal("24.99"),
    ),
    PlanCreate(
        name="Enterprise",
        description="Maximum performance for large applications",
        cpu=8,
        ram=16384,
        disk=160,
        databases=10,
        backups=20,
        price_monthly=Decimal("49.99"),
    ),
    PlanCreate(name="Custom", description="Build your own plan", is_custom=True),
]


class PlanRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100, active_only: bool = True) -> list[Plan]:
        query = self.db.query(Plan)
        if active_only:
            query = query.filter(Plan.is_active.is_(True))
        return query.order_by(Plan.price_monthly.asc()).offset(skip).limit(limit).all()

    def count(self, active_only: bool = True) -> int:
        query = self.db.query(func.count(Plan.id))
        if active_only:
            query = query.filter(Plan.is_active.is_(True))
        return query.scalar() or 0

    def get_by_id(self, plan_id: UUID) -> Plan | None:
        return self.db.query(Plan).filter(Plan.id == plan_id).first()

    def create(self, data: PlanCreate) -> Plan:
        plan = Plan(**data.model_dump())
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def seed_defaults(self) -> int:
        """Insert the default catalog when no plans exist. Returns rows inserted."""
        if self.count(active_only=False):
            return 0
        for data in DEFAULT_PLANS:
            self.db.add(Plan(**data.model_dump()))
        self.db.commit()
        return len(DEFAULT_PLANS)

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class PlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    cpu: int = Field(default=0, ge=0)
    ram: int = Field(default=0, ge=0)
    disk: int = Field(default=0, ge=0)
    databases: int = Field(default=0, ge=0)
    backups: int = Field(default=0, ge=0)
    price_monthly: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True
    is_custom: bool = False


class PlanResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    cpu: int
    ram: int
    disk: int
    databases: int
    backups: int
    price_monthly: Decimal
    is_active: bool
    is_custom: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

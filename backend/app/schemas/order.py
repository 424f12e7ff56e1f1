from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.order import OrderStatus


class OrderCreate(BaseModel):
    plan_id: UUID | None = None
    node_location: str = Field(..., min_length=1, max_length=255)
    cpu: int = Field(default=0, ge=0)
    ram: int = Field(default=0, ge=0)
    disk: int = Field(default=0, ge=0)
    databases: int = Field(default=0, ge=0)
    backups: int = Field(default=0, ge=0)
    # Parsed by the order service so malformed amounts share one error path
    price: Decimal | str
    coupon_code: str | None = Field(default=None, max_length=64)


class OrderCreatedResponse(BaseModel):
    order_id: UUID
    final_price: str
    discount_amount: str


class OrderErrorResponse(BaseModel):
    error: str
    code: str
    reason: str | None = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    payment_reference: str | None = Field(default=None, max_length=255)


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    plan_id: UUID | None = None
    plan_name: str | None = None
    node_location: str
    cpu: int
    ram: int
    disk: int
    databases: int
    backups: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    coupon_id: UUID | None = None
    coupon_code: str | None = None
    status: str
    payment_reference: str | None = None
    created_at: datetime
    updated_at: datetime

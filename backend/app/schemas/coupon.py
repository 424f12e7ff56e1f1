"""Coupon, coupon usage and coupon preview schemas."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.coupon import CouponType
from app.models.shared import as_utc


def normalize_coupon_code(code: str) -> str:
    """Coupon codes are matched case-insensitively and stored uppercased."""
    return code.strip().upper()


def coupon_date_to_utc(value: datetime | None) -> datetime | None:
    """Convert a window bound to UTC; naive values are taken as UTC.

    Stores such as SQLite drop the offset on write, so bounds are persisted as UTC.
    """
    if value is None or value.tzinfo is None:
        return as_utc(value)
    return value.astimezone(UTC)


def validate_coupon_terms(
    coupon_type: CouponType | str,
    value: Decimal,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    """Check the discount rule and validity window of a coupon.

    Raises:
        ValueError: If the terms are inconsistent.
    """
    if CouponType(coupon_type) == CouponType.PERCENTAGE and value > Decimal("100"):
        raise ValueError("Percentage coupons cannot exceed 100")
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValueError("start_date must be before end_date")


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    description: str | None = None
    coupon_type: CouponType
    value: Decimal = Field(..., gt=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=1)
    min_purchase: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        code = normalize_coupon_code(v)
        if not code:
            raise ValueError("code must not be blank")
        return code

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_to_utc(cls, v: datetime | None) -> datetime | None:
        return coupon_date_to_utc(v)

    @model_validator(mode="after")
    def validate_terms(self) -> Self:
        validate_coupon_terms(self.coupon_type, self.value, self.start_date, self.end_date)
        return self


class CouponUpdate(BaseModel):
    description: str | None = None
    coupon_type: CouponType | None = None
    value: Decimal | None = Field(default=None, gt=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=1)
    min_purchase: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_to_utc(cls, v: datetime | None) -> datetime | None:
        return coupon_date_to_utc(v)

    @field_validator("coupon_type", "value", "min_purchase", "is_active")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        # Explicit null is only meaningful for the nullable columns
        if v is None:
            raise ValueError("field cannot be null")
        return v


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str | None = None
    coupon_type: str
    value: Decimal
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = None
    usage_count: int
    min_purchase: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CouponWithUsageResponse(CouponResponse):
    """Coupon as listed for administrators, with its ledger row count."""

    total_redemptions: int = 0


class CouponUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    coupon_id: UUID
    user_id: UUID
    order_id: UUID
    discount_amount: Decimal
    created_at: datetime


class CouponPreviewRequest(BaseModel):
    code: str = Field(..., max_length=64)
    order_amount: Decimal | str


class CouponSummary(BaseModel):
    code: str
    coupon_type: str
    value: Decimal
    description: str | None = None


class CouponPreviewResponse(BaseModel):
    """Live discount preview. Amounts are two-decimal strings."""

    valid: bool
    discount_amount: str | None = None
    final_price: str | None = None
    message: str | None = None
    reason: str | None = None
    coupon: CouponSummary | None = None

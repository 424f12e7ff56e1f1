"""Coupon administration endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_admin
from app.core.database import get_db
from app.models.coupon import Coupon
from app.models.coupon_usage import CouponUsage
from app.models.user import User
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_usage_repository import CouponUsageRepository
from app.schemas.coupon import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponUsageResponse,
    CouponWithUsageResponse,
    validate_coupon_terms,
)

router = APIRouter()


def _get_or_404(repo: CouponRepository, code: str) -> Coupon:
    coupon = repo.get_by_code(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@router.post(
    "/",
    response_model=CouponResponse,
    status_code=201,
    summary="Create coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        409: {"description": "Coupon with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_coupon(
    data: CouponCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Coupon:
    """Create a new coupon. The code is stored uppercased."""
    repo = CouponRepository(db)
    if repo.get_by_code(data.code):
        raise HTTPException(status_code=409, detail="Coupon with this code already exists")
    return repo.create(data)


@router.get(
    "/",
    response_model=list[CouponWithUsageResponse],
    summary="List coupons",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
    },
)
async def list_coupons(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    is_active: bool | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[CouponWithUsageResponse]:
    """List coupons with the number of recorded redemptions."""
    repo = CouponRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(is_active=is_active))
    coupons = repo.get_all(skip=skip, limit=limit, is_active=is_active, order_by=order_by)
    redemptions = CouponUsageRepository(db).count_by_coupon_ids(
        [c.id for c in coupons]  # type: ignore[misc]
    )
    return [
        CouponWithUsageResponse.model_validate(c).model_copy(
            update={"total_redemptions": redemptions.get(c.id, 0)}  # type: ignore[call-overload]
        )
        for c in coupons
    ]


@router.get(
    "/{code}",
    response_model=CouponResponse,
    summary="Get coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Coupon not found"},
    },
)
async def get_coupon(
    code: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Coupon:
    """Get a coupon by code."""
    return _get_or_404(CouponRepository(db), code)


@router.put(
    "/{code}",
    response_model=CouponResponse,
    summary="Update coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Coupon not found"},
        409: {"description": "Usage limit below current usage"},
        422: {"description": "Validation error"},
    },
)
async def update_coupon(
    code: str,
    data: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Coupon:
    """Update a coupon's terms. The usage counter cannot be changed here."""
    repo = CouponRepository(db)
    coupon = _get_or_404(repo, code)

    changes = data.model_dump(exclude_unset=True)
    try:
        validate_coupon_terms(
            changes.get("coupon_type") or str(coupon.coupon_type),
            changes.get("value") or Decimal(str(coupon.value)),
            changes.get("start_date", coupon.start_date),
            changes.get("end_date", coupon.end_date),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None

    new_limit = changes.get("usage_limit", coupon.usage_limit)
    if new_limit is not None and new_limit < coupon.usage_count:
        raise HTTPException(
            status_code=409,
            detail=(
                "usage_limit cannot be lower than the current usage count "
                f"({coupon.usage_count})"
            ),
        )

    return repo.update(code, data)  # type: ignore[return-value]


@router.delete(
    "/{code}",
    status_code=204,
    summary="Delete coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Coupon not found"},
        409: {"description": "Coupon has been redeemed"},
    },
)
async def delete_coupon(
    code: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> None:
    """Delete a coupon that has never been redeemed."""
    repo = CouponRepository(db)
    coupon = _get_or_404(repo, code)
    if CouponUsageRepository(db).count_by_coupon_id(coupon.id):  # type: ignore[arg-type]
        raise HTTPException(
            status_code=409,
            detail="Coupon has been redeemed by existing orders; deactivate it instead",
        )
    repo.delete(code)


@router.get(
    "/{code}/usage",
    response_model=list[CouponUsageResponse],
    summary="List coupon redemptions",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Administrator access required"},
        404: {"description": "Coupon not found"},
    },
)
async def list_coupon_usage(
    code: str,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[CouponUsage]:
    """List the ledger entries recorded for a coupon, newest first."""
    coupon = _get_or_404(CouponRepository(db), code)
    usage_repo = CouponUsageRepository(db)
    response.headers["X-Total-Count"] = str(usage_repo.count_by_coupon_id(coupon.id))  # type: ignore[arg-type]
    return usage_repo.get_all_by_coupon_id(coupon.id, skip=skip, limit=limit)  # type: ignore[arg-type]

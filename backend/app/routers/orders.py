"""Order checkout, coupon preview and order lifecycle endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.database import get_db
from app.models.order import Order, OrderStatus
from app.models.user import User
from app.repositories.order_repository import OrderRepository
from app.schemas.coupon import CouponPreviewRequest, CouponPreviewResponse
from app.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderErrorResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from app.services.coupon_evaluator import CouponEvaluator
from app.services.money import format_amount
from app.services.order_service import OrderService, PlanSelection

router = APIRouter()


def _to_response(order: Order, plan_name: str | None, coupon_code: str | None) -> OrderResponse:
    response = OrderResponse.model_validate(order)
    return response.model_copy(update={"plan_name": plan_name, "coupon_code": coupon_code})


@router.post(
    "/",
    response_model=OrderCreatedResponse,
    status_code=201,
    summary="Create order",
    responses={
        400: {"model": OrderErrorResponse, "description": "Invalid amount or coupon"},
        401: {"description": "Unauthorized"},
        500: {"model": OrderErrorResponse, "description": "Order could not be persisted"},
    },
)
async def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderCreatedResponse:
    """Price an order, redeem the optional coupon and record the order as pending."""
    service = OrderService(db)
    result = service.create_order(
        user_id=user.id,  # type: ignore[arg-type]
        selection=PlanSelection(
            plan_id=data.plan_id,
            cpu=data.cpu,
            ram=data.ram,
            disk=data.disk,
            databases=data.databases,
            backups=data.backups,
        ),
        node_location=data.node_location,
        price_before_discount=data.price,
        coupon_code=data.coupon_code,
    )
    return OrderCreatedResponse(
        order_id=result.order_id,
        final_price=format_amount(result.final_price),
        discount_amount=format_amount(result.discount_amount),
    )


@router.post(
    "/validate-coupon",
    response_model=CouponPreviewResponse,
    summary="Preview coupon discount",
    responses={
        400: {"model": OrderErrorResponse, "description": "Invalid order amount"},
        401: {"description": "Unauthorized"},
    },
)
async def validate_coupon(
    data: CouponPreviewRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CouponPreviewResponse:
    """Show the discount a coupon would give. Does not reserve a coupon use."""
    return CouponEvaluator(db).preview_discount(data.code, data.order_amount)


@router.get(
    "/",
    response_model=list[OrderResponse],
    summary="List orders",
    responses={401: {"description": "Unauthorized"}},
)
async def list_orders(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    status: OrderStatus | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[OrderResponse]:
    """List the caller's orders. Administrators see every order."""
    repo = OrderRepository(db)
    owner_id = None if user.is_admin else user.id
    response.headers["X-Total-Count"] = str(repo.count(user_id=owner_id, status=status))  # type: ignore[arg-type]
    orders = repo.get_all(
        skip=skip,
        limit=limit,
        user_id=owner_id,  # type: ignore[arg-type]
        status=status,
        order_by=order_by,
    )
    return [_to_response(*detail) for detail in repo.get_details(orders)]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Order not found"},
    },
)
async def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    """Get one of the caller's orders."""
    repo = OrderRepository(db)
    order = repo.get_by_id(order_id, None if user.is_admin else user.id)  # type: ignore[arg-type]
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _to_response(*repo.get_details([order])[0])


@router.post(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    responses={
        400: {"description": "Status transition not allowed"},
        401: {"description": "Unauthorized"},
        403: {"description": "Status can only be set by an administrator"},
        404: {"description": "Order not found"},
    },
)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    """Move an order through its lifecycle, e.g. after payment confirmation."""
    service = OrderService(db)
    try:
        order = service.update_status(
            order_id,
            data.status,
            payment_reference=data.payment_reference,
            user_id=None if user.is_admin else user.id,  # type: ignore[arg-type]
            as_admin=user.is_admin,
        )
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _to_response(*OrderRepository(db).get_details([order])[0])

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core import database
from app.core.config import settings
from app.repositories.plan_repository import PlanRepository
from app.routers import coupons, orders, plans, reports
from app.services.pricing_errors import OrderError, OrderErrorKind

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Plans", "description": "Browse the hosting plan catalog."},
    {"name": "Orders", "description": "Checkout, coupon previews and order lifecycle."},
    {"name": "Coupons", "description": "Administer discount coupons and their redemptions."},
    {"name": "Reports", "description": "Sales, revenue and coupon usage analytics."},
]

ORDER_ERROR_STATUS = {
    OrderErrorKind.INVALID_AMOUNT: 400,
    OrderErrorKind.INVALID_COUPON: 400,
    OrderErrorKind.INVALID_PLAN: 400,
    OrderErrorKind.PERSISTENCE_FAILURE: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.SEED_DEFAULT_PLANS:
        database.init_db()
        db = database.SessionLocal()
        try:
            inserted = PlanRepository(db).seed_defaults()
            if inserted:
                logger.info("Inserted %d default plans", inserted)
        finally:
            db.close()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Storefront backend for a hosting provider. "
        "Price and place server orders, apply coupons, and manage coupons and sales reports."
    ),
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError) -> JSONResponse:
    body: dict[str, str] = {"error": exc.message, "code": exc.kind.value}
    reason = getattr(exc, "reason", None)
    if reason is not None:
        body["reason"] = reason.value
    return JSONResponse(status_code=ORDER_ERROR_STATUS[exc.kind], content=body)


app.include_router(plans.router, prefix="/v1/plans", tags=["Plans"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])
app.include_router(coupons.router, prefix="/v1/coupons", tags=["Coupons"])
app.include_router(reports.router, prefix="/v1/reports", tags=["Reports"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }

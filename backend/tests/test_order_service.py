"""Tests for OrderService: pricing, redemption atomicity and lifecycle."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.core import database as db_module
from app.models.coupon import Coupon, CouponType
from app.models.coupon_usage import CouponUsage
from app.models.order import Order, OrderStatus
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_usage_repository import CouponUsageRepository
from app.repositories.plan_repository import PlanRepository
from app.schemas.coupon import CouponCreate
from app.schemas.plan import PlanCreate
from app.services.order_service import OrderService, PlanSelection
from app.services.pricing_errors import (
    CouponRejection,
    InvalidAmountError,
    InvalidCouponError,
    InvalidPlanError,
    OrderErrorKind,
    PersistenceFailureError,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.fixture
def service(db_session):
    return OrderService(db_session)


@pytest.fixture
def plan(db_session):
    return PlanRepository(db_session).create(
        PlanCreate(
            name="Basic",
            cpu=2,
            ram=4096,
            disk=40,
            databases=2,
            backups=5,
            price_monthly=Decimal("12.99"),
        )
    )


@pytest.fixture
def selection(plan):
    return PlanSelection(plan_id=plan.id, cpu=2, ram=4096, disk=40, databases=2, backups=5)


@pytest.fixture
def make_coupon(db_session):
    repo = CouponRepository(db_session)

    def _make(code: str = "SAVE10", **kwargs) -> Coupon:
        kwargs.setdefault("coupon_type", CouponType.PERCENTAGE)
        kwargs.setdefault("value", Decimal("10"))
        return repo.create(CouponCreate(code=code, **kwargs))

    return _make


def _count(db_session, model) -> int:
    db_session.expire_all()
    return db_session.query(model).count()


class TestCreateOrderWithoutCoupon:
    def test_full_price(self, service, user, selection, db_session):
        result = service.create_order(user.id, selection, "fsn1", "12.99")

        assert result.original_price == Decimal("12.99")
        assert result.discount_amount == Decimal("0")
        assert result.final_price == Decimal("12.99")
        assert result.coupon_id is None

        order = db_session.query(Order).filter(Order.id == result.order_id).one()
        assert order.status == OrderStatus.PENDING.value
        assert order.user_id == user.id
        assert order.plan_id == selection.plan_id
        assert order.node_location == "fsn1"
        assert (order.cpu, order.ram, order.disk, order.databases, order.backups) == (
            2,
            4096,
            40,
            2,
            5,
        )
        assert order.coupon_id is None
        assert _count(db_session, CouponUsage) == 0

    @pytest.mark.parametrize("coupon_code", [None, ""])
    def test_empty_coupon_code_means_no_coupon(self, service, user, selection, coupon_code):
        result = service.create_order(user.id, selection, "fsn1", "20", coupon_code=coupon_code)
        assert result.final_price == Decimal("20")

    def test_custom_configuration_without_plan(self, service, user, db_session):
        custom = PlanSelection(cpu=3, ram=6144, disk=60)
        result = service.create_order(user.id, custom, "hel1", Decimal("18.50"))

        order = db_session.query(Order).filter(Order.id == result.order_id).one()
        assert order.plan_id is None
        assert order.cpu == 3

    def test_unknown_plan(self, service, user, db_session):
        with pytest.raises(InvalidPlanError) as exc_info:
            service.create_order(user.id, PlanSelection(plan_id=uuid4()), "fsn1", "10")
        assert exc_info.value.kind == OrderErrorKind.INVALID_PLAN
        assert _count(db_session, Order) == 0

    def test_retired_plan(self, service, user, make_coupon, db_session):
        retired = PlanRepository(db_session).create(PlanCreate(name="Legacy", is_active=False))
        coupon = make_coupon("SAVE10")
        with pytest.raises(InvalidPlanError):
            service.create_order(
                user.id, PlanSelection(plan_id=retired.id), "fsn1", "10", "SAVE10", NOW
            )
        db_session.refresh(coupon)
        assert coupon.usage_count == 0

    @pytest.mark.parametrize("price", ["0", "0.00", "-5", "abc", None, "NaN", "Infinity"])
    def test_invalid_price(self, service, user, selection, db_session, price):
        with pytest.raises(InvalidAmountError) as exc_info:
            service.create_order(user.id, selection, "fsn1", price)
        assert exc_info.value.kind == OrderErrorKind.INVALID_AMOUNT
        assert _count(db_session, Order) == 0


class TestCreateOrderWithCoupon:
    def test_percentage_coupon(self, service, user, selection, make_coupon, db_session):
        coupon = make_coupon("SAVE10")

        result = service.create_order(user.id, selection, "fsn1", "100.00", "SAVE10", NOW)

        assert result.rounded_discount_amount == Decimal("10.00")
        assert result.rounded_final_price == Decimal("90.00")
        assert result.coupon_id == coupon.id

        db_session.refresh(coupon)
        assert coupon.usage_count == 1
        usage = CouponUsageRepository(db_session).get_by_order_id(result.order_id)
        assert usage is not None
        assert usage.coupon_id == coupon.id
        assert usage.user_id == user.id
        assert usage.discount_amount == Decimal("10")

        order = db_session.query(Order).filter(Order.id == result.order_id).one()
        assert order.original_price == Decimal("100")
        assert order.discount_amount == Decimal("10")
        assert order.final_price == Decimal("90")
        assert order.coupon_id == coupon.id

    def test_lowercase_code(self, service, user, selection, make_coupon):
        make_coupon("SAVE10")
        result = service.create_order(user.id, selection, "fsn1", "50", "save10", NOW)
        assert result.rounded_final_price == Decimal("45.00")

    def test_fixed_coupon_clamped_to_price(self, service, user, selection, make_coupon):
        make_coupon("FLAT50", coupon_type=CouponType.FIXED, value=Decimal("50"))

        result = service.create_order(user.id, selection, "fsn1", "30.00", "FLAT50", NOW)

        assert result.discount_amount == Decimal("30.00")
        assert result.final_price == Decimal("0")

    def test_fractional_discount_kept_at_full_precision(
        self, service, user, selection, make_coupon, db_session
    ):
        make_coupon("SAVE15", value=Decimal("15"))

        result = service.create_order(user.id, selection, "fsn1", "12.99", "SAVE15", NOW)

        assert result.discount_amount == Decimal("1.9485")
        assert result.final_price == Decimal("11.0415")
        assert result.rounded_final_price == Decimal("11.04")
        order = db_session.query(Order).filter(Order.id == result.order_id).one()
        assert order.discount_amount == Decimal("1.9485")
        assert order.original_price == order.discount_amount + order.final_price

    def test_unknown_coupon(self, service, user, selection, db_session):
        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "BOGUS", NOW)

        assert exc_info.value.reason == CouponRejection.NOT_FOUND
        assert exc_info.value.kind == OrderErrorKind.INVALID_COUPON
        assert _count(db_session, Order) == 0

    def test_exhausted_coupon(self, service, user, selection, make_coupon, db_session):
        coupon = make_coupon("ONCE", usage_limit=1)
        service.create_order(user.id, selection, "fsn1", "100", "ONCE", NOW)

        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "ONCE", NOW)

        assert exc_info.value.reason == CouponRejection.EXHAUSTED
        db_session.refresh(coupon)
        assert coupon.usage_count == 1
        assert _count(db_session, Order) == 1
        assert _count(db_session, CouponUsage) == 1

    def test_inactive_coupon(self, service, user, selection, make_coupon):
        make_coupon("OFF", is_active=False)
        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "OFF", NOW)
        assert exc_info.value.reason == CouponRejection.INACTIVE

    def test_coupon_not_yet_active(self, service, user, selection, make_coupon):
        make_coupon("SOON", start_date=NOW + timedelta(days=7))
        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "SOON", NOW)
        assert exc_info.value.reason == CouponRejection.NOT_YET_ACTIVE

    def test_expired_coupon(self, service, user, selection, make_coupon, db_session):
        coupon = make_coupon("OLD", end_date=NOW - timedelta(days=1))
        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "OLD", NOW)
        assert exc_info.value.reason == CouponRejection.EXPIRED
        db_session.refresh(coupon)
        assert coupon.usage_count == 0

    def test_minimum_purchase_not_met(self, service, user, selection, make_coupon, db_session):
        coupon = make_coupon("BIG", min_purchase=Decimal("50"))

        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "40", "BIG", NOW)

        assert exc_info.value.reason == CouponRejection.MINIMUM_NOT_MET
        assert "$50.00" in exc_info.value.message
        db_session.refresh(coupon)
        assert coupon.usage_count == 0
        assert _count(db_session, Order) == 0

    def test_counter_matches_ledger(self, service, user, selection, make_coupon, db_session):
        coupon = make_coupon("MULTI", usage_limit=5)
        for _ in range(3):
            service.create_order(user.id, selection, "fsn1", "10", "MULTI", NOW)

        db_session.refresh(coupon)
        assert coupon.usage_count == 3
        assert CouponUsageRepository(db_session).count_by_coupon_id(coupon.id) == 3


class TestConcurrentRedemption:
    def test_last_use_taken_between_evaluation_and_claim(
        self, service, user, selection, make_coupon, db_session, monkeypatch
    ):
        coupon = make_coupon("LAST", usage_limit=1)
        original_evaluate = service.evaluator.evaluate

        def evaluate_then_lose_race(code, amount, now=None):
            outcome = original_evaluate(code, amount, now)
            competitor = db_module.SessionLocal()
            try:
                OrderService(competitor).create_order(
                    user.id, selection, "fsn1", "100", "LAST", NOW
                )
            finally:
                competitor.close()
            return outcome

        monkeypatch.setattr(service.evaluator, "evaluate", evaluate_then_lose_race)

        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "LAST", NOW)

        assert exc_info.value.reason == CouponRejection.EXHAUSTED
        db_session.refresh(coupon)
        assert coupon.usage_count == 1
        assert _count(db_session, Order) == 1
        assert _count(db_session, CouponUsage) == 1

    def test_coupon_disabled_between_evaluation_and_claim(
        self, service, user, selection, make_coupon, db_session, monkeypatch
    ):
        coupon = make_coupon("FLASH")
        original_evaluate = service.evaluator.evaluate

        def evaluate_then_disable(code, amount, now=None):
            outcome = original_evaluate(code, amount, now)
            admin = db_module.SessionLocal()
            try:
                admin.query(Coupon).filter(Coupon.id == coupon.id).update({"is_active": False})
                admin.commit()
            finally:
                admin.close()
            return outcome

        monkeypatch.setattr(service.evaluator, "evaluate", evaluate_then_disable)

        with pytest.raises(InvalidCouponError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "FLASH", NOW)

        assert exc_info.value.reason == CouponRejection.INACTIVE
        assert _count(db_session, Order) == 0


class TestAtomicity:
    def test_ledger_failure_rolls_back_everything(
        self, service, user, selection, make_coupon, db_session, monkeypatch
    ):
        coupon = make_coupon("SAVE10", usage_limit=10)

        def fail(*args, **kwargs):
            raise SQLAlchemyError("ledger unavailable")

        monkeypatch.setattr(service.usage_repo, "record", fail)

        with pytest.raises(PersistenceFailureError) as exc_info:
            service.create_order(user.id, selection, "fsn1", "100", "SAVE10", NOW)

        assert exc_info.value.kind == OrderErrorKind.PERSISTENCE_FAILURE
        db_session.refresh(coupon)
        assert coupon.usage_count == 0
        assert _count(db_session, Order) == 0
        assert _count(db_session, CouponUsage) == 0

    def test_commit_failure_rolls_back_everything(
        self, service, user, selection, make_coupon, db_session, monkeypatch
    ):
        coupon = make_coupon("SAVE10")

        def fail_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", fail_commit)

        with pytest.raises(PersistenceFailureError):
            service.create_order(user.id, selection, "fsn1", "100", "SAVE10", NOW)

        monkeypatch.undo()
        db_session.refresh(coupon)
        assert coupon.usage_count == 0
        assert _count(db_session, Order) == 0
        assert _count(db_session, CouponUsage) == 0

    def test_order_insert_failure_without_coupon(
        self, service, user, selection, db_session, monkeypatch
    ):
        def fail(**kwargs):
            raise SQLAlchemyError("orders table unavailable")

        monkeypatch.setattr(service.order_repo, "add", fail)

        with pytest.raises(PersistenceFailureError, match="Failed to create order"):
            service.create_order(user.id, selection, "fsn1", "100")

    def test_rejected_coupon_leaves_no_side_effects(
        self, service, user, selection, make_coupon, db_session
    ):
        coupon = make_coupon("BIG", min_purchase=Decimal("500"))
        with pytest.raises(InvalidCouponError):
            service.create_order(user.id, selection, "fsn1", "100", "BIG", NOW)

        db_session.refresh(coupon)
        assert coupon.usage_count == 0
        assert _count(db_session, Order) == 0


class TestUpdateStatus:
    @pytest.fixture
    def order_id(self, service, user, selection):
        return service.create_order(user.id, selection, "fsn1", "12.99").order_id

    def test_pending_to_paid(self, service, order_id):
        order = service.update_status(order_id, OrderStatus.PAID, payment_reference="pi_123")
        assert order is not None
        assert order.status == "paid"
        assert order.payment_reference == "pi_123"

    def test_paid_to_provisioned(self, service, order_id):
        service.update_status(order_id, OrderStatus.PAID)
        order = service.update_status(order_id, OrderStatus.PROVISIONED, as_admin=True)
        assert order.status == "provisioned"

    def test_provisioning_is_admin_only(self, service, order_id, db_session):
        service.update_status(order_id, OrderStatus.PAID)
        with pytest.raises(PermissionError):
            service.update_status(order_id, OrderStatus.PROVISIONED)
        db_session.expire_all()
        assert db_session.get(Order, order_id).status == "paid"

    def test_pricing_is_never_changed(self, service, order_id):
        order = service.update_status(order_id, OrderStatus.PAID)
        assert order.final_price == Decimal("12.99")
        assert order.discount_amount == Decimal("0")

    def test_pending_to_provisioned_rejected(self, service, order_id):
        with pytest.raises(ValueError, match="Cannot change order status"):
            service.update_status(order_id, OrderStatus.PROVISIONED)

    @pytest.mark.parametrize("terminal", [OrderStatus.CANCELLED, OrderStatus.FAILED])
    def test_terminal_states(self, service, order_id, terminal):
        service.update_status(order_id, terminal)
        with pytest.raises(ValueError):
            service.update_status(order_id, OrderStatus.PAID)

    def test_unknown_order(self, service):
        assert service.update_status(uuid4(), OrderStatus.PAID) is None

    def test_other_users_order(self, service, order_id):
        assert service.update_status(order_id, OrderStatus.PAID, user_id=uuid4()) is None

"""Decimal helpers for prices and discounts."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.services.pricing_errors import InvalidAmountError

CURRENCY_QUANTUM = Decimal("0.01")


def parse_amount(value: Any, allow_zero: bool = True) -> Decimal:
    """Parse a monetary amount into a finite, non-negative Decimal.

    Floats are converted through ``str`` so ``12.99`` stays ``12.99``.

    Raises:
        InvalidAmountError: If the value is missing, non-numeric, not finite,
            negative, or zero when ``allow_zero`` is False.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError("Amount is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise InvalidAmountError("Amount must be a finite number")
    if amount < 0:
        raise InvalidAmountError("Amount cannot be negative")
    if not allow_zero and amount == 0:
        raise InvalidAmountError("Amount must be greater than zero")
    return amount


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to currency precision (two decimal places)."""
    return amount.quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Render an amount as a two-decimal string, e.g. ``"90.00"``."""
    return f"{round_currency(amount):.2f}"

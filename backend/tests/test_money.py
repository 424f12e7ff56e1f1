from decimal import Decimal

import pytest

from app.services.money import format_amount, parse_amount, round_currency
from app.services.pricing_errors import InvalidAmountError, OrderErrorKind


class TestParseAmount:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("12.99", Decimal("12.99")),
            (" 5 ", Decimal("5")),
            (12.99, Decimal("12.99")),
            (7, Decimal("7")),
            (Decimal("0.10"), Decimal("0.10")),
            ("0", Decimal("0")),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, "", "ten", "-0.01", True, "sNaN", "-Infinity"])
    def test_invalid(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            parse_amount(value)
        assert exc_info.value.kind == OrderErrorKind.INVALID_AMOUNT

    def test_zero_rejected_when_positive_required(self):
        with pytest.raises(InvalidAmountError, match="greater than zero"):
            parse_amount("0.00", allow_zero=False)

    def test_invalid_amount_is_value_error(self):
        with pytest.raises(ValueError):
            parse_amount("abc")


class TestRounding:
    def test_round_half_up(self):
        assert round_currency(Decimal("1.945")) == Decimal("1.95")
        assert round_currency(Decimal("1.9449")) == Decimal("1.94")

    def test_format_amount(self):
        assert format_amount(Decimal("10")) == "10.00"
        assert format_amount(Decimal("0")) == "0.00"
        assert format_amount(Decimal("11.0415")) == "11.04"

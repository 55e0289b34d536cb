"""
Unit tests for financial data types and precision calculations.
Testing Decimal conversion, PnL, margin and averaging helpers.
"""

from decimal import Decimal

import pytest

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.exceptions.ledger import InvalidInputError
from trading_ledger.core.types.financial import (
    HUNDRED,
    ZERO,
    calculate_margin,
    calculate_pnl,
    coerce_decimal,
    is_finite,
    is_non_negative_finite,
    is_positive_finite,
    percent_of,
    to_decimal,
    weighted_average_price,
)


class TestFinancialTypeConversions:
    """Test suite for Decimal conversions."""

    def test_should_return_decimal_unchanged(self) -> None:
        """Test that Decimal input is returned as is."""
        value = Decimal("123.45")
        assert to_decimal(value) is value

    def test_should_convert_float_through_repr(self) -> None:
        """Test that 0.1 becomes Decimal('0.1'), not its binary expansion."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(50000.5) == Decimal("50000.5")

    def test_should_convert_int_and_string(self) -> None:
        """Test converting int and numeric strings."""
        assert to_decimal(50000) == Decimal("50000")
        assert to_decimal("1.5") == Decimal("1.5")

    def test_should_reject_non_numeric_values(self) -> None:
        """Test that junk input raises InvalidInputError."""
        with pytest.raises(InvalidInputError, match="Not a numeric value"):
            to_decimal("abc")
        with pytest.raises(InvalidInputError):
            to_decimal(None)  # type: ignore[arg-type]
        with pytest.raises(InvalidInputError):
            to_decimal(True)

    def test_should_coerce_junk_to_nan(self) -> None:
        """Test lenient coercion used for stored documents."""
        assert coerce_decimal(None).is_nan()
        assert coerce_decimal("abc").is_nan()
        assert coerce_decimal({"nested": 1}).is_nan()
        assert coerce_decimal("42") == Decimal("42")


class TestFiniteChecks:
    """Test suite for finiteness predicates."""

    @pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf"), Decimal("-Inf")])
    def test_should_reject_missing_or_non_finite(self, value: object) -> None:
        """Test values that are never finite."""
        assert not is_finite(value)
        assert not is_positive_finite(value)
        assert not is_non_negative_finite(value)

    def test_should_distinguish_zero_and_negative(self) -> None:
        """Test zero is non-negative but not positive; negatives are neither."""
        assert is_finite(0)
        assert is_non_negative_finite(0)
        assert not is_positive_finite(0)
        assert is_finite(-1)
        assert not is_non_negative_finite(-1)
        assert is_positive_finite("0.0001")


class TestFinancialCalculations:
    """Test suite for financial calculation helpers."""

    def test_should_calculate_long_pnl(self) -> None:
        """Test PnL of a long (buy) book."""
        pnl = calculate_pnl(Decimal("1.1"), Decimal("1.2"), Decimal("1000"), TradeDirection.BUY)
        assert pnl == Decimal("100")

    def test_should_calculate_short_pnl(self) -> None:
        """Test PnL of a short (sell) book."""
        pnl = calculate_pnl(Decimal("1.1"), Decimal("1.2"), Decimal("1000"), TradeDirection.SELL)
        assert pnl == Decimal("-100")

    def test_should_calculate_margin(self) -> None:
        """Test margin = size / leverage."""
        assert calculate_margin(Decimal("1000"), Decimal("100")) == Decimal("10")

    @pytest.mark.parametrize("leverage", [Decimal("0"), Decimal("-5"), Decimal("NaN")])
    def test_should_reject_invalid_leverage_in_margin(self, leverage: Decimal) -> None:
        """Test that margin with a non-positive leverage raises."""
        with pytest.raises(InvalidInputError, match="Leverage must be positive"):
            calculate_margin(Decimal("1000"), leverage)

    def test_should_calculate_weighted_average_price(self) -> None:
        """Test weighted average after adding to a holding."""
        avg = weighted_average_price(Decimal(10), Decimal(100), Decimal(10), Decimal(200))
        assert avg == Decimal("150")

    def test_should_use_buy_price_for_empty_holding(self) -> None:
        """Test averaging from nothing yields the buy price."""
        assert weighted_average_price(ZERO, ZERO, Decimal(5), Decimal(42)) == Decimal(42)

    def test_should_express_percent_of_whole(self) -> None:
        """Test percentage helper, including division by zero."""
        assert percent_of(Decimal(500), Decimal(100000)) == Decimal("0.5")
        assert percent_of(Decimal(1), Decimal(1)) == HUNDRED
        assert percent_of(Decimal(5), ZERO) == ZERO

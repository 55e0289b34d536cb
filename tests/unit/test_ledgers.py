"""
Unit tests for the position sub-ledgers.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.models.ledgers import MarginLedger, PositionLedger
from trading_ledger.core.models.position import MarginPosition, Position

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _position(symbol: str, quantity: str = "10", avg_price: str = "100") -> Position:
    return Position(
        symbol=symbol,
        quantity=Decimal(quantity),
        avg_price=Decimal(avg_price),
        total_cost=Decimal(quantity) * Decimal(avg_price),
    )


def _margin_position(symbol: str, direction: TradeDirection) -> MarginPosition:
    return MarginPosition(
        symbol=symbol,
        direction=direction,
        size=Decimal("1000"),
        avg_price=Decimal("1.1"),
        leverage=Decimal("100"),
        margin=Decimal("10"),
    )


class TestPositionLedger:
    """Test suite for PositionLedger."""

    def test_should_store_and_return_positions(self) -> None:
        """Test put/get/contains."""
        ledger = PositionLedger()
        position = _position("AAPL")
        ledger.put("AAPL", position)
        assert "AAPL" in ledger
        assert ledger.get("AAPL") is position
        assert ledger.get("MSFT") is None
        assert len(ledger) == 1

    def test_should_remove_positions(self) -> None:
        """Test remove and missing-key error."""
        ledger = PositionLedger.from_positions([_position("AAPL")])
        removed = ledger.remove("AAPL")
        assert removed.symbol == "AAPL"
        assert len(ledger) == 0
        with pytest.raises(KeyError):
            ledger.remove("AAPL")

    def test_should_allow_removal_while_iterating_items(self) -> None:
        """Test that items() is a snapshot list."""
        ledger = PositionLedger.from_positions([_position("AAPL"), _position("MSFT")])
        for symbol, _ in ledger.items():
            ledger.remove(symbol)
        assert len(ledger) == 0

    def test_should_sum_total_cost(self) -> None:
        """Test aggregate cost basis."""
        ledger = PositionLedger.from_positions([_position("AAPL"), _position("MSFT", "2", "50")])
        assert ledger.total_cost() == Decimal("1100")

    def test_should_compare_by_entries(self) -> None:
        """Test equality."""
        first = PositionLedger.from_positions([_position("AAPL")])
        second = PositionLedger.from_positions([_position("AAPL")])
        assert first == second
        assert first != PositionLedger()

    def test_should_serialize_keyed_by_symbol(self) -> None:
        """Test to_dict output."""
        data = PositionLedger.from_positions([_position("AAPL")]).to_dict()
        assert data["AAPL"]["quantity"] == 10.0


class TestMarginLedger:
    """Test suite for MarginLedger."""

    def test_should_keep_long_and_short_books_apart(self) -> None:
        """Test (symbol, direction) keying."""
        ledger = MarginLedger.from_positions(
            [
                _margin_position("EURUSD", TradeDirection.BUY),
                _margin_position("EURUSD", TradeDirection.SELL),
            ]
        )
        assert len(ledger) == 2
        assert ("EURUSD", TradeDirection.BUY) in ledger
        assert ("EURUSD", TradeDirection.SELL) in ledger

    def test_should_sum_used_margin(self) -> None:
        """Test used margin."""
        ledger = MarginLedger.from_positions(
            [
                _margin_position("EURUSD", TradeDirection.BUY),
                _margin_position("GBPUSD", TradeDirection.BUY),
            ]
        )
        assert ledger.used_margin() == Decimal("20")

    def test_should_serialize_with_direction_suffix(self) -> None:
        """Test to_dict keys."""
        ledger = MarginLedger.from_positions([_margin_position("EURUSD", TradeDirection.SELL)])
        assert list(ledger.to_dict()) == ["EURUSD_sell"]

    def test_should_copy_detached_from_source(self) -> None:
        """Test that writes to a copy do not reach the original."""
        long_key = ("EURUSD", TradeDirection.BUY)
        ledger = MarginLedger.from_positions([_margin_position("EURUSD", TradeDirection.BUY)])
        copied = ledger.copy()

        copied.remove(long_key)

        assert isinstance(copied, MarginLedger)
        assert long_key in ledger
        assert len(copied) == 0

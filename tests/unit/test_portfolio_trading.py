"""
Unit tests for PortfolioTrading class.
Testing buy/sell and forex open/close against a bare PortfolioCore.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from trading_ledger.core.enums import AssetClass, TradeDirection
from trading_ledger.core.exceptions.ledger import (
    InsufficientFundsError,
    InsufficientPositionError,
    InvalidInputError,
)
from trading_ledger.core.models.portfolio_core import PortfolioCore
from trading_ledger.core.models.portfolio_trading import PortfolioTrading

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def core() -> PortfolioCore:
    return PortfolioCore(owner_id="user-1", display_name="Alice")


@pytest.fixture
def trading(core: PortfolioCore) -> PortfolioTrading:
    return PortfolioTrading(core)


class TestPortfolioTradingBuyOperations:
    """Test stock and crypto buys."""

    def test_should_open_new_stock_position(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test opening a new stock position."""
        result = trading.buy(AssetClass.STOCK, "AAPL", 10, 100, timestamp=NOW)

        assert core.cash == Decimal("99000")
        position = core.stock_positions.get("AAPL")
        assert position is not None
        assert position.quantity == Decimal("10")
        assert position.avg_price == Decimal("100")
        assert position.total_cost == Decimal("1000")
        assert result.record.direction == TradeDirection.BUY
        assert result.record.total_cost == Decimal("1000")
        assert result.realized_pnl is None
        assert core.trade_counters.stock_trades == 1
        assert core.last_trade_at == NOW

    def test_should_average_price_when_adding_to_position(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test weighted average: 10@100 then 10@200 gives 20 @ 150."""
        trading.buy(AssetClass.STOCK, "AAPL", 10, 100)
        trading.buy(AssetClass.STOCK, "AAPL", 10, 200)

        position = core.stock_positions.get("AAPL")
        assert position is not None
        assert position.quantity == Decimal("20")
        assert position.avg_price == Decimal("150")
        assert position.total_cost == Decimal("3000")
        assert len(position.history) == 2
        assert core.cash == Decimal("97000")

    def test_should_keep_crypto_in_its_own_ledger(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test that crypto buys do not touch the stock ledger."""
        trading.buy(AssetClass.CRYPTO, "btc", "0.5", 40000)

        assert "BTC" in core.crypto_positions
        assert len(core.stock_positions) == 0
        assert core.trade_counters.crypto_trades == 1
        assert core.cash == Decimal("80000")

    def test_should_reject_buy_without_funds(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test that an unaffordable buy changes nothing."""
        with pytest.raises(InsufficientFundsError) as exc_info:
            trading.buy(AssetClass.STOCK, "AAPL", 1001, 100)

        assert exc_info.value.required == Decimal("100100")
        assert exc_info.value.available == Decimal("100000")
        assert core.cash == Decimal("100000")
        assert len(core.stock_positions) == 0
        assert core.trade_counters.total_trades == 0

    @pytest.mark.parametrize(
        ("quantity", "price"),
        [(0, 100), (-1, 100), (10, 0), (10, -5), (float("nan"), 100), (10, float("inf")), ("x", 1)],
    )
    def test_should_reject_invalid_quantity_or_price(
        self, core: PortfolioCore, trading: PortfolioTrading, quantity: object, price: object
    ) -> None:
        """Test input validation runs before any mutation."""
        with pytest.raises(InvalidInputError):
            trading.buy(AssetClass.STOCK, "AAPL", quantity, price)

        assert core.cash == Decimal("100000")
        assert core.trade_counters.total_trades == 0

    def test_should_reject_forex_in_unlevered_ledger(self, trading: PortfolioTrading) -> None:
        """Test that forex must go through open/close."""
        with pytest.raises(ValueError, match="margin ledger"):
            trading.buy(AssetClass.FOREX, "EURUSD", 1000, 1.1)


class TestPortfolioTradingSellOperations:
    """Test stock and crypto sells."""

    def test_should_restore_cash_on_round_trip(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test buy Q@P then sell Q@P restores cash exactly."""
        trading.buy(AssetClass.CRYPTO, "ETH", 0.1, 0.3)
        trading.sell(AssetClass.CRYPTO, "ETH", 0.1, 0.3)

        assert core.cash == Decimal("100000")
        assert "ETH" not in core.crypto_positions

    def test_should_run_full_stock_scenario(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test buy 10@100, buy 10@200, sell 20@150."""
        trading.buy(AssetClass.STOCK, "AAPL", 10, 100)
        assert core.cash == Decimal("99000")

        trading.buy(AssetClass.STOCK, "AAPL", 10, 200)
        assert core.cash == Decimal("97000")

        result = trading.sell(AssetClass.STOCK, "AAPL", 20, 150)

        assert core.cash == Decimal("100000")
        assert core.stock_positions.get("AAPL") is None
        assert result.realized_pnl == Decimal("0")
        assert result.successful is False
        assert core.trade_counters.stock_trades == 3

    def test_should_reduce_cost_at_average_price_on_partial_sell(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test partial sell keeps the average and removes cost at average."""
        trading.buy(AssetClass.STOCK, "AAPL", 10, 100)
        trading.buy(AssetClass.STOCK, "AAPL", 10, 200)

        result = trading.sell(AssetClass.STOCK, "AAPL", 5, 300)

        position = core.stock_positions.get("AAPL")
        assert position is not None
        assert position.quantity == Decimal("15")
        assert position.avg_price == Decimal("150")
        assert position.total_cost == Decimal("2250")
        assert result.record.total_cost == Decimal("1500")
        assert result.realized_pnl == Decimal("750")
        assert result.successful is True
        assert core.trade_counters.successful_trades == 1
        assert core.trade_counters.closing_trades == 1

    def test_should_classify_success_with_pre_sale_average(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test selling the whole lot above average is successful."""
        trading.buy(AssetClass.STOCK, "AAPL", 10, 100)
        result = trading.sell(AssetClass.STOCK, "AAPL", 10, 101)

        assert result.successful is True
        assert result.realized_pnl == Decimal("10")

    def test_should_reject_over_sell_without_changes(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test selling more than held leaves state unchanged."""
        trading.buy(AssetClass.STOCK, "AAPL", 10, 100)
        position_before = core.stock_positions.get("AAPL")

        with pytest.raises(InsufficientPositionError) as exc_info:
            trading.sell(AssetClass.STOCK, "AAPL", 11, 100)

        assert exc_info.value.requested == Decimal("11")
        assert exc_info.value.held == Decimal("10")
        assert core.cash == Decimal("99000")
        assert core.stock_positions.get("AAPL") is position_before
        assert core.trade_counters.stock_trades == 1

    def test_should_reject_sell_of_unheld_symbol(self, trading: PortfolioTrading) -> None:
        """Test selling a symbol that is not held."""
        with pytest.raises(InsufficientPositionError) as exc_info:
            trading.sell(AssetClass.CRYPTO, "DOGE", 1, 1)

        assert exc_info.value.held == Decimal("0")


class TestPortfolioTradingForexOperations:
    """Test forex open/close."""

    def test_should_deduct_margin_on_open(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test open(size=1000, leverage=100) deducts exactly 10."""
        result = trading.open_forex_position("EURUSD", 1000, 1.1, 100, "buy", timestamp=NOW)

        assert core.cash == Decimal("99990")
        position = core.forex_positions.get(("EURUSD", TradeDirection.BUY))
        assert position is not None
        assert position.margin == Decimal("10")
        assert position.leverage == Decimal("100")
        assert result.record.leverage == Decimal("100")
        assert core.trade_counters.forex_trades == 1

    def test_should_keep_long_and_short_separate(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test that opposite directions on one pair never net."""
        trading.open_forex_position("EURUSD", 1000, 1.1, 100, "buy")
        trading.open_forex_position("EURUSD", 500, 1.1, 100, "sell")

        assert len(core.forex_positions) == 2
        assert core.cash == Decimal("99985")

    def test_should_blend_leverage_when_adding(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test that margin = size / leverage keeps holding after adds."""
        trading.open_forex_position("EURUSD", 1000, 1.0, 100, "buy")
        trading.open_forex_position("EURUSD", 1000, 1.2, 50, "buy")

        position = core.forex_positions.get(("EURUSD", TradeDirection.BUY))
        assert position is not None
        assert position.size == Decimal("2000")
        assert position.margin == Decimal("30")
        assert position.avg_price == Decimal("1.1")
        assert position.leverage == Decimal("2000") / Decimal("30")

    def test_should_reject_open_without_margin(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test that an unaffordable margin changes nothing."""
        with pytest.raises(InsufficientFundsError):
            trading.open_forex_position("EURUSD", 20_000_000, 1.1, 100, "buy")

        assert core.cash == Decimal("100000")
        assert len(core.forex_positions) == 0

    @pytest.mark.parametrize(
        ("size", "price", "leverage", "direction"),
        [
            (0, 1.1, 100, "buy"),
            (1000, 0, 100, "buy"),
            (1000, 1.1, 0, "buy"),
            (1000, 1.1, float("nan"), "buy"),
            (1000, 1.1, 100, "sideways"),
        ],
    )
    def test_should_reject_invalid_open(
        self,
        core: PortfolioCore,
        trading: PortfolioTrading,
        size: object,
        price: object,
        leverage: object,
        direction: str,
    ) -> None:
        """Test forex open validation."""
        with pytest.raises(InvalidInputError):
            trading.open_forex_position("EURUSD", size, price, leverage, direction)

        assert core.cash == Decimal("100000")

    def test_should_credit_margin_and_profit_on_long_close(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test closing a long book at a higher price."""
        trading.open_forex_position("EURUSD", 1000, 1.1, 100, "buy")
        result = trading.close_forex_position("EURUSD", 1000, 1.2, "buy")

        assert result.realized_pnl == Decimal("100")
        assert result.successful is True
        assert result.record.total_cost == Decimal("10")
        assert core.cash == Decimal("100100")
        assert len(core.forex_positions) == 0

    def test_should_profit_when_short_price_falls(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test closing a short book at a lower price."""
        trading.open_forex_position("EURUSD", 1000, 1.2, 100, "sell")
        result = trading.close_forex_position("EURUSD", 1000, 1.1, "short")

        assert result.realized_pnl == Decimal("100")
        assert core.cash == Decimal("100100")

    def test_should_return_margin_proportionally_on_partial_close(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test partial close shrinks size and margin."""
        trading.open_forex_position("EURUSD", 1000, 1.1, 100, "buy")
        trading.close_forex_position("EURUSD", 400, 1.1, "buy")

        position = core.forex_positions.get(("EURUSD", TradeDirection.BUY))
        assert position is not None
        assert position.size == Decimal("600")
        assert position.margin == Decimal("6")
        assert core.cash == Decimal("99994")

    def test_should_floor_cash_at_zero_on_large_loss(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test a loss beyond the balance wipes the account but never goes negative."""
        trading.open_forex_position("EURUSD", 1_000_000, 1.0, 100, "buy")
        result = trading.close_forex_position("EURUSD", 1_000_000, 0.8, "buy")

        assert result.realized_pnl == Decimal("-200000")
        assert result.successful is False
        assert core.cash == Decimal("0")

    def test_should_reject_close_beyond_size(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test closing more than held leaves state unchanged."""
        trading.open_forex_position("EURUSD", 1000, 1.1, 100, "buy")

        with pytest.raises(InsufficientPositionError):
            trading.close_forex_position("EURUSD", 1001, 1.1, "buy")
        with pytest.raises(InsufficientPositionError):
            trading.close_forex_position("EURUSD", 1000, 1.1, "sell")

        assert core.cash == Decimal("99990")
        assert core.trade_counters.forex_trades == 1

    def test_should_reject_close_of_unheld_pair(
        self, core: PortfolioCore, trading: PortfolioTrading
    ) -> None:
        """Test closing a pair with no open book reports zero held."""
        with pytest.raises(InsufficientPositionError) as exc_info:
            trading.close_forex_position("GBPUSD", 10, 1.3, "sell")

        assert exc_info.value.symbol == "GBPUSD (sell)"
        assert exc_info.value.held == Decimal("0")
        assert core.cash == Decimal("100000")
        assert core.trade_counters.forex_trades == 0

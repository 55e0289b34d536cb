"""
Main Portfolio class - orchestrates all portfolio components.

This module provides the Portfolio aggregate by composing the focused
components: core state, trading operations, valuation and integrity audit.
"""

import copy
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any

import pandas as pd

from trading_ledger.core.constants import DEFAULT_FOREX_LEVERAGE, STARTING_CASH
from trading_ledger.core.enums import AssetClass, TradeAction, TradeDirection
from trading_ledger.core.exceptions.ledger import InvalidInputError
from trading_ledger.core.interfaces.portfolio import IPortfolio
from trading_ledger.core.models.commands import PortfolioSummary, TradeCommand
from trading_ledger.core.models.ledgers import MarginLedger, PositionLedger
from trading_ledger.core.models.position import MarginPosition, Position
from trading_ledger.core.models.trade import TradeResult
from trading_ledger.core.protocols import PriceMap
from trading_ledger.core.types.financial import ZERO, percent_of
from trading_ledger.core.utils.decorators import log_trades
from trading_ledger.core.utils.validation import validate_direction, validate_symbol

from .portfolio_audit import AuditReport, PortfolioAuditor
from .portfolio_core import (
    AssetAllocation,
    PortfolioCore,
    TradeCounters,
    ValueSnapshot,
    utcnow,
)
from .portfolio_trading import PortfolioTrading
from .portfolio_valuation import PortfolioValuation, value_history_frame


class Portfolio(IPortfolio):
    """Main Portfolio implementation.

    Orchestrates portfolio operations by composing focused components:
    - PortfolioCore: State
    - PortfolioTrading: Buy/sell and forex open/close
    - PortfolioValuation: Mark-to-market and value history
    - PortfolioAuditor: Repair of corrupted stored state

    State is only changed through the trading and valuation commands and
    the audit; everything exposed for reading is either immutable or a copy.
    """

    def __init__(
        self,
        owner_id: str,
        display_name: str | None = None,
        cash: Decimal | float = STARTING_CASH,
        stock_positions: Iterable[Position] | None = None,
        crypto_positions: Iterable[Position] | None = None,
        forex_positions: Iterable[MarginPosition] | None = None,
        total_value: Decimal | float = STARTING_CASH,
        total_gain_loss: Decimal | float = ZERO,
        total_gain_loss_percent: Decimal | float = ZERO,
        trade_counters: TradeCounters | None = None,
        value_history: Iterable[ValueSnapshot] | None = None,
        asset_allocation: AssetAllocation | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        last_trade_at: datetime | None = None,
    ) -> None:
        """Initialize Portfolio with composition pattern.

        Numbers are accepted as stored, including NaN, so that a persisted
        portfolio can be rebuilt and then repaired by ``audit``.
        """
        created_at = created_at if created_at is not None else utcnow()

        # Create the core state first - single source of truth
        self._core = PortfolioCore(
            owner_id=owner_id,
            display_name=display_name if display_name else owner_id,
            cash=cash,
            stock_positions=PositionLedger.from_positions(stock_positions or ()),
            crypto_positions=PositionLedger.from_positions(crypto_positions or ()),
            forex_positions=MarginLedger.from_positions(forex_positions or ()),
            total_value=total_value,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percent=total_gain_loss_percent,
            trade_counters=trade_counters if trade_counters is not None else TradeCounters(),
            value_history=value_history or (),
            asset_allocation=(
                asset_allocation if asset_allocation is not None else AssetAllocation()
            ),
            created_at=created_at,
            updated_at=updated_at if updated_at is not None else created_at,
            last_trade_at=last_trade_at,
        )

        # Initialize specialized components
        self._trading = PortfolioTrading(self._core)
        self._valuation = PortfolioValuation(self._core)
        self._auditor = PortfolioAuditor(self._core)

    @classmethod
    def create(
        cls, owner_id: str, display_name: str | None = None, now: datetime | None = None
    ) -> "Portfolio":
        """Create a fresh portfolio with the starting endowment.

        The value history starts with one snapshot at the starting cash.
        """
        now = now if now is not None else utcnow()
        return cls(
            owner_id=owner_id,
            display_name=display_name,
            value_history=[ValueSnapshot(value=STARTING_CASH, timestamp=now)],
            created_at=now,
            updated_at=now,
        )

    # Read-only property delegation
    @property
    def owner_id(self) -> str:
        return self._core.owner_id

    @property
    def display_name(self) -> str:
        return self._core.display_name

    @property
    def cash(self) -> Decimal:
        """Uncommitted cash balance."""
        return self._core.cash

    @property
    def stock_positions(self) -> PositionLedger:
        """Copy of the stock ledger."""
        return self._core.stock_positions.copy()

    @property
    def crypto_positions(self) -> PositionLedger:
        """Copy of the crypto ledger."""
        return self._core.crypto_positions.copy()

    @property
    def forex_positions(self) -> MarginLedger:
        """Copy of the forex ledger."""
        return self._core.forex_positions.copy()

    @property
    def total_value(self) -> Decimal:
        """Total value as of the last valuation."""
        return self._core.total_value

    @property
    def total_gain_loss(self) -> Decimal:
        return self._core.total_gain_loss

    @property
    def total_gain_loss_percent(self) -> Decimal:
        return self._core.total_gain_loss_percent

    @property
    def trade_counters(self) -> TradeCounters:
        """Copy of the trade counters."""
        return copy.copy(self._core.trade_counters)

    @property
    def value_history(self) -> list[ValueSnapshot]:
        """Value snapshots, oldest first."""
        return list(self._core.value_history)

    @property
    def asset_allocation(self) -> AssetAllocation:
        return self._core.asset_allocation

    @property
    def created_at(self) -> datetime:
        return self._core.created_at

    @property
    def updated_at(self) -> datetime:
        return self._core.updated_at

    @property
    def last_trade_at(self) -> datetime | None:
        return self._core.last_trade_at

    # Core Portfolio Interface (IPortfolio)
    @log_trades
    def buy_stock(
        self, symbol: str, quantity: Any, price: Any, timestamp: datetime | None = None
    ) -> TradeResult:
        """Buy shares of a stock."""
        return self._trading.buy(AssetClass.STOCK, symbol, quantity, price, timestamp)

    @log_trades
    def sell_stock(
        self, symbol: str, quantity: Any, price: Any, timestamp: datetime | None = None
    ) -> TradeResult:
        """Sell shares of a stock."""
        return self._trading.sell(AssetClass.STOCK, symbol, quantity, price, timestamp)

    @log_trades
    def buy_crypto(
        self, symbol: str, quantity: Any, price: Any, timestamp: datetime | None = None
    ) -> TradeResult:
        """Buy units of a cryptocurrency."""
        return self._trading.buy(AssetClass.CRYPTO, symbol, quantity, price, timestamp)

    @log_trades
    def sell_crypto(
        self, symbol: str, quantity: Any, price: Any, timestamp: datetime | None = None
    ) -> TradeResult:
        """Sell units of a cryptocurrency."""
        return self._trading.sell(AssetClass.CRYPTO, symbol, quantity, price, timestamp)

    @log_trades
    def open_forex_position(
        self,
        symbol: str,
        size: Any,
        price: Any,
        leverage: Any = DEFAULT_FOREX_LEVERAGE,
        direction: Any = TradeDirection.BUY,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Open or add to a leveraged forex position."""
        return self._trading.open_forex_position(
            symbol, size, price, leverage, direction, timestamp
        )

    @log_trades
    def close_forex_position(
        self,
        symbol: str,
        size: Any,
        price: Any,
        direction: Any = TradeDirection.BUY,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Close all or part of a forex position."""
        return self._trading.close_forex_position(symbol, size, price, direction, timestamp)

    def execute(
        self,
        command: TradeCommand,
        default_leverage: Decimal = DEFAULT_FOREX_LEVERAGE,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Dispatch a trade command to the matching operation.

        Forex accepts buy/open (open a position) and sell/close (close one);
        stocks and cryptos accept only buy and sell.

        Raises:
            InvalidInputError: On an action the asset class does not support
        """
        if command.asset_class == AssetClass.FOREX:
            direction = command.direction if command.direction is not None else TradeDirection.BUY
            if command.action.is_opening:
                leverage = command.leverage if command.leverage is not None else default_leverage
                return self.open_forex_position(
                    command.symbol, command.quantity, command.price, leverage, direction, timestamp
                )
            return self.close_forex_position(
                command.symbol, command.quantity, command.price, direction, timestamp
            )

        if command.action == TradeAction.BUY:
            buy = self.buy_stock if command.asset_class == AssetClass.STOCK else self.buy_crypto
            return buy(command.symbol, command.quantity, command.price, timestamp)
        if command.action == TradeAction.SELL:
            sell = self.sell_stock if command.asset_class == AssetClass.STOCK else self.sell_crypto
            return sell(command.symbol, command.quantity, command.price, timestamp)

        raise InvalidInputError(
            f"Action {command.action} is not supported for {command.asset_class} trades"
        )

    def update_valuation(self, market_prices: PriceMap, now: datetime | None = None) -> Decimal:
        """Mark to market, record a value snapshot and return the total value."""
        return self._valuation.update_valuation(market_prices, now).value

    def calculate_portfolio_value(self, market_prices: PriceMap) -> Decimal:
        """Total value at the given prices, without recording anything."""
        return self._valuation.calculate_portfolio_value(market_prices)

    def audit(self) -> AuditReport:
        """Repair corrupted numeric state in place."""
        return self._auditor.audit()

    # Read helpers
    def get_stock_position(self, symbol: str) -> Position | None:
        return self._core.stock_positions.get(validate_symbol(symbol))

    def get_crypto_position(self, symbol: str) -> Position | None:
        return self._core.crypto_positions.get(validate_symbol(symbol))

    def get_forex_position(
        self, symbol: str, direction: Any = TradeDirection.BUY
    ) -> MarginPosition | None:
        return self._core.forex_positions.get(
            (validate_symbol(symbol), validate_direction(direction))
        )

    @property
    def trade_count(self) -> int:
        return self._core.trade_counters.total_trades

    def win_rate(self) -> Decimal:
        """Percentage of closing trades that realized a profit (0 when none)."""
        counters = self._core.trade_counters
        return percent_of(Decimal(counters.successful_trades), Decimal(counters.closing_trades))

    def value_history_frame(self) -> pd.DataFrame:
        """Value history as a pandas DataFrame (value and return_pct)."""
        return value_history_frame(self._core.value_history)

    def summary(self) -> PortfolioSummary:
        """Leaderboard row for this portfolio."""
        return PortfolioSummary(
            owner_id=self._core.owner_id,
            display_name=self._core.display_name,
            total_value=self._core.total_value,
            total_gain_loss=self._core.total_gain_loss,
            total_gain_loss_percent=self._core.total_gain_loss_percent,
            updated_at=self._core.updated_at,
        )

    def snapshot(self) -> "Portfolio":
        """Independent deep copy; mutating it never affects this portfolio."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert portfolio to dictionary."""
        core = self._core
        return {
            "owner_id": core.owner_id,
            "display_name": core.display_name,
            "cash": float(core.cash),
            "stock_positions": core.stock_positions.to_dict(),
            "crypto_positions": core.crypto_positions.to_dict(),
            "forex_positions": core.forex_positions.to_dict(),
            "total_value": float(core.total_value),
            "total_gain_loss": float(core.total_gain_loss),
            "total_gain_loss_percent": float(core.total_gain_loss_percent),
            "trade_counters": core.trade_counters.to_dict(),
            "win_rate": float(self.win_rate()),
            "asset_allocation": core.asset_allocation.to_dict(),
            "value_history": [snapshot.to_dict() for snapshot in core.value_history],
            "created_at": core.created_at.isoformat(),
            "updated_at": core.updated_at.isoformat(),
            "last_trade_at": core.last_trade_at.isoformat() if core.last_trade_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"Portfolio(owner_id={self._core.owner_id!r}, cash={self._core.cash}, "
            f"total_value={self._core.total_value})"
        )

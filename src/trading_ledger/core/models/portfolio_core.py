"""
Portfolio core state management.

This module holds the fundamental portfolio state: cash, the three
sub-ledgers, derived valuation fields, trade counters and timestamps.
Behaviour lives in the trading, valuation and audit components, which all
operate on one shared PortfolioCore.

PortfolioCore carries no lock. Commands on one owner are serialized by the
ledger service for the whole load -> mutate -> save pipeline, and the state
must stay deep-copyable so that a failed save can be discarded.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from trading_ledger.core.constants import MAX_VALUE_HISTORY, STARTING_CASH
from trading_ledger.core.enums import AssetClass
from trading_ledger.core.models.ledgers import MarginLedger, PositionLedger
from trading_ledger.core.types.financial import ZERO, coerce_decimal


def utcnow() -> datetime:
    """Current timestamp (timezone-aware, UTC)."""
    return datetime.now(UTC)


@dataclass
class TradeCounters:
    """Per-asset-class trade counts and successful (profitable) closes."""

    stock_trades: int = 0
    crypto_trades: int = 0
    forex_trades: int = 0
    closing_trades: int = 0
    successful_trades: int = 0

    def record(
        self, asset_class: AssetClass, successful: bool = False, closing: bool = False
    ) -> None:
        """Count one trade of the given asset class."""
        if asset_class == AssetClass.STOCK:
            self.stock_trades += 1
        elif asset_class == AssetClass.CRYPTO:
            self.crypto_trades += 1
        else:
            self.forex_trades += 1
        if closing:
            self.closing_trades += 1
        if successful:
            self.successful_trades += 1

    @property
    def total_trades(self) -> int:
        return self.stock_trades + self.crypto_trades + self.forex_trades

    def to_dict(self) -> dict[str, int]:
        return {
            "stock_trades": self.stock_trades,
            "crypto_trades": self.crypto_trades,
            "forex_trades": self.forex_trades,
            "closing_trades": self.closing_trades,
            "successful_trades": self.successful_trades,
        }


@dataclass(frozen=True)
class ValueSnapshot:
    """One point of the portfolio value history."""

    value: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", coerce_decimal(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {"value": float(self.value), "timestamp": self.timestamp.isoformat()}


@dataclass(frozen=True)
class AssetAllocation:
    """Value held in each asset class at the last valuation."""

    stocks: Decimal = ZERO
    cryptos: Decimal = ZERO
    forex: Decimal = ZERO
    cash: Decimal = STARTING_CASH

    def __post_init__(self) -> None:
        for name in ("stocks", "cryptos", "forex", "cash"):
            object.__setattr__(self, name, coerce_decimal(getattr(self, name)))

    def values(self) -> tuple[Decimal, Decimal, Decimal, Decimal]:
        return (self.stocks, self.cryptos, self.forex, self.cash)

    @property
    def total(self) -> Decimal:
        return sum(self.values(), ZERO)

    def to_dict(self) -> dict[str, float]:
        return {
            "stocks": float(self.stocks),
            "cryptos": float(self.cryptos),
            "forex": float(self.forex),
            "cash": float(self.cash),
        }


def _bounded_history(entries: Any = ()) -> deque[ValueSnapshot]:
    return deque(entries or (), maxlen=MAX_VALUE_HISTORY)


@dataclass
class PortfolioCore:
    """Core portfolio state.

    ``value_history`` is a bounded deque: appending beyond
    MAX_VALUE_HISTORY entries evicts the oldest snapshot.
    """

    owner_id: str
    display_name: str
    cash: Decimal = STARTING_CASH
    stock_positions: PositionLedger = field(default_factory=PositionLedger)
    crypto_positions: PositionLedger = field(default_factory=PositionLedger)
    forex_positions: MarginLedger = field(default_factory=MarginLedger)
    total_value: Decimal = STARTING_CASH
    total_gain_loss: Decimal = ZERO
    total_gain_loss_percent: Decimal = ZERO
    trade_counters: TradeCounters = field(default_factory=TradeCounters)
    value_history: deque[ValueSnapshot] = field(default_factory=_bounded_history)
    asset_allocation: AssetAllocation = field(default_factory=AssetAllocation)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_trade_at: datetime | None = None

    def __post_init__(self) -> None:
        """Normalize numeric fields and enforce the history bound."""
        self.cash = coerce_decimal(self.cash)
        self.total_value = coerce_decimal(self.total_value)
        self.total_gain_loss = coerce_decimal(self.total_gain_loss)
        self.total_gain_loss_percent = coerce_decimal(self.total_gain_loss_percent)
        if (
            not isinstance(self.value_history, deque)
            or self.value_history.maxlen != MAX_VALUE_HISTORY
        ):
            self.value_history = _bounded_history(self.value_history)

    def ledger_for(self, asset_class: AssetClass) -> PositionLedger:
        """Unlevered sub-ledger for stocks or cryptos."""
        if asset_class == AssetClass.STOCK:
            return self.stock_positions
        if asset_class == AssetClass.CRYPTO:
            return self.crypto_positions
        raise ValueError(f"{asset_class} positions are held in the margin ledger")

    def record_trade(
        self,
        asset_class: AssetClass,
        timestamp: datetime,
        successful: bool = False,
        closing: bool = False,
    ) -> None:
        """Update counters and trade timestamps after a trade."""
        self.trade_counters.record(asset_class, successful, closing)
        self.last_trade_at = timestamp
        self.updated_at = timestamp

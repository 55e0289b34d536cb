"""
Portfolio valuation.

This module marks positions to market, recomputes total value, gain/loss
and asset allocation, and appends to the bounded value history.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pandas as pd

from trading_ledger.core.constants import STARTING_CASH
from trading_ledger.core.models.commands import PortfolioSummary
from trading_ledger.core.models.ledgers import PositionLedger
from trading_ledger.core.types.financial import ZERO, coerce_decimal, percent_of

from .portfolio_core import AssetAllocation, ValueSnapshot, utcnow

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


def normalize_prices(market_prices: Mapping[str, Any] | None) -> dict[str, Decimal]:
    """Upper-case symbols and keep only finite, positive prices.

    Missing, zero, negative or non-numeric prices are dropped so that the
    affected positions fall back to their average price.
    """
    prices: dict[str, Decimal] = {}
    for symbol, raw_price in (market_prices or {}).items():
        price = coerce_decimal(raw_price)
        if price.is_finite() and price > ZERO:
            prices[str(symbol).strip().upper()] = price
    return prices


class PortfolioValuation:
    """Mark-to-market valuation of a portfolio.

    A symbol without usable market data is valued at its average price
    rather than failing the valuation.
    """

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The portfolio core state to value
        """
        self.core = portfolio_core

    @staticmethod
    def _holdings_value(ledger: PositionLedger, prices: Mapping[str, Decimal]) -> Decimal:
        return sum(
            (
                position.position_value(prices.get(symbol, position.avg_price))
                for symbol, position in ledger.items()
            ),
            ZERO,
        )

    def stock_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Market value of all stock holdings."""
        return self._holdings_value(self.core.stock_positions, prices)

    def crypto_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Market value of all crypto holdings."""
        return self._holdings_value(self.core.crypto_positions, prices)

    def forex_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Margin plus unrealized PnL of all forex positions."""
        return sum(
            (
                position.position_value(prices.get(position.symbol, position.avg_price))
                for position in self.core.forex_positions.values()
            ),
            ZERO,
        )

    def asset_allocation(self, market_prices: Mapping[str, Any] | None) -> AssetAllocation:
        """Value held per asset class at the given prices."""
        prices = normalize_prices(market_prices)
        return AssetAllocation(
            stocks=self.stock_value(prices),
            cryptos=self.crypto_value(prices),
            forex=self.forex_value(prices),
            cash=self.core.cash,
        )

    def calculate_portfolio_value(self, market_prices: Mapping[str, Any] | None) -> Decimal:
        """Calculate total portfolio value without recording it.

        Portfolio Value = Cash + Stock Value + Crypto Value + Forex Value
        """
        return self.asset_allocation(market_prices).total

    def update_valuation(
        self, market_prices: Mapping[str, Any] | None, now: datetime | None = None
    ) -> ValueSnapshot:
        """Recompute derived fields and append a value snapshot.

        Args:
            market_prices: symbol -> current price
            now: Snapshot timestamp (default now)

        Returns:
            The appended snapshot
        """
        allocation = self.asset_allocation(market_prices)
        total_value = allocation.total
        gain_loss = total_value - STARTING_CASH

        self.core.asset_allocation = allocation
        self.core.total_value = total_value
        self.core.total_gain_loss = gain_loss
        self.core.total_gain_loss_percent = percent_of(gain_loss, STARTING_CASH)

        snapshot = ValueSnapshot(value=total_value, timestamp=now if now is not None else utcnow())
        # deque(maxlen=MAX_VALUE_HISTORY) drops the oldest snapshot
        self.core.value_history.append(snapshot)
        self.core.updated_at = snapshot.timestamp
        return snapshot


def value_history_frame(history: Iterable[ValueSnapshot]) -> pd.DataFrame:
    """Value history as a DataFrame indexed by timestamp.

    Columns:
        value: portfolio value at the snapshot
        return_pct: percent change from the previous snapshot (NaN for the first)
    """
    snapshots = list(history)
    frame = pd.DataFrame(
        {"value": [float(snapshot.value) for snapshot in snapshots]},
        index=pd.DatetimeIndex(
            [snapshot.timestamp for snapshot in snapshots], name="timestamp"
        ),
    )
    values = frame["value"]
    frame["return_pct"] = (values / values.shift(1) - 1) * 100
    return frame


def rank_portfolios(summaries: Iterable[PortfolioSummary], limit: int) -> list[PortfolioSummary]:
    """Top ``limit`` summaries by total gain/loss percent, best first.

    Non-finite percentages rank last; ties keep the input order.
    """
    rows = list(summaries)
    if not rows:
        return []

    frame = pd.DataFrame(
        {"gain_pct": [float(summary.total_gain_loss_percent) for summary in rows]}
    )
    order = frame.sort_values(
        "gain_pct", ascending=False, kind="stable", na_position="last"
    ).index[:limit]
    return [rows[position] for position in order]

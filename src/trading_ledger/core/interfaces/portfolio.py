"""
Portfolio management interfaces.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from trading_ledger.core.models.trade import TradeResult
from trading_ledger.core.protocols import PriceMap


class IPortfolio(ABC):
    """Abstract interface for the portfolio aggregate."""

    @abstractmethod
    def buy_stock(
        self, symbol: str, quantity: Decimal | float, price: Decimal | float
    ) -> TradeResult:
        """Buy shares of a stock."""
        pass

    @abstractmethod
    def sell_stock(
        self, symbol: str, quantity: Decimal | float, price: Decimal | float
    ) -> TradeResult:
        """Sell shares of a stock."""
        pass

    @abstractmethod
    def buy_crypto(
        self, symbol: str, quantity: Decimal | float, price: Decimal | float
    ) -> TradeResult:
        """Buy units of a cryptocurrency."""
        pass

    @abstractmethod
    def sell_crypto(
        self, symbol: str, quantity: Decimal | float, price: Decimal | float
    ) -> TradeResult:
        """Sell units of a cryptocurrency."""
        pass

    @abstractmethod
    def open_forex_position(
        self,
        symbol: str,
        size: Decimal | float,
        price: Decimal | float,
        leverage: Decimal | float,
        direction: str,
    ) -> TradeResult:
        """Open or add to a leveraged forex position."""
        pass

    @abstractmethod
    def close_forex_position(
        self, symbol: str, size: Decimal | float, price: Decimal | float, direction: str
    ) -> TradeResult:
        """Close all or part of a forex position."""
        pass

    @abstractmethod
    def update_valuation(self, market_prices: PriceMap, now: datetime | None = None) -> Decimal:
        """Mark to market and record a value snapshot."""
        pass

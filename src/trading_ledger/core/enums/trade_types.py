"""
Asset class, trade action and trade direction enumerations.

This module defines the values accepted by the trade command contract.
"""

from enum import StrEnum


class AssetClass(StrEnum):
    """
    Asset classes held in a portfolio.

    Stocks and cryptos are unlevered holdings; forex positions are
    leveraged and backed by margin.
    """

    STOCK = "stock"
    CRYPTO = "crypto"
    FOREX = "forex"

    @property
    def is_leveraged(self) -> bool:
        """Check if positions of this asset class are margin-backed."""
        return self == self.FOREX


class TradeAction(StrEnum):
    """
    Allowed trade actions.

    Stocks and cryptos are bought and sold; forex positions are opened and
    closed. ``buy``/``sell`` on forex are accepted as aliases of
    ``open``/``close``.
    """

    BUY = "buy"
    SELL = "sell"
    OPEN = "open"
    CLOSE = "close"

    @property
    def is_opening(self) -> bool:
        """Check if action adds to a position."""
        return self in [self.BUY, self.OPEN]

    @property
    def is_closing(self) -> bool:
        """Check if action reduces a position."""
        return self in [self.SELL, self.CLOSE]


class TradeDirection(StrEnum):
    """
    Direction of a trade record or forex position.

    On a forex position ``buy`` is a long book and ``sell`` a short book;
    the two are kept separately and never netted.
    """

    BUY = "buy"
    SELL = "sell"

    @property
    def is_long(self) -> bool:
        """Check if direction is long."""
        return self == self.BUY

    @property
    def is_short(self) -> bool:
        """Check if direction is short."""
        return self == self.SELL

    def opposite(self) -> "TradeDirection":
        """Get the opposite direction."""
        return self.SELL if self.is_long else self.BUY  # type: ignore[return-value]

    @classmethod
    def from_string(cls, value: str) -> "TradeDirection":
        """
        Convert string to TradeDirection, case-insensitive.

        ``long``/``short`` are accepted as synonyms of ``buy``/``sell``.

        Raises:
            ValueError: If direction is not recognised
        """
        value_lower = value.strip().lower()
        if value_lower in ["buy", "long"]:
            return cls.BUY
        elif value_lower in ["sell", "short"]:
            return cls.SELL
        else:
            raise ValueError(
                f"Unsupported direction: {value}. "
                f"Supported directions: {', '.join([d.value for d in cls])}"
            )

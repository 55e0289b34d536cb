"""
Trade record domain model.

Every buy, sell, open and close appends one immutable TradeRecord to the
history of the position it touched.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from trading_ledger.core.enums import AssetClass, TradeDirection
from trading_ledger.core.types.financial import coerce_decimal, is_positive_finite


@dataclass(frozen=True)
class TradeRecord:
    """Represents one executed fill against a position.

    ``total_cost`` is the cash that changed hands: the cost of a buy, the
    proceeds of a sell, or the margin posted/returned for a forex trade.
    Forex records also carry the leverage in force.
    """

    quantity: Decimal
    price: Decimal
    total_cost: Decimal
    timestamp: datetime
    direction: TradeDirection
    leverage: Decimal | None = None

    def __post_init__(self) -> None:
        """Normalize numeric fields to Decimal (junk becomes NaN)."""
        object.__setattr__(self, "quantity", coerce_decimal(self.quantity))
        object.__setattr__(self, "price", coerce_decimal(self.price))
        object.__setattr__(self, "total_cost", coerce_decimal(self.total_cost))
        if self.leverage is not None:
            object.__setattr__(self, "leverage", coerce_decimal(self.leverage))

    def numeric_fields(self) -> tuple[Decimal, ...]:
        """All numeric fields present on this record."""
        fields = (self.quantity, self.price, self.total_cost)
        if self.leverage is not None:
            return (*fields, self.leverage)
        return fields

    def is_valid(self) -> bool:
        """Check that every numeric field is finite and positive."""
        return all(is_positive_finite(value) for value in self.numeric_fields())

    def notional_value(self) -> Decimal:
        """Calculate the notional value of the fill."""
        return abs(self.quantity) * self.price

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary."""
        data: dict[str, Any] = {
            "quantity": float(self.quantity),
            "price": float(self.price),
            "total_cost": float(self.total_cost),
            "timestamp": self.timestamp.isoformat(),
            "direction": str(self.direction),
        }
        if self.leverage is not None:
            data["leverage"] = float(self.leverage)
        return data


@dataclass(frozen=True)
class TradeResult:
    """Outcome of one aggregate command."""

    asset_class: AssetClass
    symbol: str
    record: TradeRecord
    realized_pnl: Decimal | None = None
    successful: bool = False

    @property
    def is_closing(self) -> bool:
        """Check if the trade realized PnL (sell or close)."""
        return self.realized_pnl is not None

"""
Position and MarginPosition domain models.

Positions are immutable: the portfolio replaces an entry on every trade, so
no caller holding a reference can change ledger state behind its back.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.models.trade import TradeRecord
from trading_ledger.core.types.financial import ZERO, calculate_pnl, coerce_decimal


@dataclass(frozen=True)
class Position:
    """An unlevered stock or crypto holding.

    Invariants maintained by the portfolio: ``quantity > 0`` (a fully sold
    position is removed, never stored at zero), ``avg_price >= 0`` and
    ``total_cost`` approximately ``quantity * avg_price``.
    """

    symbol: str
    quantity: Decimal
    avg_price: Decimal
    total_cost: Decimal
    history: tuple[TradeRecord, ...] = ()

    def __post_init__(self) -> None:
        """Normalize numeric fields and freeze history."""
        object.__setattr__(self, "quantity", coerce_decimal(self.quantity))
        object.__setattr__(self, "avg_price", coerce_decimal(self.avg_price))
        object.__setattr__(self, "total_cost", coerce_decimal(self.total_cost))
        object.__setattr__(self, "history", tuple(self.history))

    def cost_basis_of(self, quantity: Decimal) -> Decimal:
        """Cost basis attributable to ``quantity`` units at the average price."""
        return quantity * self.avg_price

    def position_value(self, current_price: Decimal) -> Decimal:
        """Calculate position value at given price."""
        return self.quantity * current_price

    def unrealized_pnl(self, current_price: Decimal) -> Decimal:
        """Calculate unrealized PnL against the average entry price."""
        return calculate_pnl(
            entry_price=self.avg_price,
            exit_price=current_price,
            size=self.quantity,
            direction=TradeDirection.BUY,
        )

    @classmethod
    def create(cls, symbol: str, record: TradeRecord) -> "Position":
        """Factory method to open a position from its first buy record."""
        return cls(
            symbol=symbol,
            quantity=record.quantity,
            avg_price=record.price,
            total_cost=record.total_cost,
            history=(record,),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert position to dictionary."""
        return {
            "symbol": self.symbol,
            "quantity": float(self.quantity),
            "avg_price": float(self.avg_price),
            "total_cost": float(self.total_cost),
            "history": [record.to_dict() for record in self.history],
        }


@dataclass(frozen=True)
class MarginPosition:
    """A leveraged forex position, one book per (symbol, direction).

    ``margin`` is the cash set aside, ``size / leverage`` at open and
    reduced proportionally on partial close.
    """

    symbol: str
    direction: TradeDirection
    size: Decimal
    avg_price: Decimal
    leverage: Decimal
    margin: Decimal
    history: tuple[TradeRecord, ...] = ()

    def __post_init__(self) -> None:
        """Normalize numeric fields and freeze history."""
        object.__setattr__(self, "size", coerce_decimal(self.size))
        object.__setattr__(self, "avg_price", coerce_decimal(self.avg_price))
        object.__setattr__(self, "leverage", coerce_decimal(self.leverage))
        object.__setattr__(self, "margin", coerce_decimal(self.margin))
        object.__setattr__(self, "history", tuple(self.history))

    @property
    def key(self) -> tuple[str, TradeDirection]:
        """Ledger key of this position."""
        return (self.symbol, self.direction)

    def unrealized_pnl(self, current_price: Decimal) -> Decimal:
        """Calculate unrealized PnL based on direction.

        Args:
            current_price: Current market price

        Returns:
            Unrealized PnL as Decimal
        """
        if self.size == ZERO:
            return ZERO
        return calculate_pnl(
            entry_price=self.avg_price,
            exit_price=current_price,
            size=self.size,
            direction=self.direction,
        )

    def position_value(self, current_price: Decimal) -> Decimal:
        """Value of the position: margin held plus unrealized PnL."""
        return self.margin + self.unrealized_pnl(current_price)

    def margin_for(self, size: Decimal) -> Decimal:
        """Share of the held margin attributable to ``size`` units."""
        return (size / self.size) * self.margin

    @classmethod
    def create(
        cls, symbol: str, direction: TradeDirection, record: TradeRecord
    ) -> "MarginPosition":
        """Factory method to open a margin position from its first record."""
        return cls(
            symbol=symbol,
            direction=direction,
            size=record.quantity,
            avg_price=record.price,
            leverage=record.leverage if record.leverage is not None else ZERO,
            margin=record.total_cost,
            history=(record,),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert position to dictionary."""
        return {
            "symbol": self.symbol,
            "direction": str(self.direction),
            "size": float(self.size),
            "avg_price": float(self.avg_price),
            "leverage": float(self.leverage),
            "margin": float(self.margin),
            "history": [record.to_dict() for record in self.history],
        }

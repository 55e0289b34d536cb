"""
Symbol-keyed sub-ledgers owned by a portfolio.

PositionLedger maps symbol -> Position for stocks and cryptos.
MarginLedger maps (symbol, direction) -> MarginPosition for forex, so a
long and a short book on the same pair never net against each other.
"""

from collections.abc import Iterable, Iterator, Mapping
from decimal import Decimal
from typing import Any, Generic, Self, TypeVar

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.models.position import MarginPosition, Position
from trading_ledger.core.types.financial import ZERO

MarginKey = tuple[str, TradeDirection]

K = TypeVar("K")
V = TypeVar("V")


class Ledger(Generic[K, V]):
    """Owned mapping of immutable positions.

    Reads return the stored (frozen) position; only the owning portfolio
    components call ``put``/``remove``. Outside callers get a ``copy()``.
    """

    def __init__(self, entries: Mapping[K, V] | None = None) -> None:
        self._entries: dict[K, V] = dict(entries or {})

    def get(self, key: K) -> V | None:
        """Get position by key, or None when absent."""
        return self._entries.get(key)

    def put(self, key: K, position: V) -> None:
        """Store or replace a position."""
        self._entries[key] = position

    def remove(self, key: K) -> V:
        """Remove and return a position.

        Raises:
            KeyError: If no position is held under key
        """
        return self._entries.pop(key)

    def copy(self) -> Self:
        """Detached ledger holding the same (frozen) positions."""
        return type(self)(self._entries)

    def keys(self) -> list[K]:
        return list(self._entries.keys())

    def values(self) -> list[V]:
        return list(self._entries.values())

    def items(self) -> list[tuple[K, V]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return type(self) is type(other) and self._entries == other._entries

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._entries!r})"


class PositionLedger(Ledger[str, Position]):
    """Stock or crypto holdings keyed by symbol."""

    @classmethod
    def from_positions(cls, positions: Iterable[Position]) -> "PositionLedger":
        """Build a ledger from positions, keyed by their own symbol."""
        return cls({position.symbol: position for position in positions})

    def total_cost(self) -> Decimal:
        """Sum of cost basis across holdings."""
        return sum((position.total_cost for position in self.values()), ZERO)

    def to_dict(self) -> dict[str, Any]:
        """Convert ledger to dictionary keyed by symbol."""
        return {symbol: position.to_dict() for symbol, position in self.items()}


class MarginLedger(Ledger[MarginKey, MarginPosition]):
    """Forex positions keyed by (symbol, direction)."""

    @classmethod
    def from_positions(cls, positions: Iterable[MarginPosition]) -> "MarginLedger":
        """Build a ledger from positions, keyed by their own (symbol, direction)."""
        return cls({position.key: position for position in positions})

    def used_margin(self) -> Decimal:
        """Total margin held by open positions."""
        return sum((position.margin for position in self.values()), ZERO)

    def to_dict(self) -> dict[str, Any]:
        """Convert ledger to dictionary keyed by ``SYMBOL_direction``."""
        return {
            f"{symbol}_{direction}": position.to_dict()
            for (symbol, direction), position in self.items()
        }

"""
Core type definitions and protocols.

This module defines shared types and protocols to prevent circular
dependencies between domain models while maintaining type safety.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Protocol

from trading_ledger.core.models.trade import TradeRecord


class HasHistory(Protocol):
    """Anything carrying an append-only trade history (Position, MarginPosition)."""

    @property
    def history(self) -> tuple[TradeRecord, ...]: ...


# Type aliases for commonly used types
PriceMap = Mapping[str, Decimal | float | int | str]

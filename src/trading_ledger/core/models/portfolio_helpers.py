"""Helper classes for Portfolio operations to reduce complexity."""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from trading_ledger.core.enums import TradeDirection
from trading_ledger.core.exceptions.ledger import (
    InsufficientFundsError,
    InsufficientPositionError,
)
from trading_ledger.core.models.portfolio_core import utcnow
from trading_ledger.core.models.position import MarginPosition, Position
from trading_ledger.core.models.trade import TradeRecord
from trading_ledger.core.types.financial import ZERO, weighted_average_price
from trading_ledger.core.utils.validation import (
    validate_direction,
    validate_positive,
    validate_symbol,
)


class OrderValidator:
    """Validates order parameters.

    Every check runs before the portfolio is touched, so a rejected order
    leaves no partial effect.
    """

    @staticmethod
    def validate_order(symbol: Any, quantity: Any, price: Any) -> tuple[str, Decimal, Decimal]:
        """Validate and return stock/crypto order parameters."""
        symbol = validate_symbol(symbol)
        quantity = validate_positive(quantity, "quantity")
        price = validate_positive(price, "price")
        return symbol, quantity, price

    @staticmethod
    def validate_margin_order(
        symbol: Any, size: Any, price: Any, leverage: Any, direction: Any
    ) -> tuple[str, Decimal, Decimal, Decimal, TradeDirection]:
        """Validate and return forex open parameters."""
        symbol = validate_symbol(symbol)
        size = validate_positive(size, "size")
        price = validate_positive(price, "price")
        leverage = validate_positive(leverage, "leverage")
        direction = validate_direction(direction)
        return symbol, size, price, leverage, direction

    @staticmethod
    def validate_close_order(
        symbol: Any, size: Any, price: Any, direction: Any
    ) -> tuple[str, Decimal, Decimal, TradeDirection]:
        """Validate and return forex close parameters."""
        symbol = validate_symbol(symbol)
        size = validate_positive(size, "size")
        price = validate_positive(price, "price")
        direction = validate_direction(direction)
        return symbol, size, price, direction

    @staticmethod
    def check_sufficient_funds(required: Decimal, available: Decimal, operation: str) -> None:
        """Check if sufficient cash is available."""
        if available < required:
            raise InsufficientFundsError(
                required=required,
                available=available,
                operation=operation,
            )

    @staticmethod
    def check_sufficient_position(symbol: str, requested: Decimal, held: Decimal) -> None:
        """Check that a sell or close does not exceed the held quantity."""
        if requested > held:
            raise InsufficientPositionError(symbol=symbol, requested=requested, held=held)


class TradeRecorder:
    """Creates trade history records."""

    @staticmethod
    def create_record(
        quantity: Decimal,
        price: Decimal,
        total_cost: Decimal,
        direction: TradeDirection,
        timestamp: datetime | None = None,
        leverage: Decimal | None = None,
    ) -> TradeRecord:
        """Create a trade record."""
        return TradeRecord(
            quantity=quantity,
            price=price,
            total_cost=total_cost,
            timestamp=timestamp if timestamp is not None else utcnow(),
            direction=direction,
            leverage=leverage,
        )


class PositionManager:
    """Computes the next state of a position.

    Positions are frozen; each method returns a replacement, or None when
    the position is closed out and must leave the ledger.
    """

    @staticmethod
    def add_to_position(existing: Position | None, symbol: str, record: TradeRecord) -> Position:
        """Apply a buy using the weighted-average cost formula."""
        if existing is None:
            return Position.create(symbol, record)

        return replace(
            existing,
            quantity=existing.quantity + record.quantity,
            avg_price=weighted_average_price(
                existing.quantity, existing.avg_price, record.quantity, record.price
            ),
            total_cost=existing.total_cost + record.total_cost,
            history=(*existing.history, record),
        )

    @staticmethod
    def reduce_position(
        existing: Position, quantity: Decimal, record: TradeRecord
    ) -> Position | None:
        """Apply a sell; the average price of the remaining lot is unchanged."""
        remaining = existing.quantity - quantity
        if remaining == ZERO:
            return None

        return replace(
            existing,
            quantity=remaining,
            total_cost=existing.total_cost - existing.cost_basis_of(quantity),
            history=(*existing.history, record),
        )

    @staticmethod
    def add_to_margin_position(
        existing: MarginPosition | None,
        symbol: str,
        direction: TradeDirection,
        record: TradeRecord,
    ) -> MarginPosition:
        """Apply an open; margin is summed and leverage becomes size / margin."""
        if existing is None:
            return MarginPosition.create(symbol, direction, record)

        total_size = existing.size + record.quantity
        total_margin = existing.margin + record.total_cost
        return replace(
            existing,
            size=total_size,
            avg_price=weighted_average_price(
                existing.size, existing.avg_price, record.quantity, record.price
            ),
            leverage=total_size / total_margin,
            margin=total_margin,
            history=(*existing.history, record),
        )

    @staticmethod
    def reduce_margin_position(
        existing: MarginPosition, size: Decimal, margin_returned: Decimal, record: TradeRecord
    ) -> MarginPosition | None:
        """Apply a close, shrinking size and margin proportionally."""
        remaining = existing.size - size
        if remaining == ZERO:
            return None

        return replace(
            existing,
            size=remaining,
            margin=existing.margin - margin_returned,
            history=(*existing.history, record),
        )

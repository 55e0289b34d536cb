"""
Validation utilities for core domain models.

Provides consistent validation across the application. Every validator
raises InvalidInputError so the ledger reports a single error kind for
caller mistakes.
"""

from decimal import Decimal
from typing import Any

from trading_ledger.core.enums import AssetClass, TradeAction, TradeDirection
from trading_ledger.core.exceptions.ledger import InvalidInputError
from trading_ledger.core.types.financial import ZERO, to_decimal


def validate_symbol(symbol: Any, param_name: str = "symbol") -> str:
    """Validate a ticker or currency-pair symbol.

    Args:
        symbol: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The symbol, stripped and upper-cased

    Raises:
        InvalidInputError: If symbol is not a non-empty string
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidInputError(f"{param_name} must be a non-empty string, got {symbol!r}")
    return symbol.strip().upper()


def validate_owner_id(owner_id: Any) -> str:
    """Validate an owner identity (opaque, non-empty string)."""
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise InvalidInputError(f"owner_id must be a non-empty string, got {owner_id!r}")
    return owner_id


def validate_positive(value: Any, param_name: str) -> Decimal:
    """Validate that a numeric value is finite and strictly positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value as Decimal

    Raises:
        InvalidInputError: If value is not numeric, not finite or not positive
    """
    number = to_decimal(value)
    if not number.is_finite():
        raise InvalidInputError(f"{param_name} must be finite, got {value}")
    if number <= ZERO:
        raise InvalidInputError(f"{param_name} must be positive, got {value}")
    return number


def validate_direction(direction: Any, param_name: str = "direction") -> TradeDirection:
    """Validate a trade direction given as enum or string."""
    if isinstance(direction, TradeDirection):
        return direction
    if not isinstance(direction, str):
        raise InvalidInputError(f"{param_name} must be 'buy' or 'sell', got {direction!r}")
    try:
        return TradeDirection.from_string(direction)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


def validate_asset_class(asset_class: Any) -> AssetClass:
    """Validate an asset class given as enum or string."""
    try:
        return AssetClass(str(asset_class).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Unsupported asset class: {asset_class}. "
            f"Supported asset classes: {', '.join([a.value for a in AssetClass])}"
        ) from e


def validate_action(action: Any) -> TradeAction:
    """Validate a trade action given as enum or string."""
    try:
        return TradeAction(str(action).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Unsupported action: {action}. "
            f"Supported actions: {', '.join([a.value for a in TradeAction])}"
        ) from e


def validate_limit(limit: Any, maximum: int, param_name: str = "limit") -> int:
    """Validate a result-count limit (1..maximum)."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInputError(f"{param_name} must be an integer, got {limit!r}")
    if limit < 1 or limit > maximum:
        raise InvalidInputError(f"{param_name} must be between 1 and {maximum}, got {limit}")
    return limit

"""
Custom exception hierarchy for the trading ledger.

This module defines domain-specific exceptions for better error handling.
Only PersistenceFailureError is retryable: it is raised after a valid
computation whose result was discarded because the save failed.
"""

from decimal import Decimal


class LedgerException(Exception):
    """Base exception for all ledger-related errors."""

    retryable = False


class InvalidInputError(LedgerException):
    """Raised when a quantity, price, leverage, symbol or enum value is invalid."""

    pass


class PortfolioError(LedgerException):
    """Raised when portfolio operations fail."""

    pass


class InsufficientFundsError(PortfolioError):
    """Raised when cash does not cover a purchase or margin requirement."""

    def __init__(
        self, required: Decimal | float, available: Decimal | float, operation: str = "operation"
    ):
        self.required = required
        self.available = available
        self.operation = operation
        super().__init__(
            f"Insufficient funds for {operation}: "
            f"required={float(required):.2f}, available={float(available):.2f}"
        )


class InsufficientPositionError(PortfolioError):
    """Raised when a sell or close exceeds the held quantity."""

    def __init__(self, symbol: str, requested: Decimal | float, held: Decimal | float):
        self.symbol = symbol
        self.requested = requested
        self.held = held
        super().__init__(
            f"Insufficient position in {symbol}: requested={requested}, held={held}"
        )


class PortfolioNotFoundError(LedgerException):
    """Raised when a portfolio is read without the create flag and does not exist."""

    def __init__(self, owner_id: str):
        self.owner_id = owner_id
        super().__init__(f"Portfolio not found for owner: {owner_id}")


class PersistenceFailureError(LedgerException):
    """Raised when saving a computed portfolio fails.

    No effect was committed; the caller may replay the original request.
    """

    retryable = True

    def __init__(self, owner_id: str, reason: str = "save failed"):
        self.owner_id = owner_id
        self.reason = reason
        super().__init__(f"Failed to persist portfolio for owner {owner_id}: {reason}")

"""
Unit tests for custom exceptions.
Testing the exception hierarchy, carried attributes and retryability.
"""

from decimal import Decimal

from trading_ledger.core.exceptions.ledger import (
    InsufficientFundsError,
    InsufficientPositionError,
    InvalidInputError,
    LedgerException,
    PersistenceFailureError,
    PortfolioError,
    PortfolioNotFoundError,
)


class TestLedgerException:
    """Tests for LedgerException base class."""

    def test_should_create_base_exception_with_message(self) -> None:
        """Test creating base exception with message."""
        exc = LedgerException("Test error message")
        assert str(exc) == "Test error message"
        assert isinstance(exc, Exception)
        assert exc.retryable is False

    def test_should_root_every_ledger_error(self) -> None:
        """Test that all ledger errors share the base class."""
        for exc_type in (
            InvalidInputError,
            InsufficientFundsError,
            InsufficientPositionError,
            PortfolioNotFoundError,
            PersistenceFailureError,
        ):
            assert issubclass(exc_type, LedgerException)


class TestInsufficientFundsError:
    """Tests for InsufficientFundsError."""

    def test_should_carry_required_available_and_operation(self) -> None:
        """Test attributes and message."""
        exc = InsufficientFundsError(Decimal("1500"), Decimal("1000.5"), "buying AAPL")
        assert isinstance(exc, PortfolioError)
        assert exc.required == Decimal("1500")
        assert exc.available == Decimal("1000.5")
        assert exc.operation == "buying AAPL"
        assert "required=1500.00" in str(exc)
        assert "available=1000.50" in str(exc)
        assert exc.retryable is False


class TestInsufficientPositionError:
    """Tests for InsufficientPositionError."""

    def test_should_carry_symbol_requested_and_held(self) -> None:
        """Test attributes and message."""
        exc = InsufficientPositionError("AAPL", Decimal("11"), Decimal("10"))
        assert exc.symbol == "AAPL"
        assert exc.requested == Decimal("11")
        assert exc.held == Decimal("10")
        assert "AAPL" in str(exc)


class TestPortfolioNotFoundError:
    """Tests for PortfolioNotFoundError."""

    def test_should_carry_owner_id(self) -> None:
        """Test attributes and message."""
        exc = PortfolioNotFoundError("user-1")
        assert exc.owner_id == "user-1"
        assert "user-1" in str(exc)


class TestPersistenceFailureError:
    """Tests for PersistenceFailureError."""

    def test_should_be_retryable(self) -> None:
        """Test that a persistence failure may be replayed."""
        exc = PersistenceFailureError("user-1", "disk full")
        assert exc.retryable is True
        assert exc.owner_id == "user-1"
        assert exc.reason == "disk full"
        assert "disk full" in str(exc)

"""
Portfolio persistence interface.

The ledger never talks to a storage technology directly; the service is
given an implementation of this interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trading_ledger.core.models.portfolio import Portfolio


class IPortfolioRepository(ABC):
    """Abstract interface for loading and saving one portfolio by owner id."""

    @abstractmethod
    def load(self, owner_id: str) -> "Portfolio | None":
        """Load the portfolio of an owner, or None when none exists."""

    @abstractmethod
    def save(self, portfolio: "Portfolio") -> None:
        """Persist a portfolio, replacing the stored version.

        Raises:
            Exception: Any storage error; the service wraps it in
                PersistenceFailureError
        """

    @abstractmethod
    def list_portfolios(self) -> Iterable["Portfolio"]:
        """All stored portfolios (used for leaderboard ranking)."""

"""
In-memory portfolio repository.

Stores detached deep copies: nothing a caller does to a loaded or saved
portfolio object reaches the stored version without another save.
"""

import copy
from collections.abc import Iterable
from threading import RLock

from loguru import logger

from trading_ledger.core.interfaces.repository import IPortfolioRepository
from trading_ledger.core.models.portfolio import Portfolio


class InMemoryPortfolioRepository(IPortfolioRepository):
    """Thread-safe dict-backed repository keyed by owner id."""

    def __init__(self, portfolios: Iterable[Portfolio] | None = None) -> None:
        self._portfolios: dict[str, Portfolio] = {}
        self._lock = RLock()  # Thread-safe store access
        for portfolio in portfolios or ():
            self._portfolios[portfolio.owner_id] = copy.deepcopy(portfolio)

    def load(self, owner_id: str) -> Portfolio | None:
        with self._lock:
            stored = self._portfolios.get(owner_id)
            return copy.deepcopy(stored) if stored is not None else None

    def save(self, portfolio: Portfolio) -> None:
        with self._lock:
            self._portfolios[portfolio.owner_id] = copy.deepcopy(portfolio)
        logger.debug(f"Saved portfolio {portfolio.owner_id}")

    def list_portfolios(self) -> list[Portfolio]:
        with self._lock:
            return [copy.deepcopy(portfolio) for portfolio in self._portfolios.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._portfolios)

    def __contains__(self, owner_id: object) -> bool:
        with self._lock:
            return owner_id in self._portfolios

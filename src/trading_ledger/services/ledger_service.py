"""
Ledger service.

Runs every command as one pipeline under the owner's lock:

    lock -> load -> copy -> audit -> command -> save -> unlock

The command mutates a private copy of the loaded portfolio; if the save
fails the copy is discarded, the stored portfolio is untouched and
PersistenceFailureError is raised for the caller to retry.
"""

import copy
from collections.abc import Callable
from threading import RLock

import pandas as pd
from cachetools import TTLCache
from loguru import logger

from trading_ledger.core.config import LedgerSettings
from trading_ledger.core.constants import DEFAULT_TOP_PERFORMERS_LIMIT, MAX_TOP_PERFORMERS_LIMIT
from trading_ledger.core.exceptions.ledger import (
    PersistenceFailureError,
    PortfolioNotFoundError,
)
from trading_ledger.core.interfaces.repository import IPortfolioRepository
from trading_ledger.core.models.commands import PortfolioSummary, TradeCommand
from trading_ledger.core.models.portfolio import Portfolio
from trading_ledger.core.models.portfolio_valuation import rank_portfolios
from trading_ledger.core.protocols import PriceMap
from trading_ledger.core.utils.validation import validate_limit, validate_owner_id
from trading_ledger.infrastructure.locking import OwnerLockRegistry


class LedgerService:
    """Owner-serialized command handling on top of a portfolio repository.

    Every method returns a detached snapshot; callers never hold the
    portfolio the repository stores.
    """

    def __init__(
        self,
        repository: IPortfolioRepository,
        settings: LedgerSettings | None = None,
        locks: OwnerLockRegistry | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings if settings is not None else LedgerSettings()
        self._locks = locks if locks is not None else OwnerLockRegistry()

        self._leaderboard: TTLCache[int, list[PortfolioSummary]] = TTLCache(
            maxsize=self.settings.leaderboard_cache_size,
            ttl=self.settings.leaderboard_cache_ttl_seconds,
        )
        self._leaderboard_lock = RLock()
        # Bumped on every save; a ranking computed across a bump is not cached
        self._leaderboard_generation = 0

    def get_or_create_portfolio(self, owner_id: str, display_name: str | None = None) -> Portfolio:
        """Load an owner's portfolio, creating it with the starting cash if absent."""
        owner_id = validate_owner_id(owner_id)
        with self._locks.hold(owner_id):
            portfolio = self._load_audited(owner_id)
            if portfolio is None:
                portfolio = Portfolio.create(owner_id, display_name)
                self._save(portfolio)
                logger.info(f"Created portfolio for owner {owner_id}")
            return portfolio.snapshot()

    def get_portfolio(self, owner_id: str) -> Portfolio:
        """Load an existing portfolio.

        Raises:
            PortfolioNotFoundError: If the owner has no portfolio
        """
        owner_id = validate_owner_id(owner_id)
        with self._locks.hold(owner_id):
            portfolio = self._load_audited(owner_id)
            if portfolio is None:
                raise PortfolioNotFoundError(owner_id)
            return portfolio.snapshot()

    def execute_trade(self, command: TradeCommand) -> Portfolio:
        """Apply one trade and persist the result.

        A missing portfolio is created first, named after the command's
        display name (or the owner id).

        Raises:
            InvalidInputError: On invalid trade parameters
            InsufficientFundsError: If cash does not cover the cost or margin
            InsufficientPositionError: If the sell or close exceeds the holding
            PersistenceFailureError: If the save fails
        """
        return self._run(
            command.owner_id,
            lambda portfolio: portfolio.execute(
                command, default_leverage=self.settings.default_forex_leverage
            ),
            create_with_name=command.display_name or command.owner_id,
        )

    def update_valuation(self, owner_id: str, market_prices: PriceMap) -> Portfolio:
        """Mark an existing portfolio to market and persist the snapshot.

        Raises:
            PortfolioNotFoundError: If the owner has no portfolio
            PersistenceFailureError: If the save fails
        """
        return self._run(owner_id, lambda portfolio: portfolio.update_valuation(market_prices))

    def value_history(self, owner_id: str) -> pd.DataFrame:
        """Value history with period returns (see Portfolio.value_history_frame)."""
        return self.get_portfolio(owner_id).value_history_frame()

    def list_top_performers(
        self, limit: int = DEFAULT_TOP_PERFORMERS_LIMIT
    ) -> list[PortfolioSummary]:
        """Summaries ordered by total gain/loss percent, best first.

        Results are cached for a short time and invalidated on every save.
        """
        limit = validate_limit(limit, MAX_TOP_PERFORMERS_LIMIT)
        with self._leaderboard_lock:
            cached = self._leaderboard.get(limit)
            if cached is not None:
                return list(cached)
            generation = self._leaderboard_generation

        summaries = [portfolio.summary() for portfolio in self.repository.list_portfolios()]
        ranked = rank_portfolios(summaries, limit)

        with self._leaderboard_lock:
            if generation == self._leaderboard_generation:
                self._leaderboard[limit] = ranked
        return list(ranked)

    def _run(
        self,
        owner_id: str,
        operation: Callable[[Portfolio], object],
        create_with_name: str | None = None,
    ) -> Portfolio:
        owner_id = validate_owner_id(owner_id)
        with self._locks.hold(owner_id):
            loaded = self._load_audited(owner_id)
            if loaded is None:
                if create_with_name is None:
                    raise PortfolioNotFoundError(owner_id)
                working = Portfolio.create(owner_id, create_with_name)
            else:
                working = copy.deepcopy(loaded)

            # Validation errors propagate here with nothing saved
            operation(working)
            self._save(working)
            return working.snapshot()

    def _load_audited(self, owner_id: str) -> Portfolio | None:
        """Load and repair; a repaired portfolio is persisted immediately."""
        portfolio = self.repository.load(owner_id)
        if portfolio is None:
            return None

        report = portfolio.audit()
        if report.needs_update:
            logger.bind(owner_id=owner_id, repairs=len(report.repairs)).warning(
                f"Persisting repaired portfolio {owner_id}"
            )
            self._save(portfolio)
        return portfolio

    def _save(self, portfolio: Portfolio) -> None:
        try:
            self.repository.save(portfolio)
        except Exception as e:
            logger.bind(owner_id=portfolio.owner_id).error(
                f"Failed to save portfolio {portfolio.owner_id}: {e}"
            )
            raise PersistenceFailureError(portfolio.owner_id, str(e)) from e
        self._invalidate_leaderboard()

    def _invalidate_leaderboard(self) -> None:
        with self._leaderboard_lock:
            self._leaderboard_generation += 1
            self._leaderboard.clear()

"""
Portfolio API endpoints.

All routes delegate to the ledger service. Handlers are plain ``def``:
the service blocks on per-owner locks and the repository, so FastAPI runs
them in its threadpool.
"""

import math

from fastapi import APIRouter, Depends, Query

from trading_ledger.core.constants import DEFAULT_TOP_PERFORMERS_LIMIT, MAX_TOP_PERFORMERS_LIMIT
from trading_ledger.services.ledger_service import LedgerService

from ..dependencies import get_ledger_service
from ..schemas.api_models import (
    ErrorResponse,
    PortfolioResponse,
    PortfolioSummaryResponse,
    TradeRequest,
    ValuationRequest,
    ValueHistoryPoint,
)

router = APIRouter()


@router.get("/leaderboard/top", response_model=list[PortfolioSummaryResponse])
def top_performers(
    limit: int = Query(default=DEFAULT_TOP_PERFORMERS_LIMIT, ge=1, le=MAX_TOP_PERFORMERS_LIMIT),
    service: LedgerService = Depends(get_ledger_service),
) -> list[PortfolioSummaryResponse]:
    """Portfolios ranked by total gain/loss percent."""
    return [
        PortfolioSummaryResponse.from_summary(summary)
        for summary in service.list_top_performers(limit)
    ]


@router.get("/{owner_id}", response_model=PortfolioResponse)
def get_portfolio(
    owner_id: str,
    display_name: str | None = None,
    service: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Get an owner's portfolio, creating it on first access."""
    portfolio = service.get_or_create_portfolio(owner_id, display_name)
    return PortfolioResponse.from_portfolio(portfolio)


@router.post(
    "/{owner_id}/trades",
    response_model=PortfolioResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def execute_trade(
    owner_id: str,
    request: TradeRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Execute a stock, crypto or forex trade."""
    portfolio = service.execute_trade(request.to_command(owner_id))
    return PortfolioResponse.from_portfolio(portfolio)


@router.put(
    "/{owner_id}/valuation",
    response_model=PortfolioResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def update_valuation(
    owner_id: str,
    request: ValuationRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Mark the portfolio to market and record a value snapshot."""
    portfolio = service.update_valuation(owner_id, request.market_prices)
    return PortfolioResponse.from_portfolio(portfolio)


@router.get(
    "/{owner_id}/history",
    response_model=list[ValueHistoryPoint],
    responses={404: {"model": ErrorResponse}},
)
def value_history(
    owner_id: str,
    service: LedgerService = Depends(get_ledger_service),
) -> list[ValueHistoryPoint]:
    """Value history with period-over-period returns."""
    frame = service.value_history(owner_id)
    return [
        ValueHistoryPoint(
            timestamp=point.Index.to_pydatetime(),
            value=point.value,
            return_pct=None if math.isnan(point.return_pct) else point.return_pct,
        )
        for point in frame.itertuples()
    ]

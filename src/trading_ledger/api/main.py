"""
FastAPI main application for the trading ledger.
"""

from fastapi import FastAPI

from trading_ledger.core.config import LedgerSettings, get_settings
from trading_ledger.core.interfaces.repository import IPortfolioRepository
from trading_ledger.infrastructure.logging import configure_logging
from trading_ledger.infrastructure.repositories.memory_repository import (
    InMemoryPortfolioRepository,
)
from trading_ledger.services.ledger_service import LedgerService

from .errors import register_error_handlers
from .routers import portfolio
from .schemas.api_models import HealthResponse


def create_app(
    settings: LedgerSettings | None = None,
    repository: IPortfolioRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings (default: loaded from environment)
        repository: Portfolio store (default: in-memory)
    """
    settings = settings if settings is not None else get_settings()
    configure_logging(level=settings.log_level, serialize=settings.log_serialize)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="API for paper-trading portfolios across stocks, crypto and forex",
    )
    app.state.ledger_service = LedgerService(
        repository if repository is not None else InMemoryPortfolioRepository(),
        settings=settings,
    )

    register_error_handlers(app)
    app.include_router(portfolio.router, prefix="/api/portfolio", tags=["portfolio"])

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=settings.version)

    return app


app = create_app()

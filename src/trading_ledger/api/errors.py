"""
Centralized error handlers for FastAPI.

Maps ledger exceptions to HTTP responses with an ErrorResponse body.
No stack traces or internal details are exposed to clients.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from trading_ledger.core.exceptions.ledger import (
    InsufficientFundsError,
    InsufficientPositionError,
    InvalidInputError,
    LedgerException,
    PersistenceFailureError,
    PortfolioNotFoundError,
)

from .schemas.api_models import ErrorResponse

HTTP_400 = 400
HTTP_404 = 404
HTTP_500 = 500
HTTP_503 = 503


def _error_response(
    status_code: int,
    error: str,
    exc: Exception,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body = ErrorResponse(
        error=error,
        message=str(exc),
        retryable=getattr(exc, "retryable", False),
        details=details,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def register_error_handlers(app: FastAPI) -> None:
    """Register all ledger error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance
    """

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(_request: Request, exc: InvalidInputError) -> JSONResponse:
        logger.info(f"Invalid input: {exc}")
        return _error_response(HTTP_400, "invalid_input", exc)

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        logger.info(f"Insufficient funds: {exc}")
        return _error_response(
            HTTP_400,
            "insufficient_funds",
            exc,
            {
                "required": float(exc.required),
                "available": float(exc.available),
                "operation": exc.operation,
            },
        )

    @app.exception_handler(InsufficientPositionError)
    async def handle_insufficient_position(
        _request: Request, exc: InsufficientPositionError
    ) -> JSONResponse:
        logger.info(f"Insufficient position: {exc}")
        return _error_response(
            HTTP_400,
            "insufficient_position",
            exc,
            {"symbol": exc.symbol, "requested": float(exc.requested), "held": float(exc.held)},
        )

    @app.exception_handler(PortfolioNotFoundError)
    async def handle_portfolio_not_found(
        _request: Request, exc: PortfolioNotFoundError
    ) -> JSONResponse:
        logger.info(f"Portfolio not found: {exc.owner_id}")
        return _error_response(HTTP_404, "not_found", exc, {"owner_id": exc.owner_id})

    @app.exception_handler(PersistenceFailureError)
    async def handle_persistence_failure(
        _request: Request, exc: PersistenceFailureError
    ) -> JSONResponse:
        logger.error(f"Persistence failure: {exc}")
        return _error_response(HTTP_503, "persistence_failure", exc, {"owner_id": exc.owner_id})

    @app.exception_handler(LedgerException)
    async def handle_ledger_exception(_request: Request, exc: LedgerException) -> JSONResponse:
        """Catch-all for unmapped ledger errors."""
        logger.error(f"Unhandled ledger error: {type(exc).__name__}: {exc}")
        return _error_response(HTTP_500, "internal_error", Exception("Internal server error"))

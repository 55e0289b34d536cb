"""
Dependency injection for the portfolio API.

The application holds one LedgerService on ``app.state``; tests replace it
by overriding ``get_ledger_service``.
"""

from fastapi import Request

from trading_ledger.services.ledger_service import LedgerService


def get_ledger_service(request: Request) -> LedgerService:
    """Provide the application's ledger service."""
    return request.app.state.ledger_service

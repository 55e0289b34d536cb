"""
Pydantic schemas for API request/response models.

Enum-like fields are plain strings here; the ledger validates them so that
an unknown asset class or action is reported as invalid input (400).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from trading_ledger.core.models.commands import PortfolioSummary, TradeCommand
from trading_ledger.core.models.portfolio import Portfolio


class TradeRequest(BaseModel):
    """Request model for a trade.

    Give either ``quantity`` or, for a crypto buy, ``notional_amount`` (cash
    to spend).
    """

    asset_class: str = Field(..., description="stock, crypto or forex")
    action: str = Field(..., description="buy, sell, open or close")
    symbol: str = Field(..., min_length=1, description="Ticker or currency pair")
    price: Decimal = Field(..., description="Execution price per unit")
    quantity: Decimal | None = Field(default=None, description="Units, shares or forex size")
    notional_amount: Decimal | None = Field(
        default=None, description="Cash to spend on a crypto buy"
    )
    leverage: Decimal | None = Field(default=None, description="Forex leverage (default 100)")
    direction: str | None = Field(default=None, description="Forex direction: buy or sell")
    display_name: str | None = Field(default=None, description="Name for a new portfolio")

    def to_command(self, owner_id: str) -> TradeCommand:
        """Build the validated ledger command (notional amounts become quantities)."""
        return TradeCommand.create(
            owner_id=owner_id,
            asset_class=self.asset_class,
            action=self.action,
            symbol=self.symbol,
            price=self.price,
            quantity=self.quantity,
            notional_amount=self.notional_amount,
            leverage=self.leverage,
            direction=self.direction,
            display_name=self.display_name,
        )


class ValuationRequest(BaseModel):
    """Request model for a mark-to-market update."""

    market_prices: dict[str, float | int | str] = Field(
        default_factory=dict, description="Symbol -> current price"
    )


class ValueHistoryPoint(BaseModel):
    """One value snapshot with its period return."""

    timestamp: datetime
    value: float
    return_pct: float | None = None


class PortfolioResponse(BaseModel):
    """Response model for a portfolio snapshot."""

    owner_id: str
    display_name: str
    cash: float
    stock_positions: dict[str, dict[str, Any]]
    crypto_positions: dict[str, dict[str, Any]]
    forex_positions: dict[str, dict[str, Any]]
    total_value: float
    total_gain_loss: float
    total_gain_loss_percent: float
    trade_counters: dict[str, int]
    win_rate: float
    asset_allocation: dict[str, float]
    value_history: list[dict[str, Any]]
    created_at: datetime
    updated_at: datetime
    last_trade_at: datetime | None = None

    @classmethod
    def from_portfolio(cls, portfolio: Portfolio) -> "PortfolioResponse":
        return cls.model_validate(portfolio.to_dict())


class PortfolioSummaryResponse(BaseModel):
    """Response model for one leaderboard row."""

    owner_id: str
    display_name: str
    total_value: float
    total_gain_loss: float
    total_gain_loss_percent: float
    updated_at: datetime

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> "PortfolioSummaryResponse":
        return cls.model_validate(summary.to_dict())


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    retryable: bool = False
    details: dict[str, Any] | None = None

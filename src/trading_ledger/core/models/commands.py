"""
Command and read-model types exchanged with the ledger service.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from trading_ledger.core.enums import AssetClass, TradeAction, TradeDirection
from trading_ledger.core.exceptions.ledger import InvalidInputError
from trading_ledger.core.utils.validation import (
    validate_action,
    validate_asset_class,
    validate_direction,
    validate_owner_id,
    validate_positive,
    validate_symbol,
)


@dataclass(frozen=True)
class TradeCommand:
    """One trade request against one owner's portfolio.

    The ledger only accepts quantities; use ``create`` to turn a notional
    crypto purchase amount into a quantity at the boundary.
    """

    owner_id: str
    asset_class: AssetClass
    action: TradeAction
    symbol: str
    quantity: Decimal
    price: Decimal
    leverage: Decimal | None = None
    direction: TradeDirection | None = None
    display_name: str | None = None

    @classmethod
    def create(
        cls,
        owner_id: Any,
        asset_class: Any,
        action: Any,
        symbol: Any,
        price: Any,
        quantity: Any = None,
        notional_amount: Any = None,
        leverage: Any = None,
        direction: Any = None,
        display_name: str | None = None,
    ) -> "TradeCommand":
        """Build a validated command from loosely typed request fields.

        A crypto buy may give ``notional_amount`` (cash to spend) instead of
        ``quantity``; it is converted as ``notional_amount / price``.

        Raises:
            InvalidInputError: On unknown enums, bad numbers, or a missing or
                misplaced amount
        """
        owner_id = validate_owner_id(owner_id)
        asset_class = validate_asset_class(asset_class)
        action = validate_action(action)
        symbol = validate_symbol(symbol)
        price = validate_positive(price, "price")

        if quantity is not None:
            quantity = validate_positive(quantity, "quantity")
        elif notional_amount is not None:
            if asset_class != AssetClass.CRYPTO or action != TradeAction.BUY:
                raise InvalidInputError("notional_amount is only accepted for crypto buys")
            quantity = validate_positive(notional_amount, "notional_amount") / price
        else:
            raise InvalidInputError("Either quantity or notional_amount is required")

        return cls(
            owner_id=owner_id,
            asset_class=asset_class,
            action=action,
            symbol=symbol,
            quantity=quantity,
            price=price,
            leverage=validate_positive(leverage, "leverage") if leverage is not None else None,
            direction=validate_direction(direction) if direction is not None else None,
            display_name=display_name,
        )


@dataclass(frozen=True)
class PortfolioSummary:
    """Leaderboard row."""

    owner_id: str
    display_name: str
    total_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to dictionary."""
        return {
            "owner_id": self.owner_id,
            "display_name": self.display_name,
            "total_value": float(self.total_value),
            "total_gain_loss": float(self.total_gain_loss),
            "total_gain_loss_percent": float(self.total_gain_loss_percent),
            "updated_at": self.updated_at.isoformat(),
        }

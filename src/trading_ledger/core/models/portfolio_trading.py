"""
Portfolio trading operations.

This module handles buy/sell of stocks and cryptos and open/close of forex
positions. Every operation validates all inputs and funding before the
first write, so a failed operation leaves the portfolio unchanged.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from loguru import logger

from trading_ledger.core.enums import AssetClass, TradeDirection
from trading_ledger.core.exceptions.ledger import InsufficientPositionError
from trading_ledger.core.models.trade import TradeResult
from trading_ledger.core.types.financial import ZERO, calculate_margin, calculate_pnl

from .portfolio_core import utcnow
from .portfolio_helpers import OrderValidator, PositionManager, TradeRecorder

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


class PortfolioTrading:
    """Portfolio trading operations.

    Handles buy/sell and open/close, position lifecycle and trade counters.
    """

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The portfolio core state to execute trades for
        """
        self.core = portfolio_core

    def buy(
        self,
        asset_class: AssetClass,
        symbol: Any,
        quantity: Any,
        price: Any,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Buy stock or crypto.

        Args:
            asset_class: STOCK or CRYPTO
            symbol: Ticker symbol
            quantity: Units to buy
            price: Price per unit

        Returns:
            TradeResult with the appended history record

        Raises:
            InvalidInputError: If quantity or price is not finite and positive
            InsufficientFundsError: If cash does not cover quantity * price
        """
        symbol, quantity, price = OrderValidator.validate_order(symbol, quantity, price)
        ledger = self.core.ledger_for(asset_class)
        cost = quantity * price

        OrderValidator.check_sufficient_funds(
            cost, self.core.cash, f"buying {quantity} {symbol} at {price}"
        )

        timestamp = timestamp if timestamp is not None else utcnow()
        record = TradeRecorder.create_record(
            quantity=quantity,
            price=price,
            total_cost=cost,
            direction=TradeDirection.BUY,
            timestamp=timestamp,
        )
        existing = ledger.get(symbol)
        position = PositionManager.add_to_position(existing, symbol, record)

        self.core.cash -= cost
        ledger.put(symbol, position)
        self.core.record_trade(asset_class, timestamp, successful=False)

        if existing is None:
            logger.debug(f"Opened {asset_class} position {symbol}: {quantity} @ {price}")
        return TradeResult(asset_class=asset_class, symbol=symbol, record=record)

    def sell(
        self,
        asset_class: AssetClass,
        symbol: Any,
        quantity: Any,
        price: Any,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Sell stock or crypto.

        The trade counts as successful when the proceeds exceed the cost
        basis of the sold units at the pre-sale average price.

        Raises:
            InvalidInputError: If quantity or price is not finite and positive
            InsufficientPositionError: If nothing or less than quantity is held
        """
        symbol, quantity, price = OrderValidator.validate_order(symbol, quantity, price)
        ledger = self.core.ledger_for(asset_class)
        existing = ledger.get(symbol)

        if existing is None:
            raise InsufficientPositionError(symbol=symbol, requested=quantity, held=ZERO)
        OrderValidator.check_sufficient_position(symbol, quantity, existing.quantity)

        proceeds = quantity * price
        realized_pnl = proceeds - existing.cost_basis_of(quantity)

        timestamp = timestamp if timestamp is not None else utcnow()
        record = TradeRecorder.create_record(
            quantity=quantity,
            price=price,
            total_cost=proceeds,
            direction=TradeDirection.SELL,
            timestamp=timestamp,
        )
        position = PositionManager.reduce_position(existing, quantity, record)

        self.core.cash += proceeds
        if position is None:
            ledger.remove(symbol)
            logger.debug(f"Closed {asset_class} position {symbol}")
        else:
            ledger.put(symbol, position)

        successful = realized_pnl > ZERO
        self.core.record_trade(asset_class, timestamp, successful=successful, closing=True)
        return TradeResult(
            asset_class=asset_class,
            symbol=symbol,
            record=record,
            realized_pnl=realized_pnl,
            successful=successful,
        )

    def open_forex_position(
        self,
        symbol: Any,
        size: Any,
        price: Any,
        leverage: Any,
        direction: Any,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Open or add to a leveraged forex position.

        Margin of ``size / leverage`` is moved out of cash. Long (buy) and
        short (sell) books on one symbol are independent.

        Raises:
            InvalidInputError: If size, price or leverage is invalid
            InsufficientFundsError: If cash does not cover the margin
        """
        symbol, size, price, leverage, direction = OrderValidator.validate_margin_order(
            symbol, size, price, leverage, direction
        )
        margin = calculate_margin(size, leverage)

        OrderValidator.check_sufficient_funds(
            margin, self.core.cash, f"opening {direction} {size} {symbol} at {leverage}x"
        )

        timestamp = timestamp if timestamp is not None else utcnow()
        record = TradeRecorder.create_record(
            quantity=size,
            price=price,
            total_cost=margin,
            direction=TradeDirection.BUY,
            timestamp=timestamp,
            leverage=leverage,
        )
        key = (symbol, direction)
        existing = self.core.forex_positions.get(key)
        position = PositionManager.add_to_margin_position(existing, symbol, direction, record)

        self.core.cash -= margin
        self.core.forex_positions.put(key, position)
        self.core.record_trade(AssetClass.FOREX, timestamp, successful=False)

        if existing is None:
            logger.debug(f"Opened forex {direction} position {symbol}: {size} @ {price}")
        return TradeResult(asset_class=AssetClass.FOREX, symbol=symbol, record=record)

    def close_forex_position(
        self,
        symbol: Any,
        size: Any,
        price: Any,
        direction: Any,
        timestamp: datetime | None = None,
    ) -> TradeResult:
        """Close all or part of a forex position.

        The proportional share of margin plus realized PnL is credited to
        cash. A loss that exceeds the balance floors cash at zero.

        Raises:
            InvalidInputError: If size or price is invalid
            InsufficientPositionError: If size exceeds the held size
        """
        symbol, size, price, direction = OrderValidator.validate_close_order(
            symbol, size, price, direction
        )
        key = (symbol, direction)
        existing = self.core.forex_positions.get(key)

        label = f"{symbol} ({direction})"
        if existing is None:
            raise InsufficientPositionError(symbol=label, requested=size, held=ZERO)
        OrderValidator.check_sufficient_position(label, size, existing.size)

        margin_returned = existing.margin_for(size)
        pnl = calculate_pnl(existing.avg_price, price, size, direction)

        timestamp = timestamp if timestamp is not None else utcnow()
        record = TradeRecorder.create_record(
            quantity=size,
            price=price,
            total_cost=margin_returned,
            direction=TradeDirection.SELL,
            timestamp=timestamp,
            leverage=existing.leverage,
        )
        position = PositionManager.reduce_margin_position(existing, size, margin_returned, record)

        new_cash = self.core.cash + margin_returned + pnl
        if new_cash < ZERO:
            logger.warning(
                f"Loss on {symbol} ({direction}) exceeds available balance "
                f"by {-new_cash}; cash floored at zero for owner {self.core.owner_id}"
            )
            new_cash = ZERO
        self.core.cash = new_cash

        if position is None:
            self.core.forex_positions.remove(key)
            logger.debug(f"Closed forex {direction} position {symbol}")
        else:
            self.core.forex_positions.put(key, position)

        successful = pnl > ZERO
        self.core.record_trade(
            AssetClass.FOREX, timestamp, successful=successful, closing=True
        )
        return TradeResult(
            asset_class=AssetClass.FOREX,
            symbol=symbol,
            record=record,
            realized_pnl=pnl,
            successful=successful,
        )

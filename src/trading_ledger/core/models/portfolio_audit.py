"""
Portfolio integrity audit.

Stored portfolios can carry NaN, missing or negative numbers left behind by
partial writes or out-of-band recovery tooling. The auditor runs once per
load, before any command, and repairs that state in place.

Rules, applied in order:
1. Non-finite cash or total value resets to the starting endowment.
2. Positions with a non-finite or non-positive quantity/size are deleted;
   bad average prices reset to zero; bad cost basis or margin is recomputed.
3. History records keep only entries whose numbers are finite and positive.

Running the audit on its own output changes nothing.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from loguru import logger

from trading_ledger.core.constants import DEFAULT_FOREX_LEVERAGE, STARTING_CASH
from trading_ledger.core.models.ledgers import PositionLedger
from trading_ledger.core.models.position import MarginPosition, Position
from trading_ledger.core.models.trade import TradeRecord
from trading_ledger.core.protocols import HasHistory
from trading_ledger.core.types.financial import (
    ZERO,
    is_finite,
    is_non_negative_finite,
    is_positive_finite,
    percent_of,
)

from .portfolio_core import AssetAllocation

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


@dataclass
class AuditReport:
    """Repairs applied by one audit pass."""

    owner_id: str
    repairs: list[str] = field(default_factory=list)

    @property
    def needs_update(self) -> bool:
        """True when the audited portfolio differs from what was loaded."""
        return bool(self.repairs)

    def add(self, message: str) -> None:
        self.repairs.append(message)


class PortfolioAuditor:
    """Idempotent repair pass over corrupted numeric state."""

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The portfolio core state to audit
        """
        self.core = portfolio_core

    def audit(self) -> AuditReport:
        """Detect and repair corrupted state.

        Returns:
            AuditReport listing every repair (empty when the state was clean)
        """
        report = AuditReport(owner_id=self.core.owner_id)

        self._repair_balances(report)
        self._repair_holdings(self.core.stock_positions, "stock", report)
        self._repair_holdings(self.core.crypto_positions, "crypto", report)
        self._repair_margin_positions(report)
        self._repair_value_history(report)

        for message in report.repairs:
            logger.warning(f"Portfolio {self.core.owner_id} repaired: {message}")
        return report

    def _repair_balances(self, report: AuditReport) -> None:
        core = self.core
        if not is_finite(core.cash):
            report.add(f"cash {core.cash} reset to {STARTING_CASH}")
            core.cash = STARTING_CASH
        elif core.cash < ZERO:
            report.add(f"negative cash {core.cash} floored at 0")
            core.cash = ZERO

        if not is_finite(core.total_value):
            report.add(f"total value {core.total_value} reset to {STARTING_CASH}")
            core.total_value = STARTING_CASH

        if not is_finite(core.total_gain_loss):
            core.total_gain_loss = core.total_value - STARTING_CASH
            report.add("total gain/loss recomputed")
        if not is_finite(core.total_gain_loss_percent):
            core.total_gain_loss_percent = percent_of(
                core.total_value - STARTING_CASH, STARTING_CASH
            )
            report.add("total gain/loss percent recomputed")

        if not all(is_finite(value) for value in core.asset_allocation.values()):
            core.asset_allocation = AssetAllocation(cash=core.cash)
            report.add("asset allocation reset")

    def _repair_holdings(self, ledger: PositionLedger, label: str, report: AuditReport) -> None:
        for symbol, position in ledger.items():
            if not is_positive_finite(position.quantity):
                ledger.remove(symbol)
                report.add(f"{label} {symbol} removed (quantity {position.quantity})")
                continue

            repaired = self._repair_position(position, f"{label} {symbol}", report)
            if repaired is not position:
                ledger.put(symbol, repaired)

    def _repair_position(self, position: Position, label: str, report: AuditReport) -> Position:
        avg_price = position.avg_price
        if not is_non_negative_finite(avg_price):
            report.add(f"{label} average price {avg_price} reset to 0")
            avg_price = ZERO

        total_cost = position.total_cost
        if not is_non_negative_finite(total_cost):
            total_cost = position.quantity * avg_price
            report.add(f"{label} total cost recomputed as {total_cost}")

        history = self._valid_history(position, label, report)

        if (
            avg_price is position.avg_price
            and total_cost is position.total_cost
            and history is position.history
        ):
            return position
        return replace(position, avg_price=avg_price, total_cost=total_cost, history=history)

    def _repair_margin_positions(self, report: AuditReport) -> None:
        ledger = self.core.forex_positions
        for key, position in ledger.items():
            label = f"forex {position.symbol} ({position.direction})"
            if not is_positive_finite(position.size):
                ledger.remove(key)
                report.add(f"{label} removed (size {position.size})")
                continue

            repaired = self._repair_margin_position(position, label, report)
            if repaired is not position:
                ledger.put(key, repaired)

    def _repair_margin_position(
        self, position: MarginPosition, label: str, report: AuditReport
    ) -> MarginPosition:
        avg_price = position.avg_price
        if not is_non_negative_finite(avg_price):
            report.add(f"{label} average price {avg_price} reset to 0")
            avg_price = ZERO

        leverage = position.leverage
        if not is_positive_finite(leverage):
            report.add(f"{label} leverage {leverage} reset to {DEFAULT_FOREX_LEVERAGE}")
            leverage = DEFAULT_FOREX_LEVERAGE

        margin = position.margin
        if not is_non_negative_finite(margin):
            margin = position.size / leverage
            report.add(f"{label} margin recomputed as {margin}")

        history = self._valid_history(position, label, report)

        if (
            avg_price is position.avg_price
            and leverage is position.leverage
            and margin is position.margin
            and history is position.history
        ):
            return position
        return replace(
            position, avg_price=avg_price, leverage=leverage, margin=margin, history=history
        )

    @staticmethod
    def _valid_history(
        holder: HasHistory, label: str, report: AuditReport
    ) -> tuple[TradeRecord, ...]:
        """Return the holder's history, filtered only if it contains bad records."""
        valid = tuple(record for record in holder.history if record.is_valid())
        if len(valid) == len(holder.history):
            return holder.history
        report.add(f"{label} dropped {len(holder.history) - len(valid)} invalid history records")
        return valid

    def _repair_value_history(self, report: AuditReport) -> None:
        history = self.core.value_history
        valid = [snapshot for snapshot in history if is_non_negative_finite(snapshot.value)]
        dropped = len(history) - len(valid)
        if dropped == 0:
            return
        history.clear()
        history.extend(valid)
        report.add(f"dropped {dropped} invalid value history entries")

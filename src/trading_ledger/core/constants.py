"""
Core constants and limits.

Defines the fixed endowment, history capacity and trading defaults shared
by the ledger, the valuation engine and the integrity auditor.
"""

from decimal import Decimal

# Portfolio Lifecycle
STARTING_CASH = Decimal("100000")  # Every portfolio starts with this endowment
MAX_VALUE_HISTORY = 100  # Valuation snapshots kept per portfolio (oldest evicted first)

# Forex Defaults
DEFAULT_FOREX_LEVERAGE = Decimal("100")  # 100:1 when the caller gives no leverage

# Leaderboard
DEFAULT_TOP_PERFORMERS_LIMIT = 10
MAX_TOP_PERFORMERS_LIMIT = 100
LEADERBOARD_CACHE_TTL_SECONDS = 30.0
LEADERBOARD_CACHE_SIZE = 32

"""
Runtime configuration.

Loads settings from environment variables (prefix ``LEDGER_``) and an
optional .env file. Domain constants live in core.constants; only values an
operator may tune are settings.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from trading_ledger.core.constants import (
    DEFAULT_FOREX_LEVERAGE,
    LEADERBOARD_CACHE_SIZE,
    LEADERBOARD_CACHE_TTL_SECONDS,
)


class LedgerSettings(BaseSettings):
    """Ledger settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_serialize: Emit log records as JSON lines.
        leaderboard_cache_ttl_seconds: How long a top-performers result is reused.
        leaderboard_cache_size: Number of distinct limits cached.
        default_forex_leverage: Leverage applied when a forex open omits it.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "Trading Ledger"
    version: str = "1.0.0"
    log_level: str = "INFO"
    log_serialize: bool = False
    leaderboard_cache_ttl_seconds: float = Field(default=LEADERBOARD_CACHE_TTL_SECONDS, gt=0)
    leaderboard_cache_size: int = Field(default=LEADERBOARD_CACHE_SIZE, gt=0)
    default_forex_leverage: Decimal = Field(default=DEFAULT_FOREX_LEVERAGE, gt=0)


@lru_cache
def get_settings() -> LedgerSettings:
    """Process-wide settings instance."""
    return LedgerSettings()

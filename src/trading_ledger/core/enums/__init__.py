"""
Core enumerations for the trading ledger.

This module provides centralized enumerations for asset classes,
trade actions and trade directions.
"""

from .trade_types import AssetClass, TradeAction, TradeDirection

__all__ = ["AssetClass", "TradeAction", "TradeDirection"]

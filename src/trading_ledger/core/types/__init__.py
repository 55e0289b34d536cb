"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    HUNDRED,
    NAN,
    ONE,
    ZERO,
    Numeric,
    calculate_margin,
    calculate_pnl,
    coerce_decimal,
    is_finite,
    is_non_negative_finite,
    is_positive_finite,
    percent_of,
    to_decimal,
    weighted_average_price,
)

__all__ = [
    # Utility functions
    "to_decimal",
    "coerce_decimal",
    "is_finite",
    "is_positive_finite",
    "is_non_negative_finite",
    "calculate_pnl",
    "calculate_margin",
    "weighted_average_price",
    "percent_of",
    # Types
    "Numeric",
    # Constants
    "ZERO",
    "ONE",
    "HUNDRED",
    "NAN",
]

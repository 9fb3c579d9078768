"""Shared helper utilities for consistency across the journal."""

from .validation import (
    coerce_number,
    finite_float,
    is_present,
    parse_number,
    round_money,
    safe_ratio,
)
from .sessions import detect_session

__all__ = [
    "coerce_number",
    "detect_session",
    "finite_float",
    "is_present",
    "parse_number",
    "round_money",
    "safe_ratio",
]

"""Validation helpers to keep numeric values finite and well-shaped."""

import math
import re
from typing import Any, Optional

_NUMBER_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_CURRENCY_MARKS = ("$", "€", "£", "¥", "₪", "USD", "EUR", "CAD")


def finite_float(value: Any, default: float = 0.0) -> float:
    """Return a finite float or a default fallback."""
    try:
        fval = float(value)
        if math.isfinite(fval):
            return fval
    except (TypeError, ValueError):
        pass
    return default


def parse_number(value: Any) -> Optional[float]:
    """Parse broker-formatted numbers: '$1,234.50', '(12.00)', '5-', '−3'.

    Returns None when nothing numeric is present.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        fval = float(value)
        return fval if math.isfinite(fval) else None

    text = str(value).strip()
    if not text:
        return None
    text = text.replace("−", "-").replace("–", "-").replace("—", "-")
    text = text.replace(",", "").replace(" ", "")
    for mark in _CURRENCY_MARKS:
        text = text.replace(mark, "")
    negative = text.startswith("(") and text.endswith(")")
    text = text.strip("()")
    if text.endswith("-"):
        negative = True
        text = text[:-1]
    if text.startswith("-"):
        negative = not negative
        text = text[1:]
    if text.startswith("+"):
        text = text[1:]

    match = _NUMBER_RE.match(text)
    if not match:
        return None
    fval = float(match.group(0))
    if not math.isfinite(fval):
        return None
    return -fval if negative else fval


def coerce_number(value: Any) -> float:
    """Falsy, garbage or non-finite input becomes 0.0."""
    if not value:
        return 0.0
    parsed = parse_number(value)
    return parsed if parsed is not None else 0.0


def is_present(value: Optional[float]) -> bool:
    """True for a finite, non-zero number."""
    return value is not None and math.isfinite(value) and value != 0


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when undefined or non-finite."""
    if not denominator or not math.isfinite(denominator):
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def round_money(value: Optional[float], decimals: int = 2) -> Optional[float]:
    if value is None:
        return None
    if not math.isfinite(value):
        return 0.0
    rounded = round(value, decimals)
    return rounded + 0.0  # normalize -0.0

"""Asset classification from a raw symbol string.

Drives tick size / multiplier selection and the commission schedule key:
- exact instrument table hit
- OCC option symbols
- futures contract codes (root + month code + year)
- crypto pairs, FX pairs
- everything else is treated as a stock
"""

import re
from typing import Optional, Union

from core.instruments import (
    CRYPTO_BASES,
    CRYPTO_QUOTES,
    FUTURES_ROOTS,
    FX_CURRENCIES,
    INSTRUMENTS,
    OPTIONS_MULTIPLIER,
)
from core.models.asset import AssetClass, Instrument

FUTURES_MONTH_CODES = "FGHJKMNQUVXZ"

_OCC_RE = re.compile(r"^([A-Z][A-Z.]{0,5})\s*(\d{6})([CP])(\d+(?:\.\d+)?)$")
_MONTH_YEAR_RE = re.compile(rf"^[{FUTURES_MONTH_CODES}](\d{{1,2}}|\d{{4}})$")
_SPACED_CONTRACT_RE = re.compile(r"^([A-Z0-9]{1,4})\s+\d{2}-\d{2}$")  # "NQ 12-24"
_PAIR_SPLIT_RE = re.compile(r"[-/._]")


def normalize_symbol(symbol: Optional[str]) -> str:
    """Upper-case and strip exchange prefixes and decorations."""
    if not symbol:
        return ""
    text = str(symbol).strip().upper()
    if ":" in text:
        text = text.rsplit(":", 1)[-1]
    text = text.lstrip("/")
    if text.endswith("=F"):
        text = text[:-2]
    return text.strip()


def futures_root(symbol: Optional[str]) -> Optional[str]:
    """Root of a futures contract code ('NQZ4' -> 'NQ'), or None."""
    text = normalize_symbol(symbol)
    if not text:
        return None
    if text in FUTURES_ROOTS:
        return text

    spaced = _SPACED_CONTRACT_RE.match(text)
    if spaced and spaced.group(1) in FUTURES_ROOTS:
        return spaced.group(1)

    # Prefer the longest known root ("MNQZ4" is MNQ, not a hypothetical M)
    for size in range(min(4, len(text) - 2), 0, -1):
        root, rest = text[:size], text[size:]
        if root in FUTURES_ROOTS and _MONTH_YEAR_RE.match(rest):
            return root
    return None


def is_option_symbol(symbol: Optional[str]) -> bool:
    return bool(_OCC_RE.match(normalize_symbol(symbol)))


def _is_crypto(text: str) -> bool:
    parts = [p for p in _PAIR_SPLIT_RE.split(text) if p]
    if len(parts) == 2:
        base, quote = parts
        return base in CRYPTO_BASES and (quote == "USD" or quote in CRYPTO_QUOTES)
    for quote in CRYPTO_QUOTES:
        if text.endswith(quote) and len(text) > len(quote):
            return True
    if text.endswith("USD") and text[:-3] in CRYPTO_BASES:
        return True
    return False


def _is_fx(text: str) -> bool:
    compact = _PAIR_SPLIT_RE.sub("", text)
    if len(compact) != 6:
        return False
    base, quote = compact[:3], compact[3:]
    return base != quote and base in FX_CURRENCIES and quote in FX_CURRENCIES


def detect_asset_class(symbol: Optional[str]) -> Optional[AssetClass]:
    """Infer the asset class of a symbol.

    Returns None only for empty input; callers treat None as "unknown".
    """
    text = normalize_symbol(symbol)
    if not text:
        return None

    instrument = INSTRUMENTS.get(text)
    if instrument is not None:
        return instrument.asset_class
    if _OCC_RE.match(text):
        return AssetClass.OPTIONS
    if futures_root(text):
        return AssetClass.FUTURES
    if _is_crypto(text):
        return AssetClass.CRYPTO
    if _is_fx(text):
        return AssetClass.FX
    return AssetClass.STOCKS


def get_instrument(symbol: Optional[str]) -> Optional[Instrument]:
    """Instrument spec for a symbol or contract code, if known."""
    text = normalize_symbol(symbol)
    if not text:
        return None
    instrument = INSTRUMENTS.get(text)
    if instrument is not None:
        return instrument
    if _is_fx(text):
        return INSTRUMENTS.get(_PAIR_SPLIT_RE.sub("", text))
    root = futures_root(text)
    return INSTRUMENTS.get(root) if root else None


def get_multiplier(
    symbol: Optional[str],
    asset_class: Union[AssetClass, str, None] = None,
) -> float:
    """Currency value of a one-point move per unit (defaults to 1)."""
    instrument = get_instrument(symbol)
    if instrument is not None:
        return instrument.multiplier
    resolved = AssetClass.from_value(asset_class) or detect_asset_class(symbol)
    if resolved is AssetClass.OPTIONS:
        return OPTIONS_MULTIPLIER
    return 1.0


def get_quantity_label(asset_class: Union[AssetClass, str, None]) -> str:
    resolved = AssetClass.from_value(asset_class)
    return resolved.quantity_label if resolved else "Shares"

"""Asset class enum and instrument specification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class AssetClass(str, Enum):
    STOCKS = "Stocks"
    FUTURES = "Futures"
    CRYPTO = "Crypto"
    FX = "FX"
    OPTIONS = "Options"

    @property
    def commission_key(self) -> str:
        """Key into the commission schedule."""
        return _COMMISSION_KEYS[self]

    @property
    def quantity_label(self) -> str:
        return _QUANTITY_LABELS[self]

    @classmethod
    def from_value(cls, value: Union[str, "AssetClass", None]) -> Optional["AssetClass"]:
        """Parse loose spellings like 'STOCK', 'equity', 'forex', 'future'."""
        if value is None:
            return None
        if isinstance(value, AssetClass):
            return value
        normalized = str(value).strip().lower()
        if not normalized:
            return None
        for member in cls:
            if normalized == member.value.lower():
                return member
        for member, words in _ALIASES.items():
            if any(word in normalized for word in words):
                return member
        return None


_COMMISSION_KEYS = {
    AssetClass.STOCKS: "stocks",
    AssetClass.FUTURES: "futures",
    AssetClass.CRYPTO: "crypto",
    AssetClass.FX: "forex",
    AssetClass.OPTIONS: "options",
}

_QUANTITY_LABELS = {
    AssetClass.STOCKS: "Shares",
    AssetClass.FUTURES: "Contracts",
    AssetClass.CRYPTO: "Units",
    AssetClass.FX: "Lots",
    AssetClass.OPTIONS: "Contracts",
}

# Checked in order: "option" before "stock" so "stock option" is an option
_ALIASES = {
    AssetClass.OPTIONS: ("option", "opt"),
    AssetClass.FUTURES: ("future", "fut"),
    AssetClass.CRYPTO: ("crypto", "coin", "digital"),
    AssetClass.FX: ("forex", "fx", "currency", "cfd"),
    AssetClass.STOCKS: ("stock", "equity", "equities", "etf", "share"),
}


@dataclass(frozen=True)
class Instrument:
    """Contract specification for a tradable symbol."""
    symbol: str
    asset_class: AssetClass
    tick_size: float
    tick_value: float
    multiplier: float = 1.0
    decimals: int = 2

    def ticks(self, price_distance: float) -> float:
        """Number of ticks in a price distance."""
        if self.tick_size <= 0:
            return 0.0
        return abs(price_distance) / self.tick_size

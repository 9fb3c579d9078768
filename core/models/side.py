"""Direction and outcome enums."""

from enum import Enum
from typing import Optional, Union


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Side.LONG else -1

    @classmethod
    def from_value(cls, value: Union[str, "Side", None]) -> Optional["Side"]:
        """Map broker spellings (buy, b, long, sell short, ...) to a side."""
        if value is None:
            return None
        if isinstance(value, Side):
            return value
        normalized = " ".join(str(value).replace("_", " ").lower().split())
        if not normalized:
            return None
        if normalized in _LONG_WORDS:
            return cls.LONG
        if normalized in _SHORT_WORDS:
            return cls.SHORT
        return None


_LONG_WORDS = {
    "long", "buy", "b", "bot", "bought", "bullish", "1", "true",
    "buy to open", "bto", "buy to close", "btc", "buy to cover", "bought to open",
    "bought to cover", "bought to close", "cover",
}
_SHORT_WORDS = {
    "short", "sell", "s", "sld", "sold", "bearish", "-1",
    "sell short", "sold short", "sell to open", "sto", "ss", "sell to close", "stc",
    "sold to open", "sold to close",
}


class Confidence(str, Enum):
    """How strongly entry/stop/target agree on a direction."""
    HIGH = "high"            # target and stop both point the same way
    LOW = "low"              # only one of target or stop carries a signal
    AMBIGUOUS = "ambiguous"  # neither does; side is the LONG default


class Outcome(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    BE = "BE"
    OPEN = "OPEN"

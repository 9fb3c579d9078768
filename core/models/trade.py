"""Calculation results and imported trade records."""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from core.models.asset import AssetClass
from core.models.side import Confidence, Side


def _to_jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return str(value)


@dataclass(frozen=True)
class DirectionAssessment:
    side: Side
    conflict: bool = False
    confidence: Confidence = Confidence.HIGH

    @property
    def ambiguous(self) -> bool:
        return self.confidence is Confidence.AMBIGUOUS


@dataclass(frozen=True)
class RRResult:
    """Full risk/reward breakdown for one trade."""
    side: Side
    rr: float
    risk_usd: float
    reward_usd: float
    risk_pts: float
    reward_pts: float
    conflict: bool = False
    confidence: Confidence = Confidence.HIGH
    result_r: Optional[float] = None
    pnl_usd: Optional[float] = None      # gross, before fees
    net_pnl_usd: Optional[float] = None  # after fees
    user_risk_r: Optional[float] = None
    user_reward_r: Optional[float] = None
    user_actual_r: Optional[float] = None

    def to_dict(self) -> dict:
        return _to_jsonable(asdict(self))


@dataclass(frozen=True)
class RiskReward:
    """Quantity-scaled risk/reward used by lightweight call sites."""
    risk: float
    reward: float
    rr: float
    result_r: Optional[float] = None


@dataclass(frozen=True)
class Fill:
    """A single execution reported by a broker."""
    symbol: str
    side: Side            # LONG = buy, SHORT = sell
    quantity: float
    price: float
    timestamp: Optional[datetime] = None
    fees: float = 0.0
    row: int = 0
    fill_id: str = ""
    multiplier: Optional[float] = None
    asset_class: Optional[AssetClass] = None
    opens: Optional[bool] = None  # True/False when the broker says open/close
    raw_row: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedTrade:
    """Canonical trade produced by an importer, ready for persistence."""
    symbol: str
    side: Side
    quantity: float
    entry_price: float
    broker: str
    exit_price: Optional[float] = None
    stop_price: Optional[float] = None
    take_profit: Optional[float] = None
    fees: float = 0.0
    multiplier: Optional[float] = None  # instrument default when unknown
    asset_class: Optional[AssetClass] = None
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None
    pnl: Optional[float] = None
    session: Optional[str] = None
    notes: str = ""
    setup: str = ""
    tags: tuple = ()

    # Derived metrics
    rr: Optional[float] = None
    risk_usd: Optional[float] = None
    reward_usd: Optional[float] = None
    result_r: Optional[float] = None

    # Import metadata
    raw_row: Dict[str, str] = field(default_factory=dict)
    import_batch_id: str = ""
    external_id: str = ""

    @property
    def is_closed(self) -> bool:
        return self.exit_price is not None

    def evolve(self, **changes) -> "ParsedTrade":
        return replace(self, **changes)

    def to_payload(self) -> dict:
        """Dict handed to the persistence collaborator (``trades`` table)."""
        return _to_jsonable(asdict(self))


@dataclass
class ParserResult:
    trades: List[ParsedTrade] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and bool(self.trades)

    def extend(self, other: "ParserResult") -> None:
        self.trades.extend(other.trades)
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

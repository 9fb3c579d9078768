"""
Base broker parser interface.

Every parser recognizes its own export layout through ``can_parse`` and
turns the file into ParsedTrade records. Two shapes exist:

- RoundTripParser: one CSV row is one complete trade
- FillParser: one CSV row is one execution; fills are paired FIFO

Whatever the shape, every trade leaves ``parse`` through ``backfill`` so
derived metrics (rr, risk, reward, result R, P&L) are computed the same
way for every import source.
"""

import hashlib
from abc import ABC, abstractmethod
from datetime import datetime
from typing import FrozenSet, Optional, Sequence, Tuple

from core.asset_class import detect_asset_class
from core.config import settings
from core.helpers.sessions import detect_session
from core.logging_utils import get_logger
from core.models.side import Side
from core.models.trade import Fill, ParsedTrade, ParserResult
from core.risk_reward import compute_rr, resolve_multiplier
from importers.csv_utils import CsvRow, CsvTable, normalize_headers, parse_datetime, read_table
from importers.fills import FillMatcher

logger = get_logger(__name__)


def make_external_id(trade: ParsedTrade) -> str:
    """Stable id used to skip trades that were already imported."""
    parts = [
        trade.broker,
        trade.symbol,
        trade.side.value,
        trade.open_at.isoformat() if trade.open_at else "",
        trade.close_at.isoformat() if trade.close_at else "",
        f"{trade.quantity:g}",
        f"{trade.entry_price:g}",
        f"{trade.exit_price:g}" if trade.exit_price is not None else "",
    ]
    return hashlib.sha1("|".join(parts).encode("utf-8")).hexdigest()[:20]


def backfill(trade: ParsedTrade, batch_id: str = "") -> ParsedTrade:
    """Fill asset class, multiplier, session and derived metrics.

    Values the broker reported are kept; only missing ones are computed.
    """
    asset_class = trade.asset_class or detect_asset_class(trade.symbol)
    multiplier = resolve_multiplier(trade.multiplier, trade.symbol, asset_class)
    metrics = compute_rr(
        entry=trade.entry_price,
        sl=trade.stop_price,
        tp=trade.take_profit,
        qty=trade.quantity,
        fees=trade.fees,
        multiplier=multiplier,
        side=trade.side,
        asset_class=asset_class,
        exit=trade.exit_price,
        decimals=settings.money_decimals,
    )
    pnl = trade.pnl
    if pnl is None and trade.is_closed:
        pnl = metrics.net_pnl_usd

    filled = trade.evolve(
        asset_class=asset_class,
        multiplier=multiplier,
        session=trade.session or detect_session(trade.open_at),
        rr=trade.rr if trade.rr is not None else metrics.rr,
        risk_usd=trade.risk_usd if trade.risk_usd is not None else metrics.risk_usd,
        reward_usd=trade.reward_usd if trade.reward_usd is not None else metrics.reward_usd,
        result_r=trade.result_r if trade.result_r is not None else metrics.result_r,
        pnl=pnl,
        import_batch_id=batch_id or trade.import_batch_id,
    )
    if not filled.external_id:
        filled = filled.evolve(external_id=make_external_id(filled))
    return filled


# Row helpers. Each raises ValueError with a message naming the problem;
# parsers turn that into a row-level error.

def require_text(row: CsvRow, label: str, *names: str) -> str:
    value = row.get(*names)
    if not value:
        raise ValueError(f"missing {label}")
    return value


def require_number(row: CsvRow, label: str, *names: str) -> float:
    raw = row.get(*names)
    value = row.number_of(*names)
    if value is None:
        raise ValueError(f"missing {label}" if not raw else f"invalid {label} {raw!r}")
    return value


def optional_number(row: CsvRow, *names: str) -> Optional[float]:
    return row.number_of(*names)


def require_positive(value: Optional[float], label: str) -> float:
    if value is None or value <= 0:
        raise ValueError(f"invalid {label} {value!r}")
    return value


def row_timestamp(row: CsvRow, label: str, *names: str, required: bool = False) -> Optional[datetime]:
    raw = row.get(*names)
    if not raw:
        if required:
            raise ValueError(f"missing {label}")
        return None
    parsed = parse_datetime(raw)
    if parsed is None:
        raise ValueError(f"unparseable {label} {raw!r}")
    return parsed


_OPEN_MARKERS = ("to open", "opening", "sell short", "sold short", "short sale")
_CLOSE_MARKERS = ("to close", "closing", "to cover", "buy to cover")
_BUY_WORDS = ("buy", "bought", "bot")
_SELL_WORDS = ("sell", "sold", "sld")


def classify_action(action: str) -> Tuple[Optional[Side], Optional[bool]]:
    """Side and open/close intent of a broker action text.

    'Buy to Open' -> (LONG, True); 'YOU SOLD CLOSING TRANSACTION' -> (SHORT, False);
    'Buy' -> (LONG, None). Unknown text -> (None, None).
    """
    text = " ".join(action.replace("_", " ").lower().split())
    if not text:
        return None, None
    opens = None
    if any(marker in text for marker in _OPEN_MARKERS):
        opens = True
    elif any(marker in text for marker in _CLOSE_MARKERS):
        opens = False

    side = Side.from_value(text)
    if side is None:
        words = text.replace("(", " ").split()
        if any(w in _BUY_WORDS for w in words):
            side = Side.LONG
        elif any(w in _SELL_WORDS for w in words):
            side = Side.SHORT
    if side is Side.SHORT and text == "short":
        opens = True
    return side, opens


class BrokerParser(ABC):
    """Chain-of-responsibility link for one export layout."""

    name: str = "base"
    label: str = "Base"
    priority: int = 100  # lower is asked first
    signature: FrozenSet[str] = frozenset()

    def can_parse(self, header: Sequence[str]) -> bool:
        """True when every signature column is present in the header."""
        names = set(normalize_headers(header))
        return bool(self.signature) and self.signature <= names

    def read(self, text: str) -> CsvTable:
        return read_table(text, self.signature or None)

    def parse(self, text: str, batch_id: str = "") -> ParserResult:
        table = self.read(text)
        if not table.header:
            return ParserResult(errors=[f"{self.label}: header row not found"])

        raw = self.parse_table(table)
        result = ParserResult(
            trades=[backfill(t, batch_id) for t in raw.trades],
            errors=list(raw.errors),
            warnings=list(raw.warnings),
        )
        logger.info(
            "[IMPORT] %s: %d trades, %d errors, %d warnings",
            self.label, len(result.trades), len(result.errors), len(result.warnings),
        )
        return result

    @abstractmethod
    def parse_table(self, table: CsvTable) -> ParserResult:
        """Map the table to raw trades (before backfill)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class RoundTripParser(BrokerParser):
    """Exports where each row already is a complete trade."""

    def parse_table(self, table: CsvTable) -> ParserResult:
        result = ParserResult()
        for row in table.rows:
            if self.skip_row(row):
                continue
            try:
                trade = self.parse_trade(row)
            except ValueError as e:
                logger.debug("[IMPORT] %s row %d rejected: %s", self.label, row.number, e)
                result.errors.append(f"Row {row.number}: {e}")
                continue
            if trade is not None:
                result.trades.append(trade.evolve(raw_row=dict(row.values)))
        return result

    def skip_row(self, row: CsvRow) -> bool:
        """Summary, total or blank-symbol rows that are not trades."""
        return False

    @abstractmethod
    def parse_trade(self, row: CsvRow) -> Optional[ParsedTrade]:
        ...


class FillParser(BrokerParser):
    """Exports where each row is one execution."""

    # Several brokers list the newest transaction first
    newest_first: bool = False

    def parse_table(self, table: CsvTable) -> ParserResult:
        result = ParserResult()
        fills = []
        for row in table.rows:
            try:
                fill = self.parse_fill(row)
            except ValueError as e:
                logger.debug("[IMPORT] %s row %d rejected: %s", self.label, row.number, e)
                result.errors.append(f"Row {row.number}: {e}")
                continue
            if fill is not None:
                fills.append(fill)

        if self.newest_first:
            fills.reverse()
        result.extend(FillMatcher(self.name).match(fills))
        return result

    @abstractmethod
    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        """A Fill, or None for rows that are not executions (dividends, transfers)."""


class MultiLayoutParser(BrokerParser):
    """A broker with several export layouts; the first matching layout parses."""

    layouts: Sequence[BrokerParser] = ()

    def can_parse(self, header: Sequence[str]) -> bool:
        return any(layout.can_parse(header) for layout in self.layouts)

    def read(self, text: str) -> CsvTable:
        for layout in self.layouts:
            table = layout.read(text)
            if table.header:
                return table
        return CsvTable(header=[], rows=[])

    def parse_table(self, table: CsvTable) -> ParserResult:
        for layout in self.layouts:
            if layout.can_parse(table.header):
                return layout.parse_table(table)
        return ParserResult(errors=[f"{self.label}: unsupported export layout"])

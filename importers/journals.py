"""
Trading-journal exports (TradeZella, Tradervue, Edgewonk, TradesViz) and the
canonical generic layout.

Journal exports are already round trips, so one table-driven parser covers
all of them: a JournalLayout names the column for every canonical field and
the columns that identify the export.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from core.models.asset import AssetClass
from core.models.side import Side
from core.models.trade import ParsedTrade
from importers.base import (
    RoundTripParser,
    optional_number,
    require_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow, normalize_header

_TAG_SPLIT_RE = re.compile(r"[,;|]")


@dataclass(frozen=True)
class JournalLayout:
    name: str
    label: str
    signature: FrozenSet[str]
    columns: Dict[str, str] = field(default_factory=dict)
    pnl_is_gross: bool = False
    priority: int = 50


JOURNAL_LAYOUTS = (
    JournalLayout(
        name="tradezella",
        label="TradeZella",
        signature=frozenset({"symbol", "side", "net p&l", "setup"}),
        columns={
            "symbol": "Symbol", "side": "Side", "quantity": "Quantity",
            "entry_price": "Entry Price", "exit_price": "Exit Price",
            "open_at": "Open Date", "close_at": "Close Date",
            "pnl": "Net P&L", "fees": "Commission",
            "notes": "Notes", "setup": "Setup", "tags": "Tags",
        },
    ),
    JournalLayout(
        name="tradervue",
        label="Tradervue",
        signature=frozenset({"symbol", "gross p/l", "shares"}),
        columns={
            "symbol": "Symbol", "side": "Long/Short", "quantity": "Shares",
            "entry_price": "Entry", "exit_price": "Exit",
            "open_at": "Date", "close_at": "Exit Date",
            "pnl": "Gross P/L", "fees": "Commissions",
            "notes": "Notes", "tags": "Tags",
        },
        pnl_is_gross=True,
    ),
    JournalLayout(
        name="edgewonk",
        label="Edgewonk",
        signature=frozenset({"instrument", "net result"}),
        columns={
            "symbol": "Instrument", "side": "Direction", "quantity": "Position Size",
            "entry_price": "Entry", "exit_price": "Exit",
            "open_at": "Entry Date", "close_at": "Exit Date",
            "pnl": "Net Result", "notes": "Comments", "setup": "Setup",
            "stop_price": "Stop Loss", "take_profit": "Target",
        },
    ),
    JournalLayout(
        name="tradesviz",
        label="TradesViz",
        signature=frozenset({"symbol", "avg entry", "realized p&l"}),
        columns={
            "symbol": "Symbol", "side": "Side", "quantity": "Qty",
            "entry_price": "Avg Entry", "exit_price": "Avg Exit",
            "open_at": "Open Time", "close_at": "Close Time",
            "pnl": "Realized P&L", "fees": "Fees",
            "notes": "Notes", "asset_class": "Asset Class",
        },
    ),
    # Exact snake_case names, the layout this library itself exports
    JournalLayout(
        name="generic",
        label="Generic CSV",
        signature=frozenset({"symbol", "side", "quantity", "entry_price"}),
        columns={
            "symbol": "symbol", "side": "side", "quantity": "quantity",
            "entry_price": "entry_price", "exit_price": "exit_price",
            "stop_price": "stop_price", "take_profit": "take_profit",
            "open_at": "open_at", "close_at": "close_at",
            "pnl": "pnl", "fees": "commission", "multiplier": "multiplier",
            "asset_class": "asset_class", "notes": "notes", "setup": "setup", "tags": "tags",
        },
        priority=90,
    ),
)


def parse_tags(value: str) -> tuple:
    """'breakout; A+ , news' -> ('breakout', 'A+', 'news')"""
    return tuple(t.strip() for t in _TAG_SPLIT_RE.split(value or "") if t.strip())


class JournalParser(RoundTripParser):
    """Round-trip parser driven by a JournalLayout."""

    def __init__(self, layout: JournalLayout):
        self.layout = layout
        self.name = layout.name
        self.label = layout.label
        self.priority = layout.priority
        self.signature = layout.signature

    def _column(self, canonical: str) -> str:
        column = self.layout.columns.get(canonical)
        return normalize_header(column) if column else ""

    def _text(self, row: CsvRow, canonical: str) -> str:
        column = self._column(canonical)
        return row.get(column).strip() if column else ""

    def _number(self, row: CsvRow, canonical: str) -> Optional[float]:
        column = self._column(canonical)
        return optional_number(row, column) if column else None

    def skip_row(self, row: CsvRow) -> bool:
        return not self._text(row, "symbol")

    def parse_trade(self, row: CsvRow) -> Optional[ParsedTrade]:
        side_text = self._text(row, "side")
        side = Side.from_value(side_text)
        if side is None:
            raise ValueError(f"unknown side {side_text!r}" if side_text else "missing side")

        exit_price = self._number(row, "exit_price")
        fees = abs(self._number(row, "fees") or 0.0)
        pnl = self._number(row, "pnl")
        if pnl is not None and self.layout.pnl_is_gross:
            pnl -= fees

        asset_text = self._text(row, "asset_class")
        return ParsedTrade(
            symbol=require_text(row, "symbol", self._column("symbol")),
            side=side,
            quantity=require_positive(abs(require_number(row, "quantity", self._column("quantity"))), "quantity"),
            entry_price=require_positive(require_number(row, "entry price", self._column("entry_price")), "entry price"),
            exit_price=exit_price if exit_price else None,
            stop_price=self._number(row, "stop_price") or None,
            take_profit=self._number(row, "take_profit") or None,
            fees=fees,
            multiplier=self._number(row, "multiplier") or None,
            asset_class=AssetClass.from_value(asset_text) if asset_text else None,
            open_at=row_timestamp(row, "open date", self._column("open_at")),
            close_at=row_timestamp(row, "close date", self._column("close_at")),
            pnl=pnl,
            broker=self.name,
            notes=self._text(row, "notes"),
            setup=self._text(row, "setup"),
            tags=parse_tags(self._text(row, "tags")),
        )


def journal_parsers() -> list:
    return [JournalParser(layout) for layout in JOURNAL_LAYOUTS]

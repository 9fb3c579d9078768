"""TradeStation: Orders history export (one filled order per row)."""

from typing import Optional

from core.models.trade import Fill
from importers.base import (
    FillParser,
    classify_action,
    optional_number,
    require_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow

_FILLED = {"filled", "partially filled", "partial fill"}


class TradeStationParser(FillParser):
    name = "tradestation"
    label = "TradeStation"
    priority = 30
    signature = frozenset({"symbol", "type", "filled qty", "avg fill price", "status"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        if row.get("status").strip().lower() not in _FILLED:
            return None
        quantity = require_number(row, "filled qty", "filled qty")
        if quantity == 0:
            return None
        side, opens = classify_action(row.get("type"))
        if side is None:
            raise ValueError(f"unknown order type {row.get('type')!r}")
        return Fill(
            symbol=require_text(row, "symbol", "symbol"),
            side=side,
            quantity=abs(quantity),
            price=require_positive(require_number(row, "avg fill price", "avg fill price"), "avg fill price"),
            timestamp=row_timestamp(row, "filled time", "filled time", "time filled", "entered", required=True),
            fees=abs(optional_number(row, "commission", "comm") or 0.0),
            row=row.number,
            fill_id=row.get("order #", "order id"),
            opens=opens,
            raw_row=dict(row.values),
        )

"""Webull: orders history export (stock and option order lists share the layout)."""

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


class WebullParser(FillParser):
    name = "webull"
    label = "Webull"
    priority = 40
    signature = frozenset({"symbol", "side", "status", "filled", "avg price", "filled time"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        if row.get("status").strip().lower() != "filled":
            return None  # cancelled, failed, pending
        side, opens = classify_action(row.get("side"))
        if side is None:
            raise ValueError(f"unknown side {row.get('side')!r}")

        return Fill(
            symbol=require_text(row, "symbol", "symbol"),
            side=side,
            quantity=require_positive(abs(require_number(row, "filled", "filled")), "filled"),
            price=require_positive(require_number(row, "avg price", "avg price", "price"), "avg price"),
            timestamp=row_timestamp(row, "filled time", "filled time", required=True),
            fees=abs(optional_number(row, "fee", "fees", "commission") or 0.0),
            row=row.number,
            opens=opens,
            raw_row=dict(row.values),
        )

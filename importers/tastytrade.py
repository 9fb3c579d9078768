"""Tastytrade: account transactions history export."""

from typing import Optional

from core.models.asset import AssetClass
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


class TastytradeParser(FillParser):
    name = "tastytrade"
    label = "Tastytrade"
    priority = 30
    signature = frozenset({"date", "type", "action", "symbol", "instrument type", "average price"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        if row.get("type").strip().lower() != "trade":
            return None  # money movement, receive/deliver, dividends

        side, opens = classify_action(row.get("action"))
        if side is None:
            raise ValueError(f"unknown action {row.get('action')!r}")

        # Average Price carries the cash-flow sign; fees are reported negative
        price = abs(require_number(row, "average price", "average price"))
        fees = abs(optional_number(row, "commissions") or 0.0) + abs(optional_number(row, "fees") or 0.0)
        symbol = " ".join(require_text(row, "symbol", "symbol").split())
        asset_class = AssetClass.from_value(row.get("instrument type"))
        multiplier = optional_number(row, "multiplier")
        if asset_class is AssetClass.OPTIONS and multiplier and multiplier > 1:
            price /= multiplier  # option rows quote the per-contract value

        return Fill(
            symbol=symbol,
            side=side,
            quantity=require_positive(abs(require_number(row, "quantity", "quantity")), "quantity"),
            price=require_positive(price, "average price"),
            timestamp=row_timestamp(row, "date", "date", required=True),
            fees=fees,
            row=row.number,
            fill_id=row.get("order #"),
            multiplier=multiplier,
            asset_class=asset_class,
            opens=opens,
            raw_row=dict(row.values),
        )

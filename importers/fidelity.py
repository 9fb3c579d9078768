"""Fidelity: Accounts History export.

Blank lines precede the header and a disclaimer follows the data. Actions
are free text ("YOU BOUGHT APPLE INC (AAPL) (Cash)"); quantities are
signed and rows are newest first. Option symbols carry a leading dash.
"""

from typing import Optional

from core.models.asset import AssetClass
from core.models.trade import Fill
from importers.base import (
    FillParser,
    classify_action,
    optional_number,
    require_positive,
    row_timestamp,
)
from importers.csv_utils import CsvRow


class FidelityParser(FillParser):
    name = "fidelity"
    label = "Fidelity"
    priority = 40
    signature = frozenset({"run date", "action", "symbol", "quantity", "price ($)"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        action = row.get("action")
        if "reinvest" in action.lower():
            return None
        side, opens = classify_action(action)
        quantity = optional_number(row, "quantity")
        price = optional_number(row, "price ($)")
        symbol = row.get("symbol").strip()
        if side is None or not quantity or price is None or not symbol:
            return None

        is_option = symbol.startswith("-")
        fees = abs(optional_number(row, "commission ($)") or 0.0) + abs(optional_number(row, "fees ($)") or 0.0)
        return Fill(
            symbol=symbol.lstrip("-"),
            side=side,
            quantity=abs(quantity),
            price=require_positive(price, "price"),
            timestamp=row_timestamp(row, "run date", "run date", required=True),
            fees=fees,
            row=row.number,
            asset_class=AssetClass.OPTIONS if is_option else None,
            opens=opens,
            raw_row=dict(row.values),
        )

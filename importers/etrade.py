"""E*Trade: transaction history download ("For Account:" preamble, newest first)."""

from typing import Optional

from core.models.asset import AssetClass
from core.models.trade import Fill
from importers.base import (
    FillParser,
    classify_action,
    optional_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow

_SECURITY_TYPES = {
    "eq": AssetClass.STOCKS,
    "optn": AssetClass.OPTIONS,
    "mf": AssetClass.STOCKS,
}


class ETradeParser(FillParser):
    name = "etrade"
    label = "E*Trade"
    priority = 40
    signature = frozenset({"transactiondate", "transactiontype", "securitytype", "symbol", "quantity", "price"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        side, opens = classify_action(row.get("transactiontype"))
        quantity = optional_number(row, "quantity")
        price = optional_number(row, "price")
        if side is None or not quantity or price is None:
            return None

        security = row.get("securitytype").strip().lower()
        return Fill(
            symbol=require_text(row, "symbol", "symbol"),
            side=side,
            quantity=abs(quantity),
            price=require_positive(price, "price"),
            timestamp=row_timestamp(row, "transaction date", "transactiondate", required=True),
            fees=abs(optional_number(row, "commission") or 0.0),
            row=row.number,
            asset_class=_SECURITY_TYPES.get(security) or AssetClass.from_value(security),
            opens=opens,
            raw_row=dict(row.values),
        )

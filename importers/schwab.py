"""Charles Schwab: brokerage account transactions export.

The file opens with a title line ("Transactions for account ...") above the
header and closes with a "Transactions Total" row. Rows are newest first
and carry dates only.
"""

import re
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

# "AAPL 01/19/2024 150.00 C"
_OPTION_RE = re.compile(r"^\S+ \d{2}/\d{2}/\d{4} [\d.]+ [CP]$")


class SchwabParser(FillParser):
    name = "schwab"
    label = "Charles Schwab"
    priority = 40
    signature = frozenset({"date", "action", "symbol", "quantity", "price", "fees & comm", "amount"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        side, opens = classify_action(row.get("action"))
        quantity = optional_number(row, "quantity")
        price = optional_number(row, "price")
        if side is None or not quantity or price is None:
            return None  # dividends, interest, transfers, totals

        symbol = require_text(row, "symbol", "symbol")
        is_option = bool(_OPTION_RE.match(symbol)) or opens is not None
        return Fill(
            symbol=symbol,
            side=side,
            quantity=abs(quantity),
            price=require_positive(price, "price"),
            timestamp=row_timestamp(row, "date", "date", required=True),
            fees=abs(optional_number(row, "fees & comm") or 0.0),
            row=row.number,
            asset_class=AssetClass.OPTIONS if is_option else None,
            opens=opens,
            raw_row=dict(row.values),
        )

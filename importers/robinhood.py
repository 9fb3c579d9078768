"""Robinhood: account activity report.

Trade rows are identified by Trans Code: Buy/Sell for shares, BTO/STC/STO/BTC
for options. Option rows name the underlying in Instrument and the contract
in Description, so the description becomes the symbol to keep strikes apart.
"""

from typing import Optional

from core.models.asset import AssetClass
from core.models.side import Side
from core.models.trade import Fill
from importers.base import (
    FillParser,
    optional_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow

_TRADE_CODES = {
    "buy": (Side.LONG, None),
    "sell": (Side.SHORT, None),
    "bto": (Side.LONG, True),
    "stc": (Side.SHORT, False),
    "sto": (Side.SHORT, True),
    "btc": (Side.LONG, False),
}
_OPTION_CODES = {"bto", "stc", "sto", "btc"}


class RobinhoodParser(FillParser):
    name = "robinhood"
    label = "Robinhood"
    priority = 40
    signature = frozenset({"activity date", "instrument", "trans code", "quantity", "price"})
    newest_first = True

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        code = row.get("trans code").strip().lower()
        if code not in _TRADE_CODES:
            return None  # dividends, ACH, fees, Gold
        side, opens = _TRADE_CODES[code]

        is_option = code in _OPTION_CODES
        symbol = require_text(row, "instrument", "instrument")
        if is_option:
            symbol = " ".join(row.get("description").split()) or symbol

        return Fill(
            symbol=symbol,
            side=side,
            quantity=require_positive(abs(optional_number(row, "quantity") or 0.0), "quantity"),
            price=require_positive(optional_number(row, "price"), "price"),
            timestamp=row_timestamp(row, "activity date", "activity date", required=True),
            row=row.number,
            asset_class=AssetClass.OPTIONS if is_option else None,
            opens=opens,
            raw_row=dict(row.values),
        )

"""Interactive Brokers: Flex Query trade exports and Activity Statements.

Activity Statements are multi-section files where every line starts with
the section name and a row kind (``Trades,Header,...`` / ``Trades,Data,...``);
each asset category may repeat its own header. Flex exports are a plain
table with one execution per row.
"""

from typing import Optional, Sequence

from core.models.asset import AssetClass
from core.models.side import Side
from core.models.trade import Fill
from importers.base import (
    FillParser,
    optional_number,
    require_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow, CsvTable, normalize_header, normalize_headers, read_rows, read_table

FLEX_COLUMNS = frozenset({"symbol", "quantity", "tradeprice"})
ACTIVITY_COLUMNS = frozenset({"symbol", "date/time", "quantity", "t. price"})

_CATEGORY_CODES = {
    "stk": AssetClass.STOCKS,
    "fut": AssetClass.FUTURES,
    "opt": AssetClass.OPTIONS,
    "fop": AssetClass.OPTIONS,
    "cash": AssetClass.FX,
    "crypto": AssetClass.CRYPTO,
}

_TRADE_ROW_KINDS = {"order", "trade", "execution", ""}


def _asset_class(value: str) -> Optional[AssetClass]:
    text = value.strip().lower()
    return _CATEGORY_CODES.get(text) or AssetClass.from_value(text)


def _opens(code: str) -> Optional[bool]:
    tokens = {t.strip().upper() for t in code.replace(",", ";").split(";") if t.strip()}
    if "O" in tokens:
        return True
    if "C" in tokens:
        return False
    return None


def _is_statement(names: Sequence[str]) -> bool:
    return list(names[:2]) in (["statement", "header"], ["trades", "header"])


class IBKRParser(FillParser):
    name = "ibkr"
    label = "Interactive Brokers"
    priority = 10
    signature = FLEX_COLUMNS

    def can_parse(self, header: Sequence[str]) -> bool:
        names = normalize_headers(header)
        found = set(names)
        return _is_statement(names) or FLEX_COLUMNS <= found or ACTIVITY_COLUMNS <= found

    def read(self, text: str) -> CsvTable:
        rows = read_rows(text)
        if not any(len(r) > 1 and normalize_header(r[0]) == "trades" for r in rows):
            table = read_table(text, FLEX_COLUMNS)
            return table if table.header else read_table(text, ACTIVITY_COLUMNS)

        header: list = []
        seen: list = []
        data = []
        for number, cells in enumerate(rows, start=1):
            if len(cells) < 3 or normalize_header(cells[0]) != "trades":
                continue
            kind = normalize_header(cells[1])
            if kind == "header":
                header = normalize_headers(cells[2:])
                seen.extend(h for h in header if h not in seen)
            elif kind == "data" and header:
                values = dict(zip(header, cells[2:]))
                data.append(CsvRow(number=number, values=values))
        return CsvTable(header=seen, rows=data)

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        kind = row.get("datadiscriminator", "levelofdetail").lower()
        if kind not in _TRADE_ROW_KINDS:
            return None  # SubTotal / Total / summary lines

        symbol = require_text(row, "symbol", "symbol")
        quantity = require_number(row, "quantity", "quantity")
        if quantity == 0:
            raise ValueError("zero quantity")
        side = Side.from_value(row.get("buy/sell")) or (Side.LONG if quantity > 0 else Side.SHORT)
        price = require_positive(require_number(row, "price", "t. price", "tradeprice"), "price")

        return Fill(
            symbol=symbol,
            side=side,
            quantity=abs(quantity),
            price=price,
            timestamp=row_timestamp(row, "date/time", "date/time", "datetime", "tradedate", required=True),
            fees=abs(optional_number(row, "comm/fee", "ibcommission", "commission") or 0.0),
            row=row.number,
            fill_id=row.get("tradeid", "ibexecid", "transactionid"),
            multiplier=optional_number(row, "multiplier"),
            asset_class=_asset_class(row.get("asset category", "assetclass")),
            opens=_opens(row.get("code", "open/closeindicator")),
            raw_row=dict(row.values),
        )

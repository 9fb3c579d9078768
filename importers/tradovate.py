"""Tradovate: Orders/Fills export and the Performance (paired trades) export."""

from typing import Optional

from core.models.asset import AssetClass
from core.models.side import Side
from core.models.trade import Fill, ParsedTrade
from importers.base import (
    FillParser,
    MultiLayoutParser,
    RoundTripParser,
    optional_number,
    require_number,
    require_positive,
    require_text,
    row_timestamp,
)
from importers.csv_utils import CsvRow

FILLS_COLUMNS = frozenset({"b/s", "contract"})
PERFORMANCE_COLUMNS = frozenset({"symbol", "buyfillid", "sellfillid", "buyprice", "sellprice", "qty"})

_DONE_STATUSES = {"filled", "fill", ""}


class _Fills(FillParser):
    name = "tradovate"
    label = "Tradovate"
    signature = FILLS_COLUMNS

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        status = row.get("status").strip().lower()
        if status not in _DONE_STATUSES:
            return None  # working, canceled, rejected orders
        side = Side.from_value(row.get("b/s"))
        if side is None:
            raise ValueError(f"unknown B/S {row.get('b/s')!r}")
        quantity = require_number(row, "quantity", "filled qty", "filledqty", "qty", "quantity")
        price = require_number(row, "fill price", "avg fill price", "avgprice", "fill price", "price")
        return Fill(
            symbol=require_text(row, "contract", "contract"),
            side=side,
            quantity=require_positive(abs(quantity), "quantity"),
            price=require_positive(price, "fill price"),
            timestamp=row_timestamp(row, "fill time", "fill time", "timestamp", "date", required=True),
            fees=abs(optional_number(row, "fee", "fees", "commission") or 0.0),
            row=row.number,
            fill_id=row.get("fill id", "fillid", "order id", "orderid"),
            asset_class=AssetClass.FUTURES,
            raw_row=dict(row.values),
        )


class _Performance(RoundTripParser):
    name = "tradovate"
    label = "Tradovate"
    signature = PERFORMANCE_COLUMNS

    def parse_trade(self, row: CsvRow) -> Optional[ParsedTrade]:
        bought = row_timestamp(row, "boughtTimestamp", "boughttimestamp", required=True)
        sold = row_timestamp(row, "soldTimestamp", "soldtimestamp", required=True)
        buy_price = require_positive(require_number(row, "buyPrice", "buyprice"), "buyPrice")
        sell_price = require_positive(require_number(row, "sellPrice", "sellprice"), "sellPrice")

        # Whichever leg came first opened the position
        long_trade = bought <= sold
        return ParsedTrade(
            symbol=require_text(row, "symbol", "symbol"),
            side=Side.LONG if long_trade else Side.SHORT,
            quantity=require_positive(abs(require_number(row, "qty", "qty")), "qty"),
            entry_price=buy_price if long_trade else sell_price,
            exit_price=sell_price if long_trade else buy_price,
            open_at=bought if long_trade else sold,
            close_at=sold if long_trade else bought,
            pnl=optional_number(row, "pnl"),
            asset_class=AssetClass.FUTURES,
            broker=self.name,
            external_id=f"{row.get('buyfillid')}+{row.get('sellfillid')}",
        )


class TradovateParser(MultiLayoutParser):
    name = "tradovate"
    label = "Tradovate"
    priority = 20
    signature = FILLS_COLUMNS
    layouts = (_Performance(), _Fills())

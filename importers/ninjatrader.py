"""NinjaTrader: Trade Performance "Trades" grid and the Executions grid."""

from typing import Optional

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

TRADES_COLUMNS = frozenset({"instrument", "market pos.", "entry price", "exit price"})
EXECUTIONS_COLUMNS = frozenset({"instrument", "action", "quantity", "price", "e/x"})


class _TradesGrid(RoundTripParser):
    name = "ninjatrader"
    label = "NinjaTrader"
    signature = TRADES_COLUMNS

    def skip_row(self, row: CsvRow) -> bool:
        return not row.get("instrument")

    def parse_trade(self, row: CsvRow) -> Optional[ParsedTrade]:
        side = Side.from_value(row.get("market pos."))
        if side is None:
            raise ValueError(f"unknown market position {row.get('market pos.')!r}")
        quantity = require_positive(require_number(row, "quantity", "qty", "quantity"), "quantity")
        commission = abs(optional_number(row, "commission") or 0.0)
        profit = optional_number(row, "profit")

        return ParsedTrade(
            symbol=require_text(row, "instrument", "instrument"),
            side=side,
            quantity=quantity,
            entry_price=require_positive(require_number(row, "entry price", "entry price"), "entry price"),
            exit_price=require_positive(require_number(row, "exit price", "exit price"), "exit price"),
            fees=commission,
            open_at=row_timestamp(row, "entry time", "entry time", required=True),
            close_at=row_timestamp(row, "exit time", "exit time"),
            # "Profit" is reported net of commission
            pnl=profit,
            setup=row.get("strategy", "entry name"),
            broker=self.name,
            external_id=row.get("trade number"),
        )


class _ExecutionsGrid(FillParser):
    name = "ninjatrader"
    label = "NinjaTrader"
    signature = EXECUTIONS_COLUMNS

    def parse_fill(self, row: CsvRow) -> Optional[Fill]:
        action = row.get("action")
        side = Side.from_value(action)
        if side is None:
            raise ValueError(f"unknown action {action!r}")
        entry_exit = row.get("e/x").strip().lower()
        return Fill(
            symbol=require_text(row, "instrument", "instrument"),
            side=side,
            quantity=require_positive(require_number(row, "quantity", "quantity"), "quantity"),
            price=require_positive(require_number(row, "price", "price"), "price"),
            timestamp=row_timestamp(row, "time", "time", required=True),
            fees=abs(optional_number(row, "commission") or 0.0),
            row=row.number,
            fill_id=row.get("id", "order id"),
            opens=True if entry_exit == "entry" else False if entry_exit == "exit" else None,
            raw_row=dict(row.values),
        )


class NinjaTraderParser(MultiLayoutParser):
    name = "ninjatrader"
    label = "NinjaTrader"
    priority = 20
    signature = TRADES_COLUMNS
    layouts = (_TradesGrid(), _ExecutionsGrid())

"""
FIFO pairing of broker executions into round-trip trades.

Fills are grouped per symbol and walked in time order. Each opening fill
becomes a lot; a fill on the opposite side closes lots first-in first-out,
splitting a lot when only part of it is closed. Every closing fill yields
one trade whose entry is the quantity-weighted price of the lots it
consumed. A closing fill larger than the open position flips it: the
excess opens a new lot.

Fees are allocated pro rata: a lot carries its share of the opening fill's
fees, and the closing fill's fees are split across what it closed.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, Iterable, List, Optional, Tuple

from core.asset_class import normalize_symbol
from core.logging_utils import get_logger
from core.models.side import Side
from core.models.trade import Fill, ParsedTrade, ParserResult

logger = get_logger(__name__)

QTY_EPSILON = 1e-9


@dataclass
class _Lot:
    fill: Fill
    remaining: float
    fees: float  # fees still attached to ``remaining``

    def take(self, quantity: float) -> float:
        """Detach ``quantity`` from the lot and return its share of fees."""
        share = self.fees * (quantity / self.remaining) if self.remaining > 0 else 0.0
        self.remaining -= quantity
        self.fees -= share
        return share


def _sort_key(item: Tuple[int, Fill]) -> Tuple:
    position, fill = item
    ts = fill.timestamp
    return (ts is None, ts.timestamp() if isinstance(ts, datetime) else 0.0, position)


def _fill_label(fill: Fill) -> str:
    return f"row {fill.row}" if fill.row else (fill.fill_id or "fill")


class FillMatcher:
    """Pairs opening and closing fills into ParsedTrade records."""

    def __init__(self, broker: str, emit_open: bool = True):
        self.broker = broker
        self.emit_open = emit_open

    def match(self, fills: Iterable[Fill]) -> ParserResult:
        result = ParserResult()
        groups: Dict[str, List[Tuple[int, Fill]]] = {}
        for position, fill in enumerate(fills):
            key = normalize_symbol(fill.symbol) or fill.symbol
            groups.setdefault(key, []).append((position, fill))

        for symbol in groups:
            ordered = [fill for _, fill in sorted(groups[symbol], key=_sort_key)]
            self._match_symbol(symbol, ordered, result)

        result.trades.sort(key=lambda t: (t.open_at is None, t.open_at.timestamp() if t.open_at else 0.0))
        logger.debug(
            "[FILLS] %s: %d trades, %d warnings",
            self.broker, len(result.trades), len(result.warnings),
        )
        return result

    def _match_symbol(self, symbol: str, fills: List[Fill], result: ParserResult) -> None:
        lots: Deque[_Lot] = deque()
        lot_side: Optional[Side] = None

        for fill in fills:
            if fill.quantity <= QTY_EPSILON or fill.price <= 0:
                result.warnings.append(
                    f"{symbol}: {_fill_label(fill)} skipped (quantity {fill.quantity}, price {fill.price})"
                )
                continue

            if not lots or fill.side is lot_side:
                if fill.opens is False:
                    result.warnings.append(
                        f"{symbol}: closing fill at {_fill_label(fill)} has no open position "
                        f"(qty {fill.quantity:g})"
                    )
                    continue
                lots.append(_Lot(fill=fill, remaining=fill.quantity, fees=fill.fees))
                lot_side = fill.side
                continue

            remaining = self._close(lots, lot_side, fill, result)
            if remaining > QTY_EPSILON:
                if fill.opens is False:
                    result.warnings.append(
                        f"{symbol}: closing fill at {_fill_label(fill)} exceeds the open position "
                        f"by {remaining:g}"
                    )
                else:
                    fees = fill.fees * (remaining / fill.quantity)
                    lots.append(_Lot(fill=fill, remaining=remaining, fees=fees))
                    lot_side = fill.side
            if not lots:
                lot_side = None

        for lot in lots:
            result.warnings.append(
                f"{symbol}: {lot.remaining:g} from {_fill_label(lot.fill)} left open (no closing fill)"
            )
            if self.emit_open:
                result.trades.append(self._open_trade(lot, lot_side))

    def _close(
        self,
        lots: Deque[_Lot],
        lot_side: Side,
        fill: Fill,
        result: ParserResult,
    ) -> float:
        """Close lots against ``fill``; returns the quantity left over."""
        remaining = fill.quantity
        closed_qty = 0.0
        notional = 0.0
        fees = 0.0
        first: Optional[Fill] = None
        ids: List[str] = []

        while lots and remaining > QTY_EPSILON:
            lot = lots[0]
            quantity = min(lot.remaining, remaining)
            fees += lot.take(quantity)
            notional += lot.fill.price * quantity
            closed_qty += quantity
            remaining -= quantity
            first = first or lot.fill
            if lot.fill.fill_id and lot.fill.fill_id not in ids:
                ids.append(lot.fill.fill_id)
            if lot.remaining <= QTY_EPSILON:
                lots.popleft()

        fees += fill.fees * (closed_qty / fill.quantity)
        if fill.fill_id:
            ids.append(fill.fill_id)

        result.trades.append(ParsedTrade(
            symbol=first.symbol,
            side=lot_side,
            quantity=closed_qty,
            entry_price=notional / closed_qty,
            exit_price=fill.price,
            fees=fees,
            multiplier=first.multiplier or fill.multiplier,
            asset_class=first.asset_class or fill.asset_class,
            open_at=first.timestamp,
            close_at=fill.timestamp,
            broker=self.broker,
            raw_row=dict(fill.raw_row),
            external_id="+".join(ids),
        ))
        return remaining

    def _open_trade(self, lot: _Lot, side: Side) -> ParsedTrade:
        fill = lot.fill
        return ParsedTrade(
            symbol=fill.symbol,
            side=side,
            quantity=lot.remaining,
            entry_price=fill.price,
            fees=lot.fees,
            multiplier=fill.multiplier,
            asset_class=fill.asset_class,
            open_at=fill.timestamp,
            broker=self.broker,
            raw_row=dict(fill.raw_row),
            external_id=fill.fill_id,
        )


def match_fills(fills: Iterable[Fill], broker: str) -> ParserResult:
    return FillMatcher(broker).match(fills)

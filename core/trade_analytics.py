"""
Trade Analytics - aggregate journal statistics over closed trades.

Works on ParsedTrade records or plain mappings with the same field names
(as loaded back from the ``trades`` table). Open trades are counted but
excluded from every performance figure.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from core.helpers.validation import coerce_number, parse_number, safe_ratio
from core.models.side import Outcome
from core.risk_reward import calculate_actual_r, calculate_pnl, resolve_multiplier, trade_outcome

NO_GROUP = "Unassigned"


@dataclass(frozen=True)
class AggregateStats:
    total_trades: int = 0
    closed_trades: int = 0
    open_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    win_rate: float = 0.0          # percent of closed trades
    total_pnl: float = 0.0
    avg_pnl: float = 0.0
    total_r: float = 0.0
    avg_r: float = 0.0
    avg_win_r: float = 0.0
    avg_loss_r: float = 0.0        # positive magnitude
    best_trade: float = 0.0
    worst_trade: float = 0.0
    expectancy: float = 0.0        # in R
    profit_factor: float = 0.0
    max_drawdown: float = 0.0      # currency, peak-to-trough of cumulative P&L
    current_streak: int = 0        # +N wins / -N losses
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    std_dev_r: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    avg_duration_hours: float = 0.0  # closed trades with both timestamps

    def to_dict(self) -> dict:
        return asdict(self)


def _field(trade: Any, name: str) -> Any:
    if isinstance(trade, Mapping):
        return trade.get(name)
    return getattr(trade, name, None)


def _is_closed(trade: Any) -> bool:
    return coerce_number(_field(trade, "exit_price")) > 0


def trade_r(trade: Any) -> float:
    """Realized R of a closed trade, net of fees.

    A stored ``actual_r`` wins; otherwise it is derived from prices.
    """
    stored = parse_number(_field(trade, "actual_r"))
    if stored is not None:
        return stored
    multiplier = resolve_multiplier(
        _field(trade, "multiplier"), _field(trade, "symbol"), _field(trade, "asset_class")
    )
    return calculate_actual_r(
        _field(trade, "entry_price"),
        _field(trade, "stop_price"),
        _field(trade, "exit_price"),
        _field(trade, "quantity"),
        multiplier,
        _field(trade, "side"),
        _field(trade, "fees"),
    )


def _timestamp(trade: Any, name: str) -> Optional[datetime]:
    value = _field(trade, name)
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _close_time(trade: Any) -> Optional[datetime]:
    return _timestamp(trade, "close_at") or _timestamp(trade, "open_at")


def trade_duration(trade: Any, now: Optional[datetime] = None) -> Optional[timedelta]:
    """Time from open to close; open trades run until ``now`` (UTC now by default).

    None without an open timestamp or when the close precedes the open.
    """
    opened = _timestamp(trade, "open_at")
    if opened is None:
        return None
    closed = _timestamp(trade, "close_at") or now or datetime.now(timezone.utc)
    if closed.tzinfo is None:
        closed = closed.replace(tzinfo=timezone.utc)
    if closed < opened:
        return None
    return closed - opened


def format_duration(duration: Optional[timedelta]) -> str:
    """Compact label: 2d 3h, 1h 5m, 12m or 40s."""
    if duration is None:
        return "-"
    total = int(duration.total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m"
    return f"{seconds}s"


def _sorted_closed(trades: Iterable[Any]) -> List[Any]:
    """Closed trades in close order; undated trades keep their input order at the end."""
    closed = [t for t in trades if _is_closed(t)]
    dated = [(i, t, _close_time(t)) for i, t in enumerate(closed)]
    dated.sort(key=lambda item: (item[2] is None, item[2].timestamp() if item[2] else 0, item[0]))
    return [t for _, t, _ in dated]


def _streaks(outcomes: List[Outcome]) -> tuple:
    current = 0
    last: Optional[Outcome] = None
    longest_win = longest_loss = 0
    for outcome in outcomes:
        if outcome is Outcome.BE:
            current, last = 0, None
            continue
        current = current + 1 if outcome is last else 1
        last = outcome
        if outcome is Outcome.WIN:
            longest_win = max(longest_win, current)
        else:
            longest_loss = max(longest_loss, current)
    signed = current if last is Outcome.WIN else -current if last is Outcome.LOSS else 0
    return signed, longest_win, longest_loss


def calculate_stats(trades: Iterable[Any]) -> AggregateStats:
    """Aggregate performance statistics for a set of trades."""
    trades = list(trades or [])
    if not trades:
        return AggregateStats()

    closed = _sorted_closed(trades)
    if not closed:
        return AggregateStats(total_trades=len(trades), open_trades=len(trades))

    pnls = np.array([calculate_pnl(t) for t in closed], dtype=float)
    outcomes = [trade_outcome(p, True) for p in pnls]
    r_values = np.array([trade_r(t) for t in closed], dtype=float)

    wins = sum(1 for o in outcomes if o is Outcome.WIN)
    losses = sum(1 for o in outcomes if o is Outcome.LOSS)
    breakeven = len(outcomes) - wins - losses
    win_rate = wins / len(closed) * 100

    nonzero_r = r_values[r_values != 0]
    win_r = nonzero_r[nonzero_r > 0]
    loss_r = np.abs(nonzero_r[nonzero_r < 0])
    avg_r = float(nonzero_r.mean()) if nonzero_r.size else 0.0
    avg_win_r = float(win_r.mean()) if win_r.size else 0.0
    avg_loss_r = float(loss_r.mean()) if loss_r.size else 0.0
    expectancy = (win_rate / 100) * avg_win_r - (1 - win_rate / 100) * avg_loss_r

    gross_win = float(pnls[pnls > 0].sum())
    gross_loss = float(np.abs(pnls[pnls < 0]).sum())
    profit_factor = safe_ratio(gross_win, gross_loss)

    equity = np.cumsum(pnls)
    peaks = np.maximum.accumulate(np.concatenate(([0.0], equity)))[1:]
    max_drawdown = float((peaks - equity).max())

    current, longest_win, longest_loss = _streaks(outcomes)

    std_r = float(np.std(nonzero_r)) if nonzero_r.size else 0.0
    downside = nonzero_r[nonzero_r < 0]
    downside_std = float(np.std(downside)) if downside.size else 0.0

    durations = [d for d in (trade_duration(t) for t in closed if _timestamp(t, "close_at")) if d is not None]
    avg_hours = sum(d.total_seconds() for d in durations) / len(durations) / 3600 if durations else 0.0

    return AggregateStats(
        total_trades=len(trades),
        closed_trades=len(closed),
        open_trades=len(trades) - len(closed),
        wins=wins,
        losses=losses,
        breakeven=breakeven,
        win_rate=win_rate,
        total_pnl=float(pnls.sum()),
        avg_pnl=float(pnls.mean()),
        total_r=float(nonzero_r.sum()),
        avg_r=avg_r,
        avg_win_r=avg_win_r,
        avg_loss_r=avg_loss_r,
        best_trade=max(float(pnls.max()), 0.0),
        worst_trade=min(float(pnls.min()), 0.0),
        expectancy=expectancy,
        profit_factor=profit_factor,
        max_drawdown=max_drawdown,
        current_streak=current,
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        std_dev_r=std_r,
        sharpe_ratio=safe_ratio(avg_r, std_r),
        sortino_ratio=safe_ratio(avg_r, downside_std),
        avg_duration_hours=avg_hours,
    )


def _strategy_key(trade: Any) -> str:
    return str(_field(trade, "setup") or _field(trade, "strategy") or "") or NO_GROUP


def _day_key(trade: Any) -> str:
    moment = _close_time(trade)
    return moment.strftime("%A") if moment else NO_GROUP


# Upper bound in minutes, label
DURATION_BUCKETS = (
    (5, "< 5m"),
    (30, "5-30m"),
    (120, "30m-2h"),
    (1440, "2-24h"),
)


def _duration_key(trade: Any) -> str:
    if _timestamp(trade, "close_at") is None:
        return NO_GROUP
    duration = trade_duration(trade)
    if duration is None:
        return NO_GROUP
    minutes = duration.total_seconds() / 60
    for limit, label in DURATION_BUCKETS:
        if minutes < limit:
            return label
    return "> 1d"


def _enum_or_text(name: str) -> Callable[[Any], str]:
    def key(trade: Any) -> str:
        value = _field(trade, name)
        if value is None or value == "":
            return NO_GROUP
        return str(getattr(value, "value", value))
    return key


BREAKDOWN_KEYS: Dict[str, Callable[[Any], str]] = {
    "strategy": _strategy_key,
    "symbol": _enum_or_text("symbol"),
    "side": _enum_or_text("side"),
    "session": _enum_or_text("session"),
    "asset_class": _enum_or_text("asset_class"),
    "day": _day_key,
    "duration": _duration_key,
}


def breakdown(
    trades: Iterable[Any],
    key: Union[str, Callable[[Any], str]] = "strategy",
) -> Dict[str, AggregateStats]:
    """Statistics per group, e.g. per strategy, symbol, side, session, weekday or holding time.

    ``key`` is one of BREAKDOWN_KEYS or a callable returning the group name.
    """
    if callable(key):
        key_fn = key
    else:
        try:
            key_fn = BREAKDOWN_KEYS[key]
        except KeyError:
            raise ValueError(f"Unknown breakdown key {key!r}; expected one of {sorted(BREAKDOWN_KEYS)}") from None

    groups: Dict[str, List[Any]] = {}
    for trade in trades:
        groups.setdefault(key_fn(trade), []).append(trade)
    return {name: calculate_stats(group) for name, group in sorted(groups.items())}

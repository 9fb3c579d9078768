"""Aggregate journal statistics."""

from datetime import datetime, timedelta, timezone

import pytest

from core.models.asset import AssetClass
from core.models.side import Side
from core.models.trade import ParsedTrade
from core.trade_analytics import (
    NO_GROUP,
    breakdown,
    calculate_stats,
    format_duration,
    trade_duration,
    trade_r,
)


def _trade(side, entry, stop, exit, day, setup="", qty=10, fees=0.0, symbol="AAPL"):
    return {
        "symbol": symbol,
        "side": side,
        "entry_price": entry,
        "stop_price": stop,
        "exit_price": exit,
        "quantity": qty,
        "multiplier": 1,
        "fees": fees,
        "setup": setup,
        "close_at": datetime(2024, 3, day, 15, 0, tzinfo=timezone.utc) if day else None,
    }


@pytest.fixture
def journal():
    # pnl 100 / -25 / 40 / -50 in close order; R 2 / -0.5 / 2 / -1
    return [
        _trade("LONG", 100, 95, 95, 4),
        _trade("SHORT", 50, 52, 46, 3, setup="VWAP", symbol="TSLA"),
        _trade("LONG", 100, 95, 97.5, 2, setup="ORB"),
        _trade("LONG", 100, 95, 110, 1, setup="ORB"),
        _trade("LONG", 100, 95, None, None, setup="ORB"),
    ]


class TestCalculateStats:
    def test_empty(self):
        stats = calculate_stats([])
        assert stats.total_trades == 0
        assert stats.win_rate == 0
        assert stats.profit_factor == 0

    def test_only_open_trades(self):
        stats = calculate_stats([_trade("LONG", 100, 95, None, None)])
        assert stats.total_trades == 1
        assert stats.open_trades == 1
        assert stats.closed_trades == 0

    def test_counts(self, journal):
        stats = calculate_stats(journal)
        assert stats.total_trades == 5
        assert stats.closed_trades == 4
        assert stats.open_trades == 1
        assert (stats.wins, stats.losses, stats.breakeven) == (2, 2, 0)
        assert stats.win_rate == pytest.approx(50.0)

    def test_pnl(self, journal):
        stats = calculate_stats(journal)
        assert stats.total_pnl == pytest.approx(65.0)
        assert stats.avg_pnl == pytest.approx(16.25)
        assert stats.best_trade == pytest.approx(100.0)
        assert stats.worst_trade == pytest.approx(-50.0)
        assert stats.profit_factor == pytest.approx(140 / 75)

    def test_drawdown_and_streaks_follow_close_order(self, journal):
        stats = calculate_stats(journal)
        # equity 100, 75, 115, 65
        assert stats.max_drawdown == pytest.approx(50.0)
        assert stats.current_streak == -1
        assert stats.longest_win_streak == 1
        assert stats.longest_loss_streak == 1

    def test_r_metrics(self, journal):
        stats = calculate_stats(journal)
        assert stats.total_r == pytest.approx(2.5)
        assert stats.avg_r == pytest.approx(0.625)
        assert stats.avg_win_r == pytest.approx(2.0)
        assert stats.avg_loss_r == pytest.approx(0.75)
        assert stats.expectancy == pytest.approx(0.625)
        assert stats.sharpe_ratio == pytest.approx(stats.avg_r / stats.std_dev_r)
        assert stats.sortino_ratio == pytest.approx(2.5)

    def test_streaks(self):
        trades = [
            _trade("LONG", 100, 95, 101, 1),
            _trade("LONG", 100, 95, 102, 2),
            _trade("LONG", 100, 95, 103, 3),
            _trade("LONG", 100, 95, 100, 4),
            _trade("LONG", 100, 95, 99, 5),
            _trade("LONG", 100, 95, 98, 6),
        ]
        stats = calculate_stats(trades)
        assert stats.longest_win_streak == 3
        assert stats.longest_loss_streak == 2
        assert stats.current_streak == -2
        assert stats.breakeven == 1

    def test_stored_pnl_wins(self):
        trade = _trade("LONG", 100, 95, 110, 1)
        trade["pnl"] = 12.5
        assert calculate_stats([trade]).total_pnl == pytest.approx(12.5)

    def test_parsed_trades(self):
        trade = ParsedTrade(
            symbol="ESH4",
            side=Side.SHORT,
            quantity=1,
            entry_price=5000,
            exit_price=4990,
            stop_price=5005,
            fees=4,
            asset_class=AssetClass.FUTURES,
            broker="generic",
        )
        stats = calculate_stats([trade])
        assert stats.total_pnl == pytest.approx(496.0)
        assert trade_r(trade) == pytest.approx(496 / 250)


class TestBreakdown:
    def test_by_strategy(self, journal):
        groups = breakdown(journal)
        assert list(groups) == sorted(["ORB", "VWAP", NO_GROUP])
        assert groups["ORB"].total_trades == 3
        assert groups["ORB"].closed_trades == 2
        assert groups["VWAP"].total_pnl == pytest.approx(40.0)
        assert groups[NO_GROUP].losses == 1

    def test_by_side_and_symbol(self, journal):
        assert set(breakdown(journal, "side")) == {"LONG", "SHORT"}
        assert breakdown(journal, "symbol")["TSLA"].wins == 1

    def test_callable_key(self, journal):
        groups = breakdown(journal, key=lambda t: "big" if t["quantity"] >= 10 else "small")
        assert list(groups) == ["big"]

    def test_unknown_key(self, journal):
        with pytest.raises(ValueError):
            breakdown(journal, "weather")


def _held(minutes, exit=110):
    opened = datetime(2024, 3, 4, 14, 30, tzinfo=timezone.utc)
    trade = _trade("LONG", 100, 95, exit, None)
    trade["open_at"] = opened
    trade["close_at"] = opened + timedelta(minutes=minutes) if exit else None
    return trade


class TestDuration:
    def test_closed_trade(self):
        assert trade_duration(_held(90)) == timedelta(minutes=90)

    def test_iso_strings_and_naive_values(self):
        trade = {"open_at": "2024-03-04T14:30:00+00:00", "close_at": datetime(2024, 3, 4, 15, 0)}
        assert trade_duration(trade) == timedelta(minutes=30)

    def test_open_trade_runs_until_now(self):
        trade = _held(0, exit=None)
        now = trade["open_at"] + timedelta(hours=3)
        assert trade_duration(trade, now=now) == timedelta(hours=3)

    def test_missing_or_reversed(self):
        assert trade_duration({"close_at": datetime(2024, 3, 4, tzinfo=timezone.utc)}) is None
        assert trade_duration(_held(-5)) is None

    @pytest.mark.parametrize("delta,label", [
        (timedelta(seconds=40), "40s"),
        (timedelta(minutes=12, seconds=5), "12m"),
        (timedelta(hours=1, minutes=5), "1h 5m"),
        (timedelta(days=2, hours=3, minutes=1), "2d 3h"),
        (None, "-"),
    ])
    def test_format(self, delta, label):
        assert format_duration(delta) == label

    def test_average_hold_in_stats(self):
        stats = calculate_stats([_held(30), _held(90)])
        assert stats.avg_duration_hours == pytest.approx(1.0)

    def test_breakdown_by_holding_time(self):
        trades = [_held(2), _held(20), _held(45), _held(300), _held(3000), _held(0, exit=None)]
        groups = breakdown(trades, "duration")
        assert set(groups) == {"< 5m", "5-30m", "30m-2h", "2-24h", "> 1d", NO_GROUP}
        assert groups[NO_GROUP].open_trades == 1

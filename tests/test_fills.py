"""FIFO fill matching."""

from datetime import datetime, timedelta, timezone

import pytest

from core.models.side import Side
from core.models.trade import Fill
from importers.fills import FillMatcher, match_fills

T0 = datetime(2024, 3, 4, 14, 30, tzinfo=timezone.utc)


def fill(side, qty, price, minutes=0, symbol="AAPL", fees=0.0, opens=None, fill_id="", row=0):
    return Fill(
        symbol=symbol,
        side=side,
        quantity=qty,
        price=price,
        timestamp=T0 + timedelta(minutes=minutes),
        fees=fees,
        opens=opens,
        fill_id=fill_id,
        row=row,
    )


class TestRoundTrips:
    def test_simple_long(self):
        result = match_fills([
            fill(Side.LONG, 10, 100.0, 0, fees=1.0, fill_id="a"),
            fill(Side.SHORT, 10, 105.0, 5, fees=1.0, fill_id="b"),
        ], "test")
        assert not result.warnings
        [trade] = result.trades
        assert trade.side is Side.LONG
        assert trade.quantity == 10
        assert trade.entry_price == 100.0
        assert trade.exit_price == 105.0
        assert trade.fees == pytest.approx(2.0)
        assert trade.open_at == T0
        assert trade.close_at == T0 + timedelta(minutes=5)
        assert trade.external_id == "a+b"

    def test_short_first(self):
        result = match_fills([
            fill(Side.SHORT, 2, 50.0, 0, symbol="ESH4"),
            fill(Side.LONG, 2, 45.0, 1, symbol="ESH4"),
        ], "test")
        [trade] = result.trades
        assert trade.side is Side.SHORT
        assert trade.entry_price == 50.0
        assert trade.exit_price == 45.0

    def test_scale_in_weighted_entry(self):
        result = match_fills([
            fill(Side.LONG, 1, 100.0, 0),
            fill(Side.LONG, 3, 104.0, 1),
            fill(Side.SHORT, 4, 110.0, 2),
        ], "test")
        [trade] = result.trades
        assert trade.quantity == 4
        assert trade.entry_price == pytest.approx(103.0)
        assert trade.open_at == T0

    def test_scale_out_splits_lot_and_fees(self):
        result = match_fills([
            fill(Side.LONG, 4, 100.0, 0, fees=4.0),
            fill(Side.SHORT, 1, 101.0, 1, fees=0.5),
            fill(Side.SHORT, 3, 102.0, 2, fees=1.5),
        ], "test")
        first, second = result.trades
        assert (first.quantity, first.exit_price) == (1, 101.0)
        assert (second.quantity, second.exit_price) == (3, 102.0)
        assert first.fees == pytest.approx(1.0 + 0.5)
        assert second.fees == pytest.approx(3.0 + 1.5)
        assert not result.warnings

    def test_flip_opens_opposite_position(self):
        result = match_fills([
            fill(Side.LONG, 2, 100.0, 0),
            fill(Side.SHORT, 5, 98.0, 1, fees=5.0),
            fill(Side.LONG, 3, 95.0, 2),
        ], "test")
        first, second = result.trades
        assert first.side is Side.LONG and first.quantity == 2
        assert first.fees == pytest.approx(2.0)
        assert second.side is Side.SHORT and second.quantity == 3
        assert second.entry_price == 98.0
        assert second.fees == pytest.approx(3.0)
        assert not result.warnings

    def test_symbols_matched_independently(self):
        result = match_fills([
            fill(Side.LONG, 1, 10.0, 0, symbol="AAA"),
            fill(Side.LONG, 1, 20.0, 1, symbol="BBB"),
            fill(Side.SHORT, 1, 11.0, 2, symbol="aaa"),
            fill(Side.SHORT, 1, 21.0, 3, symbol="BBB"),
        ], "test")
        assert sorted(t.symbol for t in result.trades) == ["AAA", "BBB"]

    def test_out_of_order_input_sorted_by_time(self):
        result = match_fills([
            fill(Side.SHORT, 1, 105.0, 10),
            fill(Side.LONG, 1, 100.0, 0),
        ], "test")
        [trade] = result.trades
        assert trade.side is Side.LONG
        assert trade.exit_price == 105.0


class TestUnmatched:
    def test_leftover_lot_warns_and_emits_open_trade(self):
        result = match_fills([
            fill(Side.LONG, 5, 100.0, 0, row=2),
            fill(Side.SHORT, 3, 101.0, 1, row=3),
        ], "test")
        assert len(result.warnings) == 1
        assert "left open" in result.warnings[0]
        closed, still_open = result.trades
        assert closed.quantity == 3
        assert still_open.quantity == 2
        assert still_open.exit_price is None

    def test_open_trades_can_be_suppressed(self):
        result = FillMatcher("test", emit_open=False).match([fill(Side.LONG, 5, 100.0)])
        assert result.trades == []
        assert len(result.warnings) == 1

    def test_closing_fill_without_position(self):
        result = match_fills([fill(Side.SHORT, 1, 100.0, opens=False, row=7)], "test")
        assert result.trades == []
        assert "row 7" in result.warnings[0]

    def test_closing_fill_larger_than_position(self):
        result = match_fills([
            fill(Side.LONG, 1, 100.0, 0),
            fill(Side.SHORT, 3, 101.0, 1, opens=False),
        ], "test")
        [trade] = result.trades
        assert trade.quantity == 1
        assert "exceeds" in result.warnings[0]

    def test_invalid_fill_skipped(self):
        result = match_fills([fill(Side.LONG, 0, 100.0), fill(Side.LONG, 1, 0.0)], "test")
        assert result.trades == []
        assert len(result.warnings) == 2

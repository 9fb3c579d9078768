"""Trade form reducer."""

from datetime import datetime, timezone
from functools import reduce as fold

import pytest

from core.models.asset import AssetClass
from core.models.commission import CommissionSettings
from core.models.side import Confidence, Side
from core.trade_form import (
    ApplyCommissions,
    Reset,
    SetAssetClass,
    SetField,
    SetSide,
    TradeFormState,
    reduce,
    to_trade_payload,
)


def apply(*commands, state=None):
    return fold(reduce, commands, state or TradeFormState())


@pytest.fixture
def nq_long():
    return apply(
        SetField("symbol", "nqz4"),
        SetField("entry_price", "18000"),
        SetField("stop_price", "17990"),
        SetField("take_profit", "18030"),
        SetField("quantity", "1"),
    )


class TestDefaults:
    def test_symbol_drives_asset_class_and_multiplier(self, nq_long):
        assert nq_long.symbol == "NQZ4"
        assert nq_long.asset_class is AssetClass.FUTURES
        assert nq_long.multiplier == 20

    def test_metrics_recomputed(self, nq_long):
        assert nq_long.metrics.risk_usd == 200
        assert nq_long.metrics.reward_usd == 600
        assert nq_long.metrics.rr == pytest.approx(3.0)
        assert nq_long.metrics.side is Side.LONG
        assert nq_long.metrics.confidence is Confidence.HIGH

    def test_manual_asset_class_survives_symbol_change(self):
        state = apply(SetAssetClass("crypto"), SetField("symbol", "AAPL"))
        assert state.asset_class is AssetClass.CRYPTO
        assert state.asset_class_manual

    def test_manual_multiplier_survives_until_cleared(self):
        state = apply(SetField("multiplier", 50), SetField("symbol", "NQ"))
        assert state.multiplier == 50
        state = reduce(state, SetField("multiplier", None))
        assert state.multiplier == 20

    def test_explicit_side_flags_conflict(self, nq_long):
        state = reduce(nq_long, SetSide("short"))
        assert state.side is Side.SHORT
        assert state.metrics.conflict is True
        assert state.metrics.reward_usd == 0


class TestCommissions:
    def test_apply_commissions_open_trade(self, nq_long):
        state = reduce(nq_long, ApplyCommissions(CommissionSettings()))
        assert state.fees == pytest.approx(2.0)

    def test_apply_commissions_round_trip(self, nq_long):
        state = reduce(nq_long, SetField("exit_price", 18020))
        state = reduce(state, ApplyCommissions(CommissionSettings()))
        assert state.fees == pytest.approx(4.0)
        assert state.metrics.net_pnl_usd == pytest.approx(396.0)

    def test_unknown_asset_class_means_no_fees(self):
        state = reduce(TradeFormState(), ApplyCommissions(CommissionSettings()))
        assert state.fees == 0


class TestCommands:
    def test_unknown_field(self):
        with pytest.raises(ValueError):
            reduce(TradeFormState(), SetField("entry", 1))

    def test_unknown_command(self):
        with pytest.raises(TypeError):
            reduce(TradeFormState(), object())

    def test_reset(self, nq_long):
        state = reduce(nq_long, Reset())
        assert state.symbol == ""
        assert state.metrics is not None
        assert state.metrics.rr == 0

    def test_state_is_not_mutated(self, nq_long):
        reduce(nq_long, SetField("entry_price", 1))
        assert nq_long.entry_price == "18000"


class TestPayload:
    def test_closed_trade_payload(self, nq_long):
        opened = datetime(2024, 3, 4, 14, 30, tzinfo=timezone.utc)
        state = apply(
            SetField("exit_price", 18020),
            SetField("fees", 4),
            SetField("open_at", opened),
            SetField("setup", "ORB"),
            state=nq_long,
        )
        payload = to_trade_payload(state)
        assert payload["symbol"] == "NQZ4"
        assert payload["side"] == "LONG"
        assert payload["asset_class"] == "Futures"
        assert payload["multiplier"] == 20
        assert payload["pnl"] == pytest.approx(396.0)
        assert payload["result_r"] == pytest.approx(2.0)
        assert payload["outcome"] == "WIN"
        assert payload["session"] == "NY_AM"
        assert payload["open_at"] == opened.isoformat()
        assert payload["setup"] == "ORB"

    def test_open_trade_payload(self, nq_long):
        payload = to_trade_payload(nq_long)
        assert payload["pnl"] is None
        assert payload["outcome"] == "OPEN"
        assert payload["exit_price"] is None

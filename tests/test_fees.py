"""Commission estimates."""

import pytest

from core.fees import SellSideFees, commission_key, estimate_fees, estimate_total_fees
from core.models.asset import AssetClass
from core.models.commission import CommissionSetting, CommissionSettings
from core.models.side import Side


@pytest.fixture
def schedule():
    return CommissionSettings.from_dict({
        "stocks": {"value": "0.1", "type": "percentage"},
        "futures": {"value": "2.5", "type": "flat"},
    })


class TestEstimateFees:
    def test_percentage(self, schedule):
        assert estimate_fees(schedule, 100, 10, "stocks") == pytest.approx(1.0)

    def test_percentage_uses_multiplier(self, schedule):
        assert estimate_fees(schedule, 100, 10, "stocks", multiplier=2) == pytest.approx(2.0)

    def test_flat_per_unit(self, schedule):
        assert estimate_fees(schedule, 18000, 3, AssetClass.FUTURES, multiplier=20) == pytest.approx(7.5)

    def test_enum_maps_to_schedule_key(self, schedule):
        assert commission_key(AssetClass.FX) == "forex"
        assert estimate_fees(schedule, 1.1, 1, AssetClass.FX) == 0  # default forex is 0%

    @pytest.mark.parametrize("stored,key", [
        ("FX", "forex"),
        ("Futures", "futures"),
        ("Options", "options"),
        ("commodities", "commodities"),
        ("bonds", "bonds"),
    ])
    def test_serialized_asset_class_maps_to_schedule_key(self, stored, key):
        assert commission_key(stored) == key

    def test_stored_fx_trade_is_charged(self):
        settings = CommissionSettings().with_setting("forex", CommissionSetting("1", "flat"))
        assert estimate_fees(settings, 1.1, 2, AssetClass.FX.value) == pytest.approx(2.0)
        assert estimate_fees(settings, 1.1, 2, AssetClass.FX) == pytest.approx(2.0)

    @pytest.mark.parametrize("price,qty", [(0, 10), (100, 0), (-5, 10), ("abc", 10)])
    def test_non_positive_inputs(self, schedule, price, qty):
        assert estimate_fees(schedule, price, qty, "stocks") == 0

    def test_missing_schedule_or_key(self, schedule):
        assert estimate_fees(None, 100, 10, "stocks") == 0
        assert estimate_fees(CommissionSettings.empty(), 100, 10, "stocks") == 0
        assert estimate_fees(schedule, 100, 10, "bonds") == 0

    def test_unparseable_value_is_zero(self):
        settings = CommissionSettings().with_setting("stocks", CommissionSetting("n/a", "flat"))
        assert estimate_fees(settings, 100, 10, "stocks") == 0


class TestEstimateTotalFees:
    def test_symmetric_when_prices_equal(self, schedule):
        single = estimate_fees(schedule, 100, 10, "stocks", 1)
        assert estimate_total_fees(schedule, 100, 100, 10, "stocks", 1) == pytest.approx(single + single)

    def test_legs_priced_separately(self, schedule):
        assert estimate_total_fees(schedule, 100, 110, 10, "stocks") == pytest.approx(1.0 + 1.1)

    def test_sell_side_fees_on_exit_for_long(self, schedule):
        regulatory = SellSideFees(sec_fee_rate=0.001, taf_per_share=0.01, taf_max=0.05)
        total = estimate_total_fees(schedule, 100, 110, 10, "stocks", sell_side_fees=regulatory)
        # sec: 110 * 10 * 0.001 = 1.1, taf capped at 0.05
        assert total == pytest.approx(1.0 + 1.1 + 1.1 + 0.05)

    def test_sell_side_fees_on_entry_for_short(self, schedule):
        regulatory = SellSideFees(sec_fee_rate=0.001)
        total = estimate_total_fees(
            schedule, 100, 90, 10, "stocks", sell_side_fees=regulatory, side=Side.SHORT,
        )
        assert total == pytest.approx(1.0 + 0.9 + 1.0)


class TestCommissionSettings:
    def test_defaults_and_overrides(self):
        settings = CommissionSettings.from_dict({"Futures": {"value": "1.25", "type": "flat"}})
        assert settings["futures"].amount == 1.25
        assert "stocks" in settings
        assert settings.get("STOCKS").type == "percentage"

    def test_bad_type_falls_back_to_percentage(self):
        assert CommissionSetting.from_dict({"value": "1", "type": "weird"}).type == "percentage"

    def test_round_trip_dict(self):
        settings = CommissionSettings()
        assert CommissionSettings.from_dict(settings.to_dict(), base_defaults=False) == settings

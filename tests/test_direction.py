"""Direction inference and side parsing."""

import pytest

from core.direction import assess_direction, infer_direction, infer_side
from core.models.side import Confidence, Side


class TestInferDirection:
    def test_target_above_is_long(self):
        assert infer_direction(100, 90, 110) is Side.LONG

    def test_target_below_is_short(self):
        assert infer_direction(100, 110, 90) is Side.SHORT

    def test_stop_decides_without_target(self):
        assert infer_direction(100, 105, None) is Side.SHORT
        assert infer_direction(100, 95, 0) is Side.LONG

    def test_nothing_defaults_long(self):
        assert infer_direction(100, None, None) is Side.LONG
        assert infer_direction(None, None, None) is Side.LONG


class TestAssessDirection:
    def test_agreeing_levels_high_confidence(self):
        result = assess_direction(100, 110, 90)
        assert result.side is Side.SHORT
        assert result.confidence is Confidence.HIGH
        assert result.conflict is False

    def test_single_level_low_confidence(self):
        result = assess_direction(100, None, 110)
        assert result.side is Side.LONG
        assert result.confidence is Confidence.LOW

    def test_disagreeing_levels(self):
        # Target above says LONG, stop above says SHORT
        result = assess_direction(100, 105, 110)
        assert result.side is Side.LONG
        assert result.conflict is True
        assert result.confidence is Confidence.LOW

    def test_ambiguous(self):
        result = assess_direction(100, 100, None)
        assert result.ambiguous
        assert result.side is Side.LONG

    def test_explicit_side_wins_and_reports_conflict(self):
        result = assess_direction(100, 95, 90, side="short")
        assert result.side is Side.SHORT
        assert result.conflict is True
        assert result.confidence is Confidence.HIGH


class TestInferSide:
    def test_from_prices(self):
        assert infer_side(100, 110) is Side.LONG
        assert infer_side(100, 90) is Side.SHORT
        assert infer_side(100, 100) is Side.SHORT
        assert infer_side(100, None) is None


class TestSideFromValue:
    @pytest.mark.parametrize("raw,expected", [
        ("Buy", Side.LONG),
        ("B", Side.LONG),
        ("long", Side.LONG),
        ("Buy to Cover", Side.LONG),
        ("BTC", Side.LONG),
        ("Sell", Side.SHORT),
        ("SLD", Side.SHORT),
        ("sell_short", Side.SHORT),
        ("Sell to Open", Side.SHORT),
        ("-1", Side.SHORT),
        ("", None),
        ("maybe", None),
        (None, None),
    ])
    def test_from_value(self, raw, expected):
        assert Side.from_value(raw) is expected

    def test_sign(self):
        assert Side.LONG.sign == 1
        assert Side.SHORT.sign == -1

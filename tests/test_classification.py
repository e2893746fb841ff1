"""Tests for flood classification and datum conversion."""

import math

import pytest

from tidal_dashboard.classification import (
    FloodCategory,
    Thresholds,
    classify,
    convert_datum,
)


class TestThresholds:
    """Test suite for the Thresholds record."""

    def test_ascending_thresholds_accepted(self):
        th = Thresholds(minor=4.19, moderate=5.19, major=6.19)
        assert th.minor < th.moderate < th.major

    @pytest.mark.parametrize("values", [(5.0, 4.0, 6.0), (4.0, 4.0, 6.0), (4.0, 6.0, 5.0)])
    def test_non_ascending_thresholds_rejected(self, values):
        with pytest.raises(ValueError):
            Thresholds(*values)

    def test_from_settings(self):
        settings = {'thresholds': {'minor': '4.19', 'moderate': 5.19, 'major': 6.19}}
        th = Thresholds.from_settings(settings)
        assert th == Thresholds(4.19, 5.19, 6.19)


class TestClassify:
    """Test suite for classify()."""

    @pytest.mark.parametrize("level,expected", [
        (6.19, FloodCategory.MAJOR),
        (9.0, FloodCategory.MAJOR),
        (6.18, FloodCategory.MODERATE),
        (5.19, FloodCategory.MODERATE),
        (5.50, FloodCategory.MODERATE),
        (4.19, FloodCategory.MINOR),
        (5.18, FloodCategory.MINOR),
        (4.18, FloodCategory.NO_FLOOD),
        (3.10, FloodCategory.NO_FLOOD),
        (-2.0, FloodCategory.NO_FLOOD),
    ])
    def test_levels(self, thresholds, level, expected):
        assert classify(level, thresholds) == expected

    def test_integer_level(self):
        assert classify(5, Thresholds(4.0, 5.0, 6.0)) == FloodCategory.MODERATE

    @pytest.mark.parametrize("value", [None, "5.5", float("nan"), True, [], {}])
    def test_absent_or_non_numeric_is_no_flood(self, thresholds, value):
        assert classify(value, thresholds) == FloodCategory.NO_FLOOD

    def test_labels(self):
        assert [c.value for c in FloodCategory] == ["No flood", "Minor", "Moderate", "Major"]


class TestConvertDatum:
    """Test suite for convert_datum()."""

    def test_offset_is_added(self):
        assert convert_datum(2.0, 0.75) == pytest.approx(2.75)
        assert convert_datum(2.0, -0.75) == pytest.approx(1.25)

    @pytest.mark.parametrize("value,offset", [(0.0, 0.0), (3.21, 0.37), (-1.5, -2.84), (1e6, 1e-3)])
    def test_negated_offset_is_inverse(self, value, offset):
        assert math.isclose(convert_datum(convert_datum(value, offset), -offset), value, abs_tol=1e-9)

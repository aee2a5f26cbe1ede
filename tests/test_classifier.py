"""
Unit tests for pressure classification.
"""
import pytest

from pressure_forecast.classifier import (
    ABSOLUTE_DELTA,
    ABSOLUTE_LEVEL,
    PERCENT_DELTA,
    PERCENT_DELTA_FALLING,
    ClassifierMode,
    classify,
    classify_change,
    get_policy,
    pressure_change,
)
from pressure_forecast.schemas import SeverityTier


def test_tier_ordering():
    """Tiers escalate Stable < Caution < Danger."""
    assert SeverityTier.STABLE < SeverityTier.CAUTION < SeverityTier.DANGER
    assert max([SeverityTier.CAUTION, SeverityTier.DANGER, SeverityTier.STABLE]) is SeverityTier.DANGER
    assert SeverityTier.DANGER >= SeverityTier.CAUTION


@pytest.mark.parametrize("current,reference", [
    (1013, 1016),
    (1016, 1013),
    (1030, 1020),
    (1020, 1030),
    (990, 993),
])
def test_absolute_large_change_is_danger_regardless_of_level(current, reference):
    assert classify(current, reference, ABSOLUTE_DELTA) is SeverityTier.DANGER


@pytest.mark.parametrize("current,reference", [(1004, 1004), (1000, 1001), (1004.9, 1005.5), (990, 989)])
def test_absolute_low_level_with_small_change_is_danger(current, reference):
    """Below dangerLevel with |delta| < lowThreshold falls back to the level check."""
    assert classify(current, reference, ABSOLUTE_DELTA) is SeverityTier.DANGER


def test_absolute_caution_by_change():
    assert classify(1020, 1018.5, ABSOLUTE_DELTA) is SeverityTier.CAUTION
    assert classify(1020, 1022, ABSOLUTE_DELTA) is SeverityTier.CAUTION


def test_absolute_caution_by_level():
    assert classify(1008, 1008, ABSOLUTE_DELTA) is SeverityTier.CAUTION


def test_absolute_stable():
    assert classify(1013, 1012, ABSOLUTE_DELTA) is SeverityTier.STABLE
    assert classify(1010, 1010, ABSOLUTE_DELTA) is SeverityTier.STABLE


def test_absolute_thresholds_are_inclusive():
    assert classify_change(1013, 3.0, ABSOLUTE_DELTA) is SeverityTier.DANGER
    assert classify_change(1013, -1.5, ABSOLUTE_DELTA) is SeverityTier.CAUTION
    assert classify_change(1013, 1.49, ABSOLUTE_DELTA) is SeverityTier.STABLE


def test_percent_change_value():
    assert pressure_change(1010, 1000, ClassifierMode.PERCENT_DELTA) == pytest.approx(1.0)
    assert pressure_change(1000, 0, ClassifierMode.PERCENT_DELTA) == 0.0


def test_absolute_change_value():
    assert pressure_change(1010, 1013, ClassifierMode.ABSOLUTE_DELTA) == -3.0


def test_percent_large_change_is_danger():
    assert classify(980, 1013, PERCENT_DELTA) is SeverityTier.DANGER
    assert classify(1045, 1013, PERCENT_DELTA) is SeverityTier.DANGER


def test_percent_caution():
    # -1.97%
    assert classify(993, 1013, PERCENT_DELTA) is SeverityTier.CAUTION


def test_percent_has_no_level_fallback():
    """Low absolute pressure with no change stays Stable in percent mode."""
    assert classify(960, 960, PERCENT_DELTA) is SeverityTier.STABLE
    assert classify(1003, 1004, PERCENT_DELTA) is SeverityTier.STABLE


def test_percent_falling_only_escalates_drops():
    # +1.97% rise is ignored, -2.27% drop is Danger, -1.09% drop is Caution
    assert classify(1033, 1013, PERCENT_DELTA_FALLING) is SeverityTier.STABLE
    assert classify(1050, 1013, PERCENT_DELTA_FALLING) is SeverityTier.STABLE
    assert classify(990, 1013, PERCENT_DELTA_FALLING) is SeverityTier.DANGER
    assert classify(1002, 1013, PERCENT_DELTA_FALLING) is SeverityTier.CAUTION


def test_level_policy_ignores_reference():
    assert classify(1004, 900, ABSOLUTE_LEVEL) is SeverityTier.DANGER
    assert classify(1009, 1200, ABSOLUTE_LEVEL) is SeverityTier.CAUTION
    assert classify(1010, 1000, ABSOLUTE_LEVEL) is SeverityTier.STABLE


def test_change_units():
    assert ABSOLUTE_DELTA.change_unit == "hPa"
    assert PERCENT_DELTA.change_unit == "%"


def test_get_policy_by_name():
    assert get_policy("absolute") is ABSOLUTE_DELTA
    assert get_policy("percent-falling") is PERCENT_DELTA_FALLING


def test_get_policy_unknown():
    with pytest.raises(ValueError):
        get_policy("Absolute")

"""
Unit tests for the region coordinate table.
"""
import pytest

from pressure_forecast.errors import UnknownRegion
from pressure_forecast.locations import PREFECTURE_COORDINATES, list_regions, resolve


def test_table_covers_all_prefectures():
    assert len(PREFECTURE_COORDINATES) == 47


def test_resolve_known_region():
    coord = resolve("東京都")
    assert coord.lat == 35.6895
    assert coord.lon == 139.6917


@pytest.mark.parametrize("region", ["UnknownLand", "", "東京", " 東京都", "tokyo"])
def test_resolve_unknown_region(region):
    with pytest.raises(UnknownRegion) as info:
        resolve(region)
    assert info.value.region_id == region
    assert info.value.retryable is False


def test_list_regions_in_table_order():
    regions = list_regions()
    assert regions[0] == "北海道"
    assert regions[-1] == "沖縄県"
    assert len(regions) == 47

from datetime import date
from types import SimpleNamespace

import pytest

from reitql.core.filters import (
    AssetTypeSelector,
    BoundingBox,
    Range,
    escape_like_pattern,
    normalize_asset_type,
    normalize_bbox,
    normalize_building_search,
    normalize_location,
    normalize_range,
    normalize_station,
    normalize_transaction_search,
    parse_ids,
    parse_string_ids,
    tri_state,
)
from reitql.errors import IncompleteRangeSpec, InvalidIdentifier


def test_parse_ids_accepts_numeric_strings_and_ints():
    assert parse_ids(["13", 27, " 101 "], "location.ward_ids") == (13, 27, 101)


def test_parse_ids_empty_list_means_absent():
    assert parse_ids([], "location.city_ids") is None
    assert parse_ids(None, "location.city_ids") is None


@pytest.mark.parametrize("bad", ["abc", "1.5", "", True])
def test_parse_ids_rejects_unparsable(bad):
    with pytest.raises(InvalidIdentifier) as exc:
        parse_ids(["1", bad], "station.station_ids")
    assert exc.value.field == "station.station_ids"
    assert exc.value.value == bad


def test_parse_string_ids_rejects_blank():
    assert parse_string_ids(["corp-a", " corp-b "], "ids") == ("corp-a", "corp-b")
    with pytest.raises(InvalidIdentifier):
        parse_string_ids(["corp-a", "  "], "ids")


def test_range_with_no_bounds_collapses():
    assert normalize_range(None) is None
    assert normalize_range({"min": None, "max": None}) is None
    assert normalize_range(SimpleNamespace(min=date(2025, 1, 1), max=None)) == Range(min=date(2025, 1, 1))


def test_location_with_only_empty_lists_collapses():
    assert normalize_location({"prefecture_ids": [], "ward_ids": None, "city_ids": []}) is None
    loc = normalize_location({"prefecture_ids": ["13"], "city_ids": []})
    assert loc.prefecture_ids == (13,)
    assert loc.city_ids == ()


def test_station_defaults_min_time_and_requires_max_time():
    st = normalize_station({"station_ids": ["1"], "max_time": 5})
    assert st.station_ids == (1,)
    assert st.min_time == 0
    assert normalize_station({"station_ids": [], "max_time": 5}) is None
    with pytest.raises(IncompleteRangeSpec) as exc:
        normalize_station({"station_ids": ["1"], "max_time": None})
    assert exc.value.missing == ["max_time"]


def test_bbox_all_or_nothing():
    assert normalize_bbox({}) is None
    assert normalize_bbox({"north": 1.0, "south": 0.0, "east": 1.0, "west": 0.0}) == BoundingBox(1.0, 0.0, 1.0, 0.0)
    with pytest.raises(IncompleteRangeSpec) as exc:
        normalize_bbox({"north": 1.0, "south": 0.0})
    assert exc.value.field == "latitude_and_longitude"
    assert exc.value.missing == ["east", "west"]


def test_asset_type_absorption():
    everything = AssetTypeSelector()
    assert normalize_asset_type(None) == everything
    assert normalize_asset_type({}) == everything
    assert normalize_asset_type({"is_office": False, "is_hotel": False}) == everything
    assert normalize_asset_type({flag: True for flag in (
        "is_office", "is_retail", "is_hotel", "is_logistic", "is_residential", "is_health_care", "is_other"
    )}) == everything

    only_office = normalize_asset_type({"is_office": True, "is_retail": None})
    assert only_office.include_is_office is True
    assert only_office.include_is_retail is False
    assert not only_office.includes_all


def test_tri_state():
    assert tri_state(None) == (True, True)
    assert tri_state(True) == (True, False)
    assert tri_state(False) == (False, True)


def test_escape_like_pattern():
    assert escape_like_pattern("100%_off\\") == "100\\%\\_off\\\\"


def test_empty_transaction_input_equals_omitted_input():
    assert normalize_transaction_search(None) == normalize_transaction_search({
        "location": {"prefecture_ids": []},
        "transaction_date": {},
        "asset_type": {"is_office": False},
        "j_reit_corporation_ids": [],
        "transaction_categories": [],
    })


def test_building_search_name_is_trimmed():
    assert normalize_building_search({"name": "  Shiba "}).name == "Shiba"
    assert normalize_building_search({"name": "   "}).name is None
    cond = normalize_building_search({"is_transferred": True})
    assert cond.is_transferred == (True, False)
    assert cond.is_delisted == (True, True)

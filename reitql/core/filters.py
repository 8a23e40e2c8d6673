"""Filter normalization.

Turns sparse, optional search inputs (GraphQL input objects or anything exposing the
same attributes) into canonical, validated conditions. Every canonical field is either
a non-empty condition or ``None``; a sub-structure whose fields are all empty collapses
to ``None`` so the composer never sees it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from ..errors import IncompleteRangeSpec, InvalidIdentifier

ASSET_TYPE_FLAGS: Tuple[str, ...] = (
    'is_office',
    'is_retail',
    'is_hotel',
    'is_logistic',
    'is_residential',
    'is_health_care',
    'is_other',
)

BBOX_BOUNDS: Tuple[str, ...] = ('north', 'south', 'east', 'west')


@dataclass(frozen=True)
class Range:
    min: Any = None
    max: Any = None

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None


@dataclass(frozen=True)
class LocationCondition:
    prefecture_ids: Tuple[int, ...] = ()
    ward_ids: Tuple[int, ...] = ()
    city_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class StationCondition:
    station_ids: Tuple[int, ...]
    max_time: int
    min_time: int = 0


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float


@dataclass(frozen=True)
class AssetTypeSelector:
    """Seven include flags; see ``normalize_asset_type`` for the absorption rule."""
    include_is_office: bool = True
    include_is_retail: bool = True
    include_is_hotel: bool = True
    include_is_logistic: bool = True
    include_is_residential: bool = True
    include_is_health_care: bool = True
    include_is_other: bool = True

    def items(self) -> list[tuple[str, bool]]:
        return [(flag, getattr(self, f'include_{flag}')) for flag in ASSET_TYPE_FLAGS]

    @property
    def includes_all(self) -> bool:
        return all(included for _, included in self.items())


@dataclass(frozen=True)
class TransactionSearchCondition:
    location: Optional[LocationCondition] = None
    station: Optional[StationCondition] = None
    bbox: Optional[BoundingBox] = None
    asset_type: AssetTypeSelector = AssetTypeSelector()
    transaction_date: Optional[Range] = None
    transaction_price: Optional[Range] = None
    transaction_categories: Optional[Tuple[int, ...]] = None
    completion_year: Optional[Range] = None
    gross_floor_area: Optional[Range] = None
    press_release_date: Optional[Range] = None
    include_bulk: Optional[bool] = None
    appraisal_price: Optional[Range] = None
    appraisal_cap_rate: Optional[Range] = None
    corporation_ids: Optional[Tuple[str, ...]] = None
    include_delisted: Optional[bool] = None
    use_apportioned_price: Optional[bool] = None

    @property
    def needs_appraisals(self) -> bool:
        return self.appraisal_price is not None or self.appraisal_cap_rate is not None


@dataclass(frozen=True)
class BuildingSearchCondition:
    name: Optional[str] = None
    corporation_ids: Optional[Tuple[str, ...]] = None
    location: Optional[LocationCondition] = None
    station: Optional[StationCondition] = None
    bbox: Optional[BoundingBox] = None
    completed_year: Optional[Range] = None
    land_area: Optional[Range] = None
    gross_floor_area: Optional[Range] = None
    total_leasable_area: Optional[Range] = None
    acquisition_date: Optional[Range] = None
    acquisition_price: Optional[Range] = None
    appraised_price: Optional[Range] = None
    initial_cap_rate: Optional[Range] = None
    cap_rate: Optional[Range] = None
    transfer_date: Optional[Range] = None
    asset_type: AssetTypeSelector = AssetTypeSelector()
    is_transferred: Tuple[bool, bool] = (True, True)
    is_delisted: Tuple[bool, bool] = (True, True)


def _get(raw: Any, name: str, default: Any = None) -> Any:
    if raw is None:
        return default
    if isinstance(raw, dict):
        return raw.get(name, default)
    return getattr(raw, name, default)


def parse_ids(raw: Optional[Iterable[Any]], field: str) -> Optional[Tuple[int, ...]]:
    """Parse external ids into ints. ``None`` and ``[]`` both mean "field absent"."""
    if raw is None:
        return None
    out: list[int] = []
    for value in raw:
        if isinstance(value, bool):
            raise InvalidIdentifier(field, value)
        if isinstance(value, int):
            out.append(value)
            continue
        try:
            out.append(int(str(value).strip()))
        except (TypeError, ValueError):
            raise InvalidIdentifier(field, value) from None
    return tuple(out) or None


def parse_string_ids(raw: Optional[Iterable[Any]], field: str) -> Optional[Tuple[str, ...]]:
    if raw is None:
        return None
    out: list[str] = []
    for value in raw:
        text = str(value).strip() if value is not None else ''
        if not text:
            raise InvalidIdentifier(field, value)
        out.append(text)
    return tuple(out) or None


def normalize_range(raw: Any) -> Optional[Range]:
    if raw is None:
        return None
    rng = Range(min=_get(raw, 'min'), max=_get(raw, 'max'))
    return None if rng.is_empty else rng


def normalize_location(raw: Any) -> Optional[LocationCondition]:
    if raw is None:
        return None
    prefecture_ids = parse_ids(_get(raw, 'prefecture_ids'), 'location.prefecture_ids') or ()
    ward_ids = parse_ids(_get(raw, 'ward_ids'), 'location.ward_ids') or ()
    city_ids = parse_ids(_get(raw, 'city_ids'), 'location.city_ids') or ()
    if not (prefecture_ids or ward_ids or city_ids):
        return None
    return LocationCondition(prefecture_ids=prefecture_ids, ward_ids=ward_ids, city_ids=city_ids)


def normalize_station(raw: Any) -> Optional[StationCondition]:
    if raw is None:
        return None
    station_ids = parse_ids(_get(raw, 'station_ids'), 'station.station_ids')
    if not station_ids:
        return None
    max_time = _get(raw, 'max_time')
    if max_time is None:
        raise IncompleteRangeSpec('station', ['max_time'])
    min_time = _get(raw, 'min_time')
    return StationCondition(
        station_ids=station_ids,
        max_time=max_time,
        min_time=0 if min_time is None else min_time,
    )


def normalize_bbox(raw: Any) -> Optional[BoundingBox]:
    if raw is None:
        return None
    values = {bound: _get(raw, bound) for bound in BBOX_BOUNDS}
    missing = [bound for bound, value in values.items() if value is None]
    if len(missing) == len(BBOX_BOUNDS):
        return None
    if missing:
        raise IncompleteRangeSpec('latitude_and_longitude', missing)
    return BoundingBox(**values)


def normalize_asset_type(raw: Any) -> AssetTypeSelector:
    """Only flags explicitly set to true are included; none set means all included."""
    if raw is None:
        return AssetTypeSelector()
    chosen = {flag: _get(raw, flag) is True for flag in ASSET_TYPE_FLAGS}
    if not any(chosen.values()):
        return AssetTypeSelector()
    return AssetTypeSelector(**{f'include_{flag}': value for flag, value in chosen.items()})


def tri_state(value: Optional[bool]) -> Tuple[bool, bool]:
    """Map an optional toggle to ``(include_true, include_false)``."""
    if value is None:
        return (True, True)
    return (True, False) if value else (False, True)


def escape_like_pattern(text: str) -> str:
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _categories(raw: Optional[Iterable[Any]]) -> Optional[Tuple[int, ...]]:
    if raw is None:
        return None
    values = tuple(int(getattr(c, 'value', c)) for c in raw)
    return values or None


def normalize_transaction_search(raw: Any) -> TransactionSearchCondition:
    return TransactionSearchCondition(
        location=normalize_location(_get(raw, 'location')),
        station=normalize_station(_get(raw, 'station')),
        bbox=normalize_bbox(_get(raw, 'latitude_and_longitude')),
        asset_type=normalize_asset_type(_get(raw, 'asset_type')),
        transaction_date=normalize_range(_get(raw, 'transaction_date')),
        transaction_price=normalize_range(_get(raw, 'transaction_price')),
        transaction_categories=_categories(_get(raw, 'transaction_categories')),
        completion_year=normalize_range(_get(raw, 'completion_year')),
        gross_floor_area=normalize_range(_get(raw, 'gross_floor_area')),
        press_release_date=normalize_range(_get(raw, 'press_release_date')),
        include_bulk=_get(raw, 'include_bulk'),
        appraisal_price=normalize_range(_get(raw, 'appraisal_price')),
        appraisal_cap_rate=normalize_range(_get(raw, 'appraisal_cap_rate')),
        corporation_ids=parse_string_ids(_get(raw, 'j_reit_corporation_ids'), 'j_reit_corporation_ids'),
        include_delisted=_get(raw, 'include_delisted'),
        use_apportioned_price=_get(raw, 'use_apportioned_price'),
    )


def normalize_building_search(raw: Any) -> BuildingSearchCondition:
    name = _get(raw, 'name')
    if name is not None:
        name = name.strip() or None
    return BuildingSearchCondition(
        name=name,
        corporation_ids=parse_string_ids(_get(raw, 'j_reit_corporation_ids'), 'j_reit_corporation_ids'),
        location=normalize_location(_get(raw, 'location')),
        station=normalize_station(_get(raw, 'station')),
        bbox=normalize_bbox(_get(raw, 'latitude_and_longitude')),
        completed_year=normalize_range(_get(raw, 'completed_year')),
        land_area=normalize_range(_get(raw, 'land_area')),
        gross_floor_area=normalize_range(_get(raw, 'gross_floor_area')),
        total_leasable_area=normalize_range(_get(raw, 'total_leasable_area')),
        acquisition_date=normalize_range(_get(raw, 'acquisition_date')),
        acquisition_price=normalize_range(_get(raw, 'acquisition_price')),
        appraised_price=normalize_range(_get(raw, 'appraised_price')),
        initial_cap_rate=normalize_range(_get(raw, 'initial_cap_rate')),
        cap_rate=normalize_range(_get(raw, 'cap_rate')),
        transfer_date=normalize_range(_get(raw, 'transfer_date')),
        asset_type=normalize_asset_type(_get(raw, 'asset_type')),
        is_transferred=tri_state(_get(raw, 'is_transferred')),
        is_delisted=tri_state(_get(raw, 'is_delisted')),
    )


__all__ = [
    'ASSET_TYPE_FLAGS',
    'Range',
    'LocationCondition',
    'StationCondition',
    'BoundingBox',
    'AssetTypeSelector',
    'TransactionSearchCondition',
    'BuildingSearchCondition',
    'parse_ids',
    'parse_string_ids',
    'normalize_range',
    'normalize_location',
    'normalize_station',
    'normalize_bbox',
    'normalize_asset_type',
    'tri_state',
    'escape_like_pattern',
    'normalize_transaction_search',
    'normalize_building_search',
]

"""Predicate trees for search queries.

Predicates are immutable tagged nodes built bottom-up from normalized conditions and
compiled to SQL only at the storage boundary (``reitql.sql.compiler``). Columns are
addressed by ``(source, column)`` where ``source`` names a base table or a lazily joined
table/subquery; the joins a tree needs are exactly the sources it references.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, FrozenSet, Iterable, Iterator, Optional, Sequence, Tuple, Union

from .filters import (
    AssetTypeSelector,
    BoundingBox,
    BuildingSearchCondition,
    LocationCondition,
    Range,
    StationCondition,
    TransactionSearchCondition,
)

# Sources
TRANSACTIONS = 'transactions'
BUILDINGS = 'buildings'
CORPORATIONS = 'corporations'
HOLDINGS = 'holdings'
APPRAISALS = 'appraisals'
CITIES = 'cities'
WARDS = 'wards'
STATIONS = 'stations'
FIRST_ACQUISITIONS = 'first_acquisitions'
LATEST_TRANSACTIONS = 'latest_transactions'
TRANSFERRED_TRANSACTIONS = 'transferred_transactions'
ID_MAPPINGS = 'id_mappings'
LATEST_CAP_RATE_HISTORY = 'latest_cap_rate_history'
LATEST_APPRAISAL_HISTORY = 'latest_appraisal_history'

TRANSACTION_ROOT = 'transaction_search'
BUILDING_ROOT = 'building_search'

# Sources joined unconditionally for each search root
ROOT_SOURCES = {
    TRANSACTION_ROOT: frozenset({TRANSACTIONS, BUILDINGS, CORPORATIONS}),
    BUILDING_ROOT: frozenset({BUILDINGS, HOLDINGS, CORPORATIONS}),
}


@dataclass(frozen=True)
class ColumnRef:
    source: str
    column: str

    def __str__(self) -> str:
        return f"{self.source}.{self.column}"


@dataclass(frozen=True)
class Between:
    """Inclusive range; a missing bound leaves that side open."""
    column: ColumnRef
    low: Any = None
    high: Any = None


@dataclass(frozen=True)
class InList:
    column: ColumnRef
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Equals:
    column: ColumnRef
    value: Any


@dataclass(frozen=True)
class IsNull:
    column: ColumnRef
    negated: bool = False


@dataclass(frozen=True)
class Contains:
    """Literal substring match; LIKE wildcards in ``text`` are escaped when compiled."""
    column: ColumnRef
    text: str


@dataclass(frozen=True)
class Const:
    value: bool


@dataclass(frozen=True)
class WithinDistance:
    """Great-circle distance between two (lon, lat) column pairs, in meters."""
    longitude: ColumnRef
    latitude: ColumnRef
    ref_longitude: ColumnRef
    ref_latitude: ColumnRef
    low: float
    high: float


@dataclass(frozen=True)
class And:
    terms: Tuple['Node', ...]


@dataclass(frozen=True)
class Or:
    terms: Tuple['Node', ...]


Node = Union[Between, InList, Equals, IsNull, Contains, Const, WithinDistance, And, Or]


@dataclass(frozen=True)
class ComposedPredicate:
    predicate: Optional[Node]
    joins: FrozenSet[str]


def all_of(*terms: Optional[Node]) -> Optional[Node]:
    present = tuple(t for t in terms if t is not None)
    if not present:
        return None
    return present[0] if len(present) == 1 else And(present)


def any_of(*terms: Optional[Node]) -> Optional[Node]:
    present = tuple(t for t in terms if t is not None)
    if not present:
        return None
    return present[0] if len(present) == 1 else Or(present)


def columns(node: Optional[Node]) -> Iterator[ColumnRef]:
    if node is None:
        return
    if isinstance(node, (And, Or)):
        for term in node.terms:
            yield from columns(term)
    elif isinstance(node, WithinDistance):
        yield node.longitude
        yield node.latitude
        yield node.ref_longitude
        yield node.ref_latitude
    elif isinstance(node, Const):
        return
    else:
        yield node.column


def sources(node: Optional[Node]) -> FrozenSet[str]:
    return frozenset(ref.source for ref in columns(node))


def required_joins(node: Optional[Node], root: str) -> FrozenSet[str]:
    return sources(node) - ROOT_SOURCES[root]


# --- condition builders ------------------------------------------------------------

def in_list(column: ColumnRef, values: Optional[Iterable[Any]]) -> Optional[InList]:
    values = tuple(values or ())
    # an empty list is "not specified", never IN ()
    return InList(column, values) if values else None


def range_predicate(column: ColumnRef, rng: Optional[Range]) -> Optional[Between]:
    if rng is None or rng.is_empty:
        return None
    return Between(column, rng.min, rng.max)


def switch_column_range(
    switch: ColumnRef,
    cases: Sequence[Tuple[Any, ColumnRef]],
    rng: Optional[Range],
) -> Optional[Node]:
    """Range over a column chosen per row by the value of ``switch``.

    Produces ``OR(switch = v1 AND c1 BETWEEN .., switch = v2 AND c2 BETWEEN .., ...)``.
    """
    if rng is None or rng.is_empty:
        return None
    return any_of(*(all_of(Equals(switch, value), range_predicate(column, rng)) for value, column in cases))


def flag_selector(flags: Iterable[Tuple[bool, ColumnRef]]) -> Optional[Node]:
    """OR of ``(include AND column = 1)``; excluded flags stay in the OR as constant false."""
    return any_of(*(And((Const(bool(include)), Equals(column, 1))) for include, column in flags))


def tri_state_predicate(states: Tuple[bool, bool], when_true: Node, when_false: Node) -> Optional[Node]:
    include_true, include_false = states
    if include_true and include_false:
        return None
    return Or((
        And((Const(include_true), when_true)),
        And((Const(include_false), when_false)),
    ))


def location_predicate(location: Optional[LocationCondition]) -> Optional[Node]:
    if location is None:
        return None
    return any_of(
        in_list(ColumnRef(BUILDINGS, 'city_id'), location.city_ids),
        in_list(ColumnRef(CITIES, 'ward_id'), location.ward_ids),
        in_list(ColumnRef(WARDS, 'prefecture_id'), location.prefecture_ids),
    )


def station_predicate(station: Optional[StationCondition], meters_per_minute: int) -> Optional[Node]:
    if station is None:
        return None
    return all_of(
        in_list(ColumnRef(STATIONS, 'id'), station.station_ids),
        WithinDistance(
            longitude=ColumnRef(BUILDINGS, 'longitude'),
            latitude=ColumnRef(BUILDINGS, 'latitude'),
            ref_longitude=ColumnRef(STATIONS, 'longitude'),
            ref_latitude=ColumnRef(STATIONS, 'latitude'),
            low=station.min_time * meters_per_minute,
            high=station.max_time * meters_per_minute,
        ),
    )


def bbox_predicate(bbox: Optional[BoundingBox]) -> Optional[Node]:
    if bbox is None:
        return None
    return all_of(
        Between(ColumnRef(BUILDINGS, 'latitude'), bbox.south, bbox.north),
        Between(ColumnRef(BUILDINGS, 'longitude'), bbox.west, bbox.east),
    )


def asset_type_predicate(selector: AssetTypeSelector) -> Optional[Node]:
    return flag_selector((included, ColumnRef(BUILDINGS, flag)) for flag, included in selector.items())


# --- composers ---------------------------------------------------------------------

def compose_transaction_search(
    condition: TransactionSearchCondition,
    *,
    meters_per_minute: int = 80,
) -> ComposedPredicate:
    tx = partial(ColumnRef, TRANSACTIONS)
    bld = partial(ColumnRef, BUILDINGS)

    if condition.include_bulk is True and condition.use_apportioned_price is True:
        price = switch_column_range(
            tx('is_bulk'),
            [(1, tx('apportioned_transaction_price')), (0, tx('transaction_price'))],
            condition.transaction_price,
        )
    else:
        price = range_predicate(tx('transaction_price'), condition.transaction_price)

    predicate = all_of(
        location_predicate(condition.location),
        bbox_predicate(condition.bbox),
        station_predicate(condition.station, meters_per_minute),
        range_predicate(tx('transaction_date'), condition.transaction_date),
        price,
        in_list(tx('transaction_category'), condition.transaction_categories),
        range_predicate(bld('completed_year'), condition.completion_year),
        range_predicate(bld('gross_floor_area'), condition.gross_floor_area),
        range_predicate(tx('press_release_date'), condition.press_release_date),
        Equals(tx('is_bulk'), 0) if condition.include_bulk is False else None,
        range_predicate(ColumnRef(APPRAISALS, 'appraisal_price'), condition.appraisal_price),
        range_predicate(ColumnRef(APPRAISALS, 'cap_rate'), condition.appraisal_cap_rate),
        in_list(tx('j_reit_corporation_id'), condition.corporation_ids),
        Equals(ColumnRef(CORPORATIONS, 'is_delisted'), 0) if condition.include_delisted is not True else None,
        asset_type_predicate(condition.asset_type),
    )
    return ComposedPredicate(predicate, required_joins(predicate, TRANSACTION_ROOT))


def compose_building_search(
    condition: BuildingSearchCondition,
    *,
    meters_per_minute: int = 80,
) -> ComposedPredicate:
    bld = partial(ColumnRef, BUILDINGS)
    first = partial(ColumnRef, FIRST_ACQUISITIONS)
    transferred_date = ColumnRef(TRANSFERRED_TRANSACTIONS, 'transaction_date')
    delisted = ColumnRef(CORPORATIONS, 'is_delisted')

    predicate = all_of(
        Contains(bld('name'), condition.name) if condition.name else None,
        in_list(ColumnRef(CORPORATIONS, 'id'), condition.corporation_ids),
        location_predicate(condition.location),
        station_predicate(condition.station, meters_per_minute),
        bbox_predicate(condition.bbox),
        range_predicate(bld('completed_year'), condition.completed_year),
        range_predicate(bld('land'), condition.land_area),
        range_predicate(bld('gross_floor_area'), condition.gross_floor_area),
        range_predicate(ColumnRef(LATEST_TRANSACTIONS, 'total_leasable_area'), condition.total_leasable_area),
        range_predicate(first('transaction_date'), condition.acquisition_date),
        range_predicate(first('transaction_price'), condition.acquisition_price),
        range_predicate(first('cap_rate'), condition.initial_cap_rate),
        range_predicate(ColumnRef(LATEST_APPRAISAL_HISTORY, 'appraisal_price'), condition.appraised_price),
        range_predicate(ColumnRef(LATEST_CAP_RATE_HISTORY, 'cap_rate'), condition.cap_rate),
        range_predicate(transferred_date, condition.transfer_date),
        asset_type_predicate(condition.asset_type),
        tri_state_predicate(condition.is_transferred, IsNull(transferred_date, negated=True), IsNull(transferred_date)),
        tri_state_predicate(condition.is_delisted, Equals(delisted, 1), Equals(delisted, 0)),
    )
    return ComposedPredicate(predicate, required_joins(predicate, BUILDING_ROOT))

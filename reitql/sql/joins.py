"""Search roots and the lazily joined sources they can pull in.

A root is the FROM clause every search of one kind starts from, plus the key columns
that identify a result row. Optional sources are joined only when a predicate or the
sort key references them; each is joined at most once, after its dependencies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Tuple

from sqlalchemy import and_, func, select, true
from sqlalchemy.sql import FromClause

from ..core.predicates import (
    APPRAISALS,
    BUILDING_ROOT,
    BUILDINGS,
    CITIES,
    CORPORATIONS,
    FIRST_ACQUISITIONS,
    HOLDINGS,
    ID_MAPPINGS,
    LATEST_APPRAISAL_HISTORY,
    LATEST_CAP_RATE_HISTORY,
    LATEST_TRANSACTIONS,
    STATIONS,
    TRANSACTION_ROOT,
    TRANSACTIONS,
    TRANSFERRED_TRANSACTIONS,
    WARDS,
)
from ..models import (
    City,
    JReitAppraisal,
    JReitAppraisalHistory,
    JReitBuilding,
    JReitCapRateHistory,
    JReitCorporation,
    JReitDataHubIdMapping,
    JReitTransaction,
    Station,
    TransactionCategoryValue,
    Ward,
)

logger = logging.getLogger(__name__)

Sources = Dict[str, FromClause]


@dataclass(frozen=True)
class JoinDef:
    name: str
    build: Callable[[Sources], Tuple[FromClause, object]]
    requires: Tuple[str, ...] = ()
    isouter: bool = True


@dataclass
class SearchRoot:
    name: str
    base: Callable[[], Tuple[FromClause, Sources]]
    key_columns: Callable[[Sources], List[object]]
    joins: Dict[str, JoinDef] = field(default_factory=dict)

    def expand(self, requested: Iterable[str]) -> List[str]:
        """Requested joins plus their dependencies, in registration order."""
        needed = set()
        stack = list(requested)
        while stack:
            name = stack.pop()
            if name in needed:
                continue
            if name not in self.joins:
                raise ValueError(f"Source '{name}' cannot be joined to {self.name}")
            needed.add(name)
            stack.extend(self.joins[name].requires)
        return [name for name in self.joins if name in needed]

    def build_from(self, requested: FrozenSet[str]) -> Tuple[FromClause, Sources]:
        from_clause, sources = self.base()
        for name in self.expand(requested):
            join = self.joins[name]
            target, onclause = join.build(sources)
            from_clause = from_clause.join(target, onclause, isouter=join.isouter)
            sources[name] = target
        return from_clause, sources


# --- shared subqueries ---------------------------------------------------------------

def _transactions_in_category(category: TransactionCategoryValue, name: str):
    t = JReitTransaction.__table__
    return (
        select(t.c.j_reit_building_id, t.c.j_reit_corporation_id, t.c.transaction_date)
        .where(t.c.transaction_category == int(category))
        .subquery(name)
    )


def first_acquisitions_subquery():
    t = JReitTransaction.__table__
    a = JReitAppraisal.__table__
    return (
        select(
            t.c.j_reit_building_id,
            t.c.j_reit_corporation_id,
            t.c.transaction_price,
            t.c.transaction_date,
            t.c.leasable_area,
            a.c.cap_rate,
            a.c.appraisal_price,
        )
        .select_from(t.outerjoin(a, a.c.id == t.c.j_reit_appraisal_id))
        .where(t.c.transaction_category == int(TransactionCategoryValue.INITIAL_ACQUISITION))
        .subquery('joined_first_acquisitions')
    )


def latest_transactions_subquery():
    t = JReitTransaction.__table__.alias('tr')
    src = JReitTransaction.__table__
    latest = (
        select(
            src.c.j_reit_building_id,
            src.c.j_reit_corporation_id,
            func.max(src.c.transaction_date).label('max_transaction_date'),
        )
        .group_by(src.c.j_reit_building_id, src.c.j_reit_corporation_id)
        .subquery('latest')
    )
    return (
        select(t.c.j_reit_building_id, t.c.j_reit_corporation_id, t.c.leasable_area, t.c.total_leasable_area)
        .select_from(
            t.join(
                latest,
                and_(
                    t.c.j_reit_building_id == latest.c.j_reit_building_id,
                    t.c.j_reit_corporation_id == latest.c.j_reit_corporation_id,
                    t.c.transaction_date == latest.c.max_transaction_date,
                ),
            )
        )
        .subquery('joined_latest_transactions')
    )


def _latest_history_subquery(model, date_column: str, value_column: str, name: str):
    h = model.__table__.alias(f'{name}_rows')
    src = model.__table__
    latest = (
        select(src.c.data_hub_building_id, func.max(src.c[date_column]).label('max_date'))
        .group_by(src.c.data_hub_building_id)
        .subquery(f'{name}_max')
    )
    return (
        select(h.c.data_hub_building_id, h.c[value_column])
        .select_from(
            h.join(
                latest,
                and_(
                    h.c.data_hub_building_id == latest.c.data_hub_building_id,
                    h.c[date_column] == latest.c.max_date,
                ),
            )
        )
        .subquery(name)
    )


def latest_cap_rate_history_subquery():
    return _latest_history_subquery(JReitCapRateHistory, 'closing_date', 'cap_rate', 'joined_latest_cap_rate_history')


def latest_appraisal_history_subquery():
    return _latest_history_subquery(
        JReitAppraisalHistory, 'appraisal_date', 'appraisal_price', 'joined_latest_appraisal_history'
    )


def holdings_subquery():
    t = JReitTransaction.__table__
    return select(t.c.j_reit_building_id, t.c.j_reit_corporation_id).distinct().subquery('holdings')


# --- joins shared by both roots -----------------------------------------------------

def _cities(sources: Sources):
    c = City.__table__
    return c, c.c.id == sources[BUILDINGS].c.city_id


def _wards(sources: Sources):
    w = Ward.__table__
    return w, w.c.id == sources[CITIES].c.ward_id


def _stations(sources: Sources):
    # Cross join; the distance predicate does the matching
    return Station.__table__, true()


def _pair_join(build_subquery: Callable[[], FromClause]):
    def _build(sources: Sources):
        sq = build_subquery()
        holdings = sources[HOLDINGS]
        return sq, and_(
            sq.c.j_reit_building_id == holdings.c.j_reit_building_id,
            sq.c.j_reit_corporation_id == holdings.c.j_reit_corporation_id,
        )
    return _build


def _id_mappings(sources: Sources):
    m = JReitDataHubIdMapping.__table__
    holdings = sources[HOLDINGS]
    return m, and_(
        m.c.j_reit_building_id == holdings.c.j_reit_building_id,
        m.c.j_reit_corporation_id == holdings.c.j_reit_corporation_id,
    )


def _history_join(build_subquery: Callable[[], FromClause]):
    def _build(sources: Sources):
        sq = build_subquery()
        return sq, sq.c.data_hub_building_id == sources[ID_MAPPINGS].c.data_hub_building_id
    return _build


def _appraisals(sources: Sources):
    a = JReitAppraisal.__table__
    return a, a.c.id == sources[TRANSACTIONS].c.j_reit_appraisal_id


# --- roots ---------------------------------------------------------------------------

def _transaction_base():
    t = JReitTransaction.__table__
    b = JReitBuilding.__table__
    c = JReitCorporation.__table__
    from_clause = t.join(b, b.c.id == t.c.j_reit_building_id).join(c, c.c.id == t.c.j_reit_corporation_id)
    return from_clause, {TRANSACTIONS: t, BUILDINGS: b, CORPORATIONS: c}


def _building_base():
    b = JReitBuilding.__table__
    c = JReitCorporation.__table__
    h = holdings_subquery()
    from_clause = b.join(h, h.c.j_reit_building_id == b.c.id).join(c, c.c.id == h.c.j_reit_corporation_id)
    return from_clause, {BUILDINGS: b, HOLDINGS: h, CORPORATIONS: c}


TRANSACTION_SEARCH = SearchRoot(
    name=TRANSACTION_ROOT,
    base=_transaction_base,
    key_columns=lambda s: [s[TRANSACTIONS].c.id],
    joins={
        APPRAISALS: JoinDef(APPRAISALS, _appraisals),
        CITIES: JoinDef(CITIES, _cities),
        WARDS: JoinDef(WARDS, _wards, requires=(CITIES,)),
        STATIONS: JoinDef(STATIONS, _stations, isouter=False),
    },
)

BUILDING_SEARCH = SearchRoot(
    name=BUILDING_ROOT,
    base=_building_base,
    key_columns=lambda s: [s[BUILDINGS].c.id, s[HOLDINGS].c.j_reit_corporation_id],
    joins={
        CITIES: JoinDef(CITIES, _cities),
        WARDS: JoinDef(WARDS, _wards, requires=(CITIES,)),
        STATIONS: JoinDef(STATIONS, _stations, isouter=False),
        FIRST_ACQUISITIONS: JoinDef(FIRST_ACQUISITIONS, _pair_join(first_acquisitions_subquery)),
        LATEST_TRANSACTIONS: JoinDef(LATEST_TRANSACTIONS, _pair_join(latest_transactions_subquery)),
        TRANSFERRED_TRANSACTIONS: JoinDef(
            TRANSFERRED_TRANSACTIONS,
            _pair_join(lambda: _transactions_in_category(
                TransactionCategoryValue.FULL_TRANSFER, 'joined_transferred_transactions'
            )),
        ),
        ID_MAPPINGS: JoinDef(ID_MAPPINGS, _id_mappings),
        LATEST_CAP_RATE_HISTORY: JoinDef(
            LATEST_CAP_RATE_HISTORY, _history_join(latest_cap_rate_history_subquery), requires=(ID_MAPPINGS,)
        ),
        LATEST_APPRAISAL_HISTORY: JoinDef(
            LATEST_APPRAISAL_HISTORY, _history_join(latest_appraisal_history_subquery), requires=(ID_MAPPINGS,)
        ),
    },
)

SEARCH_ROOTS: Dict[str, SearchRoot] = {
    TRANSACTION_ROOT: TRANSACTION_SEARCH,
    BUILDING_ROOT: BUILDING_SEARCH,
}


def get_root(name: str) -> SearchRoot:
    try:
        return SEARCH_ROOTS[name]
    except KeyError:
        raise ValueError(f"Unknown search root: {name}") from None

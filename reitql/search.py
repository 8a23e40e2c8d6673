"""Search planning and execution.

Planning is synchronous and pure: normalize the input, compose the predicate and resolve
the sort and pagination. Execution counts the matches and fetches one ordered page of
keys from storage using the same predicate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional, Sequence

from .auth import Roles
from .core.filters import normalize_building_search, normalize_transaction_search
from .core.predicates import (
    BUILDING_ROOT,
    BUILDINGS,
    CORPORATIONS,
    TRANSACTION_ROOT,
    ColumnRef,
    Node,
    compose_building_search,
    compose_transaction_search,
    in_list,
)
from .core.sorting import (
    TIEBREAKERS,
    PageInfo,
    PageSpec,
    ResolvedSort,
    SortSpec,
    merge_joins,
    resolve_sort,
)
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchPlan:
    root: str
    predicate: Optional[Node]
    predicate_joins: FrozenSet[str]
    sort: ResolvedSort
    page: PageSpec

    @property
    def joins(self) -> FrozenSet[str]:
        return merge_joins(self.predicate_joins, self.sort)


@dataclass
class SearchResult:
    keys: List[tuple] = field(default_factory=list)
    page_info: Optional[PageInfo] = None

    @property
    def total_count(self) -> int:
        return self.page_info.total_count if self.page_info else 0


def _sort_spec(raw: Any) -> Optional[SortSpec]:
    if raw is None or isinstance(raw, SortSpec):
        return raw
    if isinstance(raw, dict):
        return SortSpec(key=raw.get('key'), order=raw.get('order'))
    return SortSpec(key=getattr(raw, 'key', None), order=getattr(raw, 'order', None))


def plan_transaction_search(
    raw_input: Any,
    sort: Any = None,
    pagination: Any = None,
    settings: Optional[Settings] = None,
) -> SearchPlan:
    settings = settings or Settings.from_env()
    composed = compose_transaction_search(
        normalize_transaction_search(raw_input),
        meters_per_minute=settings.walking_meters_per_minute,
    )
    return SearchPlan(
        root=TRANSACTION_ROOT,
        predicate=composed.predicate,
        predicate_joins=composed.joins,
        sort=resolve_sort(_sort_spec(sort), TRANSACTION_ROOT),
        page=PageSpec.resolve(pagination, settings.default_page_limit),
    )


def plan_building_search(
    raw_input: Any,
    sort: Any = None,
    pagination: Any = None,
    settings: Optional[Settings] = None,
) -> SearchPlan:
    settings = settings or Settings.from_env()
    composed = compose_building_search(
        normalize_building_search(raw_input),
        meters_per_minute=settings.walking_meters_per_minute,
    )
    return SearchPlan(
        root=BUILDING_ROOT,
        predicate=composed.predicate,
        predicate_joins=composed.joins,
        sort=resolve_sort(_sort_spec(sort), BUILDING_ROOT),
        page=PageSpec.resolve(pagination, settings.default_page_limit),
    )


async def run_search(storage, plan: SearchPlan) -> SearchResult:
    logger.info(
        f"Running {plan.root}: joins={sorted(plan.joins)} sort={plan.sort.column} "
        f"desc={plan.sort.descending} offset={plan.page.offset} limit={plan.page.limit}"
    )
    # Count before pagination, over the filter joins only
    total_count = await storage.count(plan.root, plan.predicate, plan.predicate_joins)
    keys = await storage.execute(
        plan.root,
        plan.predicate,
        plan.joins,
        plan.sort,
        limit=plan.page.limit,
        offset=plan.page.offset,
    )
    return SearchResult(keys=keys, page_info=PageInfo.build(plan.page, total_count))


async def search_transactions(storage, raw_input, sort=None, pagination=None, settings=None) -> SearchResult:
    plan = plan_transaction_search(raw_input, sort, pagination, settings)
    return await run_search(storage, plan)


async def search_buildings(
    storage,
    roles: Roles,
    raw_input,
    sort=None,
    pagination=None,
    settings=None,
) -> SearchResult:
    plan = plan_building_search(raw_input, sort, pagination, settings)
    if not roles.can_view_j_reit_buildings:
        logger.info(f"Building search denied for principal {roles.principal_id!r}")
        return SearchResult(keys=[], page_info=PageInfo.empty(plan.page))
    return await run_search(storage, plan)


# Plain listing of held buildings, one row per (building, corporation) pair
LISTING_SORT_SOURCES = frozenset({BUILDINGS, CORPORATIONS})


def resolve_listing_sort(raw_sort: Any) -> ResolvedSort:
    """Building and corporation columns only; any other key falls back to building id."""
    spec = _sort_spec(raw_sort)
    if spec is not None and spec.key is not None:
        resolved = resolve_sort(spec, BUILDING_ROOT)
        if resolved.column.source in LISTING_SORT_SOURCES:
            return resolved
        logger.debug(f"Sort key {spec.key!r} is not available for listings; ordering by id")
    return ResolvedSort(
        column=ColumnRef(BUILDINGS, 'id'),
        descending=False,
        tiebreakers=TIEBREAKERS[BUILDING_ROOT],
        root=BUILDING_ROOT,
    )


async def list_buildings(
    storage,
    ids: Optional[Sequence[str]] = None,
    sort: Any = None,
    pagination: Any = None,
    settings: Optional[Settings] = None,
) -> List[tuple]:
    if ids is not None and len(ids) == 0:
        return []
    predicate = in_list(ColumnRef(BUILDINGS, 'id'), ids)
    resolved = resolve_listing_sort(sort)
    # Unpaginated unless the caller asks for a page
    if pagination is not None:
        settings = settings or Settings.from_env()
        page = PageSpec.resolve(pagination, settings.default_page_limit)
    else:
        page = None
    return await storage.execute(
        BUILDING_ROOT,
        predicate,
        merge_joins(frozenset(), resolved),
        resolved,
        limit=page.limit if page else None,
        offset=page.offset if page else None,
    )

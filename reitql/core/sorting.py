"""Sort key resolution and offset pagination.

Null policy: rows whose sort value is null are ordered last for both directions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

import strawberry

from ..errors import InvalidLimit
from .predicates import (
    APPRAISALS,
    BUILDING_ROOT,
    BUILDINGS,
    CORPORATIONS,
    FIRST_ACQUISITIONS,
    HOLDINGS,
    LATEST_APPRAISAL_HISTORY,
    LATEST_CAP_RATE_HISTORY,
    LATEST_TRANSACTIONS,
    ROOT_SOURCES,
    TRANSACTION_ROOT,
    TRANSACTIONS,
    ColumnRef,
)

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10


class _SortOrderEnum(Enum):
    ASC = 'asc'
    DESC = 'desc'


SortOrder = strawberry.enum(_SortOrderEnum, name="SortOrder")  # type: ignore


class _TransactionSortKeyEnum(Enum):
    TRANSACTION_DATE = 'transaction_date'
    TRANSACTION_CATEGORY = 'transaction_category'
    TRANSACTION_PRICE = 'transaction_price'
    PRESS_RELEASE_DATE = 'press_release_date'
    APPORTIONED_TRANSACTION_PRICE = 'apportioned_transaction_price'
    APPRAISAL_PRICE = 'appraisal_price'
    APPRAISAL_CAP_RATE = 'appraisal_cap_rate'


TransactionSortKey = strawberry.enum(_TransactionSortKeyEnum, name="JReitTransactionSortKey")  # type: ignore


class _BuildingSortKeyEnum(Enum):
    COMPLETED_YEAR = 'completed_year'
    LAND_AREA = 'land_area'
    GROSS_FLOOR_AREA = 'gross_floor_area'
    TOTAL_LEASABLE_AREA = 'total_leasable_area'
    INITIAL_LEASABLE_AREA = 'initial_leasable_area'
    CAP_RATE = 'cap_rate'
    INITIAL_CAP_RATE = 'initial_cap_rate'
    APPRAISED_PRICE = 'appraised_price'
    INITIAL_APPRAISED_PRICE = 'initial_appraised_price'
    ACQUISITION_PRICE = 'acquisition_price'
    ACQUISITION_DATE = 'acquisition_date'
    J_REIT_CORPORATION_NAME = 'j_reit_corporation_name'


BuildingSortKey = strawberry.enum(_BuildingSortKeyEnum, name="JReitBuildingSortKey")  # type: ignore


TRANSACTION_SORT_COLUMNS: Dict[Any, ColumnRef] = {
    TransactionSortKey.TRANSACTION_DATE: ColumnRef(TRANSACTIONS, 'transaction_date'),
    TransactionSortKey.TRANSACTION_CATEGORY: ColumnRef(TRANSACTIONS, 'transaction_category'),
    TransactionSortKey.TRANSACTION_PRICE: ColumnRef(TRANSACTIONS, 'transaction_price'),
    TransactionSortKey.PRESS_RELEASE_DATE: ColumnRef(TRANSACTIONS, 'press_release_date'),
    TransactionSortKey.APPORTIONED_TRANSACTION_PRICE: ColumnRef(TRANSACTIONS, 'apportioned_transaction_price'),
    TransactionSortKey.APPRAISAL_PRICE: ColumnRef(APPRAISALS, 'appraisal_price'),
    TransactionSortKey.APPRAISAL_CAP_RATE: ColumnRef(APPRAISALS, 'cap_rate'),
}

BUILDING_SORT_COLUMNS: Dict[Any, ColumnRef] = {
    BuildingSortKey.COMPLETED_YEAR: ColumnRef(BUILDINGS, 'completed_year'),
    BuildingSortKey.LAND_AREA: ColumnRef(BUILDINGS, 'land'),
    BuildingSortKey.GROSS_FLOOR_AREA: ColumnRef(BUILDINGS, 'gross_floor_area'),
    BuildingSortKey.TOTAL_LEASABLE_AREA: ColumnRef(LATEST_TRANSACTIONS, 'total_leasable_area'),
    BuildingSortKey.INITIAL_LEASABLE_AREA: ColumnRef(FIRST_ACQUISITIONS, 'leasable_area'),
    BuildingSortKey.CAP_RATE: ColumnRef(LATEST_CAP_RATE_HISTORY, 'cap_rate'),
    BuildingSortKey.INITIAL_CAP_RATE: ColumnRef(FIRST_ACQUISITIONS, 'cap_rate'),
    BuildingSortKey.APPRAISED_PRICE: ColumnRef(LATEST_APPRAISAL_HISTORY, 'appraisal_price'),
    BuildingSortKey.INITIAL_APPRAISED_PRICE: ColumnRef(FIRST_ACQUISITIONS, 'appraisal_price'),
    BuildingSortKey.ACQUISITION_PRICE: ColumnRef(FIRST_ACQUISITIONS, 'transaction_price'),
    BuildingSortKey.ACQUISITION_DATE: ColumnRef(FIRST_ACQUISITIONS, 'transaction_date'),
    BuildingSortKey.J_REIT_CORPORATION_NAME: ColumnRef(CORPORATIONS, 'name'),
}


@dataclass(frozen=True)
class SortSpec:
    key: Any
    order: Any = SortOrder.ASC

    @property
    def descending(self) -> bool:
        return getattr(self.order, 'value', self.order) == 'desc'


DEFAULT_SORTS: Dict[str, SortSpec] = {
    TRANSACTION_ROOT: SortSpec(TransactionSortKey.TRANSACTION_DATE, SortOrder.DESC),
    BUILDING_ROOT: SortSpec(BuildingSortKey.ACQUISITION_DATE, SortOrder.DESC),
}

SORT_COLUMNS: Dict[str, Dict[Any, ColumnRef]] = {
    TRANSACTION_ROOT: TRANSACTION_SORT_COLUMNS,
    BUILDING_ROOT: BUILDING_SORT_COLUMNS,
}

# Appended after the sort key so page boundaries are deterministic
TIEBREAKERS: Dict[str, Tuple[ColumnRef, ...]] = {
    TRANSACTION_ROOT: (ColumnRef(TRANSACTIONS, 'id'),),
    BUILDING_ROOT: (ColumnRef(BUILDINGS, 'id'), ColumnRef(HOLDINGS, 'j_reit_corporation_id')),
}


@dataclass(frozen=True)
class ResolvedSort:
    column: ColumnRef
    descending: bool
    tiebreakers: Tuple[ColumnRef, ...] = ()
    root: str = TRANSACTION_ROOT

    @property
    def joins(self) -> FrozenSet[str]:
        return frozenset({self.column.source}) - ROOT_SOURCES[self.root]


def resolve_sort(spec: Optional[SortSpec], root: str) -> ResolvedSort:
    """Map a sort key to its concrete column, falling back to the root's default sort."""
    spec = spec if spec is not None and spec.key is not None else DEFAULT_SORTS[root]
    try:
        column = SORT_COLUMNS[root][spec.key]
    except KeyError:
        raise ValueError(f"Unsupported sort key for {root}: {spec.key!r}") from None
    return ResolvedSort(column=column, descending=spec.descending, tiebreakers=TIEBREAKERS[root], root=root)


def merge_joins(predicate_joins: FrozenSet[str], sort: ResolvedSort) -> FrozenSet[str]:
    """Union of filter and sort joins; a join both need appears once."""
    return frozenset(predicate_joins) | sort.joins


@dataclass(frozen=True)
class PageSpec:
    offset: int = DEFAULT_OFFSET
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if self.limit is None or self.limit <= 0:
            raise InvalidLimit(self.limit, self.offset, f"limit must be a positive integer, got {self.limit!r}")
        if self.offset is None or self.offset < 0:
            raise InvalidLimit(self.limit, self.offset, f"offset must be non-negative, got {self.offset!r}")

    @classmethod
    def resolve(cls, raw: Any = None, default_limit: int = DEFAULT_LIMIT) -> "PageSpec":
        """Build from an optional pagination input; absent fields take offset 0 and ``default_limit``."""
        if raw is None:
            return cls(DEFAULT_OFFSET, default_limit)
        if isinstance(raw, dict):
            offset, limit = raw.get('offset'), raw.get('limit')
        else:
            offset, limit = getattr(raw, 'offset', None), getattr(raw, 'limit', None)
        return cls(
            DEFAULT_OFFSET if offset is None else offset,
            default_limit if limit is None else limit,
        )


@dataclass(frozen=True)
class PageInfo:
    page: int
    total_pages: int
    total_count: int

    @classmethod
    def build(cls, page: PageSpec, total_count: int) -> "PageInfo":
        return cls(
            page=page.offset // page.limit,
            total_pages=-(-total_count // page.limit),
            total_count=total_count,
        )

    @classmethod
    def empty(cls, page: PageSpec) -> "PageInfo":
        return cls.build(page, 0)


__all__ = [
    'SortOrder',
    'TransactionSortKey',
    'BuildingSortKey',
    'TRANSACTION_SORT_COLUMNS',
    'BUILDING_SORT_COLUMNS',
    'SortSpec',
    'ResolvedSort',
    'resolve_sort',
    'merge_joins',
    'PageSpec',
    'PageInfo',
]

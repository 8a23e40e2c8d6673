"""SQLAlchemy-backed storage used by searches and batch loaders."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Sequence, Union

from sqlalchemy import func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters import BaseAdapter, get_adapter
from ..core.predicates import Node
from ..core.sorting import ResolvedSort
from ..errors import StorageUnavailable
from .compiler import compile_predicate, resolve_column
from .joins import SearchRoot, get_root

logger = logging.getLogger(__name__)

RootRef = Union[str, SearchRoot]


class SQLStorage:
    """Executes search plans and keyed lookups on one request's session.

    Statements are serialized with a per-instance lock since an ``AsyncSession``
    does not allow concurrent operations.
    """

    def __init__(self, session: AsyncSession, adapter: Optional[BaseAdapter] = None):
        self.session = session
        self._adapter = adapter
        self._lock = asyncio.Lock()

    @property
    def adapter(self) -> BaseAdapter:
        if self._adapter is None:
            dialect_name = self.session.get_bind().dialect.name
            self._adapter = get_adapter(dialect_name)
            logger.debug(f"Using {self._adapter.name} adapter for dialect {dialect_name}")
        return self._adapter

    async def _run(self, stmt):
        async with self._lock:
            try:
                return await self.session.execute(stmt)
            except (OperationalError, InterfaceError, PoolTimeoutError) as e:
                logger.error(f"Storage failure: {e}")
                raise StorageUnavailable(str(e)) from e

    def _filtered(self, root: RootRef, predicate: Optional[Node], joins: Iterable[str]):
        root = get_root(root) if isinstance(root, str) else root
        from_clause, sources = root.build_from(frozenset(joins))
        keys = root.key_columns(sources)
        stmt = select(*keys).select_from(from_clause)
        if predicate is not None:
            stmt = stmt.where(compile_predicate(predicate, sources, self.adapter))
        return stmt, keys, sources

    async def execute(
        self,
        root: RootRef,
        predicate: Optional[Node],
        joins: Iterable[str],
        sort: ResolvedSort,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[tuple]:
        """Ordered key tuples for one page of matches."""
        stmt, keys, sources = self._filtered(root, predicate, joins)
        # A sort join may yield several rows per key; collapse to one value per key
        column = resolve_column(sort.column, sources)
        sort_value = func.max(column) if sort.descending else func.min(column)
        order_by = self.adapter.order_nulls_last(sort_value, sort.descending)
        order_by.extend(resolve_column(ref, sources).asc() for ref in sort.tiebreakers)
        stmt = stmt.group_by(*keys).order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._run(stmt)
        return [tuple(row) for row in result.all()]

    async def count(self, root: RootRef, predicate: Optional[Node], joins: Iterable[str]) -> int:
        """Number of distinct keys matching ``predicate``."""
        stmt, _, _ = self._filtered(root, predicate, joins)
        result = await self._run(select(func.count()).select_from(stmt.distinct().subquery('matches')))
        return int(result.scalar_one())

    async def fetch_by_keys(
        self,
        model: Any,
        key_column: str,
        keys: Sequence[Any],
        order_by: Sequence[Any] = (),
    ) -> List[Any]:
        if not keys:
            return []
        column = getattr(model, key_column)
        stmt = select(model).where(column.in_(list(keys)))
        if order_by:
            stmt = stmt.order_by(*order_by)
        result = await self._run(stmt)
        return list(result.scalars().all())

    async def fetch_where(
        self,
        model: Any,
        clause: Any = None,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Any]:
        stmt = select(model)
        if clause is not None:
            stmt = stmt.where(clause)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._run(stmt)
        return list(result.scalars().all())

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, false, or_, true

from ..adapters import BaseAdapter
from ..core.filters import escape_like_pattern
from ..core.predicates import (
    And,
    Between,
    ColumnRef,
    Const,
    Contains,
    Equals,
    InList,
    IsNull,
    Node,
    Or,
    WithinDistance,
)
from .joins import Sources


def resolve_column(ref: ColumnRef, sources: Sources):
    try:
        source = sources[ref.source]
    except KeyError:
        raise ValueError(f"Source '{ref.source}' is not joined for column {ref}") from None
    return source.c[ref.column]


def compile_predicate(node: Node, sources: Sources, adapter: BaseAdapter) -> Any:
    """Translate a predicate tree into a SQLAlchemy boolean expression."""
    if isinstance(node, And):
        return and_(*(compile_predicate(t, sources, adapter) for t in node.terms))
    if isinstance(node, Or):
        return or_(*(compile_predicate(t, sources, adapter) for t in node.terms))
    if isinstance(node, Const):
        return true() if node.value else false()
    if isinstance(node, Between):
        col = resolve_column(node.column, sources)
        if node.low is not None and node.high is not None:
            return col.between(node.low, node.high)
        if node.low is not None:
            return col >= node.low
        return col <= node.high
    if isinstance(node, InList):
        return resolve_column(node.column, sources).in_(list(node.values))
    if isinstance(node, Equals):
        return resolve_column(node.column, sources) == node.value
    if isinstance(node, IsNull):
        col = resolve_column(node.column, sources)
        return col.is_not(None) if node.negated else col.is_(None)
    if isinstance(node, Contains):
        pattern = f"%{escape_like_pattern(node.text)}%"
        return resolve_column(node.column, sources).like(pattern, escape='\\')
    if isinstance(node, WithinDistance):
        distance = adapter.distance_sphere(
            resolve_column(node.longitude, sources),
            resolve_column(node.latitude, sources),
            resolve_column(node.ref_longitude, sources),
            resolve_column(node.ref_latitude, sources),
        )
        return distance.between(node.low, node.high)
    raise TypeError(f"Unsupported predicate node: {node!r}")

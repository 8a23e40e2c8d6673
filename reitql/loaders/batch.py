"""Batch loader construction on top of Strawberry's DataLoader.

Each loader coalesces the keys requested during one event-loop tick into a single
call of its fetch function. Loaders live in a per-request ``RequestLoaders`` and
their caches die with it.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, List, Sequence, TypeVar

from strawberry.dataloader import DataLoader

logger = logging.getLogger(__name__)

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')

Fetch = Callable[[List[K]], Awaitable[Dict[K, Any]]]


def group_rows(rows: Iterable[V], key: Callable[[V], K]) -> Dict[K, List[V]]:
    """Group rows by key, keeping the fetch order inside each group."""
    grouped: Dict[K, List[V]] = {}
    for row in rows:
        grouped.setdefault(key(row), []).append(row)
    return grouped


def align(keys: Sequence[K], found: Dict[K, Any], many: bool) -> List[Any]:
    """One value per requested key; missing keys map to None or an empty list."""
    if many:
        return [list(found.get(k, ())) for k in keys]
    return [found.get(k) for k in keys]


def make_loader(name: str, fetch: Fetch, *, many: bool = False) -> DataLoader:
    async def load_fn(keys: List[K]) -> List[Any]:
        unique = list(dict.fromkeys(keys))
        logger.debug(f"{name}: dispatching batch of {len(unique)} keys")
        try:
            found = await fetch(unique)
        except Exception as e:
            # The whole batch fails; every pending key sees the same error
            logger.error(f"{name}: batch of {len(unique)} keys failed: {e}")
            raise
        return align(keys, found, many)

    return DataLoader(load_fn=load_fn)

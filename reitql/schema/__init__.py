from __future__ import annotations

import strawberry
from strawberry.schema.config import StrawberryConfig

from .context import build_context, get_loaders, get_roles, get_settings, get_storage
from .query import Query
from .types import BIG_INT_SCALAR, BigInt

schema = strawberry.Schema(query=Query, config=StrawberryConfig(scalar_map={BigInt: BIG_INT_SCALAR}))

__all__ = [
    'schema',
    'Query',
    'build_context',
    'get_loaders',
    'get_roles',
    'get_settings',
    'get_storage',
]

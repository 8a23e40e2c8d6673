"""reitql public API and lightweight lazy exports.

Importing the package does not build the GraphQL schema; the models and the core
composition layer can be imported without pulling in Strawberry type construction.

Exposes:
- schema, Query, build_context (resolved lazily from .schema)
- Settings, Roles
- search_transactions, search_buildings, plan_transaction_search, plan_building_search
- RequestLoaders, SQLStorage, create_engine, create_session_factory
"""
from __future__ import annotations

__version__ = "0.1.0"


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name in {'schema', 'Query', 'build_context'}:
        _schema = _importlib.import_module(__name__ + '.schema')
        return getattr(_schema, name)
    if name in {'search_transactions', 'search_buildings', 'plan_transaction_search', 'plan_building_search'}:
        _search = _importlib.import_module(__name__ + '.search')
        return getattr(_search, name)
    if name in {'create_engine', 'create_session_factory'}:
        _db = _importlib.import_module(__name__ + '.db')
        return getattr(_db, name)
    if name == 'Settings':
        from .settings import Settings as _Settings
        return _Settings
    if name == 'Roles':
        from .auth import Roles as _Roles
        return _Roles
    if name == 'RequestLoaders':
        from .loaders import RequestLoaders as _RequestLoaders
        return _RequestLoaders
    if name == 'SQLStorage':
        from .sql import SQLStorage as _SQLStorage
        return _SQLStorage
    raise AttributeError(name)


__all__ = [
    'schema', 'Query', 'build_context',
    'search_transactions', 'search_buildings', 'plan_transaction_search', 'plan_building_search',
    'create_engine', 'create_session_factory',
    'Settings', 'Roles', 'RequestLoaders', 'SQLStorage',
]

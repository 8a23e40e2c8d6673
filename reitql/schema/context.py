"""Per-request GraphQL context: session, roles, settings and the lazily built loaders."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Roles
from ..loaders import RequestLoaders
from ..settings import Settings
from ..sql import SQLStorage

logger = logging.getLogger(__name__)

_LOADERS_KEY = '_reitql_loaders'


def build_context(
    db_session: AsyncSession,
    roles: Optional[Roles] = None,
    settings: Optional[Settings] = None,
    **extra: Any,
) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {
        'db_session': db_session,
        'roles': roles or Roles(),
        'settings': settings or Settings.from_env(),
    }
    ctx.update(extra)
    return ctx


def _context(info) -> Dict[str, Any]:
    ctx = info.context if info is not None else None
    if ctx is None:
        raise ValueError("GraphQL context is missing")
    return ctx


def get_session(info) -> AsyncSession:
    session = _context(info).get('db_session')
    if session is None:
        raise ValueError("No db_session in context")
    return session


def get_loaders(info) -> RequestLoaders:
    """Loaders bound to this request; created on first use and cached in the context."""
    ctx = _context(info)
    loaders = ctx.get(_LOADERS_KEY)
    if loaders is None:
        loaders = RequestLoaders(SQLStorage(get_session(info)))
        ctx[_LOADERS_KEY] = loaders
        logger.debug("Created request loaders")
    return loaders


def get_storage(info) -> SQLStorage:
    return get_loaders(info).storage


def get_roles(info) -> Roles:
    roles = _context(info).get('roles')
    if roles is None:
        return Roles()
    if isinstance(roles, Roles):
        return roles
    return Roles.from_mapping(roles)


def get_settings(info) -> Settings:
    return _context(info).get('settings') or Settings.from_env()

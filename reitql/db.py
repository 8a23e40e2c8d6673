"""Engine and session factory helpers."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .adapters.sqlite import DISTANCE_FUNCTION_NAME, distance_sphere
from .settings import Settings

logger = logging.getLogger(__name__)


def register_sqlite_functions(engine: AsyncEngine) -> None:
    """Install the spherical distance function on every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _register(dbapi_connection, connection_record):  # pragma: no cover - driver callback
        dbapi_connection.create_function(DISTANCE_FUNCTION_NAME, 4, distance_sphere)


def create_engine(
    url: Optional[str] = None,
    *,
    echo: Optional[bool] = None,
    settings: Optional[Settings] = None,
    **kwargs,
) -> AsyncEngine:
    settings = settings or Settings.from_env()
    url = url or settings.database_url
    echo = settings.sql_echo if echo is None else echo
    engine = create_async_engine(url, echo=echo, future=True, **kwargs)
    if engine.dialect.name == 'sqlite':
        register_sqlite_functions(engine)
    logger.info(f"Created engine for dialect: {engine.dialect.name}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

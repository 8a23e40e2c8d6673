"""Test configuration and fixtures for reitql."""

from dotenv import load_dotenv
import pytest
import asyncio
import os
import sys
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from reitql.db import create_engine, create_session_factory
from reitql.models import Base

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="session", autouse=True)
def event_loop_policy():
    """Set event loop policy for Windows compatibility."""
    if sys.platform.startswith("win"):
        # Use SelectorEventLoop instead of ProactorEventLoop on Windows
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    yield


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function."""
    test_db_url = os.getenv('REITQL_TEST_DATABASE_URL')

    if test_db_url:
        try:
            if test_db_url.startswith("postgresql"):
                # asyncpg: minimal pool to avoid event loop issues between tests
                engine = create_engine(
                    test_db_url,
                    pool_size=1,
                    max_overflow=0,
                    pool_pre_ping=False,
                    pool_recycle=-1,
                )
            else:
                engine = create_engine(
                    test_db_url,
                    pool_size=5,
                    max_overflow=10,
                    pool_recycle=3600,
                    pool_pre_ping=True,
                )

            # Ensure a clean slate before tests: drop then create all tables
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
                await conn.run_sync(Base.metadata.create_all)

            is_external_db = True
            print(f"Using external database: {test_db_url}")

        except Exception as e:
            print(f"Failed to connect to external database ({test_db_url}): {e}")
            raise
    else:
        # In-memory SQLite; create_engine registers the distance function
        engine = create_engine("sqlite+aiosqlite:///:memory:", echo=False)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = False
        print("Using SQLite in-memory database")

    yield engine

    if is_external_db:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except Exception as e:
            print(f"Failed to clean up external database: {e}")

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async_session = create_session_factory(engine)

    async with async_session() as session:
        yield session


# Import fixtures from fixtures module
from tests.fixtures import (
    sample_geography,
    sample_corporations,
    sample_buildings,
    sample_transactions,
    sample_histories,
    populated_db,
)

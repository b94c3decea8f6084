"""Pytest fixtures for PostgreSQL integration tests."""
import os
import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from stock_checker.core.config import Settings
from stock_checker.services import SqlTickerStore
import logging

logger = logging.getLogger(__name__)

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a test database is configured."""
    if TEST_DATABASE_URL:
        return
    skip = pytest.mark.skip(reason="TEST_DATABASE_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
async def test_engine():
    """
    Create test database engine for integration tests.
    
    WARNING: the stock_likes table is truncated before each test, so point
    TEST_DATABASE_URL at a throwaway database.
    """
    # Reuse the driver rewrite applied to DATABASE_URL
    url = Settings(database_url=TEST_DATABASE_URL).database_url
    logger.info("Creating test engine")
    
    engine = create_async_engine(url, pool_size=20, max_overflow=10)
    yield engine
    
    logger.info("Disposing test engine")
    await engine.dispose()


@pytest.fixture
async def store(test_engine):
    """SqlTickerStore on a clean stock_likes table."""
    store = SqlTickerStore(test_engine, timeout=10.0)
    await store.init_schema()
    
    async with test_engine.begin() as conn:
        await conn.execute(text("TRUNCATE TABLE stock_likes"))
    
    yield store

"""
Pytest configuration and shared fixtures for Shop BFF testing.
"""

import os

# Settings are read at import time; keep the module-level engine off and the
# webhook secret known before anything from shop_bff is imported.
os.environ["CACHE_ENABLED"] = "false"
os.environ["SHOPIFY_SHOP_DOMAIN"] = "test-shop"
os.environ["SHOPIFY_ACCESS_TOKEN"] = "shpat_test"
os.environ["SHOPIFY_WEBHOOK_SECRET"] = "test-webhook-secret"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from shop_bff.db.session import create_engine_from_url, create_session_factory, init_models  # noqa: E402
from shop_bff.repositories import CustomerRepository, DraftOrderRepository  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with the cache schema created."""
    test_engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def customer_repo(db_session) -> CustomerRepository:
    return CustomerRepository(db_session)


@pytest.fixture
def draft_order_repo(db_session) -> DraftOrderRepository:
    return DraftOrderRepository(db_session)


@pytest.fixture
def mock_shopify_client():
    """Create a mock Shopify client."""
    return AsyncMock()

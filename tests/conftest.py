"""Test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import pytest_asyncio
from helpers import FakeClock, FakePostgrest, make_product

from storefront.core.cache import QueryCache
from storefront.core.cache import provider as cache_provider
from storefront.core.cache import stats as cache_stats
from storefront.core.query import FocusEvents
from storefront.services.supabase_client import SupabaseClient

BACKEND_URL = "https://db.example.test/rest/v1"


@pytest.fixture(autouse=True)
def _isolate_caches():
    cache_provider._caches.clear()  # type: ignore[attr-defined]
    cache_stats.reset()
    yield
    cache_provider._caches.clear()  # type: ignore[attr-defined]
    cache_stats.reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> QueryCache[Any]:
    return QueryCache(namespace="test", default_stale_seconds=60, clock=clock)


@pytest.fixture
def focus() -> FocusEvents:
    return FocusEvents()


@pytest.fixture
def backend() -> FakePostgrest:
    return FakePostgrest(
        {
            "products": [make_product(str(i)) for i in range(1, 4)],
            "product_clicks": [],
            "website_users": [],
        }
    )


@pytest_asyncio.fixture
async def supabase(backend: FakePostgrest):
    client = SupabaseClient(
        base_url=BACKEND_URL,
        api_key="test-key",
        transport=httpx.MockTransport(backend.handler),
    )
    yield client
    await client.close()

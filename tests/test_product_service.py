import asyncio

import pytest
from helpers import make_product

from storefront.core.cache import QueryCache
from storefront.models.product import ProductCreate, ProductUpdate
from storefront.services.product_service import ProductService
from storefront.services.supabase_client import SupabaseError


@pytest.fixture
def catalog(clock) -> QueryCache:
    return QueryCache(namespace="catalog", default_stale_seconds=86400, clock=clock)


@pytest.fixture
def service(supabase, catalog) -> ProductService:
    return ProductService(client=supabase, cache=catalog)


@pytest.mark.asyncio
async def test_fetch_product_reads_through_cache(service, backend, catalog) -> None:
    product = await service.fetch_product("2")

    assert product is not None
    assert product.id == "2"
    assert product.description == ""
    assert product.images == []
    assert "product:2" in catalog

    again = await service.fetch_product("2")
    assert again == product
    assert len(backend.requests_for("products")) == 1


@pytest.mark.asyncio
async def test_concurrent_product_reads_share_one_query(service, backend) -> None:
    results = await asyncio.gather(*[service.fetch_product("1") for _ in range(10)])

    assert {p.id for p in results} == {"1"}
    assert len(backend.requests_for("products")) == 1


@pytest.mark.asyncio
async def test_missing_or_inactive_product_is_none_and_not_cached(
    service, backend, catalog
) -> None:
    backend.tables["products"].append(make_product("9", is_active=False))

    assert await service.fetch_product("404") is None
    assert await service.fetch_product("9") is None
    assert "product:404" not in catalog
    assert "product:9" not in catalog


@pytest.mark.asyncio
async def test_fetch_product_propagates_backend_errors(service, backend, catalog) -> None:
    backend.fail_with = (500, {"message": "boom"})

    with pytest.raises(SupabaseError):
        await service.fetch_product("1")
    assert len(catalog) == 0


@pytest.mark.asyncio
async def test_fetch_products_pages_newest_first(service, backend) -> None:
    backend.tables["products"].append(make_product("4", category="books"))

    first_page = await service.fetch_products(limit=2)
    second_page = await service.fetch_products(limit=2, offset=2)
    books = await service.fetch_products(category="books")

    assert [p.id for p in first_page] == ["4", "3"]
    assert [p.id for p in second_page] == ["2", "1"]
    assert [p.id for p in books] == ["4"]


@pytest.mark.asyncio
async def test_fetch_products_treats_all_as_no_category(service, catalog) -> None:
    await service.fetch_products(category="all", limit=24)

    assert "products:all:24:0" in catalog


@pytest.mark.asyncio
async def test_similar_prefers_amazon_then_category(service, backend) -> None:
    backend.tables["products"].extend(
        [
            make_product("10", is_amazon_product=True, category="kitchen"),
            make_product("11", is_amazon_product=True, category="garden"),
            make_product("12", category="kitchen"),
        ]
    )

    amazon = await service.fetch_similar_products("10")
    regular = await service.fetch_similar_products("1")

    assert [p.id for p in amazon] == ["11"]
    assert {p.id for p in regular} == {"2", "3"}


@pytest.mark.asyncio
async def test_similar_falls_back_to_latest(service, backend) -> None:
    backend.tables["products"].append(make_product("20", category="unique"))

    similar = await service.fetch_similar_products("20", limit=2)

    assert [p.id for p in similar] == ["3", "2"]


@pytest.mark.asyncio
async def test_similar_empty_result_is_not_cached(service, catalog) -> None:
    assert await service.fetch_similar_products("404") == []
    assert not any(key.startswith("similar:") for key in catalog.keys())


@pytest.mark.asyncio
async def test_similar_and_featured_degrade_to_empty_on_error(service, backend) -> None:
    backend.fail_with = (503, {"message": "unavailable"})

    assert await service.fetch_similar_products("1") == []
    assert await service.fetch_featured_products() == []


@pytest.mark.asyncio
async def test_featured_products_are_cached_by_limit(service, backend, catalog) -> None:
    featured = await service.fetch_featured_products(limit=2)
    await service.fetch_featured_products(limit=2)

    assert [p.id for p in featured] == ["3", "2"]
    assert "featured:2" in catalog
    assert len(backend.requests_for("products")) == 1


@pytest.mark.asyncio
async def test_preload_warms_cache(service, catalog) -> None:
    loaded = await service.preload_products(["1", "2", "404"])

    assert loaded == 2
    assert "product:1" in catalog and "product:2" in catalog


@pytest.mark.asyncio
async def test_fetch_all_product_ids(service, backend) -> None:
    backend.tables["products"].append(make_product("7", is_active=False))

    assert sorted(await service.fetch_all_product_ids()) == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_clear_cache_by_pattern_or_everything(service, catalog) -> None:
    await service.fetch_product("1")
    await service.fetch_product("2")
    await service.fetch_featured_products()

    assert service.clear_cache("product:") == 2
    assert len(catalog) == 1
    assert service.clear_cache() == 1
    assert len(catalog) == 0


@pytest.mark.asyncio
async def test_update_invalidates_product_and_listings(service, backend, catalog) -> None:
    await service.fetch_product("1")
    await service.fetch_products()
    await service.fetch_featured_products()

    updated = await service.update_product("1", ProductUpdate(price=5))

    assert updated is not None and updated.price == 5
    assert len(catalog) == 0
    assert (await service.fetch_product("1")).price == 5


@pytest.mark.asyncio
async def test_update_with_no_fields_just_reads(service, backend) -> None:
    product = await service.update_product("1", ProductUpdate())

    assert product is not None and product.id == "1"
    assert backend.requests_for("products", "PATCH") == []


@pytest.mark.asyncio
async def test_deactivated_product_disappears_from_reads(service) -> None:
    await service.fetch_product("2")

    await service.set_product_active("2", False)

    assert await service.fetch_product("2") is None
    assert "2" not in [p.id for p in await service.fetch_products()]
    assert "2" in [p.id for p in await service.list_all_products()]


@pytest.mark.asyncio
async def test_create_and_delete_product(service, backend, catalog) -> None:
    await service.fetch_products()

    created = await service.create_product(ProductCreate(name="Lamp", price=12.5))
    assert created.name == "Lamp"
    assert len(catalog) == 0

    assert created.id in [p.id for p in await service.fetch_products()]

    assert await service.delete_product(created.id) is True
    assert await service.delete_product(created.id) is False
    assert await service.fetch_product(created.id) is None

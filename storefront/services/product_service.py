"""
Product catalog service.

Reads go through the ``catalog`` namespace cache (a day by default) with
single-flight loading, so a burst of page renders for the same product costs
one backend query. Admin writes invalidate the affected keys.
"""

from __future__ import annotations

import asyncio
from typing import Any

from storefront.config import settings
from storefront.core.cache import CATALOG_NAMESPACE, QueryCache, get_query_cache, query_key
from storefront.logger import get_logger
from storefront.models.product import Product, ProductCreate, ProductUpdate
from storefront.services.supabase_client import SupabaseClient, SupabaseError, get_supabase_client

logger = get_logger(__name__)

PRODUCTS_TABLE = "products"


def _to_products(rows: list[dict[str, Any]]) -> list[Product]:
    return [Product.model_validate(row) for row in rows]


class ProductService:
    def __init__(
        self,
        client: SupabaseClient | None = None,
        cache: QueryCache[Any] | None = None,
    ) -> None:
        self._client = client if client is not None else get_supabase_client()
        self._cache = cache if cache is not None else get_query_cache(CATALOG_NAMESPACE)

    @property
    def cache(self) -> QueryCache[Any]:
        return self._cache

    async def fetch_product(self, product_id: str) -> Product | None:
        """Active product by id, or None when it does not exist (not cached)."""

        async def load() -> Product | None:
            row = await self._client.select_one(
                PRODUCTS_TABLE, eq={"id": product_id, "is_active": True}
            )
            if row is None:
                logger.info("product_not_found", product_id=product_id)
                return None
            return Product.model_validate(row)

        try:
            return await self._cache.get_or_set(
                query_key("product", product_id),
                load,
                cache_if=lambda product: product is not None,
            )
        except SupabaseError as exc:
            logger.error("fetch_product_failed", product_id=product_id, error=str(exc))
            raise

    async def fetch_products(
        self,
        *,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Product]:
        """Newest-first page of active products, optionally for one category."""
        limit = settings.product_page_size if limit is None else limit
        if category == "all":
            category = None

        async def load() -> list[Product]:
            eq: dict[str, Any] = {"is_active": True}
            if category:
                eq["category"] = category
            rows = await self._client.select(
                PRODUCTS_TABLE,
                eq=eq,
                order="created_at",
                descending=True,
                limit=limit,
                offset=offset,
            )
            return _to_products(rows)

        try:
            return await self._cache.get_or_set(
                query_key("products", category, limit, offset), load
            )
        except SupabaseError as exc:
            logger.error("fetch_products_failed", category=category, error=str(exc))
            raise

    async def fetch_similar_products(
        self,
        product_id: str,
        *,
        limit: int | None = None,
    ) -> list[Product]:
        """Products to show next to ``product_id``.

        Amazon products look for other Amazon products first, then the same
        category; other products use their category. When nothing matches, the
        latest active products are used. Failures degrade to an empty list.
        """
        limit = settings.similar_products_limit if limit is None else limit

        async def load() -> list[Product]:
            current = await self.fetch_product(product_id)
            if current is None:
                return []

            base_eq: dict[str, Any] = {"is_active": True}
            exclude = {"id": product_id}
            rows: list[dict[str, Any]] = []

            if current.is_amazon_product:
                rows = await self._client.select(
                    PRODUCTS_TABLE,
                    eq={**base_eq, "is_amazon_product": True},
                    neq=exclude,
                    limit=limit,
                )
            if not rows and current.category:
                rows = await self._client.select(
                    PRODUCTS_TABLE,
                    eq={**base_eq, "category": current.category},
                    neq=exclude,
                    limit=limit,
                )
            if not rows:
                rows = await self._client.select(
                    PRODUCTS_TABLE,
                    eq=base_eq,
                    neq=exclude,
                    order="created_at",
                    descending=True,
                    limit=limit,
                )
            return _to_products(rows)

        try:
            return await self._cache.get_or_set(
                query_key("similar", product_id, limit),
                load,
                cache_if=bool,
            )
        except SupabaseError as exc:
            logger.error("fetch_similar_products_failed", product_id=product_id, error=str(exc))
            return []

    async def fetch_featured_products(self, limit: int | None = None) -> list[Product]:
        limit = settings.featured_products_limit if limit is None else limit

        async def load() -> list[Product]:
            rows = await self._client.select(
                PRODUCTS_TABLE,
                eq={"is_active": True},
                order="created_at",
                descending=True,
                limit=limit,
            )
            return _to_products(rows)

        try:
            return await self._cache.get_or_set(query_key("featured", limit), load)
        except SupabaseError as exc:
            logger.error("fetch_featured_products_failed", error=str(exc))
            return []

    async def fetch_all_product_ids(self) -> list[str]:
        try:
            rows = await self._client.select(PRODUCTS_TABLE, columns="id", eq={"is_active": True})
        except SupabaseError as exc:
            logger.error("fetch_product_ids_failed", error=str(exc))
            return []
        return [str(row["id"]) for row in rows if row.get("id") is not None]

    async def preload_products(self, product_ids: list[str]) -> int:
        """Warm the cache; returns how many products loaded."""
        results = await asyncio.gather(
            *(self.fetch_product(pid) for pid in product_ids),
            return_exceptions=True,
        )
        loaded = sum(1 for result in results if isinstance(result, Product))
        logger.info("products_preloaded", requested=len(product_ids), loaded=loaded)
        return loaded

    def clear_cache(self, pattern: str | None = None) -> int:
        if pattern:
            return self._cache.invalidate_matching(pattern)
        count = len(self._cache)
        self._cache.clear()
        return count

    # Admin CRUD

    async def list_all_products(self) -> list[Product]:
        """Every product, inactive ones included, newest first (admin only, uncached)."""
        rows = await self._client.select(PRODUCTS_TABLE, order="created_at", descending=True)
        return _to_products(rows)

    async def create_product(self, payload: ProductCreate) -> Product:
        rows = await self._client.insert(PRODUCTS_TABLE, payload.model_dump())
        if not rows:
            raise SupabaseError("insert returned no row", code="empty_result")
        product = Product.model_validate(rows[0])
        self._invalidate_listings()
        logger.info("product_created", product_id=product.id)
        return product

    async def update_product(self, product_id: str, payload: ProductUpdate) -> Product | None:
        values = payload.model_dump(exclude_unset=True)
        if not values:
            return await self.fetch_product(product_id)
        rows = await self._client.update(PRODUCTS_TABLE, values, eq={"id": product_id})
        self._invalidate_product(product_id)
        if not rows:
            return None
        logger.info("product_updated", product_id=product_id, fields=sorted(values))
        return Product.model_validate(rows[0])

    async def set_product_active(self, product_id: str, is_active: bool) -> Product | None:
        return await self.update_product(product_id, ProductUpdate(is_active=is_active))

    async def delete_product(self, product_id: str) -> bool:
        rows = await self._client.delete(PRODUCTS_TABLE, eq={"id": product_id})
        self._invalidate_product(product_id)
        logger.info("product_deleted", product_id=product_id, deleted=len(rows))
        return bool(rows)

    def _invalidate_product(self, product_id: str) -> None:
        self._cache.invalidate(query_key("product", product_id))
        self._invalidate_listings()

    def _invalidate_listings(self) -> None:
        for prefix in ("products:", "featured:", "similar:"):
            self._cache.invalidate_matching(prefix)


_product_service: ProductService | None = None


def get_product_service() -> ProductService:
    """Get the global product service instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service

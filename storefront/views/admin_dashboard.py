"""Admin dashboard: product management plus click and visitor statistics."""

from __future__ import annotations

from typing import Any

from storefront.core.cache import reset_query_caches
from storefront.core.query import QueryBinding
from storefront.logger import get_logger
from storefront.models.product import (
    ClickStat,
    DashboardStats,
    Product,
    ProductCreate,
    ProductUpdate,
)
from storefront.services.analytics_service import AnalyticsService, get_analytics_service
from storefront.services.product_service import ProductService, get_product_service

from .base import BaseView

logger = get_logger(__name__)

PRODUCTS_KEY = "admin:products"
CLICK_STATS_KEY = "admin:click-stats"
USER_COUNT_KEY = "admin:user-count"


class AdminDashboardView(BaseView):
    def __init__(
        self,
        *,
        products: ProductService | None = None,
        analytics: AnalyticsService | None = None,
        **options: Any,
    ) -> None:
        # Admins edit what they see; never trust a cached copy as fresh.
        options.setdefault("stale_seconds", 0)
        super().__init__(**options)
        self._products = products if products is not None else get_product_service()
        self._analytics = analytics if analytics is not None else get_analytics_service()
        self.products: QueryBinding[list[Product]] | None = None
        self.click_stats: QueryBinding[list[ClickStat]] | None = None
        self.user_count: QueryBinding[int] | None = None

    def open(self) -> None:
        self.products = self._binding(PRODUCTS_KEY, self._products.list_all_products, fallback=[])
        self.click_stats = self._binding(CLICK_STATS_KEY, self._analytics.click_stats, fallback=[])
        self.user_count = self._binding(USER_COUNT_KEY, self._analytics.user_count, fallback=0)
        for binding in (self.products, self.click_stats, self.user_count):
            binding.bind()

    def stats(self) -> DashboardStats:
        products = (self.products.state.data if self.products else None) or []
        clicks = (self.click_stats.state.data if self.click_stats else None) or []
        users = (self.user_count.state.data if self.user_count else None) or 0
        return DashboardStats(
            total_products=len(products),
            active_products=sum(1 for p in products if p.is_active),
            total_clicks=sum(s.total_clicks for s in clicks),
            total_users=users,
        )

    async def save_product(
        self,
        payload: ProductCreate | ProductUpdate,
        product_id: str | None = None,
    ) -> Product | None:
        if product_id is None:
            if not isinstance(payload, ProductCreate):
                raise TypeError("creating a product requires a ProductCreate payload")
            product = await self._products.create_product(payload)
        else:
            update = (
                payload
                if isinstance(payload, ProductUpdate)
                else ProductUpdate(**payload.model_dump())
            )
            product = await self._products.update_product(product_id, update)
        await self._reload_products()
        return product

    async def toggle_active(self, product: Product) -> Product | None:
        updated = await self._products.set_product_active(product.id, not product.is_active)
        await self._reload_products()
        return updated

    async def delete_product(self, product_id: str) -> bool:
        deleted = await self._products.delete_product(product_id)
        await self._reload_products()
        return deleted

    def sign_out(self) -> None:
        """Drop every binding and every cached query for this session."""
        self.close()
        reset_query_caches()
        logger.info("admin_signed_out")

    async def _reload_products(self) -> None:
        if self.products is not None and self.products.is_bound:
            await self.products.refetch()

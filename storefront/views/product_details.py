"""Product detail page and affiliate checkout."""

from __future__ import annotations

from typing import Any

from storefront.core.cache import query_key
from storefront.core.query import QueryBinding, QueryState
from storefront.logger import get_logger
from storefront.models.product import Product
from storefront.services.analytics_service import AnalyticsService, get_analytics_service
from storefront.services.product_service import ProductService, get_product_service

from .base import BaseView

logger = get_logger(__name__)


class ProductDetailsView(BaseView):
    """Binds the product and, once it is known, its similar products."""

    def __init__(
        self,
        product_id: str | None,
        *,
        fallback: Product | None = None,
        products: ProductService | None = None,
        analytics: AnalyticsService | None = None,
        user_agent: str | None = None,
        **options: Any,
    ) -> None:
        super().__init__(**options)
        self.product_id = product_id
        self._fallback = fallback
        self._products = products if products is not None else get_product_service()
        self._analytics = analytics if analytics is not None else get_analytics_service()
        self._user_agent = user_agent
        self.product: QueryBinding[Product | None] | None = None
        self.similar: QueryBinding[list[Product]] | None = None

    @property
    def product_state(self) -> QueryState[Product | None]:
        if self.product is None:
            raise RuntimeError("view is not open")
        return self.product.state

    @property
    def similar_state(self) -> QueryState[list[Product]]:
        if self.similar is None:
            raise RuntimeError("view is not open")
        return self.similar.state

    def open(self) -> None:
        product_id = self.product_id

        async def fetch_product() -> Product | None:
            return await self._products.fetch_product(product_id)

        self.similar = self._bind_similar(None)
        self.product = self._binding(
            query_key("product", product_id) if product_id else None,
            fetch_product,
            fallback=self._fallback,
        )
        self.product.subscribe(self._on_product)
        self.product.bind()

    def _bind_similar(self, product: Product | None) -> QueryBinding[list[Product]]:
        product_id = product.id if product is not None else None

        async def fetch_similar() -> list[Product]:
            return await self._products.fetch_similar_products(product_id)

        # No key until the product is known; the binding stays idle.
        key = query_key("similar", product_id) if product_id else None
        binding = self._binding(key, fetch_similar, fallback=[])
        return binding.bind()

    def _on_product(self, state: QueryState[Product | None]) -> None:
        product = state.data
        wanted = query_key("similar", product.id) if product is not None else None
        if self.similar is not None and self.similar.key == wanted:
            return
        if self.similar is not None:
            self._drop(self.similar)
        self.similar = self._bind_similar(product)

    async def view_details(self, product: Product) -> None:
        """A similar-product card was opened."""
        await self._analytics.track_click(product.id, "view_details", user_agent=self._user_agent)

    async def buy_now(self, product: Product | None = None) -> str | None:
        """Track the click and return the affiliate link to send the shopper to."""
        target = product if product is not None else self.product_state.data
        if target is None:
            return None
        await self._analytics.track_click(target.id, "buy_now", user_agent=self._user_agent)
        link = target.checkout_link
        if link is None:
            logger.warning("checkout_link_missing", product_id=target.id)
        return link

"""Product list page."""

from __future__ import annotations

from typing import Any

from storefront.config import settings
from storefront.core.cache import query_key
from storefront.core.query import QueryBinding, QueryState
from storefront.models.product import Product
from storefront.services.product_service import ProductService, get_product_service

from .base import BaseView


class ProductListView(BaseView):
    def __init__(
        self,
        *,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
        products: ProductService | None = None,
        **options: Any,
    ) -> None:
        super().__init__(**options)
        self.category = None if category == "all" else category
        self.limit = settings.product_page_size if limit is None else limit
        self.offset = offset
        self._products = products if products is not None else get_product_service()
        self.listing: QueryBinding[list[Product]] | None = None

    @property
    def state(self) -> QueryState[list[Product]]:
        if self.listing is None:
            raise RuntimeError("view is not open")
        return self.listing.state

    def open(self) -> None:
        category, limit, offset = self.category, self.limit, self.offset

        async def fetch() -> list[Product]:
            return await self._products.fetch_products(
                category=category, limit=limit, offset=offset
            )

        self.listing = self._binding(query_key("products", category, limit, offset), fetch)
        self.listing.bind()

    def show(self, *, category: str | None = None, offset: int = 0) -> None:
        """Switch category or page; the new key binds while the old one is torn down."""
        if self.listing is not None:
            self._drop(self.listing)
        self.category = None if category == "all" else category
        self.offset = offset
        self.open()

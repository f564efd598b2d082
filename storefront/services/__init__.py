"""Storefront services."""

from storefront.services.analytics_service import AnalyticsService, get_analytics_service
from storefront.services.currency_service import (
    CurrencyQuote,
    CurrencyService,
    format_currency,
    get_currency_service,
)
from storefront.services.product_service import ProductService, get_product_service
from storefront.services.supabase_client import (
    SupabaseClient,
    SupabaseError,
    close_supabase_client,
    get_supabase_client,
)

__all__ = [
    "AnalyticsService",
    "CurrencyQuote",
    "CurrencyService",
    "ProductService",
    "SupabaseClient",
    "SupabaseError",
    "close_supabase_client",
    "format_currency",
    "get_analytics_service",
    "get_currency_service",
    "get_product_service",
    "get_supabase_client",
]

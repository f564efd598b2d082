"""
Click and visit analytics.

Tracking writes are fire-and-forget from the shopper's point of view: a failed
insert is logged and never breaks the page.
"""

from __future__ import annotations

from datetime import UTC, datetime

from storefront.logger import get_logger
from storefront.models.product import CLICK_TYPES, ClickStat, ClickType
from storefront.services.supabase_client import SupabaseClient, SupabaseError, get_supabase_client

logger = get_logger(__name__)

CLICKS_TABLE = "product_clicks"
USERS_TABLE = "website_users"
PRODUCTS_TABLE = "products"

UNKNOWN = "unknown"


class AnalyticsService:
    def __init__(self, client: SupabaseClient | None = None) -> None:
        self._client = client if client is not None else get_supabase_client()

    async def track_click(
        self,
        product_id: str,
        click_type: ClickType,
        *,
        user_agent: str | None = None,
        user_ip: str | None = None,
    ) -> bool:
        """Record a product click; returns False (and logs) when the write fails."""
        if click_type not in CLICK_TYPES:
            raise ValueError(f"unknown click type: {click_type}")
        try:
            await self._client.insert(
                CLICKS_TABLE,
                {
                    "product_id": product_id,
                    "click_type": click_type,
                    "user_ip": user_ip or UNKNOWN,
                    "user_agent": user_agent or UNKNOWN,
                },
            )
        except SupabaseError as exc:
            logger.warning(
                "track_click_failed",
                product_id=product_id,
                click_type=click_type,
                error=str(exc),
            )
            return False
        logger.debug("click_tracked", product_id=product_id, click_type=click_type)
        return True

    async def track_user_visit(
        self,
        *,
        user_agent: str | None = None,
        user_ip: str | None = None,
    ) -> bool:
        """Upsert the visitor row keyed by IP with the current visit time."""
        try:
            await self._client.upsert(
                USERS_TABLE,
                {
                    "user_ip": user_ip or UNKNOWN,
                    "user_agent": user_agent or UNKNOWN,
                    "last_visit": datetime.now(UTC).isoformat(),
                },
                on_conflict="user_ip",
            )
        except SupabaseError as exc:
            logger.warning("track_visit_failed", error=str(exc))
            return False
        return True

    async def click_stats(self) -> list[ClickStat]:
        """Per-product click totals, busiest first."""
        clicks = await self._client.select(CLICKS_TABLE, columns="product_id,click_type")
        products = await self._client.select(PRODUCTS_TABLE, columns="id,name")
        names = {str(row["id"]): row.get("name") or "" for row in products}

        stats: dict[str, ClickStat] = {}
        for row in clicks:
            product_id = str(row.get("product_id"))
            stat = stats.get(product_id)
            if stat is None:
                stat = ClickStat(product_id=product_id, product_name=names.get(product_id, ""))
                stats[product_id] = stat
            stat.total_clicks += 1
            if row.get("click_type") == "view_details":
                stat.view_details_clicks += 1
            elif row.get("click_type") == "buy_now":
                stat.buy_now_clicks += 1

        return sorted(stats.values(), key=lambda s: s.total_clicks, reverse=True)

    async def user_count(self) -> int:
        return await self._client.count(USERS_TABLE)


_analytics_service: AnalyticsService | None = None


def get_analytics_service() -> AnalyticsService:
    """Get the global analytics service instance."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service

"""Session router - focus events and cache lifecycle hooks."""

from fastapi import APIRouter

from storefront.core.cache import reset_query_caches, stats
from storefront.core.query import focus_events
from storefront.logger import get_logger

router = APIRouter()

logger = get_logger(__name__)


@router.post("/focus")
async def focus_regained() -> dict[str, int]:
    """Forwarded by the shell when the storefront regains foreground focus."""
    return {"listeners": focus_events.notify()}


@router.post("/reset")
async def reset_session() -> dict[str, bool]:
    """Sign-out hook: forget every cached query."""
    reset_query_caches()
    logger.info("session_reset")
    return {"success": True}


@router.get("/cache-stats")
async def cache_stats() -> dict[str, dict[str, int]]:
    return stats.snapshot()

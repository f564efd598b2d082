"""Main API router."""

from fastapi import APIRouter

from storefront.routers.currency import router as currency_router
from storefront.routers.products import router as products_router
from storefront.routers.session import router as session_router
from storefront.routers.tracking import router as tracking_router

api_router = APIRouter()
api_router.include_router(products_router, prefix="/products", tags=["products"])
api_router.include_router(tracking_router, tags=["tracking"])
api_router.include_router(currency_router, prefix="/currency", tags=["currency"])
api_router.include_router(session_router, prefix="/session", tags=["session"])

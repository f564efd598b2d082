"""Products router - catalog reads for the storefront pages."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from storefront.errors import NotFoundError
from storefront.models.product import Product
from storefront.services.product_service import ProductService, get_product_service

router = APIRouter()

FEATURED_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"
PRODUCT_CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=300"

ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]


@router.get("", response_model=list[Product])
async def list_products(
    products: ProductServiceDep,
    category: str | None = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[Product]:
    """Newest active products, optionally filtered by category."""
    return await products.fetch_products(category=category, limit=limit, offset=offset)


@router.get("/featured", response_model=list[Product])
async def featured_products(
    response: Response,
    products: ProductServiceDep,
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
) -> list[Product]:
    """Featured products for the home page."""
    items = await products.fetch_featured_products(limit)
    response.headers["Cache-Control"] = FEATURED_CACHE_CONTROL
    return items


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    response: Response,
    products: ProductServiceDep,
) -> Product:
    product = await products.fetch_product(product_id)
    if product is None:
        raise NotFoundError("Product not found", code="product_not_found")
    response.headers["Cache-Control"] = PRODUCT_CACHE_CONTROL
    return product


@router.get("/{product_id}/similar", response_model=list[Product])
async def similar_products(
    product_id: str,
    products: ProductServiceDep,
    limit: Annotated[int | None, Query(ge=1, le=24)] = None,
) -> list[Product]:
    return await products.fetch_similar_products(product_id, limit=limit)

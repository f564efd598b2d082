"""Tracking router - click and visit analytics."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from storefront.errors import BadRequestError
from storefront.models.product import ClickType
from storefront.routers.client_info import client_ip
from storefront.services.analytics_service import AnalyticsService, get_analytics_service

router = APIRouter()

AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]


class TrackClickRequest(BaseModel):
    """Request body for a product click."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str | None = Field(default=None, alias="productId")
    click_type: ClickType | None = Field(default=None, alias="clickType")


class TrackResponse(BaseModel):
    success: bool


@router.post("/track-click", response_model=TrackResponse)
async def track_click(
    body: TrackClickRequest,
    request: Request,
    analytics: AnalyticsServiceDep,
) -> TrackResponse:
    if not body.product_id or not body.click_type:
        raise BadRequestError("Product ID and click type are required", code="invalid_click")

    # Tracking failures never fail the shopper's request.
    await analytics.track_click(
        body.product_id,
        body.click_type,
        user_agent=request.headers.get("user-agent"),
        user_ip=client_ip(request),
    )
    return TrackResponse(success=True)


@router.post("/track-visit", response_model=TrackResponse)
async def track_visit(request: Request, analytics: AnalyticsServiceDep) -> TrackResponse:
    tracked = await analytics.track_user_visit(
        user_agent=request.headers.get("user-agent"),
        user_ip=client_ip(request),
    )
    return TrackResponse(success=tracked)

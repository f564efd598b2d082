"""Currency router - local price quotes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from storefront.routers.client_info import client_ip
from storefront.services.currency_service import (
    CurrencyService,
    format_currency,
    get_currency_service,
)

router = APIRouter()


class CurrencyQuoteResponse(BaseModel):
    local_price: float = Field(..., description="Price converted to the local currency")
    currency_code: str = Field(..., description="ISO 4217 code")
    currency_symbol: str
    exchange_rate: float = Field(..., description="USD -> local rate used")
    formatted: str = Field(..., description="Display string for the local price")


@router.get("", response_model=CurrencyQuoteResponse)
async def quote(
    request: Request,
    currency: Annotated[CurrencyService, Depends(get_currency_service)],
    usd_price: Annotated[float, Query(ge=0)],
) -> CurrencyQuoteResponse:
    result = await currency.quote(usd_price, ip=client_ip(request))
    return CurrencyQuoteResponse(
        **result.to_dict(),
        formatted=format_currency(result.local_price, result.currency_code),
    )

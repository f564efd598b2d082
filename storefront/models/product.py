"""Catalog and analytics models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ClickType = Literal["view_details", "buy_now"]

CLICK_TYPES: tuple[str, ...] = ("view_details", "buy_now")


class Product(BaseModel):
    """A catalog row from the ``products`` table.

    Nullable columns are normalised on load so views never branch on None for
    text, images or flags.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    short_description: str = ""
    price: float
    original_price: float | None = None
    discount_percentage: float = 0
    category: str = ""
    badge: str | None = None
    affiliate_link: str = ""
    images: list[str] = Field(default_factory=list)
    is_amazon_product: bool = False
    amazon_affiliate_link: str | None = None
    amazon_image_url: str | None = None
    short_description_amazon: str | None = None
    long_description_amazon: str | None = None
    amazon_url: str | None = None
    is_active: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator(
        "description", "short_description", "category", "affiliate_link", mode="before"
    )
    @classmethod
    def _empty_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("discount_percentage", mode="before")
    @classmethod
    def _zero_discount(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("images", mode="before")
    @classmethod
    def _no_images(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("is_amazon_product", "is_active", mode="before")
    @classmethod
    def _false_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("original_price", mode="before")
    @classmethod
    def _falsy_original_price(cls, value: Any) -> Any:
        return value or None

    @property
    def checkout_link(self) -> str | None:
        """Affiliate URL the buy-now action sends the shopper to."""
        if self.is_amazon_product:
            return self.amazon_affiliate_link or self.amazon_url or None
        return self.affiliate_link or None


class ProductCreate(BaseModel):
    """Admin form payload for a new product."""

    name: str = Field(..., min_length=1)
    description: str = ""
    short_description: str = ""
    price: float = Field(..., ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount_percentage: float = Field(default=0, ge=0, le=100)
    category: str = ""
    badge: str | None = None
    affiliate_link: str = ""
    images: list[str] = Field(default_factory=list)
    is_amazon_product: bool = False
    amazon_affiliate_link: str | None = None
    amazon_image_url: str | None = None
    short_description_amazon: str | None = None
    long_description_amazon: str | None = None
    amazon_url: str | None = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial update; only fields that were set are sent to the backend."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    short_description: str | None = None
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    category: str | None = None
    badge: str | None = None
    affiliate_link: str | None = None
    images: list[str] | None = None
    is_amazon_product: bool | None = None
    amazon_affiliate_link: str | None = None
    amazon_image_url: str | None = None
    short_description_amazon: str | None = None
    long_description_amazon: str | None = None
    amazon_url: str | None = None
    is_active: bool | None = None


class ClickStat(BaseModel):
    """Click totals for one product on the admin dashboard."""

    product_id: str
    product_name: str = ""
    total_clicks: int = 0
    view_details_clicks: int = 0
    buy_now_clicks: int = 0


class DashboardStats(BaseModel):
    total_products: int = 0
    active_products: int = 0
    total_clicks: int = 0
    total_users: int = 0

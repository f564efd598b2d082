from .product import (
    CLICK_TYPES,
    ClickStat,
    ClickType,
    DashboardStats,
    Product,
    ProductCreate,
    ProductUpdate,
)

__all__ = [
    "CLICK_TYPES",
    "ClickStat",
    "ClickType",
    "DashboardStats",
    "Product",
    "ProductCreate",
    "ProductUpdate",
]

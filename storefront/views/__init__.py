"""View models that consume the cached query engine."""

from .admin_dashboard import AdminDashboardView
from .base import BaseView
from .catalog import ProductListView
from .product_details import ProductDetailsView

__all__ = [
    "AdminDashboardView",
    "BaseView",
    "ProductDetailsView",
    "ProductListView",
]

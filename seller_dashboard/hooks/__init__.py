"""
Data-Fetch Hooks
Per-resource loading state with cancellation of superseded requests.
"""

from .base import ResourceHook
from .dashboard import DashboardHook, DashboardCache
from .orders import OrdersHook, OrderHook
from .products import ProductsHook, ProductHook
from .profile import ProfileHook

__all__ = [
    "ResourceHook",
    "DashboardHook",
    "DashboardCache",
    "OrdersHook",
    "OrderHook",
    "ProductsHook",
    "ProductHook",
    "ProfileHook",
]

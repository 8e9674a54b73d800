"""
Typed Models
Accounts, identities, filters and resource payloads.
"""

from .account import (
    Account,
    ConfirmedIdentity,
    SyntheticIdentity,
    Identity,
    identity_from_login,
)
from .resources import (
    OrderStatus,
    Period,
    StockStatus,
    OrdersFilters,
    ProductsFilters,
    AnalyticsFilters,
    Pagination,
    OrdersPage,
    ProductsPage,
    DashboardStats,
    Profile,
    filter_params,
    filter_key,
    normalize_product,
)

__all__ = [
    "Account",
    "ConfirmedIdentity",
    "SyntheticIdentity",
    "Identity",
    "identity_from_login",
    "OrderStatus",
    "Period",
    "StockStatus",
    "OrdersFilters",
    "ProductsFilters",
    "AnalyticsFilters",
    "Pagination",
    "OrdersPage",
    "ProductsPage",
    "DashboardStats",
    "Profile",
    "filter_params",
    "filter_key",
    "normalize_product",
]

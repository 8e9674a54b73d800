"""
Resource Models
Typed filters and responses for orders, products, dashboard and profile.

Filters validate on construction and serialize to query parameters,
dropping unset values. Responses are lightweight wrappers over the
backend JSON; unknown keys are kept in `raw`.
"""

import json
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Optional, List, Dict, Any

from ..errors import ValidationError


# =============================================================================
# Enums
# =============================================================================

class OrderStatus(Enum):
    """Order lifecycle status"""
    NEW = "new"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RETURNED = "returned"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        labels = {
            "new": "New",
            "confirmed": "Confirmed",
            "in_transit": "In transit",
            "delivered": "Delivered",
            "returned": "Returned",
            "cancelled": "Cancelled",
        }
        return labels.get(self.value, self.value)

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(f"Invalid order status: {value}. Use: {allowed}")


class Period(Enum):
    """Dashboard reporting period"""
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class StockStatus(Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


# =============================================================================
# Filters
# =============================================================================

def _param_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class _Filters:
    """Shared query-param behaviour for filter dataclasses"""

    def to_params(self) -> Dict[str, Any]:
        params = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == "":
                continue
            params[f.name] = _param_value(value)
        return params

    def _check_paging(self) -> None:
        limit = getattr(self, "limit", None)
        offset = getattr(self, "offset", None)
        if limit is not None and limit <= 0:
            raise ValidationError(f"limit must be positive, got {limit}")
        if offset is not None and offset < 0:
            raise ValidationError(f"offset must not be negative, got {offset}")

    def _check_order(self) -> None:
        sort_order = getattr(self, "sort_order", None)
        if sort_order is not None and sort_order not in ("asc", "desc"):
            raise ValidationError(f"sort_order must be 'asc' or 'desc', got {sort_order}")


@dataclass
class OrdersFilters(_Filters):
    status: Optional[OrderStatus] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    customer_id: Optional[str] = None
    product_id: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    sort_by: Optional[str] = None  # date, amount, status
    sort_order: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def __post_init__(self):
        if self.status is not None:
            self.status = OrderStatus.parse(self.status)
        if self.sort_by is not None and self.sort_by not in ("date", "amount", "status"):
            raise ValidationError(f"Invalid sort_by: {self.sort_by}")
        if (self.min_amount is not None and self.max_amount is not None
                and self.min_amount > self.max_amount):
            raise ValidationError("min_amount is greater than max_amount")
        self._check_order()
        self._check_paging()


@dataclass
class ProductsFilters(_Filters):
    search: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    stock_status: Optional[StockStatus] = None
    sort_by: Optional[str] = None  # name, price, stock, sales, created_date
    sort_order: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def __post_init__(self):
        if self.stock_status is not None and not isinstance(self.stock_status, StockStatus):
            try:
                self.stock_status = StockStatus(self.stock_status)
            except ValueError:
                raise ValidationError(f"Invalid stock_status: {self.stock_status}")
        if (self.min_price is not None and self.max_price is not None
                and self.min_price > self.max_price):
            raise ValidationError("min_price is greater than max_price")
        self._check_order()
        self._check_paging()


@dataclass
class AnalyticsFilters(_Filters):
    period: Optional[Period] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    compare_with_previous: Optional[bool] = None

    def __post_init__(self):
        if self.period is not None and not isinstance(self.period, Period):
            try:
                self.period = Period(self.period)
            except ValueError:
                raise ValidationError(f"Invalid period: {self.period}")


def filter_params(filters) -> Dict[str, Any]:
    """Accept a filter dataclass, a plain dict or None"""
    if filters is None:
        return {}
    if isinstance(filters, _Filters):
        return filters.to_params()
    return {k: _param_value(v) for k, v in filters.items() if v is not None and v != ""}


def filter_key(filters) -> str:
    """Canonical serialization of the set filters"""
    params = filter_params(filters)
    if not params:
        return "default"
    return json.dumps(params, sort_keys=True, default=str)


# =============================================================================
# Responses
# =============================================================================

@dataclass
class Pagination:
    total: int = 0
    limit: int = 0
    offset: int = 0
    has_next: bool = False
    has_prev: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Pagination":
        data = data or {}
        return cls(
            total=data.get("total", 0),
            limit=data.get("limit", 0),
            offset=data.get("offset", 0),
            has_next=data.get("has_next", False),
            has_prev=data.get("has_prev", False),
        )


@dataclass
class OrdersPage:
    orders: List[dict] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)
    pagination: Pagination = field(default_factory=Pagination)

    @classmethod
    def from_dict(cls, data: dict) -> "OrdersPage":
        return cls(
            orders=list(data.get("orders") or []),
            summary=data.get("summary") or {},
            pagination=Pagination.from_dict(data.get("pagination")),
        )


def normalize_product(product: dict) -> dict:
    """Mirror backend field names onto the short ones the views read"""
    item = dict(product)
    item["stock"] = item.get("total_stock", item.get("stock", 0))
    item["image"] = item.get("main_image", item.get("image"))
    return item


@dataclass
class ProductsPage:
    products: List[dict] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    filters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ProductsPage":
        return cls(
            products=[normalize_product(p) for p in data.get("products") or []],
            pagination=Pagination.from_dict(data.get("pagination")),
            filters=data.get("filters") or {},
        )


@dataclass
class DashboardStats:
    """Dashboard KPI payload"""
    stats: Dict[str, Any] = field(default_factory=dict)
    sales_chart: List[dict] = field(default_factory=list)
    top_products: List[dict] = field(default_factory=list)
    category_performance: List[dict] = field(default_factory=list)
    recent_orders: List[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "DashboardStats":
        return cls(
            stats=data.get("stats") or {},
            sales_chart=list(data.get("sales_chart") or []),
            top_products=list(data.get("top_products") or []),
            category_performance=list(data.get("category_performance") or []),
            recent_orders=list(data.get("recent_orders") or []),
        )

    def kpi(self, section: str, name: str, default=0):
        return self.stats.get(section, {}).get(name, default)


@dataclass
class Profile:
    id: str
    name: str
    email: str
    balance_kopecks: int = 0
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            email=data.get("email", ""),
            balance_kopecks=data.get("balance_kopecks", 0),
            created_at=data.get("created_at"),
        )

    @property
    def balance(self) -> float:
        return self.balance_kopecks / 100

    def to_dict(self) -> dict:
        return asdict(self)

"""
Backend API Client
Connects the seller dashboard to the marketplace REST backend.

The active account's bearer token is attached by `BearerTokenAuth`, which
reads it from the account store at send time. Nothing else in the client
touches the token.
"""

import json
import logging
import requests
from requests.auth import AuthBase
import pandas as pd
from typing import List, Optional, Any

from ..config import Settings, settings as default_settings
from ..db import AccountStore, get_store
from ..errors import AuthError, NetworkError, ValidationError
from ..models import OrderStatus, filter_params

logger = logging.getLogger(__name__)


class BearerTokenAuth(AuthBase):
    """Attach `Authorization: Bearer <token>` when a token is stored"""

    def __init__(self, store: AccountStore):
        self.store = store

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        token = self.store.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return request


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason or ""
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or str(body)
    return str(body)


class APIClient:
    """Client for backend API communication"""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        store: Optional[AccountStore] = None,
        timeout: float = 10.0,
        upload_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.session = session or requests.Session()
        self.session.auth = BearerTokenAuth(store if store is not None else get_store())

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/api{endpoint}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Backend not connected: {self.base_url}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(str(e)) from e

        if not resp.ok:
            logger.debug("%s %s -> %s", method, endpoint, resp.status_code)
            raise NetworkError(
                f"{method} {endpoint} failed ({resp.status_code}): {_error_detail(resp)}",
                status_code=resp.status_code,
            )
        return resp

    def _json(self, resp: requests.Response) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {resp.url}") from e

    def _get(self, endpoint: str, params: dict = None) -> Any:
        """Make GET request"""
        return self._json(self._request("GET", endpoint, params=params))

    def _post(self, endpoint: str, data: dict = None, files: dict = None) -> Any:
        """Make POST request"""
        if files:
            resp = self._request("POST", endpoint, data=data, files=files,
                                 timeout=self.upload_timeout)
        else:
            resp = self._request("POST", endpoint, json=data)
        return self._json(resp)

    def _put(self, endpoint: str, data: dict = None) -> Any:
        return self._json(self._request("PUT", endpoint, json=data))

    def _delete(self, endpoint: str) -> Any:
        return self._json(self._request("DELETE", endpoint))

    def _frame(self, endpoint: str, params: dict = None, key: str = "data") -> pd.DataFrame:
        result = self._get(endpoint, params)
        rows = result.get(key) if isinstance(result, dict) else result
        if not rows:
            return pd.DataFrame()
        return pd.DataFrame(rows)

    # =========================================================================
    # Health & Status
    # =========================================================================

    def health(self) -> dict:
        """Check backend health"""
        return self._get("/health")

    def is_connected(self) -> bool:
        """Check if backend is reachable"""
        try:
            self.health()
        except NetworkError:
            return False
        return True

    # =========================================================================
    # Auth
    # =========================================================================

    def login(self, email: str, password: str) -> dict:
        """
        Exchange credentials for a token.

        Returns the raw response: `{"token": ..., "user": {...}?}`.
        A 400/401 from the backend is reported as AuthError.
        """
        try:
            return self._post("/auth/login", {"email": email, "password": password})
        except NetworkError as e:
            if e.status_code in (400, 401, 403):
                raise AuthError("Invalid email or password") from e
            raise

    def register(self, name: str, email: str) -> dict:
        """Register a seller. The response carries a temporary password."""
        return self._post("/auth/register", {"name": name, "email": email})

    def refresh_token(self) -> dict:
        return self._post("/auth/refresh")

    # =========================================================================
    # Orders
    # =========================================================================

    def get_orders(self, filters=None) -> dict:
        """List orders with status, date, amount, sort and paging filters"""
        return self._get("/orders", filter_params(filters))

    def get_order(self, order_id: str) -> dict:
        return self._get(f"/orders/{order_id}")

    def update_order_status(self, order_id: str, status, comment: str = None) -> dict:
        body = {"status": OrderStatus.parse(status).value}
        if comment:
            body["comment"] = comment
        return self._put(f"/orders/{order_id}/status", body)

    def get_orders_df(self, filters=None) -> pd.DataFrame:
        """Orders page as DataFrame (for analytics)"""
        return self._frame("/orders", filter_params(filters), key="orders")

    # =========================================================================
    # Products
    # =========================================================================

    def get_products(self, filters=None) -> dict:
        return self._get("/products", filter_params(filters))

    def get_product(self, product_id: str) -> dict:
        return self._get(f"/products/{product_id}")

    def create_product(self, product: dict) -> dict:
        missing = [k for k in ("name", "sku", "price") if not product.get(k)]
        if missing:
            raise ValidationError(f"Missing required product fields: {', '.join(missing)}")
        return self._post("/products", product)

    def update_product(self, product_id: str, changes: dict) -> dict:
        return self._put(f"/products/{product_id}", changes)

    def delete_product(self, product_id: str) -> dict:
        return self._delete(f"/products/{product_id}")

    def upload_product_images(
        self,
        product_id: str,
        images: List[tuple],
        alt_texts: List[str] = None,
        is_main: List[bool] = None,
    ) -> dict:
        """
        Upload product images as multipart form data.

        Args:
            images: (filename, content, content_type) tuples
        """
        files = [("files", image) for image in images]
        data = {
            "alt_texts": json.dumps(alt_texts or [""] * len(images)),
            "is_main": json.dumps(is_main or [i == 0 for i in range(len(images))]),
        }
        return self._post(f"/products/{product_id}/images", data=data, files=files)

    def bulk_update_products(self, updates: List[dict]) -> dict:
        """Apply several partial product updates, each with an `id`"""
        if any("id" not in u for u in updates):
            raise ValidationError("Every bulk update needs a product id")
        return self._put("/products/bulk", {"products": updates})

    def get_categories(self) -> dict:
        return self._get("/products/categories")

    def get_size_chart(self, category: str) -> dict:
        return self._get("/products/sizes", {"category": category})

    def import_products(self, file_content: bytes, filename: str) -> dict:
        """Upload a CSV or Excel catalog file"""
        name = filename.lower()
        if name.endswith(".csv"):
            content_type = "text/csv"
        elif name.endswith((".xlsx", ".xls")):
            content_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        else:
            raise ValidationError(f"Unsupported import file: {filename}. Use .csv or .xlsx")
        files = {"file": (filename, file_content, content_type)}
        return self._post("/products/import", files=files)

    def export_products(self, fmt: str = "csv", filters=None) -> bytes:
        """Download the catalog as CSV or Excel"""
        if fmt not in ("csv", "xlsx"):
            raise ValidationError(f"Unsupported export format: {fmt}")
        params = dict(filter_params(filters), format=fmt)
        resp = self._request("GET", "/products/export", params=params,
                             timeout=self.upload_timeout)
        return resp.content

    def get_products_df(self, filters=None) -> pd.DataFrame:
        """Products page as DataFrame (for analytics)"""
        return self._frame("/products", filter_params(filters), key="products")

    # =========================================================================
    # Dashboard & Analytics
    # =========================================================================

    def get_dashboard_stats(self, filters=None) -> dict:
        return self._get("/dashboard/stats", filter_params(filters))

    def get_sales_chart(self, filters=None) -> pd.DataFrame:
        df = self._frame("/dashboard/sales-chart", filter_params(filters))
        if "date" in df.columns:
            df["date"] = pd.to_datetime(df["date"], format="ISO8601")
        return df

    def get_top_products(self, filters=None) -> pd.DataFrame:
        return self._frame("/analytics/top-products", filter_params(filters))

    def get_category_analytics(self, filters=None) -> pd.DataFrame:
        return self._frame("/analytics/categories", filter_params(filters))

    def get_size_distribution(self, filters=None) -> pd.DataFrame:
        return self._frame("/analytics/size-distribution", filter_params(filters))

    def get_seasonal_trends(self, filters=None) -> pd.DataFrame:
        return self._frame("/analytics/seasonal-trends", filter_params(filters))

    def get_returns_analytics(self, filters=None) -> pd.DataFrame:
        return self._frame("/analytics/returns", filter_params(filters))

    # =========================================================================
    # Profile & Balance
    # =========================================================================

    def get_profile(self) -> dict:
        return self._get("/profile")

    def update_profile(self, name: str) -> dict:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        return self._put("/profile", {"name": name.strip()})

    def change_password(self, old_password: str, new_password: str) -> dict:
        if len(new_password) < 8:
            raise ValidationError("New password must be at least 8 characters")
        return self._post("/password/change", {
            "old_password": old_password,
            "new_password": new_password,
        })

    def get_balance(self) -> dict:
        return self._get("/balance")

    def add_balance(self, amount_kopecks: int) -> dict:
        self._check_amount(amount_kopecks)
        return self._post("/balance/add", {"amount_kopecks": amount_kopecks})

    def withdraw_balance(self, amount_kopecks: int) -> dict:
        self._check_amount(amount_kopecks)
        return self._post("/balance/withdraw", {"amount_kopecks": amount_kopecks})

    @staticmethod
    def _check_amount(amount_kopecks: int) -> None:
        if amount_kopecks <= 0:
            raise ValidationError(f"Amount must be positive, got {amount_kopecks}")

    # =========================================================================
    # Linked Accounts
    # =========================================================================

    def get_linked_accounts(self) -> List[dict]:
        result = self._get("/account/links")
        if isinstance(result, dict):
            return result.get("accounts", [])
        return result

    def link_account(self, email: str, password: str) -> dict:
        return self._post("/account/link", {"email": email, "password": password})

    def switch_linked_account(self, target_user_id: str) -> dict:
        """Ask the backend for a token of a linked account: `{"token": ...}`"""
        return self._post("/account/switch", {"target_user_id": target_user_id})


# Global client instance
_client: Optional[APIClient] = None


def get_client(config: Optional[Settings] = None) -> APIClient:
    """Get or create API client singleton"""
    global _client
    if _client is None:
        config = config or default_settings
        _client = APIClient(
            config.API_BASE_URL,
            timeout=config.REQUEST_TIMEOUT,
            upload_timeout=config.UPLOAD_TIMEOUT,
        )
    return _client

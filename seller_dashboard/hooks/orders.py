"""
Order Hooks
Order list with filters and single-order detail.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..models import OrdersPage, OrderStatus
from .base import ResourceHook, call

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrdersHook(ResourceHook[OrdersPage]):
    error_message = "Failed to load orders"

    def __init__(self, client, filters=None):
        super().__init__(client.get_orders, filters)
        self.client = client

    def transform(self, result) -> OrdersPage:
        return OrdersPage.from_dict(result)

    @property
    def orders(self) -> list:
        return self.data.orders if self.data else []

    async def update_status(self, order_id: str, status) -> bool:
        """Change an order's status on the backend, then patch the local copy. API errors propagate."""
        status = OrderStatus.parse(status)
        try:
            await call(self.client.update_order_status, order_id, status)
        except Exception:
            logger.exception("Failed to update status of order %s", order_id)
            raise

        if self.data is not None:
            for order in self.data.orders:
                if order.get("id") == order_id:
                    order["status"] = status.value
                    order["updated_date"] = _now_iso()
        return True


class OrderHook(ResourceHook[dict]):
    error_message = "Failed to load order details"

    def __init__(self, client, order_id: Optional[str]):
        super().__init__(client.get_order, order_id)
        self.client = client
        self.order_id = order_id

    def refetch(self, filters=None):
        if not self.order_id:
            self.error = "Order id is not specified"
            self.is_loading = False
            return None
        return self._start(self.order_id)

    async def update_status(self, status) -> bool:
        if not self.order_id:
            return False
        status = OrderStatus.parse(status)
        try:
            await call(self.client.update_order_status, self.order_id, status)
        except Exception:
            logger.exception("Failed to update status of order %s", self.order_id)
            raise

        if self.data is not None:
            self.data = dict(self.data, status=status.value, updated_date=_now_iso())
        return True

import asyncio
import logging
import threading

import pytest

from seller_dashboard.errors import NetworkError
from seller_dashboard.hooks import OrdersHook, OrderHook, ProductsHook, ProductHook, ProfileHook
from seller_dashboard.models import OrdersFilters, OrdersPage


class ControlledOrdersClient:
    """Each call parks on a future the test resolves explicitly"""

    def __init__(self):
        self.pending = []
        self.status_updates = []
        self.fail_update = False

    async def get_orders(self, filters):
        future = asyncio.get_running_loop().create_future()
        self.pending.append((filters, future))
        return await future

    async def get_order(self, order_id):
        return {"id": order_id, "status": "new"}

    async def update_order_status(self, order_id, status):
        if self.fail_update:
            raise NetworkError("update failed", status_code=500)
        self.status_updates.append((order_id, status.value))
        return {"message": "ok"}


def page(*ids):
    return {
        "orders": [{"id": i, "status": "new"} for i in ids],
        "summary": {"total_orders": len(ids)},
        "pagination": {"total": len(ids), "limit": 20, "offset": 0},
    }


# =============================================================================
# Loading lifecycle
# =============================================================================

def test_loading_flag_lifecycle():
    async def scenario():
        client = ControlledOrdersClient()
        hook = OrdersHook(client)
        assert hook.is_loading
        assert hook.data is None

        hook.mount()
        assert hook.is_loading
        await asyncio.sleep(0)

        client.pending[0][1].set_result(page("o1"))
        await hook.wait()

        assert not hook.is_loading
        assert hook.error is None
        assert isinstance(hook.data, OrdersPage)
        assert [o["id"] for o in hook.orders] == ["o1"]

        hook.refetch()
        assert hook.is_loading
        await asyncio.sleep(0)
        client.pending[1][1].set_result(page("o2"))
        await hook.wait()
        assert not hook.is_loading

    asyncio.run(scenario())


def test_superseded_request_is_cancelled_and_ignored():
    async def scenario():
        client = ControlledOrdersClient()
        hook = OrdersHook(client)

        hook.refetch(OrdersFilters(status="new"))
        await asyncio.sleep(0)
        hook.refetch(OrdersFilters(status="delivered"))
        await asyncio.sleep(0)

        (first_filters, first), (second_filters, second) = client.pending
        assert first_filters.status.value == "new"
        assert second_filters.status.value == "delivered"
        assert first.cancelled()

        second.set_result(page("later"))
        await hook.wait()

        assert [o["id"] for o in hook.orders] == ["later"]
        assert hook.error is None
        assert not hook.is_loading

    asyncio.run(scenario())


def test_slow_first_response_does_not_clobber_second():
    release_first = threading.Event()
    first_finished = threading.Event()
    calls = []

    class BlockingClient:
        def get_products(self, filters):
            calls.append(filters)
            if len(calls) == 1:
                release_first.wait(timeout=5)
                first_finished.set()
                return {"products": [{"id": "stale", "total_stock": 1}]}
            return {"products": [{"id": "fresh", "total_stock": 2}]}

    async def scenario():
        hook = ProductsHook(BlockingClient())
        hook.refetch({"search": "coat"})
        await asyncio.sleep(0.01)
        hook.refetch({"search": "boots"})
        await hook.wait()
        assert [p["id"] for p in hook.products] == ["fresh"]

        # first request finishes after the second one
        release_first.set()
        while not first_finished.is_set():
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.05)

        assert [p["id"] for p in hook.products] == ["fresh"]
        assert hook.filters == {"search": "boots"}
        assert not hook.is_loading

    try:
        asyncio.run(scenario())
    finally:
        release_first.set()


def test_failure_keeps_previous_data_and_logs(caplog):
    class FlakyClient:
        def __init__(self):
            self.fail = False

        async def get_orders(self, filters):
            if self.fail:
                raise NetworkError("GET /orders failed (502): bad gateway", status_code=502)
            return page("o1")

    async def scenario():
        client = FlakyClient()
        hook = OrdersHook(client)
        hook.mount()
        await hook.wait()
        loaded = hook.data

        client.fail = True
        with caplog.at_level(logging.ERROR):
            hook.refetch()
            await hook.wait()

        assert hook.data is loaded
        assert hook.error == "Failed to load orders"
        assert "bad gateway" not in hook.error
        assert not hook.is_loading
        assert any("OrdersHook failed" in r.getMessage() for r in caplog.records)

        client.fail = False
        hook.refetch()
        await hook.wait()
        assert hook.error is None

    asyncio.run(scenario())


def test_close_cancels_without_error():
    async def scenario():
        client = ControlledOrdersClient()
        hook = OrdersHook(client)
        hook.mount()
        await asyncio.sleep(0)

        hook.close()
        await asyncio.sleep(0)

        assert client.pending[0][1].cancelled()
        assert hook.error is None
        assert hook.data is None

    asyncio.run(scenario())


# =============================================================================
# Orders
# =============================================================================

def test_update_status_patches_local_order():
    async def scenario():
        client = ControlledOrdersClient()
        hook = OrdersHook(client)
        hook.mount()
        await asyncio.sleep(0)
        client.pending[0][1].set_result(page("o1", "o2"))
        await hook.wait()

        assert await hook.update_status("o2", "confirmed") is True

        assert client.status_updates == [("o2", "confirmed")]
        statuses = {o["id"]: o["status"] for o in hook.orders}
        assert statuses == {"o1": "new", "o2": "confirmed"}
        assert "updated_date" in hook.orders[1]

    asyncio.run(scenario())


def test_update_status_errors_propagate():
    async def scenario():
        client = ControlledOrdersClient()
        client.fail_update = True
        hook = OrdersHook(client)
        with pytest.raises(NetworkError):
            await hook.update_status("o1", "confirmed")

    asyncio.run(scenario())


def test_order_detail_without_id():
    hook = OrderHook(ControlledOrdersClient(), None)

    assert hook.mount() is None
    assert hook.error == "Order id is not specified"
    assert not hook.is_loading


def test_order_detail_update_status():
    async def scenario():
        client = ControlledOrdersClient()
        hook = OrderHook(client, "o9")
        hook.mount()
        await hook.wait()
        assert hook.data == {"id": "o9", "status": "new"}

        await hook.update_status("in_transit")
        assert hook.data["status"] == "in_transit"

    asyncio.run(scenario())


# =============================================================================
# Products
# =============================================================================

def test_products_are_normalized():
    class Client:
        def get_products(self, filters):
            return {
                "products": [{"id": "p1", "total_stock": 4, "main_image": "/img/p1.jpg"}],
                "pagination": {"total": 1, "limit": 20, "offset": 0, "has_next": False},
            }

        def get_product(self, product_id):
            return {"id": product_id, "total_stock": 0}

    async def scenario():
        hook = ProductsHook(Client())
        hook.mount()
        await hook.wait()
        product = hook.products[0]
        assert product["stock"] == 4
        assert product["image"] == "/img/p1.jpg"
        assert hook.data.pagination.total == 1

        detail = ProductHook(Client(), "p7")
        detail.mount()
        await detail.wait()
        assert detail.data["stock"] == 0

    asyncio.run(scenario())


def test_product_detail_without_id():
    class Client:
        def get_product(self, product_id):
            raise AssertionError("no request expected")

    hook = ProductHook(Client(), "")
    hook.mount()
    assert hook.error == "Product id is not specified"
    assert not hook.is_loading


# =============================================================================
# Profile
# =============================================================================

class ProfileClient:
    def __init__(self):
        self.balance = 1000
        self.fail_withdraw = False

    async def get_profile(self):
        return {"id": "u1", "name": "Shop", "email": "s@x.com", "balance_kopecks": self.balance}

    async def get_balance(self):
        return {"balance_kopecks": self.balance}

    async def get_linked_accounts(self):
        return [{"id": "u2", "name": "Second", "email": "b@x.com"}]

    async def add_balance(self, amount):
        self.balance += amount

    async def withdraw_balance(self, amount):
        if self.fail_withdraw:
            raise NetworkError("insufficient funds", status_code=400)
        self.balance -= amount


def test_profile_loads_and_mutates():
    async def scenario():
        client = ProfileClient()
        hook = ProfileHook(client)
        hook.mount()
        await hook.wait()
        await asyncio.sleep(0)

        assert hook.data.name == "Shop"
        assert hook.balance_kopecks == 1000
        assert hook.linked_accounts[0]["id"] == "u2"

        assert await hook.add_balance(500) is True
        assert hook.balance_kopecks == 1500

        client.fail_withdraw = True
        assert await hook.withdraw_balance(100) is False
        assert hook.error == "Failed to withdraw funds"
        assert hook.balance_kopecks == 1500
        hook.close()

    asyncio.run(scenario())

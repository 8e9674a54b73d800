import pytest

from seller_dashboard.errors import ValidationError
from seller_dashboard.models import (
    Account,
    ConfirmedIdentity,
    SyntheticIdentity,
    OrdersFilters,
    ProductsFilters,
    AnalyticsFilters,
    OrderStatus,
    OrdersPage,
    Profile,
    filter_key,
    filter_params,
    identity_from_login,
)


def test_identity_from_login_without_user_is_synthetic():
    identity = identity_from_login("a@x.com", None)

    assert isinstance(identity, SyntheticIdentity)
    assert identity.email == "a@x.com"
    assert identity.shop_name == "a@x.com"
    assert identity.id == identity.generated_id


def test_identity_from_login_with_partial_user_is_synthetic():
    identity = identity_from_login("a@x.com", {"name": "No id"})
    assert not identity.is_confirmed


def test_identity_from_login_prefers_shop_name():
    identity = identity_from_login("a@x.com", {"id": 7, "email": "a@x.com", "name": "Anna"})

    assert identity == ConfirmedIdentity(id="7", email="a@x.com", shop_name="Anna")


def test_account_round_trip_both_identities():
    for identity in (ConfirmedIdentity("u1", "a@x.com", "A"), SyntheticIdentity(email="b@x.com")):
        account = Account.create("tok", identity)
        assert Account.from_dict(account.to_dict()) == account


def test_account_repr_hides_token():
    account = Account.create("very-secret", SyntheticIdentity(email="a@x.com"))
    assert "very-secret" not in repr(account)
    assert account.display_name == "a@x.com (unverified)"


def test_orders_filters_params_drop_unset():
    filters = OrdersFilters(status="in_transit", date_from="2024-01-01", sort_order="desc")

    assert filters.to_params() == {
        "status": "in_transit",
        "date_from": "2024-01-01",
        "sort_order": "desc",
    }
    assert filters.status is OrderStatus.IN_TRANSIT


@pytest.mark.parametrize("kwargs", [
    {"status": "lost"},
    {"limit": 0},
    {"offset": -1},
    {"sort_by": "color"},
    {"sort_order": "up"},
    {"min_amount": 10, "max_amount": 5},
])
def test_orders_filters_validation(kwargs):
    with pytest.raises(ValidationError):
        OrdersFilters(**kwargs)


def test_products_filters_validation():
    assert ProductsFilters(stock_status="low_stock").to_params() == {"stock_status": "low_stock"}
    with pytest.raises(ValidationError):
        ProductsFilters(stock_status="plenty")
    with pytest.raises(ValidationError):
        ProductsFilters(min_price=100, max_price=1)


def test_analytics_filters():
    assert AnalyticsFilters(period="week", compare_with_previous=False).to_params() == {
        "period": "week",
        "compare_with_previous": "false",
    }
    with pytest.raises(ValidationError):
        AnalyticsFilters(period="decade")


def test_filter_key():
    assert filter_key(None) == "default"
    assert filter_key(AnalyticsFilters()) == "default"
    assert filter_key({"a": None, "b": ""}) == "default"
    assert filter_key({"b": 1, "a": 2}) == filter_key({"a": 2, "b": 1})
    assert filter_params({"x": 1, "y": None}) == {"x": 1}


def test_orders_page_and_profile_from_dict():
    orders = OrdersPage.from_dict({"orders": [{"id": "o1"}], "pagination": {"total": 1, "has_next": True}})
    assert orders.pagination.total == 1
    assert orders.pagination.has_next

    profile = Profile.from_dict({"id": "u1", "name": "A", "email": "a@x.com", "balance_kopecks": 12345})
    assert profile.balance == 123.45

import httpx
import pytest

from wrapntrack.storefront.api_client import ApiClient
from wrapntrack.storefront.cart_store import CartStore
from wrapntrack.storefront.session import SessionManager


def assert_consistent(state):
    assert state.item_count == sum(i.quantity for i in state.items)
    assert state.total == pytest.approx(sum(i.total_price for i in state.items))


@pytest.fixture
def store(api, seed):
    return CartStore(api)


def test_add_then_zero_quantity(store):
    result = store.add_to_cart("BC123", 2)
    assert result.success
    [item] = store.state.items
    assert (item.sku, item.quantity, item.total_price) == ("BC123", 2, 300.0)
    assert store.state.item_count == 2
    assert store.state.total == 300.0

    assert store.update_cart_item("BC123", 0).success
    assert store.state.items == []
    assert store.state.item_count == 0
    assert store.state.total == 0


def test_totals_follow_every_mutation(store):
    steps = [
        lambda: store.add_to_cart("BC123", 1),
        lambda: store.add_to_cart("FOOD-010", 3),
        lambda: store.add_to_cart("BC123", 2),
        lambda: store.update_cart_item("FOOD-010", 1),
        lambda: store.remove_from_cart("BC123"),
        lambda: store.add_to_cart("BEV-010", 2),
    ]
    for step in steps:
        assert step().success
        assert_consistent(store.state)
    assert store.get_item_quantity("FOOD-010") == 1
    assert not store.is_in_cart("BC123")


def test_server_rejection_keeps_state(store):
    store.add_to_cart("KIT-010", 4)
    before = store.state.items

    result = store.add_to_cart("KIT-010", 3)
    assert not result.success
    assert result.message == "Cannot add 3 items. Only 1 more available"
    assert store.state.error == result.message
    assert store.state.items == before
    assert store.state.loading is False


def test_zero_add_is_rejected_locally(store):
    result = store.add_to_cart("BC123", 0)
    assert not result.success
    assert store.state.items == []


def test_count_and_clear(store):
    store.add_to_cart("BC123", 2)
    store.add_to_cart("BEV-010", 1)
    assert store.get_cart_count() == 3

    assert store.clear_cart().success
    assert store.state.items == []
    assert store.state.item_count == 0
    assert store.load_cart().items == []


def test_checkout_resets_cart(store):
    store.add_to_cart("BC123", 1)
    result = store.checkout({"shipping_address": "12 Mabini St", "payment_method": "GCash"})
    assert result.success
    assert result.order_id.startswith("#CO")
    assert result.total_cost == 150.0
    assert store.state.items == []


def test_failed_checkout_leaves_cart(store):
    store.add_to_cart("BC123", 1)
    result = store.checkout({"payment_method": "GCash"})
    assert not result.success
    assert result.message == "Shipping address and payment method are required"
    assert store.is_in_cart("BC123")


def test_load_only_for_customers(backend, fake_api):
    backend.reply("GET", "/api/cart", 200, {"success": True, "cart": [], "totals": {"itemCount": 0, "cartTotal": 0}})
    staff = SessionManager()
    staff.set("token", "staff-token")
    staff.set("user", {"email": "staff@wrapntrack.ph"})

    CartStore(ApiClient(staff, http=fake_api.http)).load_for_session()
    assert backend.calls == []

    CartStore(fake_api).load_for_session()
    assert backend.count("GET", "/api/cart") == 1


def test_network_failure_uses_fallback_message(storefront_session):
    def down(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.Client(transport=httpx.MockTransport(down), base_url="http://api.test")
    store = CartStore(ApiClient(storefront_session, http=http))

    assert store.add_to_cart("BC123").message == "Failed to add item to cart"
    store.load_cart()
    assert store.state.error == "Failed to load cart"
    assert store.get_cart_count() == 0

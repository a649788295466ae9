# wrapntrack/storefront/cart_store.py
import logging
from typing import Any

from pydantic import BaseModel, Field

from wrapntrack.storefront.api_client import ApiClient, ApiError

logger = logging.getLogger(__name__)


class CartItem(BaseModel):
    """
    One product line as reported by GET /api/cart.
    """

    sku: str
    product_name: str = ""
    description: str | None = None
    unit_price: float = Field(default=0.0, ge=0)
    quantity: int = Field(ge=1)
    image_data: str | None = None
    total_price: float = 0.0


class CartState(BaseModel):
    items: list[CartItem] = Field(default_factory=list)
    item_count: int = 0
    total: float = 0.0
    loading: bool = False
    error: str | None = None


class CartResult(BaseModel):
    """
    Outcome of a cart operation, shaped for a toast or inline message.
    """

    success: bool
    message: str
    order_id: str | None = None
    total_cost: float | None = None


class CartStore:
    """
    Single source of truth for the signed-in customer's cart.

    Every mutation goes to the server and, once it succeeds, the whole
    cart is reloaded from GET /api/cart. Items and totals are only ever
    replaced by a server snapshot, never patched locally. Clearing and a
    successful checkout reset the state directly since the result is known.

    Failures are stored in `state.error` and returned to the caller;
    nothing is retried.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.state = CartState()

    # ---- internal helpers ----

    def _fail(self, exc: ApiError, fallback: str) -> CartResult:
        message = exc.message or fallback
        logger.warning("%s: %s", fallback, message)
        self.state.loading = False
        self.state.error = message
        return CartResult(success=False, message=message)

    def _set_snapshot(self, body: dict[str, Any]) -> None:
        totals = body.get("totals") or {}
        self.state = CartState(
            items=[CartItem.model_validate(row) for row in body.get("cart") or []],
            item_count=totals.get("itemCount") or 0,
            total=totals.get("cartTotal") or 0.0,
        )

    def _reset(self) -> None:
        self.state = CartState()

    def _mutate(self, method: str, path: str, payload: Any, fallback: str) -> CartResult:
        self.state.loading = True
        try:
            body = self.api.request(method, path, json=payload)
        except ApiError as exc:
            return self._fail(exc, fallback)
        self.load_cart()
        return CartResult(success=True, message=body.get("message", ""))

    # ---- loading ----

    def load_cart(self) -> CartState:
        """
        Replace items and totals with the server snapshot.
        On failure the previous items stay and `error` is set.
        """
        self.state.loading = True
        try:
            body = self.api.get("/api/cart")
        except ApiError as exc:
            self._fail(exc, "Failed to load cart")
            return self.state
        self._set_snapshot(body)
        return self.state

    def load_for_session(self) -> CartState:
        """Session start: only customers have a server cart."""
        if self.api.session.is_customer:
            return self.load_cart()
        return self.state

    def get_cart_count(self) -> int:
        try:
            body = self.api.get("/api/cart/count")
        except ApiError as exc:
            logger.warning("Error getting cart count: %s", exc)
            return 0
        self.state.item_count = body.get("itemCount", 0)
        return self.state.item_count

    # ---- mutations ----

    def add_to_cart(self, sku: str, quantity: int = 1) -> CartResult:
        if quantity < 1:
            return CartResult(success=False, message="Quantity must be at least 1")
        return self._mutate(
            "POST",
            "/api/cart/add",
            {"sku": sku, "quantity": quantity},
            "Failed to add item to cart",
        )

    def update_cart_item(self, sku: str, quantity: int) -> CartResult:
        """Quantity 0 asks the server to drop the line."""
        return self._mutate(
            "PUT",
            "/api/cart/update",
            {"sku": sku, "quantity": quantity},
            "Failed to update cart item",
        )

    def remove_from_cart(self, sku: str) -> CartResult:
        return self._mutate(
            "DELETE",
            "/api/cart/remove",
            {"sku": sku},
            "Failed to remove item from cart",
        )

    def clear_cart(self) -> CartResult:
        self.state.loading = True
        try:
            body = self.api.delete("/api/cart/clear")
        except ApiError as exc:
            return self._fail(exc, "Failed to clear cart")
        self._reset()
        return CartResult(success=True, message=body.get("message", ""))

    def checkout(self, checkout_data: dict[str, Any]) -> CartResult:
        """
        Turn the cart into an order. The cart is left untouched on failure.
        """
        self.state.loading = True
        try:
            body = self.api.post("/api/cart/checkout", json=checkout_data)
        except ApiError as exc:
            return self._fail(exc, "Failed to process checkout")
        self._reset()
        logger.info("Checkout completed: %s", body.get("orderId"))
        return CartResult(
            success=True,
            message=body.get("message", ""),
            order_id=body.get("orderId"),
            total_cost=body.get("totalCost"),
        )

    # ---- local lookups ----

    def is_in_cart(self, sku: str) -> bool:
        return any(item.sku == sku for item in self.state.items)

    def get_item_quantity(self, sku: str) -> int:
        for item in self.state.items:
            if item.sku == sku:
                return item.quantity
        return 0

# wrapntrack/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from wrapntrack.core.auth import require_customer
from wrapntrack.database import get_session
from wrapntrack.models.user import User
from wrapntrack.repositories.cart_repo import CartRepository
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.repositories.order_repo import OrderRepository
from wrapntrack.schemas.cart import (
    CartCount,
    CartItemAdd,
    CartItemRemove,
    CartItemUpdate,
    CartMessage,
    CartSummary,
    CheckoutRequest,
    CheckoutResult,
)
from wrapntrack.services.cart_service import CartService
from wrapntrack.services.order_service import OrderService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
inventory_repo = InventoryRepository()
service = CartService(cart_repo, inventory_repo)
order_service = OrderService(OrderRepository(), cart_repo, inventory_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Get the current customer's cart snapshot with totals.

    Auth:
      - Only role='customer' can access.
    """
    return service.get_cart_summary(session, current_user.id)


@router.get("/count", response_model=CartCount)
def get_cart_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """Sum of quantities, for the cart badge."""
    return service.get_item_count(session, current_user.id)


@router.post("/add", response_model=CartMessage)
def add_to_cart(
    payload: CartItemAdd,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.add_to_cart(session, current_user.id, payload)


@router.put("/update", response_model=CartMessage)
def update_cart_item(
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Set the quantity of a line. Quantity 0 removes it.
    """
    return service.update_quantity(session, current_user.id, payload)


@router.delete("/remove", response_model=CartMessage)
def remove_cart_item(
    payload: CartItemRemove,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Remove a line; the SKU travels in the request body.
    """
    return service.remove_item(session, current_user.id, payload.sku)


@router.delete("/clear", response_model=CartMessage)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.clear_cart(session, current_user.id)


@router.post("/checkout", response_model=CheckoutResult)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Convert the cart into an order, deduct stock and empty the cart.
    """
    return order_service.checkout_cart(session, current_user, payload)

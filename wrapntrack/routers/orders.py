# wrapntrack/routers/orders.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from wrapntrack.core.auth import require_auth, require_customer, require_employee
from wrapntrack.database import get_session
from wrapntrack.models.user import User
from wrapntrack.repositories.cart_repo import CartRepository
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.repositories.order_repo import OrderRepository
from wrapntrack.schemas.order import (
    OrderCreate,
    OrderProductRead,
    OrderRead,
    OrderStatusUpdate,
    OrderWithProductsRead,
)
from wrapntrack.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
inventory_repo = InventoryRepository()
service = OrderService(order_repo, cart_repo, inventory_repo)


# -------- Customer-facing endpoints --------


@router.post(
    "",
    response_model=OrderWithProductsRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Persist a gift-box order once the customer has confirmed it by OTP.
    """
    return service.create_order(session, current_user, payload)


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get("/me/{order_id}", response_model=OrderWithProductsRead)
def get_my_order(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.get_user_order(session, current_user.id, order_id)


# -------- Employee endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_employee)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_all_orders(session, skip, limit)


@router.get(
    "/{order_id}/products",
    response_model=list[OrderProductRead],
    dependencies=[Depends(require_employee)],
)
def list_order_products(
    order_id: str,
    session: Session = Depends(get_session),
):
    return service.list_order_products(session, order_id)


@router.get(
    "/{order_id}",
    response_model=OrderWithProductsRead,
    dependencies=[Depends(require_employee)],
)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
):
    return service.get_order(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_employee)],
)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along the fulfilment pipeline:

      Order Placed -> Order Paid -> To Be Packed -> Order Shipped Out
      -> Ready for Delivery -> Order Received -> Completed

    Cancelled is allowed until the order is shipped out.
    """
    return service.update_status(session, order_id, payload)

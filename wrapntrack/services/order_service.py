# wrapntrack/services/order_service.py
import logging
import secrets
import string
import uuid
from datetime import datetime

from fastapi import HTTPException, status
from sqlmodel import Session

from wrapntrack.models.cart import CartItem
from wrapntrack.models.inventory import InventoryItem
from wrapntrack.models.order import Order, OrderProduct
from wrapntrack.models.user import User
from wrapntrack.repositories.cart_repo import CartRepository
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.repositories.order_repo import OrderRepository
from wrapntrack.schemas.cart import CheckoutRequest, CheckoutResult
from wrapntrack.schemas.order import (
    OrderCreate,
    OrderProductRead,
    OrderRead,
    OrderStatusUpdate,
    OrderWithProductsRead,
)

logger = logging.getLogger(__name__)

ORDER_ID_ATTEMPTS = 5
_ORDER_ID_ALPHABET = string.digits + string.ascii_uppercase

# Fulfilment pipeline, in order. "Cancelled" is handled separately.
STATUS_FLOW: list[str] = [
    "Order Placed",
    "Order Paid",
    "To Be Packed",
    "Order Shipped Out",
    "Ready for Delivery",
    "Order Received",
    "Completed",
]

# Orders can be cancelled until they leave the warehouse
CANCELLABLE = set(STATUS_FLOW[: STATUS_FLOW.index("Order Shipped Out")])


def generate_order_id(now: datetime | None = None) -> str:
    """
    Format: #COYYYYMMDD-HHMMSS-<6 random base36>
    """
    now = now or datetime.now()
    suffix = "".join(secrets.choice(_ORDER_ID_ALPHABET) for _ in range(6))
    return f"#CO{now:%Y%m%d}-{now:%H%M%S}-{suffix}"


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from cart (checkout): stock check, deduct, clear cart
      - Create curated gift-box order from a confirmed draft
      - Compute totals from catalog unit prices
      - Enforce status transitions (employees)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        inventory_repo: InventoryRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.inventory_repo = inventory_repo

    # -------- Customer-facing operations --------

    def checkout_cart(
        self,
        session: Session,
        user: User,
        payload: CheckoutRequest,
    ) -> CheckoutResult:
        """
        Convert the customer's cart into an Order.

        Steps:
          1. Require shipping address and payment method.
          2. Load cart; error if empty.
          3. Validate every line against stock.
          4. Create Order (status 'Order Placed') and its lines.
          5. Deduct stock and clear the cart.
          6. Commit once.
        """
        if not payload.shipping_address or not payload.payment_method:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Shipping address and payment method are required",
            )

        cart_items: list[CartItem] = self.cart_repo.list_for_user(session, user.id)
        if not cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        errors: list[dict[str, str]] = []
        product_map: dict[str, InventoryItem] = {}

        for ci in cart_items:
            product = self.inventory_repo.get_by_sku(session, ci.sku)
            if not product:
                errors.append({"sku": ci.sku, "reason": "Product not found"})
                continue
            if ci.quantity > product.quantity:
                errors.append(
                    {
                        "sku": ci.sku,
                        "reason": f"Insufficient stock (have {product.quantity}, requested {ci.quantity})",
                    }
                )
                continue
            product_map[ci.sku] = product

        if errors:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Cart validation failed", "items": errors},
            )

        total_cost = round(
            sum(product_map[ci.sku].unit_price * ci.quantity for ci in cart_items), 2
        )

        order = self.order_repo.create_order(
            session,
            Order(
                order_id=self._unique_order_id(session),
                user_id=user.id,
                account_name=user.name,
                name=user.name,
                email_address=user.email,
                telephone=user.phone_number,
                shipping_address=payload.shipping_address,
                expected_delivery=payload.expected_delivery,
                package_name="cart",
                payment_method=payload.payment_method,
                payment_type=payload.payment_type,
                remarks=payload.remarks or None,
                total_cost=total_cost,
            ),
        )

        self.order_repo.create_products(
            session,
            [
                OrderProduct(
                    order_id=order.order_id,
                    sku=ci.sku,
                    quantity=ci.quantity,
                    unit_price=product_map[ci.sku].unit_price,
                )
                for ci in cart_items
            ],
        )

        for ci in cart_items:
            product_map[ci.sku].quantity -= ci.quantity
            session.add(product_map[ci.sku])
            session.delete(ci)

        session.commit()
        logger.info("Checkout %s by %s, total %.2f", order.order_id, user.id, total_cost)

        return CheckoutResult(
            message="Order placed successfully",
            order_id=order.order_id,
            total_cost=total_cost,
        )

    def create_order(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithProductsRead:
        """
        Persist a confirmed gift-box order.

        Every SKU must exist; total_cost is computed from current unit prices.
        """
        if not payload.products:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="At least one product is required",
            )

        product_map: dict[str, InventoryItem] = {}
        for line in payload.products:
            product = self.inventory_repo.get_by_sku(session, line.sku)
            if not product:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Product with SKU '{line.sku}' not found in inventory.",
                )
            product_map[line.sku] = product

        total_cost = round(
            sum(product_map[l.sku].unit_price * l.quantity for l in payload.products), 2
        )

        order = self.order_repo.create_order(
            session,
            Order(
                order_id=self._unique_order_id(session),
                user_id=user.id,
                account_name=user.name,
                name=payload.name,
                email_address=payload.email_address,
                telephone=payload.telephone,
                shipping_address=payload.shipping_address,
                expected_delivery=payload.expected_delivery,
                package_name=payload.package_name,
                remarks=payload.remarks,
                budget=payload.budget,
                order_quantity=payload.order_quantity,
                total_cost=total_cost,
            ),
        )

        lines = self.order_repo.create_products(
            session,
            [
                OrderProduct(
                    order_id=order.order_id,
                    sku=l.sku,
                    quantity=l.quantity,
                    unit_price=product_map[l.sku].unit_price,
                )
                for l in payload.products
            ],
        )

        session.commit()
        session.refresh(order)
        logger.info(
            "Order %s created for %s (%d lines, total %.2f)",
            order.order_id,
            payload.email_address,
            len(lines),
            total_cost,
        )
        return self._build_order_with_products_dto(order, lines)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        return self.order_repo.list_for_user(session, user_id, skip, limit)  # type: ignore[return-value]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: str,
    ) -> OrderWithProductsRead:
        """
        - 404 if order not found or does not belong to this customer.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        lines = self.order_repo.list_products_for_order(session, order.order_id)
        return self._build_order_with_products_dto(order, lines)

    # -------- Employee operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        return self.order_repo.list_all(session, skip, limit)  # type: ignore[return-value]

    def get_order(self, session: Session, order_id: str) -> OrderWithProductsRead:
        order = self._get_order_or_404(session, order_id)
        lines = self.order_repo.list_products_for_order(session, order.order_id)
        return self._build_order_with_products_dto(order, lines)

    def list_order_products(
        self,
        session: Session,
        order_id: str,
    ) -> list[OrderProductRead]:
        order = self._get_order_or_404(session, order_id)
        lines = self.order_repo.list_products_for_order(session, order.order_id)
        return [self._line_dto(l) for l in lines]

    def update_status(
        self,
        session: Session,
        order_id: str,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Status moves one step forward along STATUS_FLOW, or to
        'Cancelled' while the order is still in CANCELLABLE.
        Any other transition raises 400.
        """
        order = self._get_order_or_404(session, order_id)

        current = order.status
        new = payload.status

        if current == new:
            return order  # type: ignore[return-value]

        if new == "Cancelled":
            allowed = current in CANCELLABLE
        elif current in STATUS_FLOW and new in STATUS_FLOW:
            allowed = STATUS_FLOW.index(new) == STATUS_FLOW.index(current) + 1
        else:
            allowed = False

        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        order.status = new
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        logger.info("Order %s moved %s -> %s", order_id, current, new)
        return order  # type: ignore[return-value]

    # -------- Helpers --------

    def _get_order_or_404(self, session: Session, order_id: str) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _unique_order_id(self, session: Session) -> str:
        for _ in range(ORDER_ID_ATTEMPTS):
            order_id = generate_order_id()
            if not self.order_repo.exists(session, order_id):
                return order_id
        return f"#CO{int(datetime.now().timestamp() * 1000)}"

    @staticmethod
    def _line_dto(line: OrderProduct) -> OrderProductRead:
        return OrderProductRead(
            line_id=line.line_id,
            order_id=line.order_id,
            sku=line.sku,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=round(line.quantity * line.unit_price, 2),
        )

    def _build_order_with_products_dto(
        self,
        order: Order,
        lines: list[OrderProduct],
    ) -> OrderWithProductsRead:
        return OrderWithProductsRead(
            **order.model_dump(),
            products=[self._line_dto(l) for l in lines],
        )

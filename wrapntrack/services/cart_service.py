# wrapntrack/services/cart_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from wrapntrack.models.cart import CartItem
from wrapntrack.models.inventory import InventoryItem
from wrapntrack.repositories.cart_repo import CartRepository
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.schemas.cart import (
    CartCount,
    CartItemAdd,
    CartItemRead,
    CartItemUpdate,
    CartMessage,
    CartSummary,
    CartTotals,
)

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - ensure only 'customer' accounts use cart (via router dependency)
      - validate SKU existence
      - enforce quantity <= stock on hand, also after merging lines
      - compute line totals and cart totals from current unit prices
    """

    def __init__(self, cart_repo: CartRepository, inventory_repo: InventoryRepository):
        self.cart_repo = cart_repo
        self.inventory_repo = inventory_repo

    # ---- internal helpers ----

    def _get_product(self, session: Session, sku: str) -> InventoryItem:
        product = self.inventory_repo.get_by_sku(session, sku)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ---- public operations ----

    def get_cart_summary(self, session: Session, user_id: uuid.UUID) -> CartSummary:
        """
        Return the cart snapshot:
          - lines joined with the catalog (with total_price)
          - itemCount = sum of quantities
          - cartTotal = sum of line totals, rounded to 2 decimals
        """
        lines: list[CartItemRead] = []
        item_count = 0
        cart_total = 0.0

        for it, product in self.cart_repo.list_with_items(session, user_id):
            total_price = round(product.unit_price * it.quantity, 2)
            item_count += it.quantity
            cart_total += total_price
            lines.append(
                CartItemRead(
                    cart_id=it.cart_id,
                    sku=it.sku,
                    product_name=product.name,
                    description=product.description,
                    unit_price=product.unit_price,
                    image_data=product.image_data,
                    quantity=it.quantity,
                    total_price=total_price,
                    added_at=it.added_at,
                    updated_at=it.updated_at,
                )
            )

        return CartSummary(
            cart=lines,
            totals=CartTotals(item_count=item_count, cart_total=round(cart_total, 2)),
        )

    def get_item_count(self, session: Session, user_id: uuid.UUID) -> CartCount:
        return CartCount(item_count=self.cart_repo.count_quantity(session, user_id))

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemAdd,
    ) -> CartMessage:
        """
        Add a product to the cart, merging into an existing line.

        Rules:
          - SKU must exist
          - quantity <= stock on hand
          - existing + quantity <= stock on hand
        """
        product = self._get_product(session, payload.sku)

        if product.quantity < payload.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {product.quantity} items available in stock",
            )

        existing = self.cart_repo.get_item(session, user_id, payload.sku)

        if existing:
            new_qty = existing.quantity + payload.quantity
            if new_qty > product.quantity:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        f"Cannot add {payload.quantity} items. "
                        f"Only {product.quantity - existing.quantity} more available"
                    ),
                )
            existing.quantity = new_qty
            existing.updated_at = datetime.now(timezone.utc)
            self.cart_repo.update(session, existing)
        else:
            self.cart_repo.create(
                session,
                CartItem(user_id=user_id, sku=payload.sku, quantity=payload.quantity),
            )

        return CartMessage(message="Item added to cart successfully")

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartMessage:
        """
        Set a line's quantity. Quantity 0 removes the line.
        """
        product = self._get_product(session, payload.sku)

        if payload.quantity > product.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {product.quantity} items available in stock",
            )

        item = self.cart_repo.get_item(session, user_id, payload.sku)

        if payload.quantity == 0:
            if item:
                self.cart_repo.delete(session, item)
            return CartMessage(message="Cart updated successfully")

        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )

        item.quantity = payload.quantity
        item.updated_at = datetime.now(timezone.utc)
        self.cart_repo.update(session, item)
        return CartMessage(message="Cart updated successfully")

    def remove_item(self, session: Session, user_id: uuid.UUID, sku: str) -> CartMessage:
        item = self.cart_repo.get_item(session, user_id, sku)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )

        self.cart_repo.delete(session, item)
        return CartMessage(message="Item removed from cart successfully")

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartMessage:
        self.cart_repo.clear_user_cart(session, user_id)
        return CartMessage(message="Cart cleared successfully")

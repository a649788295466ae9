# wrapntrack/repositories/cart_repo.py
import uuid
from sqlmodel import Session, select
from wrapntrack.models.cart import CartItem
from wrapntrack.models.inventory import InventoryItem


class CartRepository:

    # Cart lines for a customer, newest first, joined with the catalog
    def list_with_items(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[CartItem, InventoryItem]]:
        stmt = (
            select(CartItem, InventoryItem)
            .join(InventoryItem, InventoryItem.sku == CartItem.sku)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.added_at.desc())
        )
        return session.exec(stmt).all()

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.user_id == user_id)
        return session.exec(stmt).all()

    def get_item(
        self, session: Session, user_id: uuid.UUID, sku: str
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.sku == sku
        )
        return session.exec(stmt).first()

    def count_quantity(self, session: Session, user_id: uuid.UUID) -> int:
        return sum(it.quantity for it in self.list_for_user(session, user_id))

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        for row in self.list_for_user(session, user_id):
            session.delete(row)
        session.commit()

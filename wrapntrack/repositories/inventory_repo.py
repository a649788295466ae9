# wrapntrack/repositories/inventory_repo.py
import uuid

from sqlmodel import Session, select

from wrapntrack.models.inventory import AvailableInventory, InventoryItem


class InventoryRepository:
    """
    Data access layer for InventoryItem & AvailableInventory.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Inventory items -----

    def get_by_sku(self, session: Session, sku: str) -> InventoryItem | None:
        return session.get(InventoryItem, sku)

    def list_items(
        self,
        session: Session,
        category: str | None = None,
        skip: int = 0,
        limit: int = 200,
    ) -> list[InventoryItem]:
        stmt = select(InventoryItem)
        if category:
            stmt = stmt.where(InventoryItem.category == category)
        # sku tiebreak keeps pages stable when names repeat
        stmt = stmt.order_by(InventoryItem.name, InventoryItem.sku).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, item: InventoryItem) -> InventoryItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    # ----- Available (curated) inventory -----

    def list_available(
        self,
        session: Session,
    ) -> list[tuple[AvailableInventory, InventoryItem]]:
        stmt = (
            select(AvailableInventory, InventoryItem)
            .join(InventoryItem, InventoryItem.sku == AvailableInventory.sku)
            .order_by(AvailableInventory.category, InventoryItem.name)
        )
        return session.exec(stmt).all()

    def replace_category(
        self,
        session: Session,
        category: str,
        skus: list[str],
        created_by: uuid.UUID | None,
    ) -> None:
        """
        Delete every row for `category` and insert `skus`.
        No commit; the caller replaces several categories in one transaction.
        """
        existing = session.exec(
            select(AvailableInventory).where(AvailableInventory.category == category)
        ).all()
        for row in existing:
            session.delete(row)
        session.flush()

        for sku in dict.fromkeys(skus):
            session.add(
                AvailableInventory(category=category, sku=sku, created_by=created_by)
            )
        session.flush()

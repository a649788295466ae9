# wrapntrack/services/inventory_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from wrapntrack.models.inventory import InventoryItem
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.schemas.inventory import (
    AvailableInventoryRead,
    AvailableInventoryUpdate,
    AvailableProduct,
    InventoryItemCreate,
)

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Business logic for the catalog and the curated "available" subset.

    Responsibilities:
      - SKU uniqueness on create
      - grouping curated products by offered category
      - validating SKUs before replacing a curated category
    """

    def __init__(self, repo: InventoryRepository):
        self.repo = repo

    def list_items(
        self,
        session: Session,
        category: str | None = None,
        skip: int = 0,
        limit: int = 200,
    ) -> list[InventoryItem]:
        return self.repo.list_items(session, category=category, skip=skip, limit=limit)

    def get_item(self, session: Session, sku: str) -> InventoryItem:
        item = self.repo.get_by_sku(session, sku)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return item

    def create_item(self, session: Session, payload: InventoryItemCreate) -> InventoryItem:
        if self.repo.get_by_sku(session, payload.sku):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"SKU '{payload.sku}' already exists",
            )
        item = InventoryItem(**payload.model_dump())
        return self.repo.create(session, item)

    def get_available(self, session: Session) -> AvailableInventoryRead:
        """
        Curated products grouped by category, ordered by category then name.
        """
        by_category: dict[str, list[AvailableProduct]] = {}
        for row, item in self.repo.list_available(session):
            by_category.setdefault(row.category, []).append(
                AvailableProduct(
                    sku=item.sku,
                    name=item.name,
                    unit_price=item.unit_price,
                    image_data=item.image_data,
                    inventory_category=item.category,
                )
            )
        return AvailableInventoryRead(available=by_category)

    def replace_available(
        self,
        session: Session,
        payload: AvailableInventoryUpdate,
        employee_id: uuid.UUID,
    ) -> AvailableInventoryRead:
        """
        Replace each category named in the payload. Categories not named
        are left untouched. Unknown SKUs reject the whole request.
        """
        unknown = sorted(
            {
                sku
                for skus in payload.available.values()
                for sku in skus
                if self.repo.get_by_sku(session, sku) is None
            }
        )
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown SKU(s): {', '.join(unknown)}",
            )

        for category, skus in payload.available.items():
            self.repo.replace_category(session, category, skus, employee_id)
        session.commit()

        logger.info(
            "Available inventory updated by %s: %s",
            employee_id,
            ", ".join(payload.available),
        )
        return self.get_available(session)

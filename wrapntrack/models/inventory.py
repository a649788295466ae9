# wrapntrack/models/inventory.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class InventoryItem(SQLModel, table=True):
    """
    Sellable product in the gift-box catalog, keyed by SKU.
    """

    __tablename__ = "inventory_items"

    sku: str = Field(
        primary_key=True,
        max_length=50,
        description="Stock keeping unit",
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(default=None)

    category: str = Field(
        max_length=50,
        index=True,
        description="Inventory category (packaging, beverages, food, ...)",
    )

    unit_price: float = Field(
        ge=0,
        description="Unit price (PHP)",
    )

    quantity: int = Field(
        default=0,
        ge=0,
        description="Units currently in stock",
    )

    image_data: str | None = Field(
        default=None,
        description="Base64 encoded product image",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class AvailableInventory(SQLModel, table=True):
    """
    Staff-curated subset of the catalog offered to customers,
    grouped by the category they are offered under.
    """

    __tablename__ = "available_inventory"

    category: str = Field(primary_key=True, max_length=50)

    sku: str = Field(
        primary_key=True,
        foreign_key="inventory_items.sku",
    )

    created_by: uuid.UUID | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

# wrapntrack/schemas/inventory.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class InventoryItemRead(SQLModel):
    """
    Catalog entry as returned to clients.
    """

    sku: str
    name: str
    description: str | None = None
    category: str
    unit_price: float
    quantity: int
    image_data: str | None = None
    created_at: datetime


class InventoryItemCreate(SQLModel):
    """
    Employee payload for registering a new SKU.
    """

    model_config = ConfigDict(extra="forbid")

    sku: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str = Field(min_length=1, max_length=50)
    unit_price: float = Field(ge=0)
    quantity: int = Field(default=0, ge=0)

    @field_validator("sku", "name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AvailableProduct(SQLModel):
    """
    One product offered under a curated category.
    """

    sku: str
    name: str
    unit_price: float
    image_data: str | None = None
    inventory_category: str


class AvailableInventoryRead(SQLModel):
    success: bool = True
    available: dict[str, list[AvailableProduct]]


class AvailableInventoryUpdate(SQLModel):
    """
    Employee payload: { category: [sku, ...], ... }.
    Every category named here is replaced wholesale.
    """

    model_config = ConfigDict(extra="forbid")

    available: dict[str, list[str]]

    @field_validator("available")
    @classmethod
    def normalize_categories(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        cleaned: dict[str, list[str]] = {}
        for category, skus in v.items():
            key = category.strip()
            if not key:
                raise ValueError("category cannot be empty")
            cleaned[key] = [s.strip() for s in skus if s and s.strip()]
        return cleaned

# wrapntrack/schemas/cart.py
import uuid
from datetime import date, datetime

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


class CartItemAdd(SQLModel):
    """
    Payload for adding to cart.
    """

    sku: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for changing a line's quantity. 0 removes the line.
    """

    sku: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class CartItemRemove(SQLModel):
    sku: str = Field(min_length=1)


class CartItemRead(SQLModel):
    """
    One cart line joined with its inventory item.
    """

    cart_id: uuid.UUID
    sku: str
    product_name: str
    description: str | None = None
    unit_price: float
    image_data: str | None = None
    quantity: int
    total_price: float
    added_at: datetime
    updated_at: datetime


class CartTotals(SQLModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_count: int
    cart_total: float


class CartSummary(SQLModel):
    """
    Full cart snapshot with server-computed totals.
    """

    success: bool = True
    cart: list[CartItemRead]
    totals: CartTotals


class CartCount(SQLModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    item_count: int


class CartMessage(SQLModel):
    success: bool = True
    message: str


class CheckoutRequest(SQLModel):
    """
    Shipping and payment details for converting the cart into an order.
    """

    shipping_address: str | None = None
    payment_method: str | None = None
    payment_type: str = "Online"
    remarks: str = ""
    expected_delivery: date | None = None

    @field_validator("shipping_address", "payment_method")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CheckoutResult(SQLModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str
    order_id: str
    total_cost: float

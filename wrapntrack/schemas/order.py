# wrapntrack/schemas/order.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal[
    "Order Placed",
    "Order Paid",
    "To Be Packed",
    "Order Shipped Out",
    "Ready for Delivery",
    "Order Received",
    "Completed",
    "Cancelled",
]


class OrderProductLine(SQLModel):
    sku: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class OrderCreate(SQLModel):
    """
    Curated gift-box order, submitted after OTP confirmation.

    Backend derives:
      - order_id
      - status = 'Order Placed'
      - total_cost from inventory unit prices
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    email_address: str
    telephone: str | None = None
    shipping_address: str
    expected_delivery: date
    package_name: str
    remarks: str | None = None
    budget: float | None = Field(default=None, ge=0)
    order_quantity: int = Field(default=1, gt=0)
    products: list[OrderProductLine]

    @field_validator("name", "email_address", "shipping_address", "package_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("telephone", "remarks", mode="before")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without lines).
    """

    order_id: str
    user_id: uuid.UUID | None
    account_name: str
    name: str
    email_address: str
    telephone: str | None
    shipping_address: str
    order_date: date
    expected_delivery: date | None
    package_name: str
    payment_method: str | None
    payment_type: str | None
    remarks: str | None
    budget: float | None = None
    order_quantity: int = 1
    status: OrderStatus
    total_cost: float
    created_at: datetime


class OrderProductRead(SQLModel):
    line_id: int
    order_id: str
    sku: str
    quantity: int
    unit_price: float
    line_total: float


class OrderWithProductsRead(OrderRead):
    """
    Full order view including lines.
    """

    products: list[OrderProductRead]


class OrderStatusUpdate(SQLModel):
    """
    Employee payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus

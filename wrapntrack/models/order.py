# wrapntrack/models/order.py
import uuid
from datetime import datetime, date, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order, either checked out from the cart or submitted
    as a curated gift-box order after OTP confirmation.
    """

    __tablename__ = "orders"

    # Format: #COYYYYMMDD-HHMMSS-XXXXXX
    order_id: str = Field(
        primary_key=True,
        max_length=40,
    )

    user_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
    )

    account_name: str = Field(description="Name on the placing account")
    name: str = Field(description="Customer name for the order")
    email_address: str = Field(index=True)
    telephone: str | None = None

    shipping_address: str = Field(description="Full delivery address")

    order_date: date = Field(default_factory=date.today)
    expected_delivery: date | None = Field(
        default=None,
        description="Requested delivery / event date",
    )

    # Gift box style, or "cart" for cart checkouts
    package_name: str = Field(default="cart")

    payment_method: str | None = None
    payment_type: str | None = None

    remarks: str | None = Field(
        default=None,
        description="Special instructions",
    )

    # Gift-box orders only: customer budget and number of boxes
    budget: float | None = Field(default=None, ge=0)
    order_quantity: int = Field(default=1, gt=0)

    # Order Placed | Order Paid | To Be Packed | Order Shipped Out |
    # Ready for Delivery | Order Received | Completed | Cancelled
    status: str = Field(
        default="Order Placed",
        index=True,
    )

    total_cost: float = Field(default=0.0, ge=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderProduct(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_products"

    line_id: int | None = Field(default=None, primary_key=True)

    order_id: str = Field(
        foreign_key="orders.order_id",
        index=True,
    )

    sku: str = Field(
        foreign_key="inventory_items.sku",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Unit price at time of order",
    )

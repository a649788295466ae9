# wrapntrack/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Account profile for customers and staff.

    Identity:
      - id: MUST match the JWT "sub" claim issued by the auth service

    Role:
      - "customer" | "employee"
      - anonymous visitors are represented by a missing token.

    Password hashes live with the auth service. We only mirror identity,
    contact details used on orders, and the application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the JWT subject",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email on file; OTP codes are sent here",
    )

    name: str = Field(
        max_length=100,
        description="Display name; first part of email by default",
    )

    phone_number: str | None = Field(default=None, max_length=30)

    address: str | None = Field(
        default=None,
        description="Default shipping address",
    )

    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | employee",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

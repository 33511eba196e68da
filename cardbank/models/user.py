"""
User model — the authenticated principal.

The username is the identity: it is the primary key, the JWT subject, and the
value a card's `cardholder` column points at. There is no separate surrogate
id, so a principal resolved from a token can be compared to card ownership
directly.

Roles:
  - ADMIN: card and user administration under /api/admin/**
  - USER: the default for self-registration; can list, block and transfer
    between their own cards

The password is stored as an Argon2id hash — never in plaintext.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from cardbank.database import Base


class Role(str, enum.Enum):
    """
    The role a user holds.

    Inherits from str so the value serializes naturally to JSON and request
    bodies parse straight into the enum (anything else is rejected).
    """
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(20),
        primary_key=True,
    )

    # Argon2id hash of the password
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[Role] = mapped_column(
        Enum(Role),
        default=Role.USER,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

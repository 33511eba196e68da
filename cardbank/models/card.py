"""
Card model — a monetary account identified by a card number.

Each card has:
  - An opaque UUID id, generated on creation
  - A cardholder (username of the owning principal), fixed at creation
  - The card number, encoded with the card codec (never stored in plaintext)
  - An expiry date
  - A status: ACTIVE, BLOCKED or EXPIRED
  - A balance in integer cents

Status rules:
  Only an ACTIVE card can send or receive a transfer, and only an ACTIVE card
  can be blocked. Blocking is one-way for the card holder; only the admin
  full-update path can set a different status.

Balance management:
  `balance_cents` is changed only by the paired decrease/increase updates of
  a transfer (see repositories/card_repository.py), by initialization to 0 at
  issuance, and by the admin full-update path. A CHECK constraint makes the
  database refuse a negative balance even if application code were wrong.

Why integer cents?
  Floating-point amounts accumulate representation error (0.1 + 0.2 != 0.3).
  Integer cents are exact: 10.99 is stored as 1099.
"""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cardbank.database import Base


class CardStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    EXPIRED = "EXPIRED"


class Card(Base):
    __tablename__ = "cards"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_cards_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owner of this card
    cardholder: Mapped[str] = mapped_column(
        ForeignKey("users.username"),
        nullable=False,
        index=True,
    )

    # Codec output for the 16-digit number; equal numbers encode equally,
    # which is what makes this UNIQUE constraint meaningful
    encoded_card_number: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )

    expiry_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    status: Mapped[CardStatus] = mapped_column(
        Enum(CardStatus),
        default=CardStatus.ACTIVE,
        nullable=False,
    )

    balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

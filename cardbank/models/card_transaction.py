"""
CardTransaction model — the ledger of card-to-card transfers.

Every successful transfer writes TWO rows that share a `transfer_id`:

  - a DEBIT on the source card
  - a CREDIT on the destination card

A transfer rejected for insufficient funds writes a single DECLINED debit on
the source card, so attempted overdrafts stay visible in the audit trail.

Key fields:
  - type: "credit" or "debit" — the direction of money flow for `card_id`
  - amount_cents: Always positive (the direction is implied by the type)
  - card_id: The card this leg belongs to
  - counterpart_card_id: The other side of the transfer
  - status: "approved" or "declined"
  - initiated_by: Username of the principal that requested the transfer

Why no foreign key on card_id?
  Admins can delete cards. The ledger is an audit record and must outlive the
  cards it mentions, so the ids are stored as plain indexed UUIDs.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cardbank.database import Base


class CardTransaction(Base):
    __tablename__ = "card_transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_card_transactions_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Links the two legs of one transfer
    transfer_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    # "credit" (money in) or "debit" (money out)
    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    card_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    counterpart_card_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
    )

    # "approved" or "declined"
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    initiated_by: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

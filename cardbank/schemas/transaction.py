"""
Pydantic schemas for transfers and ledger rows.

All monetary amounts are stored and returned in integer cents (e.g., 10.50 = 1050).
A transfer request may state its amount either way; it is normalized to cents.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class TransferRequest(BaseModel):
    """
    Request body for POST /api/card/cards/transfer.

    Exactly one of:
      - amount: decimal with at most two fractional digits (e.g., 10.50)
      - amount_cents: positive integer (e.g., 1050)
    After validation amount_cents is always set.
    """
    from_card_id: uuid.UUID = Field(alias="from")
    to_card_id: uuid.UUID = Field(alias="to")
    amount: Decimal | None = Field(
        None, gt=0, decimal_places=2, description="Amount with two decimals"
    )
    amount_cents: int | None = Field(None, gt=0, description="Amount in cents (must be positive)")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def normalize_amount(self) -> "TransferRequest":
        if (self.amount is None) == (self.amount_cents is None):
            raise ValueError("Provide exactly one of amount or amount_cents")
        if self.amount_cents is None:
            self.amount_cents = int(self.amount * 100)
        return self


class CardTransactionResponse(BaseModel):
    """Public representation of one ledger row."""
    id: uuid.UUID
    transfer_id: uuid.UUID
    type: str
    amount_cents: int
    card_id: uuid.UUID
    counterpart_card_id: uuid.UUID
    status: str
    initiated_by: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TransferResponse(BaseModel):
    """Receipt for a successful transfer. Balances are not included; re-query the cards."""
    transfer_id: uuid.UUID
    from_card_id: uuid.UUID
    to_card_id: uuid.UUID
    amount_cents: int
    debit_transaction: CardTransactionResponse
    credit_transaction: CardTransactionResponse

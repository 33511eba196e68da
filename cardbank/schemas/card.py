"""
Pydantic schemas for Card endpoints.

Card numbers are NEVER returned in full. Responses carry only the masked
form ("************1234"). Status values parse straight into CardStatus,
so anything other than ACTIVE, BLOCKED or EXPIRED is rejected with 422.
"""

import uuid
from datetime import date

from pydantic import BaseModel, Field

from cardbank.models.card import CardStatus

CARD_NUMBER_PATTERN = r"^\d{16}$"


class CardCreateRequest(BaseModel):
    """Request body for POST /api/admin/cards."""
    cardholder: str = Field(min_length=1, max_length=20)
    card_number: str | None = Field(
        None,
        pattern=CARD_NUMBER_PATTERN,
        description="16 digits; generated when omitted",
    )
    expiry_date: date | None = Field(
        None, description="Defaults to three years from today"
    )


class CardUpdateRequest(BaseModel):
    """Request body for PUT /api/admin/cards/{card_id} (full replace)."""
    card_number: str = Field(pattern=CARD_NUMBER_PATTERN)
    expiry_date: date
    status: CardStatus
    balance_cents: int = Field(ge=0, description="Balance in cents")


class CardResponse(BaseModel):
    """Display form of a card."""
    card_id: uuid.UUID
    card_mask: str
    cardholder: str
    expiry_date: date
    status: CardStatus

"""
Cards router — card holder operations on their own cards.

Endpoints:
  GET  /api/card/cards                          — List own cards (masked)
  GET  /api/card/cards/block/{card_id}          — Block one of own cards
  POST /api/card/cards/transfer                 — Transfer between own cards
  GET  /api/card/cards/{card_id}/transactions   — Ledger rows for one own card

Every endpoint is scoped to the authenticated username. Referencing someone
else's card yields 403 before anything is read or written.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.codec import CardNumberCodec
from cardbank.database import get_db
from cardbank.dependencies import get_codec, get_current_user
from cardbank.models.user import User
from cardbank.schemas.card import CardResponse
from cardbank.schemas.common import MessageResponse
from cardbank.schemas.transaction import (
    CardTransactionResponse,
    TransferRequest,
    TransferResponse,
)
from cardbank.services import card_service, transfer_service

router = APIRouter()


@router.get(
    "/cards",
    response_model=list[CardResponse],
    summary="List own cards",
)
async def list_cards(
    user: User = Depends(get_current_user),
    codec: CardNumberCodec = Depends(get_codec),
    db: AsyncSession = Depends(get_db),
):
    """Every card held by the caller, with the number masked to its last four digits."""
    return await card_service.list_owned(db, codec, user.username)


# Blocking is exposed as GET for compatibility with existing clients
@router.get(
    "/cards/block/{card_id}",
    response_model=MessageResponse,
    summary="Block a card",
)
async def block_card(
    card_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Block one of the caller's cards.

    - 403 if the card belongs to someone else
    - 400 if the card is not ACTIVE (a second block of the same card fails)
    - Blocking can't be undone by the card holder
    """
    await card_service.block_card(db, card_id, user.username)
    return MessageResponse(detail="Card successfully blocked")


@router.post(
    "/cards/transfer",
    response_model=TransferResponse,
    summary="Transfer money between own cards",
)
async def transfer(
    request: TransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Move money from one of the caller's cards to another.

    Either both balances change or neither does.

    - **from** / **to**: card ids, both owned by the caller
    - **amount**: positive decimal, two fractional digits at most (e.g., 50.00),
      or **amount_cents**: positive integer in cents (e.g., 5000); exactly one
    - 403 if either card belongs to someone else
    - 400 if either card is not ACTIVE or the source can't cover the amount
    """
    debit_entry, credit_entry, transfer_id = await transfer_service.transfer(
        db=db,
        from_card_id=request.from_card_id,
        to_card_id=request.to_card_id,
        amount_cents=request.amount_cents,
        username=user.username,
    )

    return TransferResponse(
        transfer_id=transfer_id,
        from_card_id=request.from_card_id,
        to_card_id=request.to_card_id,
        amount_cents=request.amount_cents,
        debit_transaction=CardTransactionResponse.model_validate(debit_entry),
        credit_transaction=CardTransactionResponse.model_validate(credit_entry),
    )


@router.get(
    "/cards/{card_id}/transactions",
    response_model=list[CardTransactionResponse],
    summary="List a card's transfer history",
)
async def list_card_transactions(
    card_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Approved and declined ledger rows for one of the caller's cards, newest first."""
    return await transfer_service.list_card_transactions(
        db=db,
        card_id=card_id,
        username=user.username,
        limit=limit,
        offset=offset,
    )

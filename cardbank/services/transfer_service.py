"""
Transfer service — moving money between two cards of the same holder.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. A transfer must never create or
destroy money, must never touch a card that is not ACTIVE, and must never act
on a card the caller doesn't own.

Preconditions, checked in this order:
  1. the caller owns the source card            -> CardAccessDeniedError
  2. the caller owns the destination card       -> CardAccessDeniedError
  3. both cards are ACTIVE                      -> CardNotInServiceError
  4. the source balance covers the amount       -> InsufficientFundsError

Atomicity:
  Both balance deltas and both ledger rows are written in the request's single
  database transaction. Every business rejection is raised BEFORE the first
  balance write, so nothing needs undoing. If the second delta can't be
  applied after the first succeeded, LedgerConsistencyError is raised; it is
  not a BankAPIError, so get_db() rolls the whole unit back.

Check-then-act:
  The two cards are row-locked (sorted by id, to avoid deadlocks) before the
  status and balance checks, and the decrement itself is a conditional UPDATE
  that refuses to go below the requested amount. A concurrent transfer that
  drained the card between check and write makes the decrement match zero
  rows, and this transfer is declined instead of overdrawing.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.exceptions import (
    CardAccessDeniedError,
    CardNotFoundError,
    CardNotInServiceError,
    InsufficientFundsError,
    LedgerConsistencyError,
)
from cardbank.models.card import Card, CardStatus
from cardbank.models.card_transaction import CardTransaction
from cardbank.repositories import card_repository, ledger_repository
from cardbank.services.card_service import validate_ownership

logger = logging.getLogger(__name__)


async def _decline(
    db: AsyncSession,
    transfer_id: uuid.UUID,
    source: Card,
    to_card_id: uuid.UUID,
    amount_cents: int,
    username: str,
) -> InsufficientFundsError:
    """Record a declined debit for the audit trail and build the error to raise."""
    await ledger_repository.add_entries(db, [
        CardTransaction(
            transfer_id=transfer_id,
            type="debit",
            amount_cents=amount_cents,
            card_id=source.id,
            counterpart_card_id=to_card_id,
            status="declined",
            initiated_by=username,
        )
    ])
    logger.warning(
        "Transfer declined: transfer=%s from=%s requested=%s available=%s",
        transfer_id, source.id, amount_cents, source.balance_cents,
    )
    return InsufficientFundsError(
        card_id=source.id,
        requested_cents=amount_cents,
        available_cents=source.balance_cents,
    )


async def transfer(
    db: AsyncSession,
    from_card_id: uuid.UUID,
    to_card_id: uuid.UUID,
    amount_cents: int,
    username: str,
) -> tuple[CardTransaction, CardTransaction, uuid.UUID]:
    """
    Move `amount_cents` from one of the caller's cards to another.

    Using the same card as source and destination is allowed and leaves the
    balance unchanged, but still requires the card to cover the amount.

    Args:
        db: Database session.
        from_card_id: Source card (must belong to `username`).
        to_card_id: Destination card (must belong to `username`).
        amount_cents: Positive integer amount in cents.
        username: The authenticated principal.

    Returns:
        Tuple of (debit_entry, credit_entry, transfer_id).

    Raises:
        ValueError: If amount_cents is not positive.
        CardAccessDeniedError: If either card isn't owned by the caller.
        CardNotFoundError: If a card was deleted after the ownership check.
        CardNotInServiceError: If either card is not ACTIVE.
        InsufficientFundsError: If the source balance is below the amount.
        LedgerConsistencyError: If the credit leg could not be applied.
    """
    if amount_cents <= 0:
        raise ValueError("amount_cents must be positive")

    if not await validate_ownership(db, username, from_card_id):
        logger.warning("Transfer denied: user=%s does not own source %s", username, from_card_id)
        raise CardAccessDeniedError("Access denied")
    if not await validate_ownership(db, username, to_card_id):
        logger.warning("Transfer denied: user=%s does not own destination %s", username, to_card_id)
        raise CardAccessDeniedError("Access denied")

    locked = await card_repository.lock_for_update(db, [from_card_id, to_card_id])
    source = locked.get(from_card_id)
    dest = locked.get(to_card_id)
    if source is None:
        raise CardNotFoundError(from_card_id)
    if dest is None:
        raise CardNotFoundError(to_card_id)

    for card in (source, dest):
        if card.status != CardStatus.ACTIVE:
            raise CardNotInServiceError(card.id)

    transfer_id = uuid.uuid4()

    if source.balance_cents < amount_cents:
        raise await _decline(db, transfer_id, source, to_card_id, amount_cents, username)

    if not await card_repository.decrease_balance(db, from_card_id, amount_cents):
        # Lost a race after the checks above: report against the current row
        source = (await card_repository.lock_for_update(db, [from_card_id])).get(from_card_id)
        if source is None:
            raise CardNotFoundError(from_card_id)
        if source.status != CardStatus.ACTIVE:
            raise CardNotInServiceError(from_card_id)
        raise await _decline(db, transfer_id, source, to_card_id, amount_cents, username)

    if not await card_repository.increase_balance(db, to_card_id, amount_cents):
        logger.error(
            "Transfer aborted after debit: transfer=%s destination %s rejected credit",
            transfer_id, to_card_id,
        )
        raise LedgerConsistencyError(f"Credit to card {to_card_id} could not be applied")

    debit_entry = CardTransaction(
        transfer_id=transfer_id,
        type="debit",
        amount_cents=amount_cents,
        card_id=from_card_id,
        counterpart_card_id=to_card_id,
        status="approved",
        initiated_by=username,
    )
    credit_entry = CardTransaction(
        transfer_id=transfer_id,
        type="credit",
        amount_cents=amount_cents,
        card_id=to_card_id,
        counterpart_card_id=from_card_id,
        status="approved",
        initiated_by=username,
    )
    await ledger_repository.add_entries(db, [debit_entry, credit_entry])

    logger.info(
        "Transfer completed: transfer=%s user=%s from=%s to=%s amount=%s",
        transfer_id, username, from_card_id, to_card_id, amount_cents,
    )
    return debit_entry, credit_entry, transfer_id


async def list_card_transactions(
    db: AsyncSession,
    card_id: uuid.UUID,
    username: str,
    limit: int = 50,
    offset: int = 0,
) -> list[CardTransaction]:
    """
    Ledger rows for one of the caller's cards, newest first.

    Raises:
        CardAccessDeniedError: If the caller doesn't own the card.
    """
    if not await validate_ownership(db, username, card_id):
        raise CardAccessDeniedError("Access denied")
    return await ledger_repository.find_by_card(db, card_id, limit=limit, offset=offset)


async def admin_list_transactions(
    db: AsyncSession,
    status_filter: str | None = None,
    type_filter: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[CardTransaction]:
    """[ADMIN ONLY] Every ledger row in the system."""
    return await ledger_repository.find_all(
        db,
        status_filter=status_filter,
        type_filter=type_filter,
        limit=limit,
        offset=offset,
    )

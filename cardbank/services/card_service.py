"""
Card service — ownership checks, blocking, listing and card administration.

Member operations (scoped to the authenticated username):
  - validate_ownership: pure predicate used to gate every member mutation
  - block_card: ACTIVE -> BLOCKED, one-way
  - list_owned: the holder's cards in display form (masked number)

Admin operations (reached only through /api/admin/**):
  - issue_card, update_card, delete_card, list_all

Card numbers never leave this module in plaintext. They are encoded with the
card codec before storage and shown only as "************1234".
"""

import logging
import random
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.codec import CardNumberCodec
from cardbank.exceptions import (
    CardAccessDeniedError,
    CardAlreadyExistsError,
    CardNotFoundError,
    CardNotInServiceError,
    UserNotFoundError,
)
from cardbank.models.card import Card, CardStatus
from cardbank.repositories import card_repository, user_repository
from cardbank.schemas.card import CardResponse

logger = logging.getLogger(__name__)

CARD_VALIDITY_YEARS = 3


def _generate_card_number() -> str:
    """Generate a random 16-digit card number.

    Real card numbers are assigned by the card network and carry a Luhn check
    digit. Here a random 16-digit number starting with "4" (Visa-like) is enough.
    """
    return "4" + "".join([str(random.randint(0, 9)) for _ in range(15)])


def _default_expiry(today: date | None = None) -> date:
    """Same day and month, CARD_VALIDITY_YEARS from today (Feb 29 rolls to Feb 28)."""
    today = today or date.today()
    try:
        return today.replace(year=today.year + CARD_VALIDITY_YEARS)
    except ValueError:
        return today.replace(year=today.year + CARD_VALIDITY_YEARS, day=28)


def to_card_response(card: Card, codec: CardNumberCodec) -> CardResponse:
    """Project a card into its display form with the number masked."""
    return CardResponse(
        card_id=card.id,
        card_mask=codec.masked(card.encoded_card_number),
        cardholder=card.cardholder,
        expiry_date=card.expiry_date,
        status=card.status,
    )


# ---------------------------------------------------------------------------
# Member operations
# ---------------------------------------------------------------------------

async def validate_ownership(db: AsyncSession, username: str, card_id: uuid.UUID) -> bool:
    """True if `username` owns `card_id`. No side effects."""
    return await card_repository.exists_owned_by(db, username, card_id)


async def block_card(db: AsyncSession, card_id: uuid.UUID, username: str) -> None:
    """
    Block one of the caller's cards.

    Checks run in this order: ownership, existence, ACTIVE status. The card row
    is locked while its status is re-read, so two simultaneous block requests
    can't both succeed.

    Raises:
        CardAccessDeniedError: If the caller doesn't own the card.
        CardNotFoundError: If the card disappeared after the ownership check.
        CardNotInServiceError: If the card is not ACTIVE (including a second
            block of the same card).
    """
    if not await validate_ownership(db, username, card_id):
        logger.warning("Block denied: user=%s card=%s", username, card_id)
        raise CardAccessDeniedError("Access denied")

    card = (await card_repository.lock_for_update(db, [card_id])).get(card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    if card.status != CardStatus.ACTIVE:
        raise CardNotInServiceError(card_id)

    await card_repository.set_blocked(db, card_id)
    logger.info("Card blocked: user=%s card=%s", username, card_id)


async def list_owned(
    db: AsyncSession,
    codec: CardNumberCodec,
    username: str,
) -> list[CardResponse]:
    """All cards of `username` in display form. Empty if they own none."""
    cards = await card_repository.find_all_owned_by(db, username)
    return [to_card_response(card, codec) for card in cards]


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------

async def list_all(db: AsyncSession, codec: CardNumberCodec) -> list[CardResponse]:
    """[ADMIN ONLY] Every card in the system, masked."""
    cards = await card_repository.find_all(db)
    return [to_card_response(card, codec) for card in cards]


async def issue_card(
    db: AsyncSession,
    codec: CardNumberCodec,
    cardholder: str,
    card_number: str | None = None,
    expiry_date: date | None = None,
) -> Card:
    """
    [ADMIN ONLY] Issue a new ACTIVE card with a zero balance.

    Args:
        db: Database session.
        codec: Card number codec.
        cardholder: Username of the owner; must exist.
        card_number: 16-digit number. Generated when omitted.
        expiry_date: Defaults to three years from today.

    Raises:
        UserNotFoundError: If the cardholder doesn't exist.
        CardAlreadyExistsError: If the given number is already issued.
    """
    if not await user_repository.exists_by_username(db, cardholder):
        raise UserNotFoundError(cardholder)

    if card_number is None:
        # Retry on collision; with 15 random digits this practically never loops
        for _ in range(10):
            encoded = codec.encode(_generate_card_number())
            if not await card_repository.exists_by_encoded_number(db, encoded):
                break
        else:
            raise RuntimeError("Failed to generate a unique card number")
    else:
        encoded = codec.encode(card_number)
        if await card_repository.exists_by_encoded_number(db, encoded):
            raise CardAlreadyExistsError()

    card = Card(
        cardholder=cardholder,
        encoded_card_number=encoded,
        expiry_date=expiry_date or _default_expiry(),
        status=CardStatus.ACTIVE,
        balance_cents=0,
    )
    await card_repository.create(db, card)
    logger.info("Card issued: card=%s cardholder=%s", card.id, cardholder)
    return card


async def update_card(
    db: AsyncSession,
    codec: CardNumberCodec,
    card_id: uuid.UUID,
    card_number: str,
    expiry_date: date,
    status: CardStatus,
    balance_cents: int,
) -> Card:
    """
    [ADMIN ONLY] Replace the mutable fields of a card.

    The cardholder is not part of the update: a card never changes owner.

    Raises:
        CardNotFoundError: If the card doesn't exist.
        CardAlreadyExistsError: If the new number belongs to another card.
    """
    card = await card_repository.get_by_id(db, card_id)

    encoded = codec.encode(card_number)
    holder_of_number = await card_repository.find_by_encoded_number(db, encoded)
    if holder_of_number is not None and holder_of_number.id != card_id:
        raise CardAlreadyExistsError()

    card.encoded_card_number = encoded
    card.expiry_date = expiry_date
    card.status = status
    card.balance_cents = balance_cents
    await card_repository.save(db, card)
    logger.info("Card updated: card=%s status=%s", card_id, status.value)
    return card


async def delete_card(db: AsyncSession, card_id: uuid.UUID) -> None:
    """
    [ADMIN ONLY] Delete a card. Its ledger rows are kept.

    Raises:
        CardNotFoundError: If the card doesn't exist.
    """
    await card_repository.get_by_id(db, card_id)
    await card_repository.delete_by_id(db, card_id)
    logger.info("Card deleted: card=%s", card_id)

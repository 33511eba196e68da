"""
Card store — queries and atomic balance/status writes for the cards table.

Balance deltas are single UPDATE statements that do the arithmetic inside the
database (`balance_cents = balance_cents - :amount`), so concurrent writers
never overwrite each other's result with a stale Python-side value.

The decrement is also conditional: it only matches a row that is still ACTIVE
and still holds at least the requested amount. A transfer that passed its
checks but lost a race to another writer therefore affects zero rows instead
of overdrawing the card, and the caller sees that as a failed guard.

SQLite note:
  SQLite doesn't support SELECT ... FOR UPDATE. with_for_update() is a no-op
  there; the conditional UPDATE guards still hold because SQLite serializes
  writers. On PostgreSQL the row locks make check-then-write a critical section.

The status and balance updates bypass the session's identity map. A Card
object loaded earlier in the same session keeps its old values until it is
reloaded (see lock_for_update, which uses populate_existing).
"""

import uuid

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.exceptions import CardNotFoundError
from cardbank.models.card import Card, CardStatus


async def exists_owned_by(db: AsyncSession, cardholder: str, card_id: uuid.UUID) -> bool:
    """True if `card_id` exists and belongs to `cardholder`."""
    result = await db.execute(
        select(exists().where(Card.id == card_id).where(Card.cardholder == cardholder))
    )
    return bool(result.scalar())


async def exists_by_encoded_number(db: AsyncSession, encoded_card_number: str) -> bool:
    result = await db.execute(
        select(exists().where(Card.encoded_card_number == encoded_card_number))
    )
    return bool(result.scalar())


async def find_by_id(db: AsyncSession, card_id: uuid.UUID) -> Card | None:
    result = await db.execute(select(Card).where(Card.id == card_id))
    return result.scalar_one_or_none()


async def get_by_id(db: AsyncSession, card_id: uuid.UUID) -> Card:
    """
    Like find_by_id, but a missing card is an error.

    Raises:
        CardNotFoundError: If no card has this id.
    """
    card = await find_by_id(db, card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    return card


async def find_by_encoded_number(db: AsyncSession, encoded_card_number: str) -> Card | None:
    result = await db.execute(
        select(Card).where(Card.encoded_card_number == encoded_card_number)
    )
    return result.scalar_one_or_none()


async def find_all_owned_by(db: AsyncSession, cardholder: str) -> list[Card]:
    """All cards of one holder, oldest first. Empty list if there are none."""
    result = await db.execute(
        select(Card)
        .where(Card.cardholder == cardholder)
        .order_by(Card.created_at)
    )
    return list(result.scalars().all())


async def find_all(db: AsyncSession) -> list[Card]:
    result = await db.execute(select(Card).order_by(Card.created_at))
    return list(result.scalars().all())


async def lock_for_update(db: AsyncSession, card_ids: list[uuid.UUID]) -> dict[uuid.UUID, Card]:
    """
    Load and row-lock the given cards, always in sorted id order.

    A consistent lock order means two transfers between the same pair of
    cards in opposite directions can't deadlock each other. Rows are
    re-read from the database (populate_existing) so the caller sees
    committed values, not whatever the session cached earlier.

    Returns:
        Mapping of id -> Card for the ids that exist. Missing ids are absent.
    """
    locked: dict[uuid.UUID, Card] = {}
    for card_id in sorted(set(card_ids)):
        result = await db.execute(
            select(Card)
            .where(Card.id == card_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        card = result.scalar_one_or_none()
        if card is not None:
            locked[card_id] = card
    return locked


async def set_blocked(db: AsyncSession, card_id: uuid.UUID) -> None:
    """Unconditionally mark a card BLOCKED. Callers enforce the ACTIVE precondition."""
    await db.execute(
        update(Card)
        .where(Card.id == card_id)
        .values(status=CardStatus.BLOCKED)
        .execution_options(synchronize_session=False)
    )


async def decrease_balance(db: AsyncSession, card_id: uuid.UUID, amount_cents: int) -> bool:
    """
    Atomically subtract `amount_cents` if the card is ACTIVE and can cover it.

    Returns:
        True if the balance was decreased, False if the guard matched no row.
    """
    result = await db.execute(
        update(Card)
        .where(Card.id == card_id)
        .where(Card.status == CardStatus.ACTIVE)
        .where(Card.balance_cents >= amount_cents)
        .values(balance_cents=Card.balance_cents - amount_cents)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def increase_balance(db: AsyncSession, card_id: uuid.UUID, amount_cents: int) -> bool:
    """
    Atomically add `amount_cents` if the card is ACTIVE.

    Returns:
        True if the balance was increased, False if the guard matched no row.
    """
    result = await db.execute(
        update(Card)
        .where(Card.id == card_id)
        .where(Card.status == CardStatus.ACTIVE)
        .values(balance_cents=Card.balance_cents + amount_cents)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def create(db: AsyncSession, card: Card) -> Card:
    db.add(card)
    await db.flush()
    return card


async def save(db: AsyncSession, card: Card) -> Card:
    """Flush pending attribute changes on an already-loaded card."""
    await db.flush()
    await db.refresh(card)
    return card


async def delete_by_id(db: AsyncSession, card_id: uuid.UUID) -> None:
    await db.execute(
        delete(Card)
        .where(Card.id == card_id)
        .execution_options(synchronize_session=False)
    )


async def delete_all_owned_by(db: AsyncSession, cardholder: str) -> int:
    result = await db.execute(
        delete(Card)
        .where(Card.cardholder == cardholder)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount

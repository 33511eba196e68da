"""Ledger store — appends and reads CardTransaction rows."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.models.card_transaction import CardTransaction


async def add_entries(db: AsyncSession, entries: list[CardTransaction]) -> list[CardTransaction]:
    db.add_all(entries)
    await db.flush()
    return entries


async def find_by_card(
    db: AsyncSession,
    card_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[CardTransaction]:
    """Ledger rows for one card, newest first."""
    result = await db.execute(
        select(CardTransaction)
        .where(CardTransaction.card_id == card_id)
        .order_by(CardTransaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def find_all(
    db: AsyncSession,
    status_filter: str | None = None,
    type_filter: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[CardTransaction]:
    """Every ledger row in the system, newest first, optionally filtered."""
    query = (
        select(CardTransaction)
        .order_by(CardTransaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )

    if status_filter:
        query = query.where(CardTransaction.status == status_filter)
    if type_filter:
        query = query.where(CardTransaction.type == type_filter)

    result = await db.execute(query)
    return list(result.scalars().all())

"""
Persistence wiring for the card service: one engine, one session per request.

The cards, users and card_transactions tables all hang off the single
declarative `Base` defined here; `cardbank.models` imports every model so
create_all() sees the full schema.

Unit of work:
  A request's session is one database transaction. A transfer's debit, its
  credit and both ledger legs are flushed into it and become visible together
  when get_db() commits, or not at all.

How get_db() ends the unit:
  - normal return          -> commit
  - BankAPIError           -> commit, then re-raise. Card rules reject before
                              any balance or status write, so the only pending
                              rows are audit rows (a declined debit) that
                              must outlive the rejection.
  - anything else          -> rollback, then re-raise. This includes
                              LedgerConsistencyError, raised when a credit leg
                              fails after its debit was applied.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from cardbank.config import settings
from cardbank.exceptions import BankAPIError


# DEBUG echoes every statement through the sqlalchemy.engine logger
engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Objects stay readable after commit; routes serialize them after the
# service returns, and an expired attribute would need a sync refresh
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for User, Card and CardTransaction."""


async def get_db():
    """Yield the request's session and close the unit of work (see module docstring)."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except BankAPIError:
            await session.commit()
            raise
        except Exception:
            await session.rollback()
            raise

"""User store — lookups and writes for the users table."""

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.models.user import User


async def exists_by_username(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(exists().where(User.username == username)))
    return bool(result.scalar())


async def find_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def find_all(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.username))
    return list(result.scalars().all())


async def create(db: AsyncSession, user: User) -> User:
    db.add(user)
    await db.flush()
    return user


async def delete_by_username(db: AsyncSession, username: str) -> None:
    await db.execute(
        delete(User)
        .where(User.username == username)
        .execution_options(synchronize_session=False)
    )

#!/usr/bin/env python3
"""One-time script to promote a user to ADMIN. Run on the server."""
import asyncio
import sys

from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from cardbank.config import settings
from cardbank.models.user import Role, User


async def promote(username: str):
    engine = create_async_engine(settings.DATABASE_URL)
    sf = async_sessionmaker(engine, class_=AsyncSession)
    async with sf() as s:
        r = await s.execute(
            update(User)
            .where(User.username == username)
            .values(role=Role.ADMIN)
        )
        await s.commit()
        print(f"Rows updated: {r.rowcount}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(promote(sys.argv[1] if len(sys.argv) > 1 else "admin"))

"""
Test fixtures for the card service test suite.

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated) bound to that database
  - codec: The application's card number codec
  - make_user: Factory that creates a user directly in the database
  - login_headers: Factory that logs a user in through the API and returns
    Authorization headers
  - make_card: Factory that inserts a card with a chosen owner, balance and status
  - reload_card: Re-reads a card from the database, bypassing the session cache

Key design decisions:
  - Required secrets are set in the environment before the application is
    imported, with a random codec key per test run.
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - get_db is overridden with a session factory that behaves like the real
    one: commit on success, commit on business errors, roll back otherwise.
"""

import base64
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CARD_CODEC_KEY", base64.urlsafe_b64encode(os.urandom(64)).decode())
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import random
from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from cardbank.database import Base, get_db
from cardbank.exceptions import BankAPIError
from cardbank.main import app
from cardbank.models.card import Card, CardStatus
from cardbank.models.user import Role, User
from cardbank.security import hash_password


TEST_DATABASE_URL = "sqlite+aiosqlite://"
DEFAULT_PASSWORD = "SecurePass123!"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    All requests hit the in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except BankAPIError:
                await session.commit()
                raise
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def codec():
    return app.state.codec


@pytest.fixture
def make_user(db_session):
    """Factory: insert a user directly (no HTTP round trip)."""

    async def _make_user(username: str, role: Role = Role.USER, password: str = DEFAULT_PASSWORD) -> User:
        user = User(username=username, hashed_password=hash_password(password), role=role)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def login_headers(client, make_user):
    """Factory: create a user, log in through the API, return auth headers."""

    async def _login_headers(username: str, role: Role = Role.USER) -> dict[str, str]:
        await make_user(username, role=role)
        response = await client.post(
            "/api/auth/login",
            json={"username": username, "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == 200, f"Login failed: {response.text}"
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login_headers


@pytest.fixture
def make_card(db_session, codec):
    """Factory: insert a card for an existing user."""

    async def _make_card(
        cardholder: str,
        balance_cents: int = 0,
        status: CardStatus = CardStatus.ACTIVE,
        card_number: str | None = None,
    ) -> Card:
        number = card_number or "4" + "".join(str(random.randint(0, 9)) for _ in range(15))
        card = Card(
            cardholder=cardholder,
            encoded_card_number=codec.encode(number),
            expiry_date=date(2030, 1, 31),
            status=status,
            balance_cents=balance_cents,
        )
        db_session.add(card)
        await db_session.commit()
        return card

    return _make_card


@pytest.fixture
def reload_card(db_session):
    """Re-read a card's committed state."""

    async def _reload_card(card_id) -> Card | None:
        return await db_session.get(Card, card_id, populate_existing=True)

    return _reload_card

#!/usr/bin/env python3
"""
Demo seed script — populates a running server with sample users and cards.

!! NOT FOR PRODUCTION !!
This script creates users with known passwords and funds their cards
through the admin API. It is intended ONLY for local demos.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

Login credentials after seeding:
    ┌──────────┬───────────────────┬───────┐
    │ Username │ Password          │ Role  │
    ├──────────┼───────────────────┼───────┤
    │ admin    │ AdminDemo123!     │ ADMIN │
    │ alice    │ AliceDemo123!     │ USER  │
    │ bob      │ BobDemo123!       │ USER  │
    │ carol    │ CarolDemo123!     │ USER  │
    └──────────┴───────────────────┴───────┘
"""

import argparse
import asyncio
import random
import sys
from datetime import date

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

ADMIN = {"username": "admin", "password": "AdminDemo123!"}

MEMBERS = [
    {"username": "alice", "password": "AliceDemo123!", "cards": [500_00, 200_00]},
    {"username": "bob", "password": "BobDemo123!", "cards": [1_200_00]},
    {"username": "carol", "password": "CarolDemo123!", "cards": [3_200_00, 12_000_00, 0]},
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def cents_to_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(client: httpx.AsyncClient, user: dict) -> str:
    """Register a user (ignoring "already exists"), return a JWT token."""
    resp = await client.post(f"{BASE_URL}/api/auth/register", json={
        "username": user["username"],
        "password": user["password"],
    })
    if resp.status_code != 400:
        resp.raise_for_status()

    resp = await client.post(f"{BASE_URL}/api/auth/login", json={
        "username": user["username"],
        "password": user["password"],
    })
    resp.raise_for_status()
    return resp.json()["token"]


async def issue_funded_card(
    client: httpx.AsyncClient, admin_token: str, username: str, balance_cents: int
) -> str:
    """Issue a card to `username` and set its opening balance. Returns the card id."""
    resp = await client.post(
        f"{BASE_URL}/api/admin/cards",
        json={"cardholder": username},
        headers=auth_header(admin_token),
    )
    resp.raise_for_status()
    card = resp.json()

    # Full replace needs a number; give the card a fresh one with the opening balance
    resp = await client.put(
        f"{BASE_URL}/api/admin/cards/{card['card_id']}",
        json={
            "card_number": "4" + "".join(str(random.randint(0, 9)) for _ in range(15)),
            "expiry_date": card["expiry_date"],
            "status": "ACTIVE",
            "balance_cents": balance_cents,
        },
        headers=auth_header(admin_token),
    )
    resp.raise_for_status()
    return card["card_id"]


async def do_transfer(
    client: httpx.AsyncClient, token: str, from_id: str, to_id: str, amount_cents: int
) -> httpx.Response:
    return await client.post(
        f"{BASE_URL}/api/card/cards/transfer",
        json={"from": from_id, "to": to_id, "amount_cents": amount_cents},
        headers=auth_header(token),
    )


async def promote_to_admin(username: str) -> None:
    """Directly update the user's role to ADMIN in the database.

    This bypasses the API since there's no self-service admin promotion.
    """
    from sqlalchemy import update
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from cardbank.config import settings
    from cardbank.models.user import Role, User

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        await session.execute(
            update(User)
            .where(User.username == username)
            .values(role=Role.ADMIN)
        )
        await session.commit()

    await engine.dispose()


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn cardbank.main:app --reload\n")
            sys.exit(1)

        print("Creating admin user...")
        await register_and_login(client, ADMIN)
        await promote_to_admin(ADMIN["username"])
        # Log in again so the token is issued for the ADMIN role
        admin_token = await register_and_login(client, ADMIN)
        log(f"Admin: {ADMIN['username']} / {ADMIN['password']}")

        for member in MEMBERS:
            print(f"\nCreating {member['username']}...")
            token = await register_and_login(client, member)
            log(f"Login: {member['username']} / {member['password']}")

            card_ids = []
            for balance in member["cards"]:
                card_ids.append(await issue_funded_card(client, admin_token, member["username"], balance))
                log(f"  Card issued with {cents_to_dollars(balance)}")

            if len(card_ids) >= 2:
                amount = random.randint(10_00, 100_00)
                resp = await do_transfer(client, token, card_ids[0], card_ids[1], amount)
                log(f"  Transfer of {cents_to_dollars(amount)}: HTTP {resp.status_code}")

                # One declined attempt so the audit trail has something to show
                resp = await do_transfer(client, token, card_ids[1], card_ids[0], 1_000_000_00)
                log(f"  Oversized transfer: HTTP {resp.status_code} ({resp.json()['error_type']})")

            if len(card_ids) >= 3:
                resp = await client.get(
                    f"{BASE_URL}/api/card/cards/block/{card_ids[-1]}",
                    headers=auth_header(token),
                )
                log(f"  Blocked last card: HTTP {resp.status_code}")

    print(f"\nSeeded on {date.today().isoformat()}. Done.\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the card API with demo data")
    parser.add_argument("--base-url", default=BASE_URL, help="API base URL")
    args = parser.parse_args()
    asyncio.run(seed(args.base_url))


if __name__ == "__main__":
    main()

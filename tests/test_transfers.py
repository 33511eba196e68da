"""
Tests for the transfer endpoint and card transaction history.

These tests verify:
  - A successful transfer returns paired debit + credit ledger rows
  - Balances change by exactly the amount (integer cents, no rounding)
  - Foreign cards, inactive cards and insufficient funds are rejected
    without moving money
  - A declined transfer is still visible in the source card's history
  - Amounts are positive integer cents, or decimals with two fractional
    digits converted to cents; exactly one form per request
  - A failure after the debit rolls the whole request back
"""

from unittest.mock import AsyncMock, patch

import pytest

from cardbank.exceptions import LedgerConsistencyError
from cardbank.models.card import CardStatus


class TestTransferSuccess:
    """Tests for POST /api/card/cards/transfer."""

    async def test_transfer_between_own_cards(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=50000)
        c2 = await make_card("alice", balance_cents=20000)

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 10000},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount_cents"] == 10000
        assert data["from_card_id"] == str(c1.id)
        assert data["to_card_id"] == str(c2.id)
        assert data["debit_transaction"]["type"] == "debit"
        assert data["credit_transaction"]["type"] == "credit"
        assert (
            data["debit_transaction"]["transfer_id"]
            == data["credit_transaction"]["transfer_id"]
            == data["transfer_id"]
        )

        assert (await reload_card(c1.id)).balance_cents == 40000
        assert (await reload_card(c2.id)).balance_cents == 30000

    async def test_accepts_field_names_as_well_as_aliases(self, client, login_headers, make_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from_card_id": str(c1.id), "to_card_id": str(c2.id), "amount_cents": 1},
        )
        assert response.status_code == 200

    async def test_repeated_small_transfers_are_exact(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        for _ in range(10):
            response = await client.post(
                "/api/card/cards/transfer",
                headers=headers,
                json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 1},
            )
            assert response.status_code == 200

        assert (await reload_card(c1.id)).balance_cents == 90
        assert (await reload_card(c2.id)).balance_cents == 10

    async def test_decimal_amount_is_converted_to_cents(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=50000)
        c2 = await make_card("alice", balance_cents=20000)

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount": "100.10"},
        )

        assert response.status_code == 200
        assert response.json()["amount_cents"] == 10010
        assert (await reload_card(c1.id)).balance_cents == 39990
        assert (await reload_card(c2.id)).balance_cents == 30010

    async def test_decimal_amount_as_json_number(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=5000)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount": 12.5},
        )

        assert response.status_code == 200
        assert (await reload_card(c2.id)).balance_cents == 1250


class TestTransferRejections:
    """Rejected transfers leave both balances untouched."""

    async def test_foreign_destination(self, client, login_headers, make_user, make_card, reload_card):
        headers = await login_headers("alice")
        await make_user("bob")
        c1 = await make_card("alice", balance_cents=50000)
        c3 = await make_card("bob", balance_cents=0)

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c3.id), "amount_cents": 100},
        )

        assert response.status_code == 403
        assert response.json()["error_type"] == "access_denied"
        assert (await reload_card(c1.id)).balance_cents == 50000
        assert (await reload_card(c3.id)).balance_cents == 0

    async def test_blocked_destination(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=50000)
        c2 = await make_card("alice", balance_cents=20000, status=CardStatus.BLOCKED)

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 100},
        )

        assert response.status_code == 400
        assert response.json()["error_type"] == "card_not_in_service"
        assert (await reload_card(c1.id)).balance_cents == 50000
        assert (await reload_card(c2.id)).balance_cents == 20000

    async def test_insufficient_funds(self, client, login_headers, make_card, reload_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=50000)
        c2 = await make_card("alice", balance_cents=20000)

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 60000},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error_type"] == "insufficient_funds"
        assert data["requested_cents"] == 60000
        assert data["available_cents"] == 50000
        assert (await reload_card(c1.id)).balance_cents == 50000
        assert (await reload_card(c2.id)).balance_cents == 20000

    async def test_declined_transfer_in_history(self, client, login_headers, make_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 500},
        )

        history = await client.get(f"/api/card/cards/{c1.id}/transactions", headers=headers)
        assert history.status_code == 200
        rows = history.json()
        assert len(rows) == 1
        assert rows[0]["status"] == "declined"
        assert rows[0]["amount_cents"] == 500

    async def test_zero_amount(self, client, login_headers, make_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 0},
        )
        assert response.status_code == 422

    async def test_fractional_amount(self, client, login_headers, make_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 10.5},
        )
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "amount_fields",
        [
            {"amount": "1.005"},
            {"amount": "0.00"},
            {"amount": "1.00", "amount_cents": 100},
            {},
        ],
        ids=["three-decimals", "zero-decimal", "both-forms", "neither-form"],
    )
    async def test_invalid_amount_forms(self, client, login_headers, make_card, reload_card, amount_fields):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=500)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), **amount_fields},
        )

        assert response.status_code == 422
        assert (await reload_card(c1.id)).balance_cents == 500

    async def test_requires_authentication(self, client, make_user, make_card):
        await make_user("alice")
        c1 = await make_card("alice", balance_cents=100)
        c2 = await make_card("alice")

        response = await client.post(
            "/api/card/cards/transfer",
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 1},
        )
        assert response.status_code == 401


class TestTransferAtomicity:
    """Either both balances change or neither does."""

    async def test_failed_credit_rolls_back_debit(self, client, login_headers, make_card, reload_card):
        """If the credit leg can't be applied, the debit is rolled back too."""
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=5000)
        c2 = await make_card("alice")

        with patch(
            "cardbank.repositories.card_repository.increase_balance",
            new=AsyncMock(return_value=False),
        ):
            # ASGITransport re-raises unhandled server errors
            with pytest.raises(LedgerConsistencyError):
                await client.post(
                    "/api/card/cards/transfer",
                    headers=headers,
                    json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 1000},
                )

        assert (await reload_card(c1.id)).balance_cents == 5000
        assert (await reload_card(c2.id)).balance_cents == 0

        history = await client.get(f"/api/card/cards/{c1.id}/transactions", headers=headers)
        assert history.json() == []


class TestCardTransactions:
    """Tests for GET /api/card/cards/{card_id}/transactions."""

    async def test_history_shows_both_directions(self, client, login_headers, make_card):
        headers = await login_headers("alice")
        c1 = await make_card("alice", balance_cents=1000)
        c2 = await make_card("alice")

        await client.post(
            "/api/card/cards/transfer",
            headers=headers,
            json={"from": str(c1.id), "to": str(c2.id), "amount_cents": 300},
        )

        source = (await client.get(f"/api/card/cards/{c1.id}/transactions", headers=headers)).json()
        dest = (await client.get(f"/api/card/cards/{c2.id}/transactions", headers=headers)).json()
        assert [row["type"] for row in source] == ["debit"]
        assert [row["type"] for row in dest] == ["credit"]
        assert source[0]["counterpart_card_id"] == str(c2.id)

    async def test_history_of_foreign_card_denied(self, client, login_headers, make_user, make_card):
        headers = await login_headers("alice")
        await make_user("bob")
        card = await make_card("bob")

        response = await client.get(f"/api/card/cards/{card.id}/transactions", headers=headers)
        assert response.status_code == 403

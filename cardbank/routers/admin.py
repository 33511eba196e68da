"""
Admin router — card and user administration.

All endpoints require the ADMIN role.

Endpoints:
  GET    /api/admin/cards                 — List ALL cards (masked)
  POST   /api/admin/cards                 — Issue a card to a user
  PUT    /api/admin/cards/{card_id}       — Replace a card's number/expiry/status/balance
  DELETE /api/admin/cards/{card_id}       — Delete a card
  GET    /api/admin/users                 — List ALL users
  POST   /api/admin/users                 — Create a user with a role
  PUT    /api/admin/users/{username}      — Replace a user's password and role
  DELETE /api/admin/users/{username}      — Delete a user and their cards
  GET    /api/admin/transactions          — List ALL ledger rows
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.codec import CardNumberCodec
from cardbank.database import get_db
from cardbank.dependencies import get_codec, require_admin
from cardbank.models.user import User
from cardbank.schemas.card import CardCreateRequest, CardResponse, CardUpdateRequest
from cardbank.schemas.common import MessageResponse
from cardbank.schemas.transaction import CardTransactionResponse
from cardbank.schemas.user import UserRequest, UserResponse, UserUpdateRequest
from cardbank.services import card_service, transfer_service, user_service

router = APIRouter()


# ---------------------------------------------------------------------------
# Card admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/cards",
    response_model=list[CardResponse],
    summary="[Admin] List all cards",
)
async def admin_list_cards(
    admin: User = Depends(require_admin),
    codec: CardNumberCodec = Depends(get_codec),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.list_all(db, codec)


@router.post(
    "/cards",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Issue a card",
)
async def admin_issue_card(
    request: CardCreateRequest,
    admin: User = Depends(require_admin),
    codec: CardNumberCodec = Depends(get_codec),
    db: AsyncSession = Depends(get_db),
):
    """
    Issue an ACTIVE card with a zero balance.

    - **cardholder**: existing username (404 otherwise)
    - **card_number**: 16 digits, unique (400 if taken); generated when omitted
    - **expiry_date**: defaults to three years from today
    """
    card = await card_service.issue_card(
        db=db,
        codec=codec,
        cardholder=request.cardholder,
        card_number=request.card_number,
        expiry_date=request.expiry_date,
    )
    return card_service.to_card_response(card, codec)


@router.put(
    "/cards/{card_id}",
    response_model=CardResponse,
    summary="[Admin] Update a card",
)
async def admin_update_card(
    card_id: uuid.UUID,
    request: CardUpdateRequest,
    admin: User = Depends(require_admin),
    codec: CardNumberCodec = Depends(get_codec),
    db: AsyncSession = Depends(get_db),
):
    """Full replace of number, expiry, status and balance. The cardholder never changes."""
    card = await card_service.update_card(
        db=db,
        codec=codec,
        card_id=card_id,
        card_number=request.card_number,
        expiry_date=request.expiry_date,
        status=request.status,
        balance_cents=request.balance_cents,
    )
    return card_service.to_card_response(card, codec)


@router.delete(
    "/cards/{card_id}",
    response_model=MessageResponse,
    summary="[Admin] Delete a card",
)
async def admin_delete_card(
    card_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await card_service.delete_card(db, card_id)
    return MessageResponse(detail="Card successfully deleted")


# ---------------------------------------------------------------------------
# User admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="[Admin] List all users",
)
async def admin_list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create a user",
)
async def admin_add_user(
    request: UserRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.add_user(
        db, username=request.username, password=request.password, role=request.role
    )


@router.put(
    "/users/{username}",
    response_model=UserResponse,
    summary="[Admin] Update a user",
)
async def admin_update_user(
    username: str,
    request: UserUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(
        db, username=username, password=request.password, role=request.role
    )


@router.delete(
    "/users/{username}",
    response_model=MessageResponse,
    summary="[Admin] Delete a user",
)
async def admin_delete_user(
    username: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user. Their cards are deleted with them; ledger rows are kept."""
    await user_service.delete_user(db, username)
    return MessageResponse(detail="User successfully deleted")


# ---------------------------------------------------------------------------
# Ledger admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/transactions",
    response_model=list[CardTransactionResponse],
    summary="[Admin] List ALL ledger rows",
)
async def admin_list_transactions(
    status: str | None = Query(None, description="Filter by status (approved/declined)"),
    type: str | None = Query(None, description="Filter by type (credit/debit)"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.admin_list_transactions(
        db=db,
        status_filter=status,
        type_filter=type,
        limit=limit,
        offset=offset,
    )

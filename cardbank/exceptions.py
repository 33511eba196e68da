"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handlers registered here translate each
one 1:1 into an HTTP status and a consistent JSON body:

    {"detail": "<message>", "error_type": "<machine-readable tag>"}

Exception hierarchy:
    BankAPIError (base)
    ├── CardAccessDeniedError   — principal does not own the card(s)        403
    ├── CardNotFoundError       — card id does not exist                    404
    ├── UserNotFoundError       — username does not exist                   404
    ├── CardNotInServiceError   — card status is not ACTIVE                 400
    ├── InsufficientFundsError  — source balance below the transfer amount  400
    ├── CardAlreadyExistsError  — card number already issued                400
    ├── UserAlreadyExistsError  — username already registered               400
    └── InvalidCredentialsError — login failed                              401

Two errors sit outside BankAPIError on purpose:
  - CodecConfigurationError: a wrong or malformed card codec key. It is
    raised while the application is being built, so the process never
    starts serving with a broken key.
  - LedgerConsistencyError: the second half of a transfer could not be
    applied. It is not a business rejection, so get_db() rolls the whole
    request back instead of committing.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all card service domain errors."""

    status_code = 400
    error_type = "bank_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class CardAccessDeniedError(BankAPIError):
    """Raised when a principal references a card they don't own."""

    status_code = 403
    error_type = "access_denied"

    def __init__(self, detail: str = "Access denied"):
        super().__init__(detail)


class CardNotFoundError(BankAPIError):
    """Raised when a requested card does not exist."""

    status_code = 404
    error_type = "card_not_found"

    def __init__(self, card_id: uuid.UUID):
        self.card_id = card_id
        super().__init__(f"Card {card_id} not found")


class UserNotFoundError(BankAPIError):
    """Raised when a referenced user does not exist."""

    status_code = 404
    error_type = "user_not_found"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User {username} not found")


class CardNotInServiceError(BankAPIError):
    """Raised when a card's status forbids the operation (not ACTIVE)."""

    status_code = 400
    error_type = "card_not_in_service"

    def __init__(self, card_id: uuid.UUID):
        self.card_id = card_id
        super().__init__(f"Card {card_id} is not in active status")


class InsufficientFundsError(BankAPIError):
    """
    Raised when a transfer would take the source balance below zero.

    Attributes:
        card_id: The card that lacks sufficient funds.
        requested_cents: The amount the user tried to move.
        available_cents: The balance of the card at the time of the check.
    """

    status_code = 400
    error_type = "insufficient_funds"

    def __init__(
        self,
        card_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.card_id = card_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient funds: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )


class CardAlreadyExistsError(BankAPIError):
    """Raised when issuing a card whose number is already taken."""

    status_code = 400
    error_type = "card_already_exists"

    def __init__(self):
        super().__init__("Card number already taken")


class UserAlreadyExistsError(BankAPIError):
    """Raised when registering a username that is already in use."""

    status_code = 400
    error_type = "user_already_exists"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User {username} already exists")


class InvalidCredentialsError(BankAPIError):
    """Raised when login credentials are incorrect."""

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid username or password")


# ---------------------------------------------------------------------------
# Non-business faults
# ---------------------------------------------------------------------------

class CodecConfigurationError(Exception):
    """The card codec key is missing, malformed, or cannot decode stored data."""


class LedgerConsistencyError(Exception):
    """A paired balance write could not be completed; the unit must roll back."""


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every BankAPIError subclass carries its own status_code and error_type,
    so a single handler covers the whole hierarchy. Insufficient funds adds
    the requested/available amounts to the body.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "requested_cents": exc.requested_cents,
                "available_cents": exc.available_cents,
            },
        )

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )

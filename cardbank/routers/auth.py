"""
Authentication router — registration and login endpoints.

These are the only public (unauthenticated) endpoints besides /health.

Endpoints:
  POST /api/auth/register — Create a USER account
  POST /api/auth/login    — Authenticate and get a token

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - The token is returned in the body and also set as an HttpOnly,
    SameSite=Strict cookie for browser clients.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.database import get_db
from cardbank.dependencies import get_token_issuer
from cardbank.schemas.auth import AuthRequest, TokenResponse
from cardbank.schemas.common import MessageResponse
from cardbank.security import TokenIssuer
from cardbank.services import auth_service

router = APIRouter()


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: AuthRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user with the USER role.

    - **username**: 1-20 characters, must not be taken
    - **password**: required
    """
    await auth_service.register(db=db, username=request.username, password=request.password)
    return MessageResponse(detail="User registered")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: AuthRequest,
    response: Response,
    http_request: Request,
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with username and password.

    Returns a JWT bearer token to send on subsequent requests:

        Authorization: Bearer <token>

    The same token is set as an HttpOnly cookie. It expires after
    ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    _, token = await auth_service.login(
        db=db,
        token_issuer=token_issuer,
        username=request.username,
        password=request.password,
    )

    response.set_cookie(
        key=http_request.app.state.auth_cookie_name,
        value=token,
        max_age=token_issuer.expire_minutes * 60,
        path="/",
        httponly=True,
        samesite="strict",
        secure=http_request.app.state.auth_cookie_secure,
    )
    return TokenResponse(token=token)

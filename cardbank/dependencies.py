"""
FastAPI dependencies for authentication, authorization and shared collaborators.

Dependency chain:

  get_current_user (JWT -> User)
      └── require_admin (User -> User)   [ADMIN role]

  get_codec        (app.state -> CardNumberCodec)
  get_token_issuer (app.state -> TokenIssuer)

  The auth cookie name is read from app.state as well.

Where the token comes from:
  An "Authorization: Bearer <token>" header is preferred. Browser clients
  that logged in through /api/auth/login also carry the token in an HttpOnly
  cookie, which is accepted when no header is present.

Roles:
  - USER and ADMIN may both use /api/card/** (scoped to their own cards)
  - only ADMIN may use /api/admin/**

The codec and token issuer are built once by the application factory from
explicit configuration and stored on app.state, so routes get them through
these dependencies instead of importing module globals.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.codec import CardNumberCodec
from cardbank.database import get_db
from cardbank.models.user import Role, User
from cardbank.repositories import user_repository
from cardbank.security import TokenIssuer


# auto_error=False so a missing header falls through to the cookie check
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_codec(request: Request) -> CardNumberCodec:
    return request.app.state.codec


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def get_current_user(
    request: Request,
    bearer_token: str | None = Depends(oauth2_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the request's JWT to the User it names.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or names
            a user that no longer exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = bearer_token or request.cookies.get(request.app.state.auth_cookie_name)
    if not token:
        raise credentials_exception

    try:
        payload = token_issuer.decode_access_token(token)
    except JWTError:
        raise credentials_exception

    username: str | None = payload.get("sub")
    if username is None:
        raise credentials_exception

    user = await user_repository.find_by_username(db, username)
    if user is None:
        raise credentials_exception

    return user


async def require_admin(
    user: User = Depends(get_current_user),
) -> User:
    """
    Require the authenticated user to have the ADMIN role.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user

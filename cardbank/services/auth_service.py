"""
Authentication service — registration and login business logic.

Registration flow:
  1. Reject a username that is already taken
  2. Hash the password with Argon2id
  3. Store the user with the USER role

Login flow:
  1. Look up the user by username
  2. Verify the password against the stored hash
  3. Issue a JWT whose subject is the username

Security notes:
  - Login returns the same error for "wrong password" and "unknown user"
    to prevent user enumeration
  - Passwords and tokens are never logged; failed logins log the username only
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.exceptions import InvalidCredentialsError, UserAlreadyExistsError
from cardbank.models.user import Role, User
from cardbank.repositories import user_repository
from cardbank.security import TokenIssuer, hash_password, verify_password

logger = logging.getLogger(__name__)


async def register(db: AsyncSession, username: str, password: str) -> User:
    """
    Register a new USER.

    Raises:
        UserAlreadyExistsError: If the username is taken.
    """
    if await user_repository.exists_by_username(db, username):
        raise UserAlreadyExistsError(username)

    user = User(
        username=username,
        hashed_password=hash_password(password),
        role=Role.USER,
    )
    await user_repository.create(db, user)
    logger.info("User registered: username=%s", username)
    return user


async def login(
    db: AsyncSession,
    token_issuer: TokenIssuer,
    username: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        InvalidCredentialsError: If the user doesn't exist or the password is wrong.
    """
    user = await user_repository.find_by_username(db, username)

    # Same error for both cases: no user enumeration
    if user is None or not verify_password(password, user.hashed_password):
        logger.warning("Failed login: username=%s", username)
        raise InvalidCredentialsError()

    token = token_issuer.create_access_token(username=user.username, roles=[user.role.value])
    return user, token

"""
User administration — [ADMIN ONLY] create, update, list and delete users.

Password hashes never leave this layer: the router serializes users through
UserResponse, which has no password field at all.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardbank.exceptions import UserAlreadyExistsError, UserNotFoundError
from cardbank.models.user import Role, User
from cardbank.repositories import card_repository, user_repository
from cardbank.security import hash_password

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession) -> list[User]:
    return await user_repository.find_all(db)


async def add_user(db: AsyncSession, username: str, password: str, role: Role) -> User:
    """
    Create a user with an explicit role.

    Raises:
        UserAlreadyExistsError: If the username is taken.
    """
    if await user_repository.exists_by_username(db, username):
        raise UserAlreadyExistsError(username)

    user = User(username=username, hashed_password=hash_password(password), role=role)
    await user_repository.create(db, user)
    logger.info("User added by admin: username=%s role=%s", username, role.value)
    return user


async def update_user(db: AsyncSession, username: str, password: str, role: Role) -> User:
    """
    Replace a user's password and role.

    Raises:
        UserNotFoundError: If the user doesn't exist.
    """
    user = await user_repository.find_by_username(db, username)
    if user is None:
        raise UserNotFoundError(username)

    user.hashed_password = hash_password(password)
    user.role = role
    await db.flush()
    logger.info("User updated by admin: username=%s role=%s", username, role.value)
    return user


async def delete_user(db: AsyncSession, username: str) -> None:
    """
    Delete a user together with every card they hold.

    Raises:
        UserNotFoundError: If the user doesn't exist.
    """
    if not await user_repository.exists_by_username(db, username):
        raise UserNotFoundError(username)

    removed_cards = await card_repository.delete_all_owned_by(db, username)
    await user_repository.delete_by_username(db, username)
    logger.info("User deleted by admin: username=%s cards_removed=%s", username, removed_cards)

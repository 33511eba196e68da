"""
Pydantic schemas for user administration.

hashed_password is NEVER included in any response schema — this is a
critical security boundary.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from cardbank.models.user import Role


class UserRequest(BaseModel):
    """Request body for POST /api/admin/users."""
    username: str = Field(min_length=1, max_length=20)
    password: str = Field(min_length=1)
    role: Role = Role.USER


class UserUpdateRequest(BaseModel):
    """Request body for PUT /api/admin/users/{username}."""
    password: str = Field(min_length=1)
    role: Role


class UserResponse(BaseModel):
    """Public representation of a user (never includes the password hash)."""
    username: str
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True}

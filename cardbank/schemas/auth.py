"""
Pydantic schemas for authentication endpoints (register and login).

Pydantic validates incoming data automatically — if a required field is
missing or the wrong type, FastAPI returns a 422 error before our code
even runs.
"""

from pydantic import BaseModel, Field


class AuthRequest(BaseModel):
    """Request body for POST /api/auth/register and /api/auth/login."""
    username: str = Field(min_length=1, max_length=20)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Response body for successful login — contains the JWT."""
    token: str
    token_type: str = "bearer"

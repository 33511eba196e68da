"""
Security utilities: password hashing and JWT access tokens.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - Argon2id is memory-hard and time-hard, which makes GPU cracking and
     side-channel attacks expensive
   - passlib's CryptContext gives safe, high-level Argon2 operations and
     transparent migration to a future scheme ("deprecated='auto'")

2. JWT TOKENS (JSON Web Tokens)
   - After login, the user receives a signed JWT whose "sub" is the username
   - A "roles" claim records the role at issuance time (informational — the
     principal resolver always re-reads the role from the database)
   - Tokens expire after ACCESS_TOKEN_EXPIRE_MINUTES

The token issuer is an object built from explicit configuration rather than a
module-level global, so its signing key never leaks into other collaborators
(the card codec has its own key in codec.py).
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash (constant time)."""
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


class TokenIssuer:
    """
    Issues and verifies signed access tokens.

    Args:
        secret_key: HMAC signing key.
        algorithm: JWS algorithm name (e.g. "HS256").
        expire_minutes: Default lifetime of issued tokens.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_access_token(
        self,
        username: str,
        roles: list[str],
        expires_delta: timedelta | None = None,
    ) -> str:
        """
        Create a signed JWT access token.

        The payload contains:
          - "sub": the username
          - "roles": role names held at issuance
          - "iat" / "exp": issuance and expiration timestamps
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        claims = {"sub": username, "roles": roles, "iat": now, "exp": expire}
        return jwt.encode(claims, self._secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> dict:
        """
        Decode and verify a JWT access token.

        Raises:
            JWTError: If the token is expired, tampered with, or invalid.
        """
        return jwt.decode(token, self._secret_key, algorithms=[self.algorithm])

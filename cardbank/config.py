"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This keeps secrets out of source code — the .env file is
gitignored and only holds values for local development.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

The two secrets are deliberately separate:
  - SECRET_KEY signs JWT access tokens
  - CARD_CODEC_KEY obfuscates card numbers at rest
Neither is read by the collaborator that doesn't own it. The application
factory in main.py hands each key to its consumer explicitly.

Usage:
    from cardbank.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the card service.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens
      - CARD_CODEC_KEY: URL-safe base64 AES-SIV key for card numbers
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Card Bank API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"  # "standard" or "json"

    # --- Database ---
    # SQLite for local runs; swap to a PostgreSQL (asyncpg) URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/cardbank.db"

    # --- Authentication ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    AUTH_COOKIE_NAME: str = "Authorization"

    # --- Card number obfuscation ---
    # Generate with:
    #   python -c "from cryptography.hazmat.primitives.ciphers.aead import AESSIV; import base64; print(base64.urlsafe_b64encode(AESSIV.generate_key(512)).decode())"
    CARD_CODEC_KEY: str

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Loaded once per process; import this instance instead of creating new Settings()
settings = Settings()

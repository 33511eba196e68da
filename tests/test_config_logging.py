"""
Tests for configuration, logging setup, and the token issuer.

These tests verify:
  - Settings read required secrets from the environment
  - setup_logging installs exactly one stdout handler, even when called twice
  - The JSON formatter emits one parseable object per record
  - Tokens round-trip through the issuer and are rejected under another key
"""

import json
import logging

import pytest
from jose import JWTError
from pydantic import ValidationError

from cardbank.config import Settings
from cardbank.logging_config import JsonFormatter, setup_logging
from cardbank.security import TokenIssuer, hash_password, verify_password


class TestSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "from-env")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")

        config = Settings()

        assert config.SECRET_KEY == "from-env"
        assert config.ACCESS_TOKEN_EXPIRE_MINUTES == 15
        assert config.ALGORITHM == "HS256"

    def test_codec_key_is_required(self, monkeypatch):
        monkeypatch.delenv("CARD_CODEC_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestLogging:

    def test_single_handler_after_repeated_setup(self):
        setup_logging("INFO")
        setup_logging("DEBUG")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

        setup_logging("INFO")

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.INFO

    def test_json_formatter(self):
        record = logging.LogRecord(
            name="cardbank.services.transfer_service",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Transfer declined: requested=%s",
            args=(500,),
            exc_info=None,
        )

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "cardbank.services.transfer_service"
        assert payload["message"] == "Transfer declined: requested=500"
        assert "timestamp" in payload


class TestSecurity:

    def test_password_hash_round_trip(self):
        hashed = hash_password("correct horse")
        assert hashed.startswith("$argon2")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_round_trip(self):
        issuer = TokenIssuer("key-one")
        token = issuer.create_access_token("alice", ["USER"])

        claims = issuer.decode_access_token(token)
        assert claims["sub"] == "alice"
        assert claims["roles"] == ["USER"]
        assert claims["exp"] > claims["iat"]

    def test_token_from_other_key_rejected(self):
        token = TokenIssuer("key-one").create_access_token("alice", ["USER"])

        with pytest.raises(JWTError):
            TokenIssuer("key-two").decode_access_token(token)

"""
Card number codec — reversible at-rest obfuscation plus display masking.

Card numbers are stored encoded, never in plaintext. Two requirements shape
the choice of cipher:

  1. Determinism. Uniqueness of a card number is checked by encoding the
     candidate and looking for an equal stored value, so the same plaintext
     must always encode to the same string.
  2. Reversibility. The display form needs the last four digits of the real
     number, so the stored value must decode.

AES-SIV (RFC 5297) is a deterministic authenticated cipher: equal inputs give
equal outputs, and any tampering or a wrong key is detected on decrypt. The
output is URL-safe base64 text so it fits a plain string column.

This is obfuscation at rest, not a secrecy boundary — anyone holding the
codec key can recover every number. Masking is a presentation transform only.
"""

import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESSIV

from cardbank.exceptions import CodecConfigurationError

logger = logging.getLogger(__name__)

MASK_CHAR = "*"
VISIBLE_DIGITS = 4

# AES-SIV uses a double-length key: 256, 384 or 512 bits
_VALID_KEY_LENGTHS = (32, 48, 64)

# Bound into every ciphertext so codec output can't be replayed in another context
_ASSOCIATED_DATA = [b"cardbank:card-number"]


class CardNumberCodec:
    """
    Encode/decode card numbers with a purpose-specific AES-SIV key.

    Args:
        key: URL-safe base64 encoding of a 32, 48 or 64 byte key.

    Raises:
        CodecConfigurationError: If the key is not valid base64, has the
            wrong length, or fails a round-trip self-check.
    """

    def __init__(self, key: str):
        try:
            raw_key = base64.urlsafe_b64decode(key.encode())
        except (binascii.Error, ValueError) as exc:
            raise CodecConfigurationError("Card codec key is not valid base64") from exc

        if len(raw_key) not in _VALID_KEY_LENGTHS:
            raise CodecConfigurationError(
                f"Card codec key must decode to 32, 48 or 64 bytes, got {len(raw_key)}"
            )

        self._cipher = AESSIV(raw_key)

        sample = "0000000000000000"
        if self.decode(self.encode(sample)) != sample:
            raise CodecConfigurationError("Card codec failed its round-trip self-check")

    def encode(self, card_number: str) -> str:
        """Encode a plaintext card number. Same input, same output."""
        ciphertext = self._cipher.encrypt(card_number.encode(), _ASSOCIATED_DATA)
        return base64.urlsafe_b64encode(ciphertext).decode()

    def decode(self, encoded: str) -> str:
        """
        Decode a stored card number.

        Raises:
            CodecConfigurationError: If the value was produced under another
                key or is corrupted. This signals misconfiguration, not a
                user error.
        """
        try:
            ciphertext = base64.urlsafe_b64decode(encoded.encode())
            return self._cipher.decrypt(ciphertext, _ASSOCIATED_DATA).decode()
        except (InvalidTag, binascii.Error, ValueError) as exc:
            logger.error("Card number could not be decoded; check CARD_CODEC_KEY")
            raise CodecConfigurationError("Stored card number cannot be decoded") from exc

    def masked(self, encoded: str) -> str:
        """Decode a stored card number straight into its display form."""
        return mask_card_number(self.decode(encoded))


def mask_card_number(card_number: str, mask_char: str = MASK_CHAR) -> str:
    """
    Replace all but the last four characters with the mask character.

    >>> mask_card_number("4111111111111234")
    '************1234'
    """
    hidden = max(len(card_number) - VISIBLE_DIGITS, 0)
    return mask_char * hidden + card_number[hidden:]

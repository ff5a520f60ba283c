"""
Fernet cipher adapter - Implements ReversibleCipher protocol.

Verification tokens travel in a URL query parameter. They are first
encrypted with Fernet (AES-128-CBC + HMAC-SHA256, so tampering is detected)
and then base64url encoded without padding for the link.
"""

import base64
import binascii
import logging

from cryptography.fernet import Fernet, InvalidToken

from src.domain.exceptions import InvalidCiphertextError

logger = logging.getLogger(__name__)


class FernetCipher:
    """
    Implements ReversibleCipher protocol via cryptography's Fernet.

    Uses structural subtyping - no explicit inheritance from Protocol.
    The key is fixed for the lifetime of the instance.
    """

    def __init__(self, key: str | bytes) -> None:
        """
        Args:
            key: 32-byte urlsafe base64 Fernet key

        Raises:
            ValueError: key is not a valid Fernet key
        """
        if isinstance(key, str):
            key = key.encode()
        self._fernet = Fernet(key)

    @staticmethod
    def generate_key() -> str:
        """Create a new random Fernet key."""
        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: bytes) -> bytes:
        return self._fernet.encrypt(plaintext)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        Raises:
            InvalidCiphertextError: wrong key, tampered or truncated input
        """
        try:
            return self._fernet.decrypt(ciphertext)
        except (InvalidToken, TypeError, ValueError):
            raise InvalidCiphertextError("Ciphertext cannot be decrypted") from None

    def encode(self, data: bytes) -> str:
        """URL-safe base64 without '=' padding."""
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")

    def decode(self, text: str) -> bytes:
        """
        Reverse encode().

        Raises:
            InvalidCiphertextError: characters outside the URL-safe alphabet
                or an impossible length
        """
        try:
            raw = text.encode("ascii")
        except (UnicodeEncodeError, AttributeError):
            raise InvalidCiphertextError("Encoded token is not ASCII") from None

        if b"+" in raw or b"/" in raw:
            raise InvalidCiphertextError("Encoded token is not URL-safe")

        padded = raw + b"=" * (-len(raw) % 4)
        try:
            return base64.b64decode(padded, altchars=b"-_", validate=True)
        except binascii.Error:
            raise InvalidCiphertextError("Encoded token is malformed") from None

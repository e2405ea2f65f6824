"""
Symmetric encryption for provider API keys.

All credential reads and writes go through ``Cipher`` so the key strategy
can change without touching the services. Tokens are Fernet tokens
(AES-128-CBC with an HMAC-SHA256 signature), so tampering or a foreign key
is detected rather than decrypted into garbage.
"""

from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import get_config
from ..exceptions import DecryptionError, ErrorCode, ServiceError


class Cipher:
    """Encrypt and decrypt opaque secret strings with the process-wide key."""

    def __init__(self, key: str):
        try:
            self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        except (ValueError, TypeError) as e:
            raise ServiceError(
                "Invalid encryption key: expected 32 url-safe base64-encoded bytes",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="cipher_init",
                cause=e,
            ) from e

    @staticmethod
    def generate_key() -> str:
        """Create a fresh key suitable for ``CATALOG_ENCRYPTION_KEY``."""
        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a token produced by ``encrypt``.

        Raises:
            DecryptionError: If the token is malformed, tampered with, or was
                produced with a different key
        """
        try:
            token = ciphertext.encode("ascii") if isinstance(ciphertext, str) else ciphertext
            return self._fernet.decrypt(token).decode("utf-8")
        except (InvalidToken, UnicodeError, TypeError, AttributeError) as e:
            raise DecryptionError(cause=e) from e


_cipher: Optional[Cipher] = None


def get_cipher() -> Cipher:
    """
    Get the process-wide cipher, built from ``SecurityConfig`` on first use.

    Raises:
        ServiceError: If no encryption key is configured
    """
    global _cipher
    if _cipher is None:
        key = get_config().security.encryption_key
        if not key:
            raise ServiceError(
                "No encryption key configured. Set CATALOG_ENCRYPTION_KEY.",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="get_cipher",
            )
        _cipher = Cipher(key)
    return _cipher


def set_cipher(cipher: Optional[Cipher]) -> None:
    """Replace the process-wide cipher (primarily for tests)."""
    global _cipher
    _cipher = cipher

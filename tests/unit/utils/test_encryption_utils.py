"""
Tests for the credential cipher.
"""

import pytest
from cryptography.fernet import Fernet

from model_catalog_core.config import AppConfig, SecurityConfig, set_config
from model_catalog_core.exceptions import DecryptionError, ErrorCode, ServiceError
from model_catalog_core.utils.encryption_utils import Cipher, get_cipher, set_cipher


class TestCipher:
    """Test Cipher encrypt/decrypt behaviour."""

    def test_round_trip(self, cipher):
        token = cipher.encrypt("sk-live-abc123")

        assert token != "sk-live-abc123"
        assert "sk-live-abc123" not in token
        assert cipher.decrypt(token) == "sk-live-abc123"

    def test_encryption_is_randomized(self, cipher):
        assert cipher.encrypt("same-secret") != cipher.encrypt("same-secret")

    def test_unicode_secret(self, cipher):
        assert cipher.decrypt(cipher.encrypt("clé-🔑")) == "clé-🔑"

    def test_foreign_key_fails(self, cipher):
        other = Cipher(Cipher.generate_key())
        token = other.encrypt("sk-other")

        with pytest.raises(DecryptionError) as exc_info:
            cipher.decrypt(token)

        assert exc_info.value.error_code == ErrorCode.DECRYPTION_FAILED
        assert exc_info.value.user_message == "Please re-enter your API key."

    def test_tampered_token_fails(self, cipher):
        token = cipher.encrypt("sk-live-abc123")
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")

        with pytest.raises(DecryptionError):
            cipher.decrypt(tampered)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "gAAAAA"])
    def test_garbage_fails(self, cipher, garbage):
        with pytest.raises(DecryptionError):
            cipher.decrypt(garbage)

    def test_invalid_key_is_configuration_error(self):
        with pytest.raises(ServiceError) as exc_info:
            Cipher("too-short")

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR

    def test_generated_key_is_fernet_compatible(self):
        key = Cipher.generate_key()
        assert Fernet(key.encode())


class TestProcessCipher:
    """Test the process-wide cipher accessor."""

    def test_built_from_config(self, encryption_key):
        set_cipher(None)
        cipher = get_cipher()

        assert Cipher(encryption_key).decrypt(cipher.encrypt("x")) == "x"
        assert get_cipher() is cipher

    def test_missing_key_is_configuration_error(self):
        set_cipher(None)
        set_config(AppConfig(security=SecurityConfig(encryption_key=None)))

        with pytest.raises(ServiceError) as exc_info:
            get_cipher()

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR

"""Payload encryption with independently generated random keys."""

import os
import secrets
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from common.constants import ENCRYPTION_KEY_BYTES, ENCRYPTION_KEY_HEX_LENGTH, ENCRYPTION_NONCE_BYTES
from common.logging_config import get_logger
from vault.exceptions import DecryptionError, EncryptionError
from vault.services.checksum_service import Payload, read_payload

logger = get_logger(__name__)


def generate_encryption_key() -> str:
    """
    Generate a random encryption key.

    Returns:
        64-character lowercase hex string (32 bytes from the OS CSPRNG)
    """
    return secrets.token_hex(ENCRYPTION_KEY_BYTES)


def _key_bytes(key: str) -> bytes:
    if not isinstance(key, str) or len(key) != ENCRYPTION_KEY_HEX_LENGTH:
        raise DecryptionError("Encryption key must be a 64-character hex string")
    try:
        return bytes.fromhex(key)
    except ValueError as e:
        raise DecryptionError("Encryption key is not valid hex") from e


class EncryptionService:
    """
    AES-256-GCM over the whole payload.

    The protected payload is ``nonce || ciphertext``. Keys never depend on
    payload content; every call to ``encrypt`` draws a fresh key and nonce.
    """

    def encrypt(self, payload: Payload) -> Tuple[bytes, str]:
        """
        Protect a payload.

        Returns:
            Tuple of (protected_payload, key)

        Raises:
            EncryptionError: If the payload cannot be read or encrypted
        """
        try:
            data = read_payload(payload)
            key = generate_encryption_key()
            nonce = os.urandom(ENCRYPTION_NONCE_BYTES)
            ciphertext = AESGCM(bytes.fromhex(key)).encrypt(nonce, data, None)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Encryption failed: {e}")
            raise EncryptionError(f"Failed to encrypt payload: {e}") from e

        logger.debug(f"Encrypted payload of {len(data)} bytes")
        return nonce + ciphertext, key

    def decrypt(self, protected_payload: bytes, key: str) -> bytes:
        """
        Reverse ``encrypt``.

        Raises:
            DecryptionError: If the key does not match or the payload is malformed
        """
        key_bytes = _key_bytes(key)
        data = bytes(protected_payload)
        if len(data) < ENCRYPTION_NONCE_BYTES:
            raise DecryptionError("Protected payload is truncated")

        nonce, ciphertext = data[:ENCRYPTION_NONCE_BYTES], data[ENCRYPTION_NONCE_BYTES:]
        try:
            return AESGCM(key_bytes).decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            logger.warning("Decryption failed: key does not match payload")
            raise DecryptionError("Decryption failed: wrong key") from e

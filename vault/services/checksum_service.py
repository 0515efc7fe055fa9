"""Provides SHA-256 digest calculation and verification for payloads."""

import hashlib
from typing import BinaryIO, Union

from common.constants import DIGEST_HEX_LENGTH, DIGEST_READ_BLOCK_BYTES
from common.logging_config import get_logger
from vault.exceptions import IntegrityError

logger = get_logger(__name__)

Payload = Union[bytes, bytearray, memoryview, BinaryIO]


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(block1)
        calculator.update(block2)
        digest = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Lowercase hexadecimal SHA-256 digest
        """
        self._finalized = True
        return self._hasher.hexdigest()


def read_payload(payload: Payload) -> bytes:
    """Full payload as bytes; seekable streams are rewound afterwards."""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    start = payload.tell() if payload.seekable() else None
    data = payload.read()
    if start is not None:
        payload.seek(start)
    return data


def _digest_stream(stream: BinaryIO) -> str:
    start = stream.tell() if stream.seekable() else None
    calculator = IncrementalChecksumCalculator()
    while True:
        block = stream.read(DIGEST_READ_BLOCK_BYTES)
        if not block:
            break
        calculator.update(block)
    if start is not None:
        stream.seek(start)
    return calculator.finalize()


def compute_digest(payload: Payload) -> str:
    """
    Compute the SHA-256 digest of the full payload.

    Seekable streams are rewound to their starting position afterwards so the
    same stream can be handed to storage.

    Args:
        payload: Bytes or a binary stream

    Returns:
        64-character lowercase hexadecimal digest

    Raises:
        IntegrityError: If the payload cannot be read
    """
    try:
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return hashlib.sha256(payload).hexdigest()
        return _digest_stream(payload)
    except (OSError, ValueError, AttributeError, TypeError) as e:
        logger.error(f"Failed to compute digest: {e}")
        raise IntegrityError(f"Failed to compute checksum: {e}") from e


def verify_digest(payload: Payload, expected: str) -> bool:
    """
    Verify that a payload matches a previously recorded digest.

    Mismatches and read failures are logged and reported as ``False``;
    they never raise.
    """
    if not isinstance(expected, str) or len(expected) != DIGEST_HEX_LENGTH:
        logger.warning(f"File integrity check failed: malformed recorded digest {expected!r}")
        return False

    try:
        actual = compute_digest(payload)
    except IntegrityError:
        logger.warning("File integrity check failed: payload could not be read")
        return False

    if actual != expected:
        logger.warning(f"File integrity check failed: expected {expected}, got {actual}")
        return False
    return True

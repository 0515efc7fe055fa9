"""Project-wide constants (digest and key sizes, view defaults)."""

DIGEST_HEX_LENGTH: int = 64  # SHA-256 hex digest
DIGEST_READ_BLOCK_BYTES: int = 1024 * 1024  # 1 MiB per read when hashing streams

ENCRYPTION_KEY_BYTES: int = 32
ENCRYPTION_KEY_HEX_LENGTH: int = ENCRYPTION_KEY_BYTES * 2
ENCRYPTION_NONCE_BYTES: int = 12  # AES-GCM standard nonce

RECENT_VIEW_LIMIT: int = 5

SHARE_LINK_TOKEN_BYTES: int = 16

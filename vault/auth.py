"""Authentication and security utilities."""

import uuid

import bcrypt
from fastapi import Header

from vault.config import API_KEY_PREFIX
from vault.domain import User
from vault.exceptions import InvalidAPIKeyError


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def generate_api_key() -> str:
    """
    Generate a new API Key with the configured prefix.

    Returns:
        API Key string in format: {prefix}{uuid4}
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


async def get_current_user(authorization: str = Header(...)) -> User:
    """
    FastAPI dependency to validate the API Key and resolve the acting user.

    Args:
        authorization: Authorization header value (format: "Bearer <api_key>")

    Raises:
        InvalidAPIKeyError: If the header is malformed or the key is unknown
    """
    from vault.service_locator import get_auth_service

    if not authorization.startswith("Bearer "):
        raise InvalidAPIKeyError("Invalid authorization header format")

    api_key = authorization[len("Bearer "):].strip()
    user = get_auth_service().validate_api_key(api_key)
    if user is None:
        raise InvalidAPIKeyError("Invalid or expired API key")
    return user

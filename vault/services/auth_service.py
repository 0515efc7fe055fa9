"""Authentication service for business logic."""

from typing import Optional, Tuple

from common.logging_config import get_logger
from vault.auth import generate_api_key, hash_password, verify_password
from vault.domain import User
from vault.exceptions import InvalidCredentialsError, UserAlreadyExistsError
from vault.repositories.user_repository import UserRepository
from vault.utils import generate_uuid, utc_now

logger = get_logger(__name__)


class AuthService:
    def __init__(self, user_repo: Optional[UserRepository] = None):
        self.user_repo = user_repo or UserRepository()

    def register_user(self, email: str, password: str, name: str) -> Tuple[str, User]:
        logger.info(f"Attempting to register user: {email}")
        if self.user_repo.get_by_email(email) is not None:
            logger.warning(f"Registration failed: email '{email}' already exists")
            raise UserAlreadyExistsError(f"Email '{email}' already registered")

        api_key = generate_api_key()
        try:
            account = self.user_repo.create_user(
                user_id=f"user-{generate_uuid()}",
                email=email,
                name=name.strip() or email.split("@")[0],
                password_hash=hash_password(password),
                api_key=api_key,
                created_at=utc_now(),
            )
        except ValueError:
            logger.warning(f"Registration failed: email '{email}' registered concurrently")
            raise UserAlreadyExistsError(f"Email '{email}' already registered")

        logger.info(f"Successfully registered user: {email} [user_id={account.user_id}]")
        return api_key, account.to_user()

    def login_user(self, email: str, password: str) -> Tuple[str, User]:
        logger.info(f"Login attempt for user: {email}")
        account = self.user_repo.get_by_email(email)
        if account is None:
            logger.warning(f"Login failed: email '{email}' not found")
            raise InvalidCredentialsError("Invalid credentials")

        if not verify_password(password, account.password_hash):
            logger.warning(f"Login failed: invalid password for '{email}'")
            raise InvalidCredentialsError("Invalid credentials")

        api_key = generate_api_key()
        account = self.user_repo.update_api_key(email, api_key, utc_now())
        logger.info(f"Successfully logged in user: {email} [user_id={account.user_id}]")
        return api_key, account.to_user()

    def validate_api_key(self, api_key: str) -> Optional[User]:
        account = self.user_repo.get_by_api_key(api_key)
        if account is None:
            logger.warning("API key validation failed: invalid key")
            return None
        return account.to_user()

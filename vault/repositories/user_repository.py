"""In-memory user accounts for the authentication surface."""

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Optional

from common.logging_config import get_logger
from vault.domain import User

logger = get_logger(__name__)


@dataclass
class UserAccount:
    user_id: str
    email: str
    name: str
    password_hash: str
    api_key: Optional[str]
    created_at: datetime
    key_updated_at: Optional[datetime] = None
    role: str = "user"

    def to_user(self) -> User:
        return User(
            user_id=self.user_id,
            email=self.email,
            name=self.name,
            role=self.role,
            created_at=self.created_at,
        )


class UserRepository:
    """
    Accounts keyed by lower-cased email. Account storage is process-local;
    sessions do not survive a restart.
    """

    def __init__(self):
        self._by_email: Dict[str, UserAccount] = {}
        self._lock = threading.Lock()

    def create_user(
        self,
        user_id: str,
        email: str,
        name: str,
        password_hash: str,
        api_key: str,
        created_at: datetime,
    ) -> UserAccount:
        key = email.strip().lower()
        account = UserAccount(
            user_id=user_id,
            email=email.strip(),
            name=name,
            password_hash=password_hash,
            api_key=api_key,
            created_at=created_at,
            key_updated_at=created_at,
        )
        with self._lock:
            if key in self._by_email:
                raise ValueError(f"Email '{email}' already registered")
            self._by_email[key] = account
        logger.info(f"User created successfully: {email} [user_id={user_id}]")
        return account

    def get_by_email(self, email: str) -> Optional[UserAccount]:
        with self._lock:
            return self._by_email.get(email.strip().lower())

    def get_by_api_key(self, api_key: str) -> Optional[UserAccount]:
        with self._lock:
            for account in self._by_email.values():
                if account.api_key is not None and account.api_key == api_key:
                    return account
        return None

    def update_api_key(self, email: str, api_key: str, updated_at: datetime) -> UserAccount:
        key = email.strip().lower()
        with self._lock:
            account = replace(self._by_email[key], api_key=api_key, key_updated_at=updated_at)
            self._by_email[key] = account
        logger.debug(f"API key rotated [user_id={account.user_id}]")
        return account

"""Sharing subsystem: grants, revocations and share links on a record."""

import asyncio
import secrets
import uuid
import weakref
from dataclasses import dataclass, replace
from typing import List, Optional

from common.constants import SHARE_LINK_TOKEN_BYTES
from common.logging_config import get_logger
from vault.config import SHARE_BASE_URL
from vault.domain import FilePermission, FileRecord, FileShare, User, effective_permissions
from vault.exceptions import InvalidRecipientError, NotFoundError, StorageError
from vault.repositories.record_repository import RecordCollection, RecordRepository
from vault.services.authorization import CAN_SHARE, require_capability
from vault.utils import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class ShareLink:
    """
    Out-of-band access link. The token is not tracked server side and
    cannot be revoked.
    """
    record_id: str
    token: str
    url: str


def validate_recipient(email) -> str:
    """
    Check that ``email`` looks like ``local@domain``.

    Returns:
        The trimmed address

    Raises:
        InvalidRecipientError: If the address is empty or has no domain part
    """
    if not isinstance(email, str) or not email.strip():
        raise InvalidRecipientError("Please enter an email address")

    address = email.strip()
    local, separator, domain = address.partition("@")
    if not separator or not local or not domain or "@" in domain or any(ch.isspace() for ch in address):
        raise InvalidRecipientError(f"Invalid email address: {address}")
    return address


class ShareService:
    """
    Mutates a record's grant list in place.

    Mutations of the same record are serialized by a per-record lock;
    different records proceed independently. When a repository is supplied
    the collection is persisted after each mutation and the mutation is
    rolled back if persisting fails.
    """

    def __init__(
        self,
        repository: Optional[RecordRepository] = None,
        collection: Optional[RecordCollection] = None,
        share_base_url: str = SHARE_BASE_URL,
    ):
        self.repository = repository
        self.collection = collection
        self.share_base_url = share_base_url.rstrip("/")
        # Entries vanish once no mutation holds or waits on the lock.
        self._locks = weakref.WeakValueDictionary()

    def _lock_for(self, record_id: str) -> asyncio.Lock:
        lock = self._locks.get(record_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[record_id] = lock
        return lock

    def _grantable(self, record: FileRecord, permissions: FilePermission, actor: User) -> FilePermission:
        """Requested capabilities limited to those the actor holds on the record."""
        granted = permissions.intersection(effective_permissions(record, actor))
        if granted != permissions:
            logger.warning(
                f"Grant on {record.id} reduced to the granting user's own capabilities [user_id={actor.user_id}]"
            )
        return granted

    def _persist(self, record: FileRecord, previous: List[FileShare]) -> None:
        if self.repository is None or self.collection is None:
            return
        try:
            self.repository.save(self.collection)
        except StorageError:
            record.shared_with = previous
            logger.error(f"Failed to persist grant change on {record.id}, rolled back")
            raise

    def _new_share_id(self, record: FileRecord) -> str:
        existing = {share.id for share in record.shared_with}
        while True:
            share_id = f"share-{uuid.uuid4().hex}"
            if share_id not in existing:
                return share_id

    def _new_share(self, record: FileRecord, email: str, permissions: FilePermission) -> FileShare:
        return FileShare(
            id=self._new_share_id(record),
            user_id=f"user-{uuid.uuid4().hex}",
            user_name=email.split("@")[0],
            user_email=email,
            permissions=permissions,
            created_at=utc_now(),
        )

    async def grant_share(
        self,
        record: FileRecord,
        email: str,
        permissions: FilePermission,
        actor: User,
    ) -> FileRecord:
        """
        Append a new grant. Granting the same address twice appends two grants.
        """
        address = validate_recipient(email)
        async with self._lock_for(record.id):
            require_capability(record, actor, CAN_SHARE)
            permissions = self._grantable(record, permissions, actor)
            previous = list(record.shared_with)
            share = self._new_share(record, address, permissions)
            record.shared_with = previous + [share]
            self._persist(record, previous)

        logger.info(f"Shared {record.id} with {address} [share_id={share.id}] [user_id={actor.user_id}]")
        return record

    async def grant_or_update_share(
        self,
        record: FileRecord,
        email: str,
        permissions: FilePermission,
        actor: User,
    ) -> FileRecord:
        """
        Replace the permission set of existing grants to ``email``
        (case-insensitive), or append a grant when there is none.
        """
        address = validate_recipient(email)
        async with self._lock_for(record.id):
            require_capability(record, actor, CAN_SHARE)
            permissions = self._grantable(record, permissions, actor)
            previous = list(record.shared_with)
            wanted = address.lower()

            if any(share.user_email.lower() == wanted for share in previous):
                updated = [
                    replace(share, permissions=permissions) if share.user_email.lower() == wanted else share
                    for share in previous
                ]
                action = "Updated share of"
            else:
                updated = previous + [self._new_share(record, address, permissions)]
                action = "Shared"

            record.shared_with = updated
            self._persist(record, previous)

        logger.info(f"{action} {record.id} with {address} [user_id={actor.user_id}]")
        return record

    async def revoke_share(self, record: FileRecord, share_id: str, actor: User) -> FileRecord:
        """
        Remove one grant.

        Raises:
            NotFoundError: If no grant with ``share_id`` exists on the record
        """
        async with self._lock_for(record.id):
            require_capability(record, actor, CAN_SHARE)
            if record.find_share(share_id) is None:
                raise NotFoundError(f"Share {share_id} not found on file {record.id}")
            previous = list(record.shared_with)
            record.shared_with = [share for share in previous if share.id != share_id]
            self._persist(record, previous)

        logger.info(f"Revoked share {share_id} on {record.id} [user_id={actor.user_id}]")
        return record

    def create_share_link(self, record: FileRecord, actor: User) -> ShareLink:
        require_capability(record, actor, CAN_SHARE)
        token = secrets.token_urlsafe(SHARE_LINK_TOKEN_BYTES)
        url = f"{self.share_base_url}/share/{record.id}?token={token}"
        logger.info(f"Created share link for {record.id} [user_id={actor.user_id}]")
        return ShareLink(record_id=record.id, token=token, url=url)

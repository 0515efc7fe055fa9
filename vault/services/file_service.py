"""File service for per-record operations and views."""

from typing import Iterable, List, Optional

from common.constants import RECENT_VIEW_LIMIT
from common.logging_config import get_logger
from vault.domain import FileRecord, User
from vault.exceptions import DecryptionError, IntegrityError, StorageError
from vault.repositories.record_repository import RecordCollection, RecordRepository
from vault.services.authorization import CAN_DELETE, CAN_EDIT, CAN_VIEW, can_view, require_capability
from vault.services.checksum_service import verify_digest
from vault.services.encryption_service import EncryptionService
from vault.services.query_service import FilterSpec, SortSpec, apply_view, recent_view
from vault.storage.blob_store import BlobStore

logger = get_logger(__name__)


class FileService:
    def __init__(
        self,
        collection: RecordCollection,
        repository: RecordRepository,
        blob_store: BlobStore,
        encryption_service: Optional[EncryptionService] = None,
    ):
        self.collection = collection
        self.repository = repository
        self.blob_store = blob_store
        self.encryption_service = encryption_service or EncryptionService()

    def _visible_records(self, user: User) -> List[FileRecord]:
        return [record for record in self.collection if can_view(record, user)]

    def list_view(
        self,
        user: User,
        filter_spec: Optional[FilterSpec] = None,
        sort_spec: Optional[SortSpec] = None,
    ) -> List[FileRecord]:
        records = apply_view(self._visible_records(user), filter_spec, sort_spec)
        logger.debug(f"List view returned {len(records)} records [user_id={user.user_id}]")
        return records

    def recent_view(self, user: User, limit: int = RECENT_VIEW_LIMIT) -> List[FileRecord]:
        return recent_view(self._visible_records(user), limit)

    def get_record(self, record_id: str, user: User) -> FileRecord:
        record = self.collection.get(record_id)
        require_capability(record, user, CAN_VIEW)
        return record

    def toggle_favorite(self, record_id: str, value: bool, user: User) -> FileRecord:
        """The flag is shared by everyone who sees the record, so changing it needs can_edit."""
        record = self.collection.get(record_id)
        require_capability(record, user, CAN_EDIT)
        previous = record.is_favorite
        record.is_favorite = bool(value)
        try:
            self.repository.save(self.collection)
        except StorageError:
            record.is_favorite = previous
            raise
        logger.info(
            f"{'Added' if record.is_favorite else 'Removed'} {record_id} "
            f"{'to' if record.is_favorite else 'from'} favorites [user_id={user.user_id}]"
        )
        return record

    def add_tags(self, record_id: str, tags: Iterable[str], user: User) -> FileRecord:
        record = self.collection.get(record_id)
        require_capability(record, user, CAN_EDIT)
        previous = list(record.tags)
        updated = list(previous)
        for tag in tags:
            tag = tag.strip() if isinstance(tag, str) else ""
            if tag and tag not in updated:
                updated.append(tag)
        return self._replace_tags(record, previous, updated, user)

    def remove_tags(self, record_id: str, tags: Iterable[str], user: User) -> FileRecord:
        record = self.collection.get(record_id)
        require_capability(record, user, CAN_EDIT)
        previous = list(record.tags)
        to_remove = {tag.strip() for tag in tags if isinstance(tag, str)}
        updated = [tag for tag in previous if tag not in to_remove]
        return self._replace_tags(record, previous, updated, user)

    def _replace_tags(self, record: FileRecord, previous: List[str], updated: List[str], user: User) -> FileRecord:
        record.tags = updated
        try:
            self.repository.save(self.collection)
        except StorageError:
            record.tags = previous
            raise
        logger.info(f"Tags of {record.id} set to {updated} [user_id={user.user_id}]")
        return record

    async def delete_record(self, record_id: str, user: User) -> RecordCollection:
        """
        Remove a record from the collection and drop its stored payload.

        Returns:
            The collection without the record

        Raises:
            NotFoundError: If the record does not exist
            UnauthorizedAccessError: If the user may not delete it
        """
        record = self.collection.get(record_id)
        require_capability(record, user, CAN_DELETE)

        position = self.collection.records().index(record)
        self.collection.remove(record_id)
        try:
            self.repository.save(self.collection)
        except StorageError:
            self.collection.insert_at(position, record)
            raise

        try:
            await self.blob_store.delete(record_id)
        except StorageError as e:
            logger.error(f"Record {record_id} deleted but its payload could not be removed: {e}")

        logger.info(f"Deleted file {record_id} [user_id={user.user_id}]")
        return self.collection

    async def download(self, record_id: str, user: User, key: Optional[str] = None) -> bytes:
        """
        Fetch a payload, check it against the recorded digest, and decrypt
        it when the record is encrypted.

        Raises:
            IntegrityError: If the stored payload no longer matches its digest
            DecryptionError: If the record is encrypted and the key is missing or wrong
        """
        record = self.get_record(record_id, user)
        data = await self.blob_store.get(record_id)

        checksum = record.metadata.checksum
        if checksum is not None and not verify_digest(data, checksum):
            raise IntegrityError(f"File integrity check failed for {record_id}")

        if record.is_encrypted:
            if not key:
                raise DecryptionError(f"File {record_id} is encrypted; a key is required")
            data = self.encryption_service.decrypt(data, key)

        logger.info(f"Downloaded {record_id} ({len(data)} bytes) [user_id={user.user_id}]")
        return data

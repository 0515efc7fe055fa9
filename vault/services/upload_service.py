"""Upload admission: turns a selected payload into a committed FileRecord."""

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from common.logging_config import get_logger
from vault.domain import FileMetadata, FilePermission, FileRecord, User
from vault.exceptions import AdmissionError, EncryptionError, IntegrityError, StorageError
from vault.repositories.record_repository import RecordCollection, RecordRepository
from vault.services.checksum_service import Payload, compute_digest, read_payload
from vault.services.encryption_service import EncryptionService
from vault.storage.blob_store import BlobStore
from vault.utils import file_type_from_name, utc_now

logger = get_logger(__name__)


class AdmissionState(str, Enum):
    SELECTED = "selected"
    ENCRYPTING = "encrypting"
    CHECKSUM_COMPUTING = "checksum_computing"
    READY = "ready"
    COMMITTED = "committed"
    FAILED = "failed"


# READY -> FAILED covers storage failures during commit.
_TRANSITIONS = {
    AdmissionState.SELECTED: {AdmissionState.ENCRYPTING, AdmissionState.CHECKSUM_COMPUTING, AdmissionState.FAILED},
    AdmissionState.ENCRYPTING: {AdmissionState.CHECKSUM_COMPUTING, AdmissionState.FAILED},
    AdmissionState.CHECKSUM_COMPUTING: {AdmissionState.READY, AdmissionState.FAILED},
    AdmissionState.READY: {AdmissionState.COMMITTED, AdmissionState.FAILED},
    AdmissionState.COMMITTED: set(),
    AdmissionState.FAILED: set(),
}


@dataclass
class UploadAttempt:
    """Tracks one admission through its state machine."""
    file_name: str
    encrypt_requested: bool
    state: AdmissionState = AdmissionState.SELECTED
    error: Optional[BaseException] = None
    history: List[AdmissionState] = field(default_factory=lambda: [AdmissionState.SELECTED])

    def transition(self, new_state: AdmissionState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise ValueError(f"Illegal admission transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def fail(self, error: Optional[BaseException]) -> None:
        if self.state is AdmissionState.FAILED:
            return
        self.transition(AdmissionState.FAILED)
        self.error = error


@dataclass(frozen=True)
class AdmissionResult:
    record: FileRecord
    encryption_key: Optional[str] = None


def generate_record_id() -> str:
    return f"file-{uuid.uuid4().hex}"


class UploadService:
    """
    Runs encryption and checksum over a payload, then commits the record to
    the blob store, the collection and the repository. Either every step
    succeeds or nothing is visible in the collection.
    """

    def __init__(
        self,
        collection: RecordCollection,
        repository: RecordRepository,
        blob_store: BlobStore,
        encryption_service: Optional[EncryptionService] = None,
        checksum_func: Callable[[Payload], str] = compute_digest,
    ):
        self.collection = collection
        self.repository = repository
        self.blob_store = blob_store
        self.encryption_service = encryption_service or EncryptionService()
        self.checksum_func = checksum_func
        self._commit_lock = asyncio.Lock()

    async def admit_upload(
        self,
        file_name: str,
        payload: Payload,
        encrypt: bool,
        acting_user: User,
        parent_folder_id: Optional[str] = None,
    ) -> AdmissionResult:
        attempt = UploadAttempt(file_name=file_name, encrypt_requested=encrypt)
        return await self.run_attempt(attempt, payload, acting_user, parent_folder_id)

    async def run_attempt(
        self,
        attempt: UploadAttempt,
        payload: Payload,
        acting_user: User,
        parent_folder_id: Optional[str] = None,
    ) -> AdmissionResult:
        file_name = (attempt.file_name or "").strip()
        if not file_name:
            error = AdmissionError("File name is required")
            attempt.fail(error)
            raise error

        logger.info(
            f"Admitting upload '{file_name}' encrypt={attempt.encrypt_requested} [user_id={acting_user.user_id}]"
        )

        try:
            original_size, stored_bytes, key = await self._protect(attempt, payload)
            checksum = await self._checksum(attempt, stored_bytes)
        except asyncio.CancelledError:
            logger.warning(f"Upload '{file_name}' cancelled during {attempt.state.value}")
            attempt.fail(None)
            raise
        except AdmissionError as e:
            attempt.fail(e)
            logger.error(f"Upload '{file_name}' failed: {e} [user_id={acting_user.user_id}]")
            raise

        record = self._build_record(file_name, original_size, checksum, attempt.encrypt_requested,
                                    acting_user, parent_folder_id)
        attempt.transition(AdmissionState.READY)

        await self._commit(attempt, record, stored_bytes)
        logger.info(f"Committed upload {record.id} ({original_size} bytes) [user_id={acting_user.user_id}]")
        return AdmissionResult(record=record, encryption_key=key)

    async def _protect(self, attempt: UploadAttempt, payload: Payload) -> Tuple[int, bytes, Optional[str]]:
        if not attempt.encrypt_requested:
            attempt.transition(AdmissionState.CHECKSUM_COMPUTING)
            try:
                data = await asyncio.to_thread(read_payload, payload)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                raise IntegrityError(f"Failed to read payload: {e}") from e
            return len(data), data, None

        attempt.transition(AdmissionState.ENCRYPTING)
        try:
            data = await asyncio.to_thread(read_payload, payload)
            protected, key = await asyncio.to_thread(self.encryption_service.encrypt, data)
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(f"Failed to encrypt payload: {e}") from e
        attempt.transition(AdmissionState.CHECKSUM_COMPUTING)
        return len(data), protected, key

    async def _checksum(self, attempt: UploadAttempt, data: bytes) -> str:
        try:
            return await asyncio.to_thread(self.checksum_func, data)
        except IntegrityError:
            raise
        except Exception as e:
            raise IntegrityError(f"Failed to compute checksum: {e}") from e

    def _build_record(
        self,
        file_name: str,
        size: int,
        checksum: str,
        encrypted: bool,
        acting_user: User,
        parent_folder_id: Optional[str],
    ) -> FileRecord:
        now = utc_now()
        file_type = file_type_from_name(file_name)
        return FileRecord(
            id=generate_record_id(),
            name=file_name,
            type=file_type,
            size=size,
            path=f"/files/{file_name}",
            metadata=FileMetadata(
                name=file_name,
                type=file_type,
                size=size,
                created_at=now,
                modified_at=now,
                created_by=acting_user.name,
                last_modified_by=acting_user.name,
                encrypted=encrypted,
                checksum=checksum,
            ),
            permissions=FilePermission.full(),
            is_encrypted=encrypted,
            parent_folder_id=parent_folder_id,
            owner_id=acting_user.user_id,
        )

    async def _commit(self, attempt: UploadAttempt, record: FileRecord, data: bytes) -> None:
        async with self._commit_lock:
            try:
                await self.blob_store.put(record.id, data)
            except (StorageError, asyncio.CancelledError) as e:
                attempt.fail(e if isinstance(e, StorageError) else None)
                await self._cleanup_blob(record.id)
                raise

            self.collection.insert_front(record)
            try:
                self.repository.save(self.collection)
            except StorageError as e:
                self.collection.remove(record.id)
                attempt.fail(e)
                await self._cleanup_blob(record.id)
                raise

            attempt.transition(AdmissionState.COMMITTED)

    async def _cleanup_blob(self, record_id: str) -> bool:
        """
        Delete an orphaned payload with retry.

        Returns:
            True if the payload is gone, False if every attempt failed
        """
        max_attempts = 3
        for attempt in range(max_attempts):
            try:
                await self.blob_store.delete(record_id)
                logger.info(f"Deleted orphaned payload {record_id}")
                return True
            except StorageError as e:
                if attempt < max_attempts - 1:
                    delay = 0.1 * 2 ** attempt
                    logger.warning(f"Failed to delete payload {record_id}, retrying in {delay}s: {e}")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Failed to delete orphaned payload {record_id} after {max_attempts} attempts: {e}")
        return False

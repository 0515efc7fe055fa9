"""Service locator for the shared vault state and services."""

from dataclasses import dataclass
from typing import Optional

from vault.config import BLOB_DIR, RECORDS_PATH, STORAGE_TIMEOUT_SECONDS
from vault.repositories.record_repository import JsonFileRecordRepository, RecordCollection, RecordRepository
from vault.repositories.user_repository import UserRepository
from vault.services.auth_service import AuthService
from vault.services.encryption_service import EncryptionService
from vault.services.file_service import FileService
from vault.services.share_service import ShareService
from vault.services.upload_service import UploadService
from vault.storage.blob_store import BlobStore, LocalDirectoryBlobStore


@dataclass
class VaultServices:
    collection: RecordCollection
    repository: RecordRepository
    blob_store: BlobStore
    auth_service: AuthService
    file_service: FileService
    upload_service: UploadService
    share_service: ShareService


_services: Optional[VaultServices] = None


def build_services(
    repository: RecordRepository,
    blob_store: BlobStore,
    user_repo: Optional[UserRepository] = None,
) -> VaultServices:
    """Load the collection from ``repository`` and wire every service to it."""
    collection = repository.load()
    encryption_service = EncryptionService()
    return VaultServices(
        collection=collection,
        repository=repository,
        blob_store=blob_store,
        auth_service=AuthService(user_repo),
        file_service=FileService(collection, repository, blob_store, encryption_service),
        upload_service=UploadService(collection, repository, blob_store, encryption_service),
        share_service=ShareService(repository, collection),
    )


def build_default_services() -> VaultServices:
    return build_services(
        JsonFileRecordRepository(RECORDS_PATH),
        LocalDirectoryBlobStore(BLOB_DIR, timeout=STORAGE_TIMEOUT_SECONDS),
    )


def set_services(services: Optional[VaultServices]) -> None:
    """Set global services instance"""
    global _services
    _services = services


def get_services() -> VaultServices:
    """Get global services instance, building the defaults on first use"""
    global _services
    if _services is None:
        _services = build_default_services()
    return _services


def get_auth_service() -> AuthService:
    return get_services().auth_service


def get_file_service() -> FileService:
    return get_services().file_service


def get_upload_service() -> UploadService:
    return get_services().upload_service


def get_share_service() -> ShareService:
    return get_services().share_service

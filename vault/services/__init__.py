"""Service layer for business logic."""

from vault.services.auth_service import AuthService
from vault.services.encryption_service import EncryptionService
from vault.services.file_service import FileService
from vault.services.share_service import ShareService
from vault.services.upload_service import UploadService

__all__ = [
    "AuthService",
    "EncryptionService",
    "FileService",
    "ShareService",
    "UploadService",
]

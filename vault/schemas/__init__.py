"""Pydantic schemas for API requests and responses."""

from vault.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from vault.schemas.common import ErrorResponse
from vault.schemas.files import (
    DeleteFileResponse,
    FavoriteRequest,
    FileRecordResponse,
    ListFilesResponse,
    PermissionSchema,
    ShareLinkResponse,
    ShareRequest,
    ShareResponse,
    TagsRequest,
    UploadFileResponse,
)

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "ErrorResponse",
    "DeleteFileResponse",
    "FavoriteRequest",
    "FileRecordResponse",
    "ListFilesResponse",
    "PermissionSchema",
    "ShareLinkResponse",
    "ShareRequest",
    "ShareResponse",
    "TagsRequest",
    "UploadFileResponse",
]

"""Pydantic schemas for file operation endpoints."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from vault.domain import FilePermission, FileRecord, FileShare
from vault.utils import format_file_size, format_iso_datetime, format_relative_time


class PermissionSchema(BaseModel):
    can_view: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_share: bool = False

    @classmethod
    def from_domain(cls, permission: FilePermission) -> "PermissionSchema":
        return cls(
            can_view=permission.can_view,
            can_edit=permission.can_edit,
            can_delete=permission.can_delete,
            can_share=permission.can_share,
        )

    def to_domain(self) -> FilePermission:
        return FilePermission(
            can_view=self.can_view,
            can_edit=self.can_edit,
            can_delete=self.can_delete,
            can_share=self.can_share,
        )


class ShareResponse(BaseModel):
    id: str
    user_id: str
    user_name: str
    user_email: str
    permissions: PermissionSchema
    created_at: str

    @classmethod
    def from_domain(cls, share: FileShare) -> "ShareResponse":
        return cls(
            id=share.id,
            user_id=share.user_id,
            user_name=share.user_name,
            user_email=share.user_email,
            permissions=PermissionSchema.from_domain(share.permissions),
            created_at=format_iso_datetime(share.created_at),
        )


class FileMetadataSchema(BaseModel):
    name: str
    type: str
    size: int
    created_at: str
    modified_at: str
    created_by: str
    last_modified_by: str
    encrypted: bool
    checksum: Optional[str] = None


class FileRecordResponse(BaseModel):
    """Response model for one record as seen by the caller."""
    id: str
    name: str
    type: str
    category: str
    size: int
    size_display: str
    modified_display: str
    path: str
    metadata: FileMetadataSchema
    permissions: PermissionSchema
    is_shared: bool
    shared_with: List[ShareResponse]
    is_favorite: bool
    is_encrypted: bool
    tags: List[str]
    parent_folder_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: FileRecord, permissions: FilePermission) -> "FileRecordResponse":
        metadata = record.metadata
        return cls(
            id=record.id,
            name=record.name,
            type=record.type,
            category=record.category.value,
            size=record.size,
            size_display=format_file_size(record.size),
            modified_display=format_relative_time(metadata.modified_at),
            path=record.path,
            metadata=FileMetadataSchema(
                name=metadata.name,
                type=metadata.type,
                size=metadata.size,
                created_at=format_iso_datetime(metadata.created_at),
                modified_at=format_iso_datetime(metadata.modified_at),
                created_by=metadata.created_by,
                last_modified_by=metadata.last_modified_by,
                encrypted=metadata.encrypted,
                checksum=metadata.checksum,
            ),
            permissions=PermissionSchema.from_domain(permissions),
            is_shared=record.is_shared,
            shared_with=[ShareResponse.from_domain(share) for share in record.shared_with],
            is_favorite=record.is_favorite,
            is_encrypted=record.is_encrypted,
            tags=list(record.tags),
            parent_folder_id=record.parent_folder_id,
        )


class ListFilesResponse(BaseModel):
    """Response model for list and recent views."""
    files: List[FileRecordResponse]
    count: int


class UploadFileResponse(BaseModel):
    """Response model for file upload. The key is only ever returned here."""
    file: FileRecordResponse
    encryption_key: Optional[str] = None


class DeleteFileResponse(BaseModel):
    deleted_id: str
    remaining_count: int


class FavoriteRequest(BaseModel):
    value: bool


class TagsRequest(BaseModel):
    tags: List[str]


class ShareRequest(BaseModel):
    """Request model for granting access to a recipient."""
    email: str
    permissions: PermissionSchema = Field(default_factory=lambda: PermissionSchema(can_view=True))
    mode: Literal["append", "update"] = "append"


class ShareLinkResponse(BaseModel):
    record_id: str
    token: str
    url: str

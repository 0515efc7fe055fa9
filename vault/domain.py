"""Vault data type definitions (FileRecord, FileShare, FilePermission, User)."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class FilePermission:
    """
    Capability set on one record.

    On a FileRecord it is the viewer's own capabilities; on a FileShare it is
    what the grantee may do.
    """
    can_view: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_share: bool = False

    @classmethod
    def full(cls) -> "FilePermission":
        return cls(can_view=True, can_edit=True, can_delete=True, can_share=True)

    @classmethod
    def view_only(cls) -> "FilePermission":
        return cls(can_view=True)

    def union(self, other: "FilePermission") -> "FilePermission":
        return FilePermission(
            can_view=self.can_view or other.can_view,
            can_edit=self.can_edit or other.can_edit,
            can_delete=self.can_delete or other.can_delete,
            can_share=self.can_share or other.can_share,
        )

    def intersection(self, other: "FilePermission") -> "FilePermission":
        return FilePermission(
            can_view=self.can_view and other.can_view,
            can_edit=self.can_edit and other.can_edit,
            can_delete=self.can_delete and other.can_delete,
            can_share=self.can_share and other.can_share,
        )

    def allows(self, capability: str) -> bool:
        return bool(getattr(self, capability))


NO_PERMISSIONS = FilePermission()


@dataclass(frozen=True)
class FileShare:
    """
    A single grant binding a recipient to a permission set.
    """
    id: str
    user_id: str
    user_name: str
    user_email: str
    permissions: FilePermission
    created_at: datetime


@dataclass
class FileMetadata:
    name: str
    type: str
    size: int
    created_at: datetime
    modified_at: datetime
    created_by: str
    last_modified_by: str
    encrypted: bool = False
    checksum: Optional[str] = None


class FileCategory(str, Enum):
    """Display category of a file type."""
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    IMAGE = "image"
    ARCHIVE = "archive"
    OTHER = "other"


_CATEGORY_BY_TYPE = {
    **{t: FileCategory.DOCUMENT for t in ("pdf", "doc", "docx", "txt", "md", "rtf", "odt")},
    **{t: FileCategory.SPREADSHEET for t in ("xls", "xlsx", "csv", "ods")},
    **{t: FileCategory.IMAGE for t in ("jpg", "jpeg", "png", "gif", "bmp", "svg", "webp")},
    **{t: FileCategory.ARCHIVE for t in ("zip", "rar", "7z", "tar", "gz")},
}


def category_for_type(file_type: str) -> FileCategory:
    return _CATEGORY_BY_TYPE.get((file_type or "").lower(), FileCategory.OTHER)


@dataclass
class FileRecord:
    """
    One file entry of the vault.

    ``is_shared`` is derived from ``shared_with`` on every access and is never
    stored separately.
    """
    id: str
    name: str
    type: str
    size: int
    path: str
    metadata: FileMetadata
    permissions: FilePermission = field(default_factory=FilePermission.full)
    shared_with: List[FileShare] = field(default_factory=list)
    is_favorite: bool = False
    is_encrypted: bool = False
    tags: List[str] = field(default_factory=list)
    parent_folder_id: Optional[str] = None
    owner_id: Optional[str] = None

    @property
    def is_shared(self) -> bool:
        return len(self.shared_with) > 0

    @property
    def category(self) -> FileCategory:
        return category_for_type(self.type)

    def find_share(self, share_id: str) -> Optional[FileShare]:
        for share in self.shared_with:
            if share.id == share_id:
                return share
        return None


@dataclass(frozen=True)
class User:
    user_id: str
    email: str
    name: str
    role: str = "user"
    created_at: Optional[datetime] = None


def effective_permissions(record: FileRecord, user: Optional[User]) -> FilePermission:
    """
    Capabilities ``user`` holds on ``record``.

    The owner holds the record's own permission set; anyone else holds the
    union of the grants addressed to their email. Records without an owner
    (seeded in bulk) expose their permission set to every viewer.
    """
    if user is None:
        return NO_PERMISSIONS

    if record.owner_id is None or record.owner_id == user.user_id:
        return record.permissions

    email = user.email.strip().lower()
    granted = NO_PERMISSIONS
    for share in record.shared_with:
        if share.user_email.strip().lower() == email:
            granted = granted.union(share.permissions)
    return granted

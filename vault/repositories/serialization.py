"""JSON mapping for FileRecord in the persisted camelCase layout."""

from typing import Any, Dict

from vault.domain import FileMetadata, FilePermission, FileRecord, FileShare
from vault.utils import format_iso_datetime, parse_iso_datetime


def permission_to_dict(permission: FilePermission) -> Dict[str, bool]:
    return {
        "canView": permission.can_view,
        "canEdit": permission.can_edit,
        "canDelete": permission.can_delete,
        "canShare": permission.can_share,
    }


def permission_from_dict(data: Dict[str, Any]) -> FilePermission:
    return FilePermission(
        can_view=bool(data.get("canView", False)),
        can_edit=bool(data.get("canEdit", False)),
        can_delete=bool(data.get("canDelete", False)),
        can_share=bool(data.get("canShare", False)),
    )


def share_to_dict(share: FileShare) -> Dict[str, Any]:
    return {
        "id": share.id,
        "userId": share.user_id,
        "userName": share.user_name,
        "userEmail": share.user_email,
        "permissions": permission_to_dict(share.permissions),
        "createdAt": format_iso_datetime(share.created_at),
    }


def share_from_dict(data: Dict[str, Any]) -> FileShare:
    return FileShare(
        id=str(data["id"]),
        user_id=str(data["userId"]),
        user_name=str(data["userName"]),
        user_email=str(data["userEmail"]),
        permissions=permission_from_dict(data.get("permissions") or {}),
        created_at=parse_iso_datetime(data["createdAt"]),
    )


def record_to_dict(record: FileRecord) -> Dict[str, Any]:
    metadata = record.metadata
    metadata_dict = {
        "name": metadata.name,
        "type": metadata.type,
        "size": metadata.size,
        "createdAt": format_iso_datetime(metadata.created_at),
        "modifiedAt": format_iso_datetime(metadata.modified_at),
        "createdBy": metadata.created_by,
        "lastModifiedBy": metadata.last_modified_by,
        "encrypted": metadata.encrypted,
    }
    if metadata.checksum is not None:
        metadata_dict["checksum"] = metadata.checksum

    data = {
        "id": record.id,
        "name": record.name,
        "type": record.type,
        "size": record.size,
        "path": record.path,
        "metadata": metadata_dict,
        "isShared": record.is_shared,
        "sharedWith": [share_to_dict(share) for share in record.shared_with],
        "permissions": permission_to_dict(record.permissions),
        "isFavorite": record.is_favorite,
        "tags": list(record.tags),
        "isEncrypted": record.is_encrypted,
    }
    if record.parent_folder_id is not None:
        data["parentFolderId"] = record.parent_folder_id
    if record.owner_id is not None:
        data["ownerId"] = record.owner_id
    return data


def record_from_dict(data: Dict[str, Any]) -> FileRecord:
    """
    Rebuild a record from its persisted form.

    ``isShared`` is ignored on load; it is recomputed from ``sharedWith``.

    Raises:
        KeyError, TypeError, ValueError: If a field is missing or malformed
    """
    raw_metadata = data["metadata"]
    size = int(data["size"])
    if size < 0:
        raise ValueError(f"Negative size {size}")

    metadata = FileMetadata(
        name=str(raw_metadata.get("name", data["name"])),
        type=str(raw_metadata.get("type", data["type"])),
        size=int(raw_metadata.get("size", size)),
        created_at=parse_iso_datetime(raw_metadata["createdAt"]),
        modified_at=parse_iso_datetime(raw_metadata["modifiedAt"]),
        created_by=str(raw_metadata.get("createdBy", "")),
        last_modified_by=str(raw_metadata.get("lastModifiedBy", "")),
        encrypted=bool(raw_metadata.get("encrypted", False)),
        checksum=raw_metadata.get("checksum"),
    )

    tags = []
    for tag in data.get("tags") or []:
        if isinstance(tag, str) and tag not in tags:
            tags.append(tag)

    return FileRecord(
        id=str(data["id"]),
        name=str(data["name"]),
        type=str(data["type"]).lower(),
        size=size,
        path=str(data["path"]),
        metadata=metadata,
        permissions=permission_from_dict(data.get("permissions") or {}),
        shared_with=[share_from_dict(share) for share in data.get("sharedWith") or []],
        is_favorite=bool(data.get("isFavorite", False)),
        is_encrypted=bool(data.get("isEncrypted", metadata.encrypted)),
        tags=tags,
        parent_folder_id=data.get("parentFolderId"),
        owner_id=data.get("ownerId"),
    )

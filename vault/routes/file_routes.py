"""File operation API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status
from fastapi.responses import Response

from common.constants import RECENT_VIEW_LIMIT
from common.logging_config import get_logger
from vault.auth import get_current_user
from vault.domain import FileRecord, User, effective_permissions
from vault.schemas.files import (
    DeleteFileResponse,
    FavoriteRequest,
    FileRecordResponse,
    ListFilesResponse,
    TagsRequest,
    UploadFileResponse,
)
from vault.service_locator import get_file_service, get_upload_service
from vault.services.query_service import DateRange, FilterSpec, SortSpec
from vault.utils import parse_iso_datetime, parse_tags

logger = get_logger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])


def _to_response(record: FileRecord, user: User) -> FileRecordResponse:
    return FileRecordResponse.from_record(record, effective_permissions(record, user))


def _parse_date(value: Optional[str]):
    if not value:
        return None
    try:
        return parse_iso_datetime(value)
    except ValueError:
        logger.debug(f"Ignoring unparsable date filter {value!r}")
        return None


@router.get("", response_model=ListFilesResponse)
async def list_files(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the file name"),
    types: Optional[str] = Query(None, description="Comma-separated file types"),
    tags: Optional[str] = Query(None, description="Comma-separated tags (any match)"),
    date_from: Optional[str] = Query(None, description="ISO-8601 lower bound on creation time"),
    date_to: Optional[str] = Query(None, description="ISO-8601 upper bound on creation time"),
    favorites: bool = Query(False),
    shared: bool = Query(False),
    encrypted: bool = Query(False),
    sort_by: str = Query("date"),
    direction: str = Query("desc"),
    current_user: User = Depends(get_current_user),
):
    """
    Filtered and sorted view of the files the caller can see.

    Unknown sort fields keep collection order and unparsable dates are
    ignored; this endpoint never fails on bad filter input.
    """
    start, end = _parse_date(date_from), _parse_date(date_to)
    filter_spec = FilterSpec(
        search_term=search,
        file_types=parse_tags(types),
        date_range=DateRange(start=start, end=end) if start or end else None,
        tags=parse_tags(tags),
        only_favorites=favorites,
        only_shared=shared,
        only_encrypted=encrypted,
    )
    sort_spec = SortSpec(sort_by=sort_by, direction=direction)

    records = get_file_service().list_view(current_user, filter_spec, sort_spec)
    files = [_to_response(record, current_user) for record in records]
    return ListFilesResponse(files=files, count=len(files))


@router.get("/recent", response_model=ListFilesResponse)
async def recent_files(
    limit: int = Query(RECENT_VIEW_LIMIT, ge=1, le=100),
    current_user: User = Depends(get_current_user),
):
    """Most recently created files, newest first, ignoring any filter."""
    records = get_file_service().recent_view(current_user, limit)
    files = [_to_response(record, current_user) for record in records]
    return ListFilesResponse(files=files, count=len(files))


@router.post("", response_model=UploadFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    encrypt: bool = Form(False),
    parent_folder_id: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a file, optionally encrypting it.

    Returns:
        - file: The committed record
        - encryption_key: Hex key for encrypted uploads; it is not stored
          anywhere else and must be kept by the caller

    Raises:
        - 401: Invalid or missing API Key
        - 422: Encryption or checksum failed (nothing was stored)
        - 503: Storage unavailable
    """
    content = await file.read()
    result = await get_upload_service().admit_upload(
        file_name=file.filename or "",
        payload=content,
        encrypt=encrypt,
        acting_user=current_user,
        parent_folder_id=parent_folder_id,
    )
    return UploadFileResponse(
        file=_to_response(result.record, current_user),
        encryption_key=result.encryption_key,
    )


@router.get("/{file_id}", response_model=FileRecordResponse)
async def get_file(file_id: str, current_user: User = Depends(get_current_user)):
    record = get_file_service().get_record(file_id, current_user)
    return _to_response(record, current_user)


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    x_encryption_key: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
):
    """
    Download the original bytes of a file.

    Encrypted files need their key in the ``X-Encryption-Key`` header.

    Raises:
        - 400: Missing or wrong encryption key
        - 403: Caller may not view this file
        - 404: File not found
        - 422: Stored payload failed its integrity check
    """
    file_service = get_file_service()
    record = file_service.get_record(file_id, current_user)
    data = await file_service.download(file_id, current_user, key=x_encryption_key)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{record.name}"'},
    )


@router.delete("/{file_id}", response_model=DeleteFileResponse)
async def delete_file(file_id: str, current_user: User = Depends(get_current_user)):
    collection = await get_file_service().delete_record(file_id, current_user)
    return DeleteFileResponse(deleted_id=file_id, remaining_count=len(collection))


@router.put("/{file_id}/favorite", response_model=FileRecordResponse)
async def set_favorite(
    file_id: str,
    request: FavoriteRequest,
    current_user: User = Depends(get_current_user),
):
    record = get_file_service().toggle_favorite(file_id, request.value, current_user)
    return _to_response(record, current_user)


@router.post("/{file_id}/tags", response_model=FileRecordResponse)
async def add_tags(
    file_id: str,
    request: TagsRequest,
    current_user: User = Depends(get_current_user),
):
    record = get_file_service().add_tags(file_id, request.tags, current_user)
    return _to_response(record, current_user)


@router.delete("/{file_id}/tags", response_model=FileRecordResponse)
async def remove_tags(
    file_id: str,
    request: TagsRequest,
    current_user: User = Depends(get_current_user),
):
    record = get_file_service().remove_tags(file_id, request.tags, current_user)
    return _to_response(record, current_user)

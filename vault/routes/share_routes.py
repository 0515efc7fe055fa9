"""Sharing API routes."""

from fastapi import APIRouter, Depends, status

from vault.auth import get_current_user
from vault.domain import User, effective_permissions
from vault.schemas.files import FileRecordResponse, ShareLinkResponse, ShareRequest
from vault.service_locator import get_file_service, get_share_service

router = APIRouter(prefix="/files", tags=["Sharing"])


@router.post("/{file_id}/shares", response_model=FileRecordResponse, status_code=status.HTTP_201_CREATED)
async def share_file(
    file_id: str,
    request: ShareRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Grant a recipient access to a file.

    Parameters:
        - email: Recipient address
        - permissions: can_view / can_edit / can_delete / can_share
        - mode: "append" adds a new grant even when the recipient already has
          one; "update" replaces the permissions of existing grants instead

    Raises:
        - 400: Invalid recipient address
        - 403: Caller may not share this file
        - 404: File not found
    """
    record = get_file_service().collection.get(file_id)
    share_service = get_share_service()
    permissions = request.permissions.to_domain()

    if request.mode == "update":
        record = await share_service.grant_or_update_share(record, request.email, permissions, current_user)
    else:
        record = await share_service.grant_share(record, request.email, permissions, current_user)

    return FileRecordResponse.from_record(record, effective_permissions(record, current_user))


@router.delete("/{file_id}/shares/{share_id}", response_model=FileRecordResponse)
async def revoke_share(
    file_id: str,
    share_id: str,
    current_user: User = Depends(get_current_user),
):
    record = get_file_service().collection.get(file_id)
    record = await get_share_service().revoke_share(record, share_id, current_user)
    return FileRecordResponse.from_record(record, effective_permissions(record, current_user))


@router.post("/{file_id}/link", response_model=ShareLinkResponse)
async def create_share_link(file_id: str, current_user: User = Depends(get_current_user)):
    """Generate a shareable link. Links carry no server-side revocation state."""
    record = get_file_service().collection.get(file_id)
    link = get_share_service().create_share_link(record, current_user)
    return ShareLinkResponse(record_id=link.record_id, token=link.token, url=link.url)

"""Tests for per-record operations: views, favorites, tags, delete and download."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from vault.domain import FilePermission, FileShare, User
from vault.exceptions import (
    DecryptionError,
    IntegrityError,
    NotFoundError,
    StorageError,
    UnauthorizedAccessError,
)
from vault.services.file_service import FileService
from vault.services.query_service import FilterSpec, SortSpec
from vault.services.upload_service import UploadService


@pytest.fixture
def file_service(collection, repository, blob_store):
    return FileService(collection, repository, blob_store)


@pytest.fixture
def viewer():
    return User(user_id="user-viewer", email="viewer@x.com", name="Viewer")


def _grant(record, email, permissions):
    record.shared_with.append(FileShare(
        id=f"share-{len(record.shared_with)}",
        user_id="user-grantee",
        user_name=email.split("@")[0],
        user_email=email,
        permissions=permissions,
        created_at=datetime(2024, 4, 1, tzinfo=timezone.utc),
    ))


class TestViews:
    """Test list and recent views scoped to the caller."""

    def test_owner_sees_every_record(self, file_service, owner):
        result = file_service.list_view(owner, FilterSpec(), SortSpec("date", "desc"))
        assert [r.name for r in result] == ["Notes.txt", "Photo.png", "Report.pdf"]

    def test_stranger_sees_nothing(self, file_service, stranger):
        assert file_service.list_view(stranger) == []
        assert file_service.recent_view(stranger) == []

    def test_grantee_sees_shared_records_only(self, file_service, collection, viewer):
        _grant(collection.get("file-photo-png"), "viewer@x.com", FilePermission.view_only())
        assert [r.name for r in file_service.list_view(viewer)] == ["Photo.png"]

    def test_unowned_records_are_visible_to_everyone(self, file_service, collection, stranger):
        collection.get("file-notes-txt").owner_id = None
        assert [r.name for r in file_service.recent_view(stranger)] == ["Notes.txt"]


class TestGetRecord:
    """Test single record lookup."""

    def test_missing_record(self, file_service, owner):
        with pytest.raises(NotFoundError):
            file_service.get_record("file-missing", owner)

    def test_stranger_is_rejected(self, file_service, stranger):
        with pytest.raises(UnauthorizedAccessError):
            file_service.get_record("file-report-pdf", stranger)


class TestFavorites:
    """Test favorite toggling."""

    def test_toggle_favorite(self, file_service, repository, owner):
        record = file_service.toggle_favorite("file-report-pdf", True, owner)
        assert record.is_favorite is True
        assert repository.load().get("file-report-pdf").is_favorite is True

        record = file_service.toggle_favorite("file-report-pdf", False, owner)
        assert record.is_favorite is False

    def test_favorite_does_not_touch_modified_at(self, file_service, owner):
        before = file_service.get_record("file-report-pdf", owner).metadata.modified_at
        record = file_service.toggle_favorite("file-report-pdf", True, owner)
        assert record.metadata.modified_at == before

    def test_view_only_grantee_cannot_toggle_favorite(self, file_service, collection, viewer):
        _grant(collection.get("file-report-pdf"), "viewer@x.com", FilePermission.view_only())

        with pytest.raises(UnauthorizedAccessError):
            file_service.toggle_favorite("file-report-pdf", True, viewer)
        assert collection.get("file-report-pdf").is_favorite is False

    def test_editor_grantee_can_toggle_favorite(self, file_service, collection, viewer):
        _grant(collection.get("file-report-pdf"), "viewer@x.com", FilePermission(can_view=True, can_edit=True))
        assert file_service.toggle_favorite("file-report-pdf", True, viewer).is_favorite is True

    def test_failed_save_restores_flag(self, collection, blob_store, owner):
        repository = MagicMock()
        repository.save.side_effect = StorageError("disk full")
        service = FileService(collection, repository, blob_store)

        with pytest.raises(StorageError):
            service.toggle_favorite("file-report-pdf", True, owner)
        assert collection.get("file-report-pdf").is_favorite is False


class TestTags:
    """Test tag editing."""

    def test_add_tags_deduplicates_and_trims(self, file_service, owner):
        record = file_service.add_tags("file-report-pdf", [" work ", "q1", "work", ""], owner)
        assert record.tags == ["work", "q1"]

    def test_remove_tags(self, file_service, owner):
        file_service.add_tags("file-report-pdf", ["work", "q1"], owner)
        record = file_service.remove_tags("file-report-pdf", ["work", "absent"], owner)
        assert record.tags == ["q1"]

    def test_view_only_grantee_cannot_tag(self, file_service, collection, viewer):
        _grant(collection.get("file-report-pdf"), "viewer@x.com", FilePermission.view_only())
        with pytest.raises(UnauthorizedAccessError):
            file_service.add_tags("file-report-pdf", ["mine"], viewer)

    def test_editor_grantee_can_tag(self, file_service, collection, viewer):
        _grant(collection.get("file-report-pdf"), "VIEWER@x.com", FilePermission(can_view=True, can_edit=True))
        record = file_service.add_tags("file-report-pdf", ["reviewed"], viewer)
        assert record.tags == ["reviewed"]


class TestDeleteRecord:
    """Test record deletion."""

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_payload(self, file_service, repository, blob_store, owner):
        await blob_store.put("file-report-pdf", b"pdf bytes")

        remaining = await file_service.delete_record("file-report-pdf", owner)

        assert len(remaining) == 2
        assert "file-report-pdf" not in remaining
        assert "file-report-pdf" not in blob_store
        assert len(repository.load()) == 2

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, file_service, owner):
        with pytest.raises(NotFoundError):
            await file_service.delete_record("file-missing", owner)

    @pytest.mark.asyncio
    async def test_view_only_grantee_cannot_delete(self, file_service, collection, viewer):
        _grant(collection.get("file-report-pdf"), "viewer@x.com", FilePermission.view_only())
        with pytest.raises(UnauthorizedAccessError):
            await file_service.delete_record("file-report-pdf", viewer)
        assert len(collection) == 3

    @pytest.mark.asyncio
    async def test_failed_save_restores_position(self, collection, blob_store, owner):
        repository = MagicMock()
        repository.save.side_effect = StorageError("disk full")
        service = FileService(collection, repository, blob_store)

        with pytest.raises(StorageError):
            await service.delete_record("file-photo-png", owner)

        assert [r.name for r in collection] == ["Report.pdf", "Photo.png", "Notes.txt"]

    @pytest.mark.asyncio
    async def test_payload_delete_failure_is_not_fatal(self, collection, repository, owner):
        blob_store = AsyncMock()
        blob_store.delete.side_effect = StorageError("bucket offline")
        service = FileService(collection, repository, blob_store)

        remaining = await service.delete_record("file-report-pdf", owner)
        assert len(remaining) == 2


class TestDownload:
    """Test download with integrity check and decryption."""

    @pytest.fixture
    def upload_service(self, collection, repository, blob_store):
        return UploadService(collection, repository, blob_store)

    @pytest.mark.asyncio
    async def test_plain_download(self, upload_service, file_service, owner):
        result = await upload_service.admit_upload("a.txt", b"plain text", False, owner)
        assert await file_service.download(result.record.id, owner) == b"plain text"

    @pytest.mark.asyncio
    async def test_encrypted_download_needs_key(self, upload_service, file_service, owner):
        result = await upload_service.admit_upload("a.txt", b"secret", True, owner)
        record_id = result.record.id

        assert await file_service.download(record_id, owner, key=result.encryption_key) == b"secret"
        with pytest.raises(DecryptionError):
            await file_service.download(record_id, owner)
        with pytest.raises(DecryptionError):
            await file_service.download(record_id, owner, key="0" * 64)

    @pytest.mark.asyncio
    async def test_tampered_payload_fails_integrity_check(self, upload_service, file_service, blob_store, owner):
        result = await upload_service.admit_upload("a.txt", b"original", False, owner)
        await blob_store.put(result.record.id, b"tampered")

        with pytest.raises(IntegrityError):
            await file_service.download(result.record.id, owner)

    @pytest.mark.asyncio
    async def test_missing_payload(self, file_service, owner):
        with pytest.raises(StorageError):
            await file_service.download("file-report-pdf", owner)

"""Shared pytest fixtures for all tests."""

from datetime import datetime, timezone

import pytest

from vault.domain import FileMetadata, FilePermission, FileRecord, User
from vault.repositories.record_repository import InMemoryRecordRepository, RecordCollection
from vault.storage.blob_store import InMemoryBlobStore


def make_record(
    name: str,
    created_at: datetime,
    size: int = 1024,
    record_id: str = None,
    modified_at: datetime = None,
    owner_id: str = "user-owner",
    **kwargs,
) -> FileRecord:
    """
    Build a FileRecord the way admission would, with overridable fields.
    """
    file_type = name.rsplit(".", 1)[1].lower() if "." in name else ""
    encrypted = kwargs.pop("is_encrypted", False)
    checksum = kwargs.pop("checksum", None)
    return FileRecord(
        id=record_id or f"file-{name.lower().replace('.', '-')}",
        name=name,
        type=file_type,
        size=size,
        path=f"/files/{name}",
        metadata=FileMetadata(
            name=name,
            type=file_type,
            size=size,
            created_at=created_at,
            modified_at=modified_at or created_at,
            created_by="Owner",
            last_modified_by="Owner",
            encrypted=encrypted,
            checksum=checksum,
        ),
        permissions=kwargs.pop("permissions", FilePermission.full()),
        is_encrypted=encrypted,
        owner_id=owner_id,
        **kwargs,
    )


@pytest.fixture
def owner():
    return User(user_id="user-owner", email="owner@example.com", name="Owner")


@pytest.fixture
def stranger():
    return User(user_id="user-stranger", email="stranger@example.com", name="Stranger")


@pytest.fixture
def scenario_records():
    """
    Three records created a month apart, listed in insertion order.
    """
    return [
        make_record("Report.pdf", datetime(2024, 1, 1, tzinfo=timezone.utc), size=300),
        make_record("Photo.png", datetime(2024, 2, 1, tzinfo=timezone.utc), size=100),
        make_record("Notes.txt", datetime(2024, 3, 1, tzinfo=timezone.utc), size=200),
    ]


@pytest.fixture
def collection(scenario_records):
    return RecordCollection(scenario_records)


@pytest.fixture
def repository():
    return InMemoryRecordRepository()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def record_factory():
    return make_record

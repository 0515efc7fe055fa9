"""Repository layer for data access."""

from vault.repositories.record_repository import (
    InMemoryRecordRepository,
    JsonFileRecordRepository,
    RecordCollection,
    RecordRepository,
)
from vault.repositories.user_repository import UserRepository

__all__ = [
    "RecordCollection",
    "RecordRepository",
    "InMemoryRecordRepository",
    "JsonFileRecordRepository",
    "UserRepository",
]

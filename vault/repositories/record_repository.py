"""Record collection and the repositories that persist it."""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from common.logging_config import get_logger
from vault.domain import FileRecord
from vault.exceptions import NotFoundError, StorageError
from vault.repositories.serialization import record_from_dict, record_to_dict

logger = get_logger(__name__)


class RecordCollection:
    """
    Ordered set of records, newest admitted first, indexed by id.
    """

    def __init__(self, records: Optional[Iterable[FileRecord]] = None):
        self._records: List[FileRecord] = []
        self._index: Dict[str, FileRecord] = {}
        for record in records or []:
            self.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records))

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._index

    def records(self) -> List[FileRecord]:
        return list(self._records)

    def get(self, record_id: str) -> FileRecord:
        record = self._index.get(record_id)
        if record is None:
            raise NotFoundError(f"File {record_id} not found")
        return record

    def _check_new(self, record: FileRecord) -> None:
        if record.id in self._index:
            raise ValueError(f"Duplicate record id {record.id}")

    def insert_front(self, record: FileRecord) -> None:
        self._check_new(record)
        self._records.insert(0, record)
        self._index[record.id] = record

    def append(self, record: FileRecord) -> None:
        self._check_new(record)
        self._records.append(record)
        self._index[record.id] = record

    def insert_at(self, position: int, record: FileRecord) -> None:
        self._check_new(record)
        self._records.insert(position, record)
        self._index[record.id] = record

    def remove(self, record_id: str) -> FileRecord:
        record = self.get(record_id)
        self._records.remove(record)
        del self._index[record_id]
        return record


class RecordRepository(ABC):
    """Persistence boundary for the admitted-records list."""

    @abstractmethod
    def load(self) -> RecordCollection:
        ...

    @abstractmethod
    def save(self, collection: RecordCollection) -> None:
        ...


class InMemoryRecordRepository(RecordRepository):
    """Keeps the serialized form in memory; useful for tests and sessions."""

    def __init__(self):
        self._rows: List[dict] = []

    def load(self) -> RecordCollection:
        return _collection_from_rows(self._rows)

    def save(self, collection: RecordCollection) -> None:
        self._rows = [record_to_dict(record) for record in collection]


class JsonFileRecordRepository(RecordRepository):
    """
    Stores the collection as a JSON list of camelCase records.

    Writes go through a temporary file in the same directory and replace the
    target, so a crash never leaves a half-written file.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> RecordCollection:
        with self._lock:
            if not self.path.exists():
                logger.info(f"No records file at {self.path}, starting empty")
                return RecordCollection()
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    rows = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to read records file {self.path}: {e}")
                return RecordCollection()

        if not isinstance(rows, list):
            logger.error(f"Records file {self.path} does not hold a list, starting empty")
            return RecordCollection()

        collection = _collection_from_rows(rows)
        logger.info(f"Loaded {len(collection)} records from {self.path}")
        return collection

    def save(self, collection: RecordCollection) -> None:
        rows = [record_to_dict(record) for record in collection]
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix='.tmp')
                try:
                    with os.fdopen(fd, 'w', encoding='utf-8') as f:
                        json.dump(rows, f, indent=2)
                    os.replace(tmp_path, self.path)
                except BaseException:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as e:
                logger.error(f"Failed to write records file {self.path}: {e}")
                raise StorageError(f"Failed to persist records: {e}") from e
        logger.debug(f"Saved {len(rows)} records to {self.path}")


def _collection_from_rows(rows: List[dict]) -> RecordCollection:
    """Rebuild a collection, skipping malformed or duplicate rows."""
    collection = RecordCollection()
    for position, row in enumerate(rows):
        try:
            record = record_from_dict(row)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed record at position {position}: {e}")
            continue
        if record.id in collection:
            logger.warning(f"Skipping duplicate record id {record.id} at position {position}")
            continue
        collection.append(record)
    return collection

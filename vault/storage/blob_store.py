"""Payload transport: stores the (possibly protected) bytes of each record."""

import asyncio
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from common.logging_config import get_logger
from vault.exceptions import StorageError

logger = get_logger(__name__)

_SAFE_ID = re.compile(r'^[A-Za-z0-9_-]+$')


class BlobStore(ABC):
    """
    External storage collaborator. Any transport failure surfaces as
    ``StorageError``.
    """

    @abstractmethod
    async def put(self, record_id: str, data: bytes) -> None:
        ...

    @abstractmethod
    async def get(self, record_id: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        ...


class InMemoryBlobStore(BlobStore):
    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    async def put(self, record_id: str, data: bytes) -> None:
        self._blobs[record_id] = bytes(data)

    async def get(self, record_id: str) -> bytes:
        try:
            return self._blobs[record_id]
        except KeyError:
            raise StorageError(f"No stored payload for {record_id}") from None

    async def delete(self, record_id: str) -> bool:
        return self._blobs.pop(record_id, None) is not None

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._blobs


class LocalDirectoryBlobStore(BlobStore):
    """
    One ``<record_id>.blob`` file per record under ``root``.

    File I/O runs in a worker thread; each call is bounded by ``timeout``
    seconds when one is configured.
    """

    def __init__(self, root, timeout: Optional[float] = None):
        self.root = Path(root)
        self.timeout = timeout if timeout and timeout > 0 else None

    def get_blob_path(self, record_id: str) -> Path:
        if not _SAFE_ID.match(record_id):
            raise StorageError(f"Invalid record id for storage: {record_id!r}")
        return self.root / f"{record_id}.blob"

    async def _run(self, operation: str, func, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Blob {operation} timed out after {self.timeout}s")
            raise StorageError(f"Storage {operation} timed out") from e
        except OSError as e:
            logger.error(f"Blob {operation} failed: {e}")
            raise StorageError(f"Storage {operation} failed: {e}") from e

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix('.tmp')
        tmp_path.write_bytes(data)
        tmp_path.replace(path)

    def _delete(self, path: Path) -> bool:
        if path.exists():
            path.unlink()
            return True
        return False

    async def put(self, record_id: str, data: bytes) -> None:
        path = self.get_blob_path(record_id)
        await self._run("write", self._write, path, bytes(data))
        logger.debug(f"Stored {len(data)} bytes for {record_id}")

    async def get(self, record_id: str) -> bytes:
        path = self.get_blob_path(record_id)
        if not path.exists():
            raise StorageError(f"No stored payload for {record_id}")
        return await self._run("read", path.read_bytes)

    async def delete(self, record_id: str) -> bool:
        path = self.get_blob_path(record_id)
        return await self._run("delete", self._delete, path)

"""Tests for payload storage backends."""

import asyncio
import tempfile
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from vault.exceptions import StorageError
from vault.storage.blob_store import InMemoryBlobStore, LocalDirectoryBlobStore


@pytest.fixture
def blob_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "blobs"


class TestLocalDirectoryBlobStore:
    """Test on-disk payload storage."""

    @pytest.mark.asyncio
    async def test_put_get_delete(self, blob_dir):
        store = LocalDirectoryBlobStore(blob_dir)

        await store.put("file-abc", b"payload")
        assert (blob_dir / "file-abc.blob").read_bytes() == b"payload"
        assert await store.get("file-abc") == b"payload"

        assert await store.delete("file-abc") is True
        assert await store.delete("file-abc") is False

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, blob_dir):
        store = LocalDirectoryBlobStore(blob_dir)
        with pytest.raises(StorageError):
            await store.get("file-missing")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("record_id", ["../escape", "a/b", "", "file.blob"])
    async def test_unsafe_ids_rejected(self, blob_dir, record_id):
        store = LocalDirectoryBlobStore(blob_dir)
        with pytest.raises(StorageError):
            await store.put(record_id, b"x")

    @pytest.mark.asyncio
    async def test_timeout_becomes_storage_error(self, blob_dir):
        store = LocalDirectoryBlobStore(blob_dir, timeout=0.01)

        def slow_write(path, data):
            time.sleep(0.2)

        with patch.object(store, "_write", slow_write):
            with pytest.raises(StorageError, match="timed out"):
                await store.put("file-slow", b"x")

    @pytest.mark.asyncio
    async def test_os_error_becomes_storage_error(self, blob_dir):
        store = LocalDirectoryBlobStore(blob_dir)
        with patch.object(store, "_write", side_effect=PermissionError("read-only")):
            with pytest.raises(StorageError):
                await store.put("file-ro", b"x")

    def test_non_positive_timeout_means_unbounded(self, blob_dir):
        assert LocalDirectoryBlobStore(blob_dir, timeout=0).timeout is None


class TestInMemoryBlobStore:
    """Test the in-memory backend."""

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = InMemoryBlobStore()
        await store.put("file-1", bytearray(b"abc"))
        assert await store.get("file-1") == b"abc"
        assert "file-1" in store

    @pytest.mark.asyncio
    async def test_missing_payload(self):
        store = InMemoryBlobStore()
        with pytest.raises(StorageError):
            await store.get("file-1")
        assert await store.delete("file-1") is False

    @pytest.mark.asyncio
    async def test_concurrent_puts(self):
        store = InMemoryBlobStore()
        await asyncio.gather(*(store.put(f"file-{i}", bytes([i])) for i in range(10)))
        assert all(f"file-{i}" in store for i in range(10))

"""Blob storage collaborators holding file payloads."""

from vault.storage.blob_store import BlobStore, InMemoryBlobStore, LocalDirectoryBlobStore

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "LocalDirectoryBlobStore",
]

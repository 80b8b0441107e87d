"""Storage module for blob store operations.

Provides:
- StorageClient for interacting with Cloudinary
- FakeStorageClient for tests and local development
- Remote reference parsing for deletion by URL
"""

from vidtube.storage.client import (
    FakeStorageClient,
    StorageClient,
    StorageClientBase,
    StorageError,
    UploadResult,
    build_storage_client,
)
from vidtube.storage.paths import RemoteReference, parse_remote_reference, storage_id_from_url

__all__ = [
    "StorageClient",
    "StorageClientBase",
    "FakeStorageClient",
    "StorageError",
    "UploadResult",
    "build_storage_client",
    "RemoteReference",
    "parse_remote_reference",
    "storage_id_from_url",
]

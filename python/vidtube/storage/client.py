"""Blob storage client abstraction.

Provides a clean interface for storage operations with:
- Upload of a local file (video, image, or auto-detected)
- Deletion by storage id, with "not found" reported distinctly from failure

The production client talks to the Cloudinary upload API over httpx using
signed requests. The fake client keeps objects in memory for tests and
local development.
"""

import hashlib
import os
import posixpath
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import httpx

from vidtube.config import Settings
from vidtube.logging import get_logger

logger = get_logger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"

VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv", ".webm"}


@dataclass(frozen=True)
class UploadResult:
    """Blob store response to a successful upload.

    duration_seconds is only reported for video resources.
    """

    url: str
    storage_id: str
    resource_type: str
    duration_seconds: float | None = None
    size_bytes: int | None = None


class StorageError(Exception):
    """Storage operation error."""

    def __init__(self, message: str, code: str = "E_STORAGE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageClientBase(ABC):
    """Abstract base class for storage client implementations."""

    @abstractmethod
    def upload(self, local_path: str, *, resource_type: str = "auto") -> UploadResult:
        """Upload a local file.

        Args:
            local_path: Path of the file on local disk.
            resource_type: "video", "image", or "auto" to let the store decide.

        Returns:
            UploadResult describing the stored asset.

        Raises:
            StorageError: If the file cannot be read or the store rejects it.
        """
        ...

    @abstractmethod
    def delete(self, storage_id: str, *, resource_type: str = "image") -> bool:
        """Delete a stored asset.

        Args:
            storage_id: Identity of the asset in the store.
            resource_type: Resource type the asset was stored under.

        Returns:
            True if the asset was deleted, False if the store did not have it.

        Raises:
            StorageError: If the store could not be reached or refused the request.
        """
        ...


class StorageClient(StorageClientBase):
    """Production Cloudinary client.

    Uses httpx for HTTP operations against the Cloudinary upload API.
    Requests are signed with SHA-1 over the sorted parameters and API secret.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout: float = 120.0,
        base_url: str = CLOUDINARY_API_BASE,
    ):
        """Initialize the storage client.

        Args:
            cloud_name: Cloudinary cloud name.
            api_key: Cloudinary API key.
            api_secret: Cloudinary API secret (used for signing only, never sent).
            timeout: Per-request timeout in seconds.
            base_url: API base URL.
        """
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout = timeout
        self._api_url = f"{base_url.rstrip('/')}/{cloud_name}"

    def sign(self, params: dict[str, Any]) -> str:
        """Compute the request signature for the given parameters."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self._api_secret}".encode()).hexdigest()

    def _signed_payload(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        return {**params, "api_key": self._api_key, "signature": self.sign(params)}

    def upload(self, local_path: str, *, resource_type: str = "auto") -> UploadResult:
        """Upload a file via the Cloudinary upload endpoint."""
        url = f"{self._api_url}/{resource_type}/upload"
        payload = self._signed_payload({})

        try:
            with open(local_path, "rb") as fh, httpx.Client() as client:
                response = client.post(
                    url,
                    data=payload,
                    files={"file": (os.path.basename(local_path), fh)},
                    timeout=self._timeout,
                )
        except OSError as e:
            raise StorageError(f"Failed to read upload source: {e}", code="E_UPLOAD_FAILED") from e
        except httpx.HTTPError as e:
            raise StorageError(f"Upload request failed: {e}", code="E_UPLOAD_FAILED") from e

        if response.status_code != 200:
            raise StorageError(
                f"Failed to upload: {response.status_code} {response.text}",
                code="E_UPLOAD_FAILED",
            )

        data = response.json()
        secure_url = data.get("secure_url") or data.get("url")
        public_id = data.get("public_id")
        if not secure_url or not public_id:
            raise StorageError("Upload response missing url or public_id", code="E_UPLOAD_FAILED")

        duration = data.get("duration")
        return UploadResult(
            url=secure_url,
            storage_id=public_id,
            resource_type=data.get("resource_type", resource_type),
            duration_seconds=float(duration) if duration is not None else None,
            size_bytes=data.get("bytes"),
        )

    def delete(self, storage_id: str, *, resource_type: str = "image") -> bool:
        """Delete an asset via the Cloudinary destroy endpoint."""
        url = f"{self._api_url}/{resource_type}/destroy"
        payload = self._signed_payload({"public_id": storage_id})

        try:
            with httpx.Client() as client:
                response = client.post(url, data=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise StorageError(f"Delete request failed: {e}", code="E_DELETION_FAILED") from e

        if response.status_code == 404:
            return False

        if response.status_code != 200:
            raise StorageError(
                f"Failed to delete: {response.status_code} {response.text}",
                code="E_DELETION_FAILED",
            )

        result = response.json().get("result")
        if result == "ok":
            return True
        if result == "not found":
            return False

        raise StorageError(f"Unexpected delete result: {result!r}", code="E_DELETION_FAILED")


class FakeStorageClient(StorageClientBase):
    """Fake storage client for testing without a real blob store.

    Stores files in memory and provides deterministic behavior for unit tests.
    Every call is appended to `calls` as ("upload" | "delete", storage_id) so
    tests can assert on ordering.
    """

    def __init__(self, video_duration_seconds: float | None = 42.0):
        self._objects: dict[str, tuple[bytes, str]] = {}  # storage_id -> (content, resource_type)
        self.video_duration_seconds = video_duration_seconds
        self.calls: list[tuple[str, str]] = []
        self.fail_uploads = False
        self.fail_deletes = False

    def upload(self, local_path: str, *, resource_type: str = "auto") -> UploadResult:
        """Store the file content under a fresh storage id."""
        if self.fail_uploads:
            self.calls.append(("upload", ""))
            raise StorageError("Simulated upload failure", code="E_UPLOAD_FAILED")

        try:
            with open(local_path, "rb") as fh:
                content = fh.read()
        except OSError as e:
            raise StorageError(f"Failed to read upload source: {e}", code="E_UPLOAD_FAILED") from e

        ext = posixpath.splitext(local_path)[1].lower()
        if resource_type == "auto":
            resource_type = "video" if ext in VIDEO_EXTENSIONS else "image"

        storage_id = uuid4().hex
        self._objects[storage_id] = (content, resource_type)
        self.calls.append(("upload", storage_id))

        return UploadResult(
            url=f"https://fake-storage.test/{resource_type}/upload/v1/{storage_id}{ext}",
            storage_id=storage_id,
            resource_type=resource_type,
            duration_seconds=self.video_duration_seconds if resource_type == "video" else None,
            size_bytes=len(content),
        )

    def delete(self, storage_id: str, *, resource_type: str = "image") -> bool:
        """Delete a fake object."""
        self.calls.append(("delete", storage_id))
        if self.fail_deletes:
            raise StorageError("Simulated delete failure", code="E_DELETION_FAILED")
        return self._objects.pop(storage_id, None) is not None

    # Test helper methods

    def put_object(self, storage_id: str, content: bytes, resource_type: str = "image") -> str:
        """Store an object directly and return its URL (test helper)."""
        self._objects[storage_id] = (content, resource_type)
        return f"https://fake-storage.test/{resource_type}/upload/v1/{storage_id}.bin"

    def has_object(self, storage_id: str) -> bool:
        """Check whether an object is stored (test helper)."""
        return storage_id in self._objects

    def get_object(self, storage_id: str) -> bytes | None:
        """Get object content directly (test helper)."""
        if storage_id not in self._objects:
            return None
        return self._objects[storage_id][0]

    @property
    def object_count(self) -> int:
        """Number of stored objects (test helper)."""
        return len(self._objects)

    def clear(self) -> None:
        """Clear all stored objects and recorded calls (test helper)."""
        self._objects.clear()
        self.calls.clear()


def build_storage_client(settings: Settings) -> StorageClientBase:
    """Build the storage client for the given settings.

    Called once at application startup; the result is process-wide.

    Returns:
        StorageClient if Cloudinary credentials are configured,
        FakeStorageClient otherwise (settings forbid this in staging/prod).
    """
    if settings.storage_configured:
        return StorageClient(
            cloud_name=settings.cloudinary_cloud_name,  # type: ignore[arg-type]
            api_key=settings.cloudinary_api_key,  # type: ignore[arg-type]
            api_secret=settings.cloudinary_api_secret,  # type: ignore[arg-type]
            timeout=settings.storage_timeout_s,
        )

    logger.warning("storage_fake_client_in_use", env=settings.vidtube_env.value)
    return FakeStorageClient()

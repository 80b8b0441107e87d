"""Spooling of multipart uploads to local temp files.

Routes stage each UploadFile into settings.upload_temp_dir and hand the path
to a service, which commits it through MediaAssetManager (and removes it).
The staging scope removes whatever the service did not get to, e.g. a
thumbnail left behind when the video upload failed first.

Mime types are checked here, before anything reaches blob storage.
"""

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import UploadFile

from vidtube.config import Settings
from vidtube.errors import ApiErrorCode, ValidationError
from vidtube.services.assets import release_temp_file

VIDEO_MIME_TYPES = frozenset({"video/mp4", "video/avi"})
IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png"})

CHUNK_SIZE = 1024 * 1024


class StagedUploads:
    """Temp files staged during one request."""

    def __init__(self, temp_dir: str, max_bytes: int):
        self.temp_dir = temp_dir
        self.max_bytes = max_bytes
        self.paths: list[str] = []

    def stage(self, upload: UploadFile | None, allowed: frozenset[str], label: str) -> str | None:
        """Copy upload into a temp file and return its path.

        Returns None when no file was sent.

        Raises:
            ValidationError: Disallowed mime type or file larger than max_bytes.
        """
        if upload is None or not upload.filename:
            return None

        if upload.content_type not in allowed:
            raise ValidationError(
                ApiErrorCode.E_INVALID_FILE_TYPE,
                f"Invalid {label} file type. Allowed: {', '.join(sorted(allowed))}",
            )

        suffix = os.path.splitext(upload.filename)[1].lower()
        fd, path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=self.temp_dir)
        self.paths.append(path)

        size = 0
        with os.fdopen(fd, "wb") as out:
            while chunk := upload.file.read(CHUNK_SIZE):
                size += len(chunk)
                if size > self.max_bytes:
                    raise ValidationError(
                        ApiErrorCode.E_FILE_TOO_LARGE, f"{label} file is too large"
                    )
                out.write(chunk)

        return path


@contextmanager
def staged_uploads(settings: Settings) -> Iterator[StagedUploads]:
    """Scope in which uploads are staged; leftovers are removed on exit."""
    staged = StagedUploads(settings.upload_temp_dir, settings.max_upload_bytes)
    try:
        yield staged
    finally:
        for path in staged.paths:
            release_temp_file(path)

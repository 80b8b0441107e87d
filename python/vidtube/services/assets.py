"""Media asset management.

Moves locally spooled uploads into blob storage and removes remote assets
that records no longer reference.

Policies:
- commit: the local temp file is released on every exit path, success or
  failure. A temp file that is already gone counts as released.
- release: "not found" in the remote store is a successful no-op.
- replace: new upload, then persist, then release of the old asset.
- batch: assets committed during a multi-step create are released again if
  a later step fails.

Storage ids never appear in client-facing error messages.
"""

import os
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from vidtube.errors import ApiErrorCode, DeletionError, UploadError, ValidationError
from vidtube.logging import get_logger
from vidtube.storage import StorageClientBase, StorageError, parse_remote_reference

logger = get_logger(__name__)


class AssetKind(str, Enum):
    """Resource type requested from the blob store."""

    video = "video"
    image = "image"
    auto = "auto"


@dataclass(frozen=True)
class CommittedAsset:
    """A durable remote asset produced by commit."""

    url: str
    storage_id: str
    kind: str
    duration_seconds: float | None = None


def release_temp_file(local_path: str) -> None:
    """Remove a local temp file, logging (not raising) secondary failures."""
    try:
        os.unlink(local_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("temp_file_cleanup_failed", local_path=local_path, error=str(e))


@contextmanager
def temp_file_scope(local_path: str) -> Iterator[str]:
    """Guarantee the temp file at local_path is released when the block exits."""
    try:
        yield local_path
    finally:
        release_temp_file(local_path)


class MediaAssetManager:
    """Commits local uploads to blob storage and releases remote assets."""

    def __init__(self, storage: StorageClientBase):
        self.storage = storage

    def commit(self, local_path: str | None, kind: AssetKind = AssetKind.auto) -> CommittedAsset:
        """Upload a local temp file and return its durable reference.

        Raises:
            ValidationError: If no local file was provided.
            UploadError: If the blob store rejects or fails the upload.
        """
        if not local_path:
            raise ValidationError(ApiErrorCode.E_MISSING_FILE, "File is required")

        kind = AssetKind(kind)
        with temp_file_scope(local_path):
            try:
                result = self.storage.upload(local_path, resource_type=kind.value)
            except StorageError as e:
                logger.error("asset_commit_failed", kind=kind.value, code=e.code, error=e.message)
                raise UploadError(message=f"Failed to upload {kind.value} file") from e

        logger.info("asset_committed", kind=result.resource_type, storage_id=result.storage_id)
        return CommittedAsset(
            url=result.url,
            storage_id=result.storage_id,
            kind=result.resource_type,
            duration_seconds=result.duration_seconds,
        )

    def release(self, remote_url: str | None) -> bool:
        """Delete the remote asset behind remote_url.

        Returns:
            True if the asset was deleted, False if there was nothing to delete.

        Raises:
            DeletionError: If the blob store fails for any reason other than "not found".
        """
        if not remote_url:
            return False

        try:
            ref = parse_remote_reference(remote_url)
        except ValueError:
            logger.warning("asset_reference_unparseable", remote_url=remote_url)
            return False

        try:
            deleted = self.storage.delete(ref.storage_id, resource_type=ref.resource_type)
        except StorageError as e:
            logger.error("asset_release_failed", storage_id=ref.storage_id, error=e.message)
            raise DeletionError(message="Failed to delete media asset") from e

        if deleted:
            logger.info("asset_released", storage_id=ref.storage_id)
        else:
            logger.info("asset_release_not_found", storage_id=ref.storage_id)
        return deleted

    def release_quietly(self, remote_url: str | None) -> bool:
        """Best-effort release for secondary cleanup. Failures are logged, not raised."""
        try:
            return self.release(remote_url)
        except DeletionError:
            logger.warning("asset_orphaned", remote_url=remote_url)
            return False

    def release_all(self, urls: Iterable[str | None]) -> list[str]:
        """Attempt every release; return the urls whose release failed."""
        failed = []
        for url in urls:
            try:
                self.release(url)
            except DeletionError:
                failed.append(url)
        return failed

    def replace(
        self,
        old_url: str | None,
        local_path: str | None,
        kind: AssetKind,
        persist: Callable[[CommittedAsset], None],
    ) -> CommittedAsset:
        """Upload a new asset, persist it via callback, then release the old one.

        If persist raises, the new asset is released and the old one is kept.
        """
        new_asset = self.commit(local_path, kind)
        try:
            persist(new_asset)
        except Exception:
            self.release_quietly(new_asset.url)
            raise

        if old_url and old_url != new_asset.url:
            self.release_quietly(old_url)
        return new_asset

    @contextmanager
    def batch(self) -> Iterator["AssetBatch"]:
        """Scope for a multi-asset create.

        Assets committed through the batch are released quietly if the block
        raises; the original exception propagates.
        """
        batch = AssetBatch(self)
        try:
            yield batch
        except BaseException:
            batch.rollback()
            raise


class AssetBatch:
    """Assets committed within one MediaAssetManager.batch() scope."""

    def __init__(self, manager: MediaAssetManager):
        self._manager = manager
        self.committed: list[CommittedAsset] = []

    def commit(self, local_path: str | None, kind: AssetKind = AssetKind.auto) -> CommittedAsset:
        asset = self._manager.commit(local_path, kind)
        self.committed.append(asset)
        return asset

    def rollback(self) -> None:
        for asset in self.committed:
            self._manager.release_quietly(asset.url)
        if self.committed:
            logger.info("asset_batch_compensated", count=len(self.committed))
        self.committed = []

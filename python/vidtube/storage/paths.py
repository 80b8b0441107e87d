"""Remote reference parsing.

This module is the single point of logic for turning a stored asset URL back
into the identity the blob store knows it by.

Reference Invariant:
    https://<host>/<cloud>/<resource_type>/upload/[v<version>/]<storage_id>.<ext>

Rules:
    - storage_id is the last path segment with its extension removed
    - resource_type is the segment preceding "upload" (image | video | raw);
      references that do not carry one are treated as images
"""

from dataclasses import dataclass
from urllib.parse import urlsplit

RESOURCE_TYPES = ("image", "video", "raw")

DEFAULT_RESOURCE_TYPE = "image"


@dataclass(frozen=True)
class RemoteReference:
    """Storage identity derived from an asset URL."""

    storage_id: str
    resource_type: str


def storage_id_from_url(url: str) -> str:
    """Derive the storage id from a remote URL.

    Args:
        url: Asset URL as returned by the blob store.

    Returns:
        The trailing path segment with its extension stripped.

    Raises:
        ValueError: If the URL has no usable trailing segment.
    """
    path = urlsplit(url).path if "://" in url else url
    filename = path.rstrip("/").rsplit("/", 1)[-1]
    storage_id = filename.split(".", 1)[0]
    if not storage_id:
        raise ValueError("Remote reference has no storage id")
    return storage_id


def parse_remote_reference(url: str) -> RemoteReference:
    """Parse a remote URL into its storage id and resource type.

    Example:
        >>> parse_remote_reference("https://res.cloudinary.com/demo/video/upload/v1/abc.mp4")
        RemoteReference(storage_id='abc', resource_type='video')
    """
    storage_id = storage_id_from_url(url)

    resource_type = DEFAULT_RESOURCE_TYPE
    segments = [s for s in urlsplit(url).path.split("/") if s]
    if "upload" in segments:
        idx = segments.index("upload")
        if idx > 0 and segments[idx - 1] in RESOURCE_TYPES:
            resource_type = segments[idx - 1]

    return RemoteReference(storage_id=storage_id, resource_type=resource_type)

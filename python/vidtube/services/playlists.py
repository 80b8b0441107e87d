"""Playlist services.

Names are unique per owner (enforced by uq_playlists_owner_name). The
optional thumbnail follows the same asset policies as videos: new-first
replacement, and best-effort release after the record is gone.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.auth.permissions import require_owner
from vidtube.db.models import Playlist, PlaylistVideo
from vidtube.db.session import transaction
from vidtube.errors import ApiErrorCode, NotFoundError, ValidationError
from vidtube.ids import parse_object_id
from vidtube.logging import get_logger
from vidtube.schemas.common import PageOut
from vidtube.schemas.playlists import PlaylistAction, PlaylistDetailOut, PlaylistOut
from vidtube.schemas.videos import VideoOut
from vidtube.services.assets import AssetKind, CommittedAsset, MediaAssetManager
from vidtube.services.pagination import PageRequest, SortSpec, paginate, require_non_empty
from vidtube.services.videos import get_video_or_404

logger = get_logger(__name__)


def _video_count_column():
    return (
        select(func.count())
        .where(PlaylistVideo.playlist_id == Playlist.id)
        .correlate(Playlist)
        .scalar_subquery()
        .label("video_count")
    )


def playlist_out(playlist: Playlist, video_count: int) -> PlaylistOut:
    return PlaylistOut.model_validate(playlist).model_copy(update={"video_count": video_count})


def playlist_detail(playlist: Playlist) -> PlaylistDetailOut:
    videos = [VideoOut.model_validate(entry.video) for entry in playlist.entries]
    return PlaylistDetailOut(**playlist_out(playlist, len(videos)).model_dump(), videos=videos)


def get_playlist_or_404(db: Session, playlist_id: str) -> Playlist:
    playlist_id = parse_object_id(playlist_id, "Invalid playlist id")
    playlist = db.get(Playlist, playlist_id)
    if playlist is None:
        raise NotFoundError(ApiErrorCode.E_PLAYLIST_NOT_FOUND, "Playlist not found")
    return playlist


def _require_unique_name(
    db: Session, owner_id: str, name: str, exclude_id: str | None = None
) -> None:
    stmt = select(Playlist.id).where(Playlist.owner_id == owner_id, Playlist.name == name)
    if exclude_id:
        stmt = stmt.where(Playlist.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise ValidationError(ApiErrorCode.E_DUPLICATE, "A playlist with this name already exists")


def create_playlist(
    db: Session,
    assets: MediaAssetManager,
    viewer_id: str,
    *,
    name: str | None,
    description: str | None = None,
    thumbnail_path: str | None = None,
) -> PlaylistDetailOut:
    name = (name or "").strip()
    if not name:
        raise ValidationError(message="Playlist name is required")
    _require_unique_name(db, viewer_id, name)

    with assets.batch() as batch:
        thumbnail = batch.commit(thumbnail_path, AssetKind.image) if thumbnail_path else None
        playlist = Playlist(
            owner_id=viewer_id,
            name=name,
            description=(description or "").strip(),
            thumbnail_url=thumbnail.url if thumbnail else None,
        )
        try:
            with transaction(db):
                db.add(playlist)
        except IntegrityError:
            raise ValidationError(
                ApiErrorCode.E_DUPLICATE, "A playlist with this name already exists"
            ) from None

    logger.info("playlist_created", playlist_id=playlist.id)
    return playlist_detail(playlist)


def get_playlist(db: Session, playlist_id: str) -> PlaylistDetailOut:
    return playlist_detail(get_playlist_or_404(db, playlist_id))


def list_user_playlists(
    db: Session, user_id: str, page_request: PageRequest
) -> PageOut[PlaylistOut]:
    """A user's playlists with video counts, newest first."""
    user_id = parse_object_id(user_id, "Invalid user id")
    stmt = select(Playlist, _video_count_column()).where(Playlist.owner_id == user_id)
    page = require_non_empty(
        paginate(
            db, stmt, page_request, SortSpec(Playlist.created_at, descending=True), Playlist.id
        ),
        "No playlists found for this user",
    )
    return PageOut.from_page(page, lambda row: playlist_out(row[0], row[1]))


def update_playlist(
    db: Session,
    assets: MediaAssetManager,
    viewer_id: str,
    playlist_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    thumbnail_path: str | None = None,
) -> PlaylistDetailOut:
    """Rename, re-describe and/or re-thumbnail the viewer's playlist."""
    playlist = get_playlist_or_404(db, playlist_id)
    require_owner(viewer_id, playlist.owner_id, message="You can only edit your own playlists")

    name = name.strip() if name is not None else None
    description = description.strip() if description is not None else None
    if not name and not description and not thumbnail_path:
        raise ValidationError(message="Provide name, description or thumbnail to update")

    if name and name != playlist.name:
        _require_unique_name(db, playlist.owner_id, name, exclude_id=playlist.id)

    def persist(asset: CommittedAsset | None = None) -> None:
        try:
            with transaction(db):
                if name:
                    playlist.name = name
                if description:
                    playlist.description = description
                if asset is not None:
                    playlist.thumbnail_url = asset.url
        except IntegrityError:
            raise ValidationError(
                ApiErrorCode.E_DUPLICATE, "A playlist with this name already exists"
            ) from None

    if thumbnail_path:
        assets.replace(playlist.thumbnail_url, thumbnail_path, AssetKind.image, persist)
    else:
        persist()

    return playlist_detail(playlist)


def delete_playlist(
    db: Session, assets: MediaAssetManager, viewer_id: str, playlist_id: str
) -> None:
    """Delete the playlist record, then release its thumbnail best-effort."""
    playlist = get_playlist_or_404(db, playlist_id)
    require_owner(viewer_id, playlist.owner_id, message="You can only delete your own playlists")

    thumbnail_url = playlist.thumbnail_url
    with transaction(db):
        db.execute(delete(Playlist).where(Playlist.id == playlist.id))

    assets.release_quietly(thumbnail_url)
    logger.info("playlist_deleted", playlist_id=playlist.id)


def modify_playlist_videos(
    db: Session,
    viewer_id: str,
    playlist_id: str,
    video_id: str,
    action: PlaylistAction,
) -> PlaylistDetailOut:
    """Add a video to, or remove it from, the viewer's playlist.

    Raises:
        ValidationError: Unknown action, duplicate add, or removing a video
            that is not in the playlist.
    """
    if action not in ("add", "remove"):
        raise ValidationError(message="action must be 'add' or 'remove'")

    playlist = get_playlist_or_404(db, playlist_id)
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, playlist.owner_id, message="You can only modify your own playlists")

    existing = db.get(PlaylistVideo, (playlist.id, video.id))
    if action == "add":
        if existing is not None:
            raise ValidationError(ApiErrorCode.E_DUPLICATE, "Video already exists in playlist")
        with transaction(db):
            playlist.entries.append(PlaylistVideo(playlist_id=playlist.id, video_id=video.id))
    else:
        if existing is None:
            raise ValidationError(message="Video does not exist in playlist")
        with transaction(db):
            playlist.entries.remove(existing)

    return playlist_detail(playlist)

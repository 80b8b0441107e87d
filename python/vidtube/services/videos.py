"""Video services.

Video records own two remote assets (file and thumbnail). Creation commits
both before the row is written and compensates if anything after the first
commit fails. Deletion releases both assets before the row is removed, so a
storage failure leaves the row in place and the delete can be retried.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from vidtube.auth.permissions import require_owner
from vidtube.db.models import Comment, Like, LikeTargetKind, User, Video
from vidtube.db.session import transaction
from vidtube.errors import (
    ApiErrorCode,
    DeletionError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from vidtube.ids import parse_object_id
from vidtube.logging import get_logger
from vidtube.schemas.common import PageOut
from vidtube.schemas.users import UserSummaryOut
from vidtube.schemas.videos import VideoOut, VideoWithOwnerOut
from vidtube.services.assets import AssetKind, CommittedAsset, MediaAssetManager
from vidtube.services.pagination import (
    PageRequest,
    paginate,
    require_non_empty,
    resolve_sort,
)

logger = get_logger(__name__)

VIDEO_SORT_FIELDS = {
    "createdAt": Video.created_at,
    "title": Video.title,
    "views": Video.views,
}


def video_with_owner(video: Video, owner: User | None) -> VideoWithOwnerOut:
    out = VideoWithOwnerOut.model_validate(video)
    out.owner = UserSummaryOut.model_validate(owner) if owner is not None else None
    return out


def get_video_or_404(db: Session, video_id: str) -> Video:
    video_id = parse_object_id(video_id, "Invalid video id")
    video = db.get(Video, video_id)
    if video is None:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found")
    return video


def list_videos(
    db: Session,
    page_request: PageRequest,
    *,
    query: str | None = None,
    sort_by: str | None = None,
    sort_type: str | None = None,
    user_id: str | None = None,
) -> PageOut[VideoWithOwnerOut]:
    """Public feed of published videos with owner summaries.

    An empty feed is a normal 200 response, unlike the other listings.
    """
    sort = resolve_sort(sort_by, sort_type, VIDEO_SORT_FIELDS, default_field="createdAt")

    stmt = (
        select(Video, User)
        .outerjoin(User, User.id == Video.owner_id)
        .where(Video.is_published.is_(True))
    )
    if query and query.strip():
        stmt = stmt.where(Video.title.icontains(query.strip(), autoescape=True))
    if user_id:
        stmt = stmt.where(Video.owner_id == parse_object_id(user_id, "Invalid user id"))

    page = paginate(db, stmt, page_request, sort, Video.id)
    return PageOut.from_page(page, lambda row: video_with_owner(row[0], row[1]))


def list_channel_videos(
    db: Session, owner_id: str, page_request: PageRequest
) -> PageOut[VideoOut]:
    """All of one owner's videos (published or not), newest first."""
    stmt = select(Video).where(Video.owner_id == owner_id)
    sort = resolve_sort(None, None, VIDEO_SORT_FIELDS, default_field="createdAt")
    page = require_non_empty(
        paginate(db, stmt, page_request, sort, Video.id), "No videos found for this channel"
    )
    return PageOut.from_page(page, VideoOut.model_validate)


def publish_video(
    db: Session,
    assets: MediaAssetManager,
    viewer_id: str,
    *,
    title: str | None,
    description: str | None,
    video_path: str | None,
    thumbnail_path: str | None,
) -> VideoWithOwnerOut:
    """Upload a video with its thumbnail and create the record.

    Raises:
        ValidationError: Missing title, description or either file.
        UploadError: A storage upload failed or no duration was reported.
    """
    title = (title or "").strip()
    description = (description or "").strip()
    if not title or not description:
        raise ValidationError(message="Title and description are required")
    if not video_path:
        raise ValidationError(ApiErrorCode.E_MISSING_FILE, "Video file is required")
    if not thumbnail_path:
        raise ValidationError(ApiErrorCode.E_MISSING_FILE, "Thumbnail is required")

    with assets.batch() as batch:
        video_asset = batch.commit(video_path, AssetKind.video)
        thumbnail_asset = batch.commit(thumbnail_path, AssetKind.image)
        if not video_asset.duration_seconds:
            raise UploadError(message="Uploaded video has no duration")

        video = Video(
            owner_id=viewer_id,
            title=title,
            description=description,
            video_url=video_asset.url,
            thumbnail_url=thumbnail_asset.url,
            duration_seconds=video_asset.duration_seconds,
        )
        with transaction(db):
            db.add(video)

    logger.info("video_published", video_id=video.id)
    return video_with_owner(video, db.get(User, viewer_id))


def get_video(db: Session, video_id: str, viewer_id: str | None) -> VideoWithOwnerOut:
    """Fetch a video with its owner and count the view.

    Unpublished videos are only visible to their owner.
    """
    video = get_video_or_404(db, video_id)
    if not video.is_published and video.owner_id != viewer_id:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found")

    with transaction(db):
        db.execute(update(Video).where(Video.id == video.id).values(views=Video.views + 1))
    db.refresh(video)

    return video_with_owner(video, db.get(User, video.owner_id))


def update_video(
    db: Session,
    assets: MediaAssetManager,
    viewer_id: str,
    video_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    thumbnail_path: str | None = None,
) -> VideoWithOwnerOut:
    """Update title, description and/or thumbnail of the viewer's video."""
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, message="You can only edit your own videos")

    title = title.strip() if title is not None else None
    description = description.strip() if description is not None else None
    if not title and not description and not thumbnail_path:
        raise ValidationError(message="Provide title, description or thumbnail to update")

    def persist(asset: CommittedAsset | None = None) -> None:
        with transaction(db):
            if title:
                video.title = title
            if description:
                video.description = description
            if asset is not None:
                video.thumbnail_url = asset.url

    # Text edits commit together with the new thumbnail, never ahead of it.
    if thumbnail_path:
        assets.replace(video.thumbnail_url, thumbnail_path, AssetKind.image, persist)
    else:
        persist()

    return video_with_owner(video, db.get(User, video.owner_id))


def delete_video(db: Session, assets: MediaAssetManager, viewer_id: str, video_id: str) -> None:
    """Release the video's assets, then remove the record and everything hanging off it.

    Raises:
        DeletionError: If an asset could not be released; the record is kept.
    """
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, message="You can only delete your own videos")

    failed = assets.release_all([video.video_url, video.thumbnail_url])
    if failed:
        raise DeletionError(message="Failed to delete video assets")

    comment_ids = select(Comment.id).where(Comment.video_id == video.id)
    with transaction(db):
        db.execute(
            delete(Like).where(
                ((Like.target_kind == LikeTargetKind.video) & (Like.target_id == video.id))
                | ((Like.target_kind == LikeTargetKind.comment) & Like.target_id.in_(comment_ids))
            )
        )
        db.execute(delete(Comment).where(Comment.video_id == video.id))
        # Zero rows here means a concurrent delete won; the outcome is the same.
        db.execute(delete(Video).where(Video.id == video.id))

    logger.info("video_deleted", video_id=video.id)


def toggle_publish_status(db: Session, viewer_id: str, video_id: str) -> VideoOut:
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, message="You can only publish your own videos")

    with transaction(db):
        video.is_published = not video.is_published

    return VideoOut.model_validate(video)

"""Like services.

A like is a relation (liked_by, target_kind, target_id); toggling goes
through vidtube.services.relations so repeated or concurrent requests never
produce duplicate rows.
"""

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from vidtube.db.models import Comment, Like, LikeTargetKind, Tweet, User, Video
from vidtube.errors import ApiErrorCode, AuthenticationError, NotFoundError
from vidtube.ids import parse_object_id
from vidtube.schemas.common import PageOut
from vidtube.schemas.likes import LikedVideoOut, LikeToggleOut
from vidtube.services.pagination import PageRequest, SortSpec, paginate, require_non_empty
from vidtube.services.relations import toggle_relation
from vidtube.services.videos import video_with_owner

_TARGETS = {
    LikeTargetKind.video: (Video, ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found"),
    LikeTargetKind.comment: (Comment, ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found"),
    LikeTargetKind.tweet: (Tweet, ApiErrorCode.E_TWEET_NOT_FOUND, "Tweet not found"),
}


def toggle_like(
    db: Session, viewer_id: str | None, kind: LikeTargetKind, target_id: str
) -> LikeToggleOut:
    """Like the target, or remove the viewer's existing like.

    Raises:
        ValidationError: Malformed target id.
        AuthenticationError: No viewer.
        NotFoundError: Target does not exist.
    """
    kind = LikeTargetKind(kind)
    target_id = parse_object_id(target_id, f"Invalid {kind.value} id")
    if not viewer_id:
        raise AuthenticationError()

    model, not_found_code, not_found_message = _TARGETS[kind]
    if db.get(model, target_id) is None:
        raise NotFoundError(not_found_code, not_found_message)

    result = toggle_relation(
        db, Like, liked_by_id=viewer_id, target_kind=kind, target_id=target_id
    )
    return LikeToggleOut(
        target_kind=kind.value,
        target_id=target_id,
        liked=result.created,
        like_id=result.record_id,
    )


def list_liked_videos(
    db: Session, viewer_id: str, page_request: PageRequest
) -> PageOut[LikedVideoOut]:
    """Videos the viewer liked, most recently liked first.

    Raises:
        NotFoundError: If the viewer has not liked any existing video.
    """
    stmt = (
        select(Like, Video, User)
        .join(Video, and_(Like.target_kind == LikeTargetKind.video, Video.id == Like.target_id))
        .outerjoin(User, User.id == Video.owner_id)
        .where(Like.liked_by_id == viewer_id)
    )
    page = require_non_empty(
        paginate(db, stmt, page_request, SortSpec(Like.created_at, descending=True), Like.id),
        "No liked videos found",
    )
    return PageOut.from_page(
        page,
        lambda row: LikedVideoOut(
            liked_at=row[0].created_at, video=video_with_owner(row[1], row[2])
        ),
    )

"""Comment services."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from vidtube.auth.middleware import Viewer
from vidtube.auth.permissions import require_owner
from vidtube.db.models import Comment, Like, LikeTargetKind, User
from vidtube.db.session import transaction
from vidtube.errors import ApiErrorCode, NotFoundError, ValidationError
from vidtube.ids import parse_object_id
from vidtube.schemas.comments import CommentOut
from vidtube.schemas.common import PageOut
from vidtube.schemas.users import UserSummaryOut
from vidtube.services.pagination import PageRequest, SortSpec, paginate, require_non_empty
from vidtube.services.videos import get_video_or_404


def _require_content(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError(message="Content is required")
    return content


def comment_with_owner(comment: Comment, owner: User | None) -> CommentOut:
    out = CommentOut.model_validate(comment)
    out.owner = UserSummaryOut.model_validate(owner) if owner is not None else None
    return out


def get_comment_or_404(db: Session, comment_id: str) -> Comment:
    comment_id = parse_object_id(comment_id, "Invalid comment id")
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found")
    return comment


def list_video_comments(
    db: Session, video_id: str, page_request: PageRequest
) -> PageOut[CommentOut]:
    """Comments on a video with author summaries, newest first.

    Raises:
        NotFoundError: If the video has no comments.
    """
    video_id = parse_object_id(video_id, "Invalid video id")
    stmt = (
        select(Comment, User)
        .outerjoin(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
    )
    page = require_non_empty(
        paginate(db, stmt, page_request, SortSpec(Comment.created_at, descending=True), Comment.id),
        "No comments found for this video",
    )
    return PageOut.from_page(page, lambda row: comment_with_owner(row[0], row[1]))


def add_comment(db: Session, viewer_id: str, video_id: str, content: str | None) -> CommentOut:
    content = _require_content(content)
    video = get_video_or_404(db, video_id)

    comment = Comment(owner_id=viewer_id, video_id=video.id, content=content)
    with transaction(db):
        db.add(comment)

    return comment_with_owner(comment, db.get(User, viewer_id))


def update_comment(db: Session, viewer_id: str, comment_id: str, content: str | None) -> CommentOut:
    """Edit a comment. Only its author may do this."""
    comment = get_comment_or_404(db, comment_id)
    require_owner(viewer_id, comment.owner_id, message="You can only edit your own comments")
    content = _require_content(content)

    with transaction(db):
        comment.content = content

    return comment_with_owner(comment, db.get(User, comment.owner_id))


def delete_comment(db: Session, viewer: Viewer, comment_id: str) -> None:
    """Delete a comment. Admins may delete anyone's comment."""
    comment = get_comment_or_404(db, comment_id)
    require_owner(
        viewer.user_id,
        comment.owner_id,
        allow_override=viewer.is_admin,
        message="You can only delete your own comments",
    )

    with transaction(db):
        db.execute(
            delete(Like).where(
                Like.target_kind == LikeTargetKind.comment, Like.target_id == comment.id
            )
        )
        db.execute(delete(Comment).where(Comment.id == comment.id))

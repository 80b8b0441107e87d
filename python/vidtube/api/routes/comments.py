"""Comment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.api.deps import get_db, get_page_request
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.responses import success_response
from vidtube.schemas.comments import CommentRequest
from vidtube.services import comments as comments_service
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.get("/videos/{video_id}/comments")
def list_video_comments(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    """Comments on a video, newest first. 404 when there are none."""
    result = comments_service.list_video_comments(db, video_id, page_request)
    return success_response(result.model_dump(mode="json"), "Comments fetched successfully")


@router.post("/videos/{video_id}/comments", status_code=201)
def add_comment(
    video_id: str,
    body: CommentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = comments_service.add_comment(db, viewer.user_id, video_id, body.content)
    return success_response(
        result.model_dump(mode="json"), "Comment added successfully", status_code=201
    )


@router.patch("/comments/{comment_id}")
def update_comment(
    comment_id: str,
    body: CommentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = comments_service.update_comment(db, viewer.user_id, comment_id, body.content)
    return success_response(result.model_dump(mode="json"), "Comment updated successfully")


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a comment. Owner, or an admin."""
    comments_service.delete_comment(db, viewer, comment_id)
    return success_response({}, "Comment deleted successfully")

"""Like routes.

Toggle endpoints answer 201 when a like was created and 200 when an
existing like was removed.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from vidtube.api.deps import get_db, get_page_request
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.db.models import LikeTargetKind
from vidtube.responses import success_response
from vidtube.services import likes as likes_service
from vidtube.services.pagination import PageRequest

router = APIRouter()


def _toggle(db: Session, viewer: Viewer, kind: LikeTargetKind, target_id: str, response: Response):
    result = likes_service.toggle_like(db, viewer.user_id, kind, target_id)
    if result.liked:
        response.status_code = 201
        return success_response(result.model_dump(mode="json"), "liked", status_code=201)
    return success_response(result.model_dump(mode="json"), "unliked")


@router.get("/likes/videos")
def list_liked_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    """Videos the viewer liked, most recent like first. 404 when there are none."""
    result = likes_service.list_liked_videos(db, viewer.user_id, page_request)
    return success_response(result.model_dump(mode="json"), "Liked videos fetched successfully")


@router.post("/likes/videos/{video_id}")
def toggle_video_like(
    video_id: str,
    response: Response,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    return _toggle(db, viewer, LikeTargetKind.video, video_id, response)


@router.post("/likes/comments/{comment_id}")
def toggle_comment_like(
    comment_id: str,
    response: Response,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    return _toggle(db, viewer, LikeTargetKind.comment, comment_id, response)


@router.post("/likes/tweets/{tweet_id}")
def toggle_tweet_like(
    tweet_id: str,
    response: Response,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    return _toggle(db, viewer, LikeTargetKind.tweet, tweet_id, response)

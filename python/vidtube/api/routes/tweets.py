"""Tweet routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.api.deps import get_db, get_page_request
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.responses import success_response
from vidtube.schemas.tweets import TweetRequest
from vidtube.services import tweets as tweets_service
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.post("/tweets", status_code=201)
def create_tweet(
    body: TweetRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tweets_service.create_tweet(db, viewer.user_id, body.content)
    return success_response(
        result.model_dump(mode="json"), "Tweet created successfully", status_code=201
    )


@router.get("/users/{user_id}/tweets")
def list_user_tweets(
    user_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    result = tweets_service.list_user_tweets(db, user_id, page_request)
    return success_response(result.model_dump(mode="json"), "Tweets fetched successfully")


@router.patch("/tweets/{tweet_id}")
def update_tweet(
    tweet_id: str,
    body: TweetRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tweets_service.update_tweet(db, viewer.user_id, tweet_id, body.content)
    return success_response(result.model_dump(mode="json"), "Tweet updated successfully")


@router.delete("/tweets/{tweet_id}")
def delete_tweet(
    tweet_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    tweets_service.delete_tweet(db, viewer.user_id, tweet_id)
    return success_response({}, "Tweet deleted successfully")

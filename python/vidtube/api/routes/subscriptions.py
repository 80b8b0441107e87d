"""Subscription routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from vidtube.api.deps import get_db, get_page_request
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.responses import success_response
from vidtube.services import subscriptions as subscriptions_service
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.post("/subscriptions/c/{channel_name}")
def toggle_subscription(
    channel_name: str,
    response: Response,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Subscribe to a channel, or unsubscribe if already subscribed."""
    result = subscriptions_service.toggle_subscription(db, viewer.user_id, channel_name)
    if result.subscribed:
        response.status_code = 201
        return success_response(
            result.model_dump(mode="json"), "Subscribed successfully", status_code=201
        )
    return success_response(result.model_dump(mode="json"), "Unsubscribed successfully")


@router.get("/subscriptions/c/{channel_name}")
def list_channel_subscribers(
    channel_name: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    result = subscriptions_service.list_channel_subscribers(db, channel_name, page_request)
    return success_response(result.model_dump(mode="json"), "Subscribers fetched successfully")


@router.get("/subscriptions/u/{subscriber_name}")
def list_subscribed_channels(
    subscriber_name: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    result = subscriptions_service.list_subscribed_channels(db, subscriber_name, page_request)
    return success_response(
        result.model_dump(mode="json"), "Subscribed channels fetched successfully"
    )

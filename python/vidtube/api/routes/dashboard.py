"""Channel dashboard routes for the viewer's own channel."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.api.deps import get_db, get_page_request
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.responses import success_response
from vidtube.services import dashboard as dashboard_service
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.get("/dashboard/stats")
def get_channel_stats(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = dashboard_service.get_channel_stats(db, viewer.user_id)
    return success_response(result.model_dump(mode="json"), "Channel stats fetched successfully")


@router.get("/dashboard/videos")
def list_channel_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    result = dashboard_service.list_dashboard_videos(db, viewer.user_id, page_request)
    return success_response(result.model_dump(mode="json"), "Channel videos fetched successfully")

"""Video routes.

Routes are transport-only:
- Extract the viewer from request.state
- Stage multipart uploads to temp files
- Call exactly one service function
- Return success_response(...) or raise ApiError
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from vidtube.api.deps import get_asset_manager, get_db, get_page_request
from vidtube.api.uploads import IMAGE_MIME_TYPES, VIDEO_MIME_TYPES, staged_uploads
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.config import Settings, get_settings
from vidtube.responses import success_response
from vidtube.services import videos as videos_service
from vidtube.services.assets import MediaAssetManager
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.get("/videos")
def list_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
    query: Annotated[str | None, Query(description="Case-insensitive title match")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_type: Annotated[str | None, Query(alias="sortType")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> dict:
    """List published videos. An empty feed is returned as an empty page."""
    result = videos_service.list_videos(
        db, page_request, query=query, sort_by=sort_by, sort_type=sort_type, user_id=user_id
    )
    return success_response(result.model_dump(mode="json"), "Videos fetched successfully")


@router.post("/videos", status_code=201)
def publish_video(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    video_file: Annotated[UploadFile | None, File()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Upload a video file and thumbnail and publish the video."""
    with staged_uploads(settings) as staged:
        video_path = staged.stage(video_file, VIDEO_MIME_TYPES, "video")
        thumbnail_path = staged.stage(thumbnail, IMAGE_MIME_TYPES, "thumbnail")
        result = videos_service.publish_video(
            db,
            assets,
            viewer.user_id,
            title=title,
            description=description,
            video_path=video_path,
            thumbnail_path=thumbnail_path,
        )
    return success_response(
        result.model_dump(mode="json"), "Video published successfully", status_code=201
    )


@router.get("/videos/{video_id}")
def get_video(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.get_video(db, video_id, viewer.user_id)
    return success_response(result.model_dump(mode="json"), "Video fetched successfully")


@router.patch("/videos/{video_id}")
def update_video(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Update title, description or thumbnail. Owner only."""
    with staged_uploads(settings) as staged:
        thumbnail_path = staged.stage(thumbnail, IMAGE_MIME_TYPES, "thumbnail")
        result = videos_service.update_video(
            db,
            assets,
            viewer.user_id,
            video_id,
            title=title,
            description=description,
            thumbnail_path=thumbnail_path,
        )
    return success_response(result.model_dump(mode="json"), "Video updated successfully")


@router.delete("/videos/{video_id}")
def delete_video(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
) -> dict:
    """Delete a video and its remote assets. Owner only."""
    videos_service.delete_video(db, assets, viewer.user_id, video_id)
    return success_response({}, "Video deleted successfully")


@router.patch("/videos/{video_id}/publish")
def toggle_publish_status(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.toggle_publish_status(db, viewer.user_id, video_id)
    return success_response(result.model_dump(mode="json"), "Publish status toggled successfully")

"""Playlist routes.

IMPORTANT: The static route /playlists/user/{user_id} must be registered
BEFORE /playlists/{playlist_id} to prevent id capture.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from vidtube.api.deps import get_asset_manager, get_db, get_page_request
from vidtube.api.uploads import IMAGE_MIME_TYPES, staged_uploads
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.config import Settings, get_settings
from vidtube.responses import success_response
from vidtube.services import playlists as playlists_service
from vidtube.services.assets import MediaAssetManager
from vidtube.services.pagination import PageRequest

router = APIRouter()


@router.get("/playlists/user/{user_id}")
def list_user_playlists(
    user_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
) -> dict:
    result = playlists_service.list_user_playlists(db, user_id, page_request)
    return success_response(result.model_dump(mode="json"), "Playlists fetched successfully")


@router.post("/playlists", status_code=201)
def create_playlist(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> dict:
    with staged_uploads(settings) as staged:
        thumbnail_path = staged.stage(thumbnail, IMAGE_MIME_TYPES, "thumbnail")
        result = playlists_service.create_playlist(
            db,
            assets,
            viewer.user_id,
            name=name,
            description=description,
            thumbnail_path=thumbnail_path,
        )
    return success_response(
        result.model_dump(mode="json"), "Playlist created successfully", status_code=201
    )


@router.get("/playlists/{playlist_id}")
def get_playlist(
    playlist_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.get_playlist(db, playlist_id)
    return success_response(result.model_dump(mode="json"), "Playlist fetched successfully")


@router.patch("/playlists/{playlist_id}")
def update_playlist(
    playlist_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Update name, description or thumbnail. Owner only."""
    with staged_uploads(settings) as staged:
        thumbnail_path = staged.stage(thumbnail, IMAGE_MIME_TYPES, "thumbnail")
        result = playlists_service.update_playlist(
            db,
            assets,
            viewer.user_id,
            playlist_id,
            name=name,
            description=description,
            thumbnail_path=thumbnail_path,
        )
    return success_response(result.model_dump(mode="json"), "Playlist updated successfully")


@router.delete("/playlists/{playlist_id}")
def delete_playlist(
    playlist_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
) -> dict:
    playlists_service.delete_playlist(db, assets, viewer.user_id, playlist_id)
    return success_response({}, "Playlist deleted successfully")


@router.patch("/playlists/{playlist_id}/videos/{video_id}")
def modify_playlist_videos(
    playlist_id: str,
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    action: Annotated[str, Query(description="'add' or 'remove'")],
) -> dict:
    """Add a video to, or remove it from, a playlist. Owner only."""
    result = playlists_service.modify_playlist_videos(
        db, viewer.user_id, playlist_id, video_id, action  # type: ignore[arg-type]
    )
    message = "Video added to playlist" if action == "add" else "Video removed from playlist"
    return success_response(result.model_dump(mode="json"), message)

"""Current user and channel profile routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from vidtube.api.deps import get_asset_manager, get_db
from vidtube.api.uploads import IMAGE_MIME_TYPES, staged_uploads
from vidtube.auth.middleware import Viewer, get_viewer
from vidtube.config import Settings, get_settings
from vidtube.responses import success_response
from vidtube.services import users as users_service
from vidtube.services.assets import MediaAssetManager

router = APIRouter()


@router.get("/me")
def get_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the authenticated viewer's profile."""
    result = users_service.get_me(db, viewer.user_id)
    return success_response(result.model_dump(mode="json"), "Current user fetched successfully")


@router.patch("/me")
def update_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[MediaAssetManager, Depends(get_asset_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    full_name: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Update full name and/or replace avatar and cover image."""
    with staged_uploads(settings) as staged:
        avatar_path = staged.stage(avatar, IMAGE_MIME_TYPES, "avatar")
        cover_path = staged.stage(cover_image, IMAGE_MIME_TYPES, "cover image")
        result = users_service.update_me(
            db,
            assets,
            viewer.user_id,
            full_name=full_name,
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )
    return success_response(result.model_dump(mode="json"), "Profile updated successfully")


@router.get("/users/c/{username}")
def get_channel_profile(
    username: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Public channel page with subscriber counts."""
    result = users_service.get_channel_profile(db, username, viewer.user_id)
    return success_response(result.model_dump(mode="json"), "Channel fetched successfully")

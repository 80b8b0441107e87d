"""Video schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from vidtube.schemas.users import UserSummaryOut


class VideoOut(BaseModel):
    """Response schema for a video."""

    id: str
    owner_id: str
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration_seconds: float
    views: int
    is_published: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VideoWithOwnerOut(VideoOut):
    """Video enriched with its owner's summary."""

    owner: UserSummaryOut | None = None

"""Playlist schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from vidtube.schemas.videos import VideoOut

PlaylistAction = Literal["add", "remove"]


class PlaylistOut(BaseModel):
    """Response schema for a playlist."""

    id: str
    owner_id: str
    name: str
    description: str
    thumbnail_url: str | None = None
    video_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlaylistDetailOut(PlaylistOut):
    """Playlist with its videos in insertion order."""

    videos: list[VideoOut]

"""Like schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from vidtube.schemas.videos import VideoWithOwnerOut


class LikeToggleOut(BaseModel):
    """Result of toggling a like."""

    target_kind: Literal["video", "comment", "tweet"]
    target_id: str
    liked: bool
    like_id: str | None = None


class LikedVideoOut(BaseModel):
    """A video the viewer liked."""

    liked_at: datetime
    video: VideoWithOwnerOut

"""Channel dashboard schemas."""

from pydantic import BaseModel


class ChannelStatsOut(BaseModel):
    """Aggregate numbers for the viewer's own channel."""

    total_videos: int
    total_views: int
    total_subscribers: int
    total_likes: int

"""Channel dashboard services for the viewer's own channel."""

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from vidtube.db.models import Like, LikeTargetKind, Subscription, Video
from vidtube.schemas.common import PageOut
from vidtube.schemas.dashboard import ChannelStatsOut
from vidtube.schemas.videos import VideoOut
from vidtube.services.pagination import PageRequest
from vidtube.services.videos import list_channel_videos


def get_channel_stats(db: Session, viewer_id: str) -> ChannelStatsOut:
    total_videos, total_views = db.execute(
        select(func.count(Video.id), func.coalesce(func.sum(Video.views), 0)).where(
            Video.owner_id == viewer_id
        )
    ).one()
    total_subscribers = db.execute(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == viewer_id)
    ).scalar_one()
    total_likes = db.execute(
        select(func.count(Like.id))
        .join(Video, and_(Like.target_kind == LikeTargetKind.video, Video.id == Like.target_id))
        .where(Video.owner_id == viewer_id)
    ).scalar_one()

    return ChannelStatsOut(
        total_videos=total_videos,
        total_views=int(total_views),
        total_subscribers=total_subscribers,
        total_likes=total_likes,
    )


def list_dashboard_videos(
    db: Session, viewer_id: str, page_request: PageRequest
) -> PageOut[VideoOut]:
    """All of the viewer's videos, including unpublished ones."""
    return list_channel_videos(db, viewer_id, page_request)

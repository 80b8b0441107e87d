"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from vidtube.schemas.comments import CommentOut, CommentRequest
from vidtube.schemas.common import PageOut
from vidtube.schemas.dashboard import ChannelStatsOut
from vidtube.schemas.likes import LikedVideoOut, LikeToggleOut
from vidtube.schemas.playlists import PlaylistAction, PlaylistDetailOut, PlaylistOut
from vidtube.schemas.subscriptions import (
    SubscribedChannelOut,
    SubscriberOut,
    SubscriptionToggleOut,
)
from vidtube.schemas.tweets import TweetOut, TweetRequest
from vidtube.schemas.users import ChannelProfileOut, UserOut, UserSummaryOut
from vidtube.schemas.videos import VideoOut, VideoWithOwnerOut

__all__ = [
    "PageOut",
    "UserSummaryOut",
    "UserOut",
    "ChannelProfileOut",
    "VideoOut",
    "VideoWithOwnerOut",
    "CommentRequest",
    "CommentOut",
    "TweetRequest",
    "TweetOut",
    "LikeToggleOut",
    "LikedVideoOut",
    "SubscriptionToggleOut",
    "SubscriberOut",
    "SubscribedChannelOut",
    "PlaylistAction",
    "PlaylistOut",
    "PlaylistDetailOut",
    "ChannelStatsOut",
]

"""Database module for Vidtube.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from vidtube.db.engine import create_db_engine, get_engine
from vidtube.db.models import (
    Base,
    Comment,
    Like,
    LikeTargetKind,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
)
from vidtube.db.session import get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    # Base
    "Base",
    # Enums
    "LikeTargetKind",
    # Models
    "User",
    "Video",
    "Comment",
    "Tweet",
    "Playlist",
    "PlaylistVideo",
    "Like",
    "Subscription",
]

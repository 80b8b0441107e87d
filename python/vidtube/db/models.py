"""SQLAlchemy ORM models for Vidtube.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Ids are 24-character hex strings generated application-side (see vidtube.ids)
so the same models run against PostgreSQL in production and SQLite in tests.

Relation tables (likes, subscriptions) carry unique constraints over their
(subject, target, kind) tuple. Those constraints are what make the toggle
operation race-free; see vidtube.services.relations.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from vidtube.ids import OBJECT_ID_LENGTH, new_object_id


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _id_column(**kwargs) -> Mapped[str]:
    return mapped_column(
        String(OBJECT_ID_LENGTH), primary_key=True, default=new_object_id, **kwargs
    )


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


def _updated_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


# =============================================================================
# Enums
# =============================================================================


class LikeTargetKind(str, PyEnum):
    """Entities that can be liked."""

    video = "video"
    comment = "comment"
    tweet = "tweet"


# =============================================================================
# Models
# =============================================================================


class User(Base):
    """User account model.

    The user ID matches the identity provider's subject claim. A user's
    username doubles as their channel name.
    """

    __tablename__ = "users"

    id: Mapped[str] = _id_column()
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    videos: Mapped[list["Video"]] = relationship("Video", back_populates="owner")


class Video(Base):
    """Published video with its two remote assets (file and thumbnail)."""

    __tablename__ = "videos"

    id: Mapped[str] = _id_column()
    owner_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    video_url: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(Text, nullable=False)
    duration_seconds: Mapped[float] = mapped_column(Float, nullable=False)
    views: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    owner: Mapped["User"] = relationship("User", back_populates="videos")

    __table_args__ = (
        CheckConstraint("duration_seconds > 0", name="ck_videos_duration_positive"),
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        Index("ix_videos_owner_id", "owner_id"),
        Index("ix_videos_created_at", "created_at"),
    )


class Comment(Base):
    """Comment on a video. Removed with its video."""

    __tablename__ = "comments"

    id: Mapped[str] = _id_column()
    owner_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    owner: Mapped["User"] = relationship("User")

    __table_args__ = (Index("ix_comments_video_id_created_at", "video_id", "created_at"),)


class Tweet(Base):
    """Short text post owned by a user."""

    __tablename__ = "tweets"

    id: Mapped[str] = _id_column()
    owner_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (Index("ix_tweets_owner_id_created_at", "owner_id", "created_at"),)


class Playlist(Base):
    """Named, ordered collection of videos owned by a user."""

    __tablename__ = "playlists"

    id: Mapped[str] = _id_column()
    owner_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    entries: Mapped[list["PlaylistVideo"]] = relationship(
        "PlaylistVideo",
        cascade="all, delete-orphan",
        order_by="PlaylistVideo.added_at",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_playlists_owner_name"),)


class PlaylistVideo(Base):
    """Membership of a video in a playlist, ordered by insertion time."""

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("playlists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    video_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("videos.id", ondelete="CASCADE"),
        primary_key=True,
    )
    added_at: Mapped[datetime] = _created_at()

    video: Mapped["Video"] = relationship("Video")


class Like(Base):
    """A user's like of a video, comment or tweet.

    At most one row exists per (liked_by_id, target_kind, target_id).
    target_id is polymorphic and carries no foreign key; rows are removed by
    the service that deletes the target.
    """

    __tablename__ = "likes"

    id: Mapped[str] = _id_column()
    liked_by_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_kind: Mapped[LikeTargetKind] = mapped_column(
        Enum(LikeTargetKind, name="like_target_kind"), nullable=False
    )
    target_id: Mapped[str] = mapped_column(String(OBJECT_ID_LENGTH), nullable=False)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        UniqueConstraint(
            "liked_by_id", "target_kind", "target_id", name="uq_likes_liked_by_target"
        ),
        Index("ix_likes_target", "target_kind", "target_id"),
    )


class Subscription(Base):
    """A subscriber following a channel (another user).

    At most one row exists per (subscriber_id, channel_id).
    """

    __tablename__ = "subscriptions"

    id: Mapped[str] = _id_column()
    subscriber_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
        Index("ix_subscriptions_channel_id", "channel_id"),
    )

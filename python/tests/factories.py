"""Test data factories.

Centralizes helper functions that create database rows for tests.
Each factory knows the full schema requirements for its table,
so individual tests don't need to track NOT NULL constraints.
Every factory commits, so rows are visible to the app under test.
"""

from sqlalchemy.orm import Session

from vidtube.db.models import (
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
from vidtube.ids import new_object_id


def _save(session: Session, row):
    session.add(row)
    session.commit()
    return row


def create_test_user(
    session: Session, username: str | None = None, *, is_admin: bool = False, **fields
) -> User:
    user_id = fields.pop("id", None) or new_object_id()
    return _save(
        session,
        User(id=user_id, username=username or f"user{user_id[-8:]}", is_admin=is_admin, **fields),
    )


def create_test_video(
    session: Session,
    owner_id: str,
    title: str = "Test video",
    *,
    views: int = 0,
    is_published: bool = True,
    video_url: str | None = None,
    thumbnail_url: str | None = None,
    **fields,
) -> Video:
    marker = new_object_id()
    return _save(
        session,
        Video(
            owner_id=owner_id,
            title=title,
            description=fields.pop("description", "A test video"),
            video_url=video_url or f"https://fake-storage.test/video/upload/v1/vid{marker}.mp4",
            thumbnail_url=thumbnail_url
            or f"https://fake-storage.test/image/upload/v1/thumb{marker}.png",
            duration_seconds=fields.pop("duration_seconds", 12.5),
            views=views,
            is_published=is_published,
            **fields,
        ),
    )


def create_test_comment(
    session: Session, owner_id: str, video_id: str, content: str = "Nice video", **fields
) -> Comment:
    return _save(session, Comment(owner_id=owner_id, video_id=video_id, content=content, **fields))


def create_test_tweet(session: Session, owner_id: str, content: str = "Hello", **fields) -> Tweet:
    return _save(session, Tweet(owner_id=owner_id, content=content, **fields))


def create_test_playlist(
    session: Session,
    owner_id: str,
    name: str = "Favourites",
    *,
    thumbnail_url: str | None = None,
    video_ids: tuple[str, ...] = (),
) -> Playlist:
    playlist = _save(
        session,
        Playlist(owner_id=owner_id, name=name, description="", thumbnail_url=thumbnail_url),
    )
    for video_id in video_ids:
        _save(session, PlaylistVideo(playlist_id=playlist.id, video_id=video_id))
    return playlist


def create_test_like(
    session: Session, liked_by_id: str, target_kind: LikeTargetKind, target_id: str
) -> Like:
    return _save(
        session, Like(liked_by_id=liked_by_id, target_kind=target_kind, target_id=target_id)
    )


def create_test_subscription(session: Session, subscriber_id: str, channel_id: str) -> Subscription:
    return _save(session, Subscription(subscriber_id=subscriber_id, channel_id=channel_id))

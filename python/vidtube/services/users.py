"""User profile and channel services."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidtube.db.models import Subscription, User
from vidtube.db.session import transaction
from vidtube.errors import ApiErrorCode, NotFoundError, ValidationError
from vidtube.schemas.users import ChannelProfileOut, UserOut
from vidtube.services.assets import AssetKind, MediaAssetManager


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    return user


def find_user_by_username(db: Session, username: str) -> User | None:
    """Case-insensitive exact username lookup."""
    name = (username or "").strip().lower()
    if not name:
        return None
    return db.execute(select(User).where(func.lower(User.username) == name)).scalar_one_or_none()


def get_me(db: Session, viewer_id: str) -> UserOut:
    return UserOut.model_validate(get_user(db, viewer_id))


def update_me(
    db: Session,
    assets: MediaAssetManager,
    viewer_id: str,
    *,
    full_name: str | None = None,
    avatar_path: str | None = None,
    cover_image_path: str | None = None,
) -> UserOut:
    """Update the viewer's profile.

    New images are uploaded first; the name and image references then commit
    in one transaction, and only after that are the previous images released.
    A failed upload leaves the stored profile untouched.

    Raises:
        ValidationError: If nothing to update was provided.
    """
    if full_name is not None:
        full_name = full_name.strip()
    if not full_name and not avatar_path and not cover_image_path:
        raise ValidationError(message="Provide full_name, avatar or cover_image to update")

    user = get_user(db, viewer_id)
    replaced: list[str | None] = []

    with assets.batch() as batch:
        avatar = batch.commit(avatar_path, AssetKind.image) if avatar_path else None
        cover = batch.commit(cover_image_path, AssetKind.image) if cover_image_path else None
        with transaction(db):
            if full_name:
                user.full_name = full_name
            if avatar is not None:
                replaced.append(user.avatar)
                user.avatar = avatar.url
            if cover is not None:
                replaced.append(user.cover_image)
                user.cover_image = cover.url

    for url in replaced:
        assets.release_quietly(url)

    return UserOut.model_validate(user)


def get_channel_profile(db: Session, username: str, viewer_id: str | None) -> ChannelProfileOut:
    """Public channel page for username with subscription counts."""
    if not (username or "").strip():
        raise ValidationError(message="Username is required")

    channel = find_user_by_username(db, username)
    if channel is None:
        raise NotFoundError(ApiErrorCode.E_CHANNEL_NOT_FOUND, "Channel does not exist")

    subscribers_count = db.execute(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == channel.id)
    ).scalar_one()
    subscribed_to_count = db.execute(
        select(func.count())
        .select_from(Subscription)
        .where(Subscription.subscriber_id == channel.id)
    ).scalar_one()
    is_subscribed = False
    if viewer_id:
        is_subscribed = (
            db.execute(
                select(Subscription.id).where(
                    Subscription.channel_id == channel.id, Subscription.subscriber_id == viewer_id
                )
            ).first()
            is not None
        )

    return ChannelProfileOut(
        id=channel.id,
        username=channel.username,
        full_name=channel.full_name,
        avatar=channel.avatar,
        cover_image=channel.cover_image,
        subscribers_count=subscribers_count,
        subscribed_to_count=subscribed_to_count,
        is_subscribed=is_subscribed,
    )

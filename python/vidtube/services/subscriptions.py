"""Subscription services.

Channels are users; a channel name is the owning user's username and is
matched case-insensitively.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidtube.db.models import Subscription, User
from vidtube.errors import ApiErrorCode, AuthenticationError, NotFoundError, ValidationError
from vidtube.schemas.common import PageOut
from vidtube.schemas.subscriptions import (
    SubscribedChannelOut,
    SubscriberOut,
    SubscriptionToggleOut,
)
from vidtube.schemas.users import UserSummaryOut
from vidtube.services.pagination import PageRequest, SortSpec, paginate, require_non_empty
from vidtube.services.relations import toggle_relation
from vidtube.services.users import find_user_by_username


def resolve_channel(db: Session, channel_name: str | None) -> User:
    """Resolve a channel name to its owning user.

    Raises:
        ValidationError: Blank name.
        NotFoundError: No user has that name.
    """
    if not (channel_name or "").strip():
        raise ValidationError(message="Channel name is required")
    channel = find_user_by_username(db, channel_name)
    if channel is None:
        raise NotFoundError(ApiErrorCode.E_CHANNEL_NOT_FOUND, "Channel not found")
    return channel


def toggle_subscription(
    db: Session, viewer_id: str | None, channel_name: str
) -> SubscriptionToggleOut:
    """Subscribe the viewer to the channel, or unsubscribe if already subscribed."""
    if not viewer_id:
        raise AuthenticationError()
    channel = resolve_channel(db, channel_name)

    result = toggle_relation(db, Subscription, subscriber_id=viewer_id, channel_id=channel.id)
    return SubscriptionToggleOut(
        channel_id=channel.id,
        subscribed=result.created,
        subscription_id=result.record_id,
    )


def list_channel_subscribers(
    db: Session, channel_name: str, page_request: PageRequest
) -> PageOut[SubscriberOut]:
    """Subscribers of a channel with their profiles, newest first."""
    channel = resolve_channel(db, channel_name)
    stmt = (
        select(Subscription, User)
        .join(User, User.id == Subscription.subscriber_id)
        .where(Subscription.channel_id == channel.id)
    )
    page = require_non_empty(
        paginate(
            db,
            stmt,
            page_request,
            SortSpec(Subscription.created_at, descending=True),
            Subscription.id,
        ),
        "No subscribers found for this channel",
    )
    return PageOut.from_page(
        page,
        lambda row: SubscriberOut(
            subscribed_at=row[0].created_at, subscriber=UserSummaryOut.model_validate(row[1])
        ),
    )


def list_subscribed_channels(
    db: Session, subscriber_name: str, page_request: PageRequest
) -> PageOut[SubscribedChannelOut]:
    """Channels a user is subscribed to, newest subscription first."""
    subscriber = resolve_channel(db, subscriber_name)
    stmt = (
        select(Subscription, User)
        .join(User, User.id == Subscription.channel_id)
        .where(Subscription.subscriber_id == subscriber.id)
    )
    page = require_non_empty(
        paginate(
            db,
            stmt,
            page_request,
            SortSpec(Subscription.created_at, descending=True),
            Subscription.id,
        ),
        "No subscribed channels found",
    )
    return PageOut.from_page(
        page,
        lambda row: SubscribedChannelOut(
            subscribed_at=row[0].created_at, channel=UserSummaryOut.model_validate(row[1])
        ),
    )

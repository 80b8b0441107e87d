"""Subscription schemas."""

from datetime import datetime

from pydantic import BaseModel

from vidtube.schemas.users import UserSummaryOut


class SubscriptionToggleOut(BaseModel):
    """Result of toggling a subscription."""

    channel_id: str
    subscribed: bool
    subscription_id: str | None = None


class SubscriberOut(BaseModel):
    """A user subscribed to a channel."""

    subscribed_at: datetime
    subscriber: UserSummaryOut


class SubscribedChannelOut(BaseModel):
    """A channel a user is subscribed to."""

    subscribed_at: datetime
    channel: UserSummaryOut

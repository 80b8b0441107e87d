"""User and channel schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserSummaryOut(BaseModel):
    """Public author/owner summary embedded in other payloads."""

    id: str
    username: str
    full_name: str | None = None
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserOut(UserSummaryOut):
    """The viewer's own profile."""

    email: str | None = None
    cover_image: str | None = None
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime


class ChannelProfileOut(UserSummaryOut):
    """A user's public channel page with subscription counts."""

    cover_image: str | None = None
    subscribers_count: int
    subscribed_to_count: int
    is_subscribed: bool

"""Tweet schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TweetRequest(BaseModel):
    """Request body for creating or editing a tweet."""

    content: str | None = None


class TweetOut(BaseModel):
    """Response schema for a tweet."""

    id: str
    owner_id: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

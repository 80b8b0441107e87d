"""Comment schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from vidtube.schemas.users import UserSummaryOut


class CommentRequest(BaseModel):
    """Request body for adding or editing a comment."""

    content: str | None = None


class CommentOut(BaseModel):
    """Response schema for a comment with its author."""

    id: str
    video_id: str
    owner_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    owner: UserSummaryOut | None = None

    model_config = ConfigDict(from_attributes=True)

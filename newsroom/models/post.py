"""
Post data models and validation for the Newsroom backend.
"""

from typing import List, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator


class Post(BaseModel):
    """Model for a persisted post as returned by the listing endpoint."""

    id: int
    title: str
    images: List[str] = Field(default_factory=list)
    content: str
    posttime: datetime


class PostUpsert(BaseModel):
    """Model for the authenticated post write payload.

    A negative ``id`` means the post has not been stored yet and a new row is
    created; any other id updates the matching row.
    """

    id: int = -1
    title: str
    images: List[str] = Field(default_factory=list)
    content: str = ""
    posttime: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Post title cannot be empty")
        return v.strip()

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        if v is None:
            return ""
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v):
        return [name.strip() for name in v if name and name.strip()]

    def resolved_posttime(self) -> datetime:
        """Return the post time, defaulting to now for posts without one."""
        if self.posttime is None:
            return datetime.now(timezone.utc)
        if self.posttime.tzinfo is None:
            return self.posttime.replace(tzinfo=timezone.utc)
        return self.posttime


class PostPage(BaseModel):
    """Model for pagination parameters of the post listing."""

    offset: int = 0
    limit: int = 3

"""Pydantic schemas for post endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.utils.formatting import truncate_text


class PostCreateRequest(BaseModel):
    title: str = Field(..., description="Post title (at least 3 characters).")
    content: str = Field("", description="Post body; HTML is escaped on save.")


class PostResponse(BaseModel):
    """Post as stored (title and content are HTML-escaped)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author_id: int
    published: bool
    created_at: datetime
    published_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def excerpt(self) -> str:
        """First 100 characters of the content."""
        return truncate_text(self.content, 100)

"""Post domain record held by the in-memory post store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.utils.formatting import truncate_text


@dataclass
class Post:
    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime
    published: bool = False
    published_at: datetime | None = None

    def is_published(self) -> bool:
        return self.published

    def publish(self, now: datetime) -> None:
        self.published = True
        self.published_at = now

    def get_excerpt(self, length: int = 100) -> str:
        return truncate_text(self.content, length)

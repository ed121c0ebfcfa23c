"""In-memory post store.

Titles and content are HTML-escaped on write. Posts start unpublished and
must carry enough content before they can be published.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Literal

from app.core.errors import NotFoundAppError, ValidationAppError
from app.models.post import Post
from app.utils.formatting import utc_now
from app.utils.validation import sanitize_input

logger = logging.getLogger(__name__)

DEFAULT_MIN_TITLE_CHARS = 3
DEFAULT_MIN_PUBLISH_CHARS = 10

SortBy = Literal["date"]


class PostStore:
    """Thread-safe in-memory post repository with sequential ids.

    Returned posts are copies; mutate them through the store only.
    """

    def __init__(
        self,
        *,
        min_title_chars: int = DEFAULT_MIN_TITLE_CHARS,
        min_publish_chars: int = DEFAULT_MIN_PUBLISH_CHARS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._min_title_chars = min_title_chars
        self._min_publish_chars = min_publish_chars
        self._clock = clock
        self._lock = threading.RLock()
        self._posts: dict[int, Post] = {}
        self._ids = itertools.count(1)

    def create_post(self, title: str, content: str, author_id: int) -> Post:
        """Create an unpublished post.

        Raises:
            ValidationAppError: If the title is missing or too short.
        """
        if not title or len(title) < self._min_title_chars:
            raise ValidationAppError(
                code="invalid_title",
                message=f"Title must be at least {self._min_title_chars} characters",
                details={
                    "field": "title",
                    "min_value": self._min_title_chars,
                    "actual_value": len(title or ""),
                },
            )

        with self._lock:
            post = Post(
                id=next(self._ids),
                title=sanitize_input(title),
                content=sanitize_input(content),
                author_id=author_id,
                created_at=self._clock(),
            )
            self._posts[post.id] = post

        logger.info("post.created", extra={"post_id": post.id, "author_id": author_id})
        return replace(post)

    def get_post_by_id(self, post_id: int) -> Post | None:
        with self._lock:
            post = self._posts.get(post_id)
            return replace(post) if post else None

    def publish_post(self, post_id: int) -> Post:
        """Mark a post as published.

        Publishing an already published post keeps its original timestamp.

        Raises:
            NotFoundAppError: If the post does not exist.
            ValidationAppError: If the content is too short to publish.
        """
        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                raise NotFoundAppError(
                    code="post_not_found",
                    message="Post not found",
                    details={"entity": "post", "entity_id": post_id},
                )

            if len(post.content) < self._min_publish_chars:
                raise ValidationAppError(
                    code="content_too_short",
                    message=(
                        f"Post content must be at least {self._min_publish_chars} "
                        "characters to publish"
                    ),
                    details={
                        "field": "content",
                        "min_value": self._min_publish_chars,
                        "actual_value": len(post.content),
                    },
                )

            if not post.is_published():
                post.publish(self._clock())

        logger.info("post.published", extra={"post_id": post_id})
        return replace(post)

    def list_posts(
        self,
        *,
        author_id: int | None = None,
        published: bool | None = None,
        sort_by: SortBy | None = None,
        limit: int | None = None,
    ) -> list[Post]:
        """List posts with optional filters.

        Args:
            author_id: Only posts by this author.
            published: Only published (True) or draft (False) posts.
            sort_by: ``"date"`` orders newest first; default is creation order.
            limit: Maximum number of posts to return.
        """
        with self._lock:
            posts = [replace(p) for p in sorted(self._posts.values(), key=lambda p: p.id)]

        if author_id is not None:
            posts = [p for p in posts if p.author_id == author_id]
        if published is not None:
            posts = [p for p in posts if p.published == published]
        if sort_by == "date":
            posts.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        if limit is not None:
            posts = posts[:limit]
        return posts

    def delete_posts_by_author(self, author_id: int) -> int:
        """Remove every post of an author; returns how many were removed."""
        with self._lock:
            ids = [pid for pid, p in self._posts.items() if p.author_id == author_id]
            for post_id in ids:
                del self._posts[post_id]
        return len(ids)

    def clear(self) -> None:
        with self._lock:
            self._posts.clear()
            self._ids = itertools.count(1)

"""Unit tests for the in-memory post store."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import NotFoundAppError, ValidationAppError
from app.stores.posts import PostStore

LONG_CONTENT = "This post has plenty of content."


class SteppingClock:
    """Returns a timestamp one minute later on every call."""

    def __init__(self) -> None:
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def posts() -> PostStore:
    return PostStore(min_title_chars=3, min_publish_chars=10, clock=SteppingClock())


def test_create_post_starts_unpublished(posts: PostStore) -> None:
    post = posts.create_post("Hello", LONG_CONTENT, author_id=1)

    assert post.id == 1
    assert post.published is False
    assert post.published_at is None
    assert post.author_id == 1


@pytest.mark.parametrize("title", ["", "ab"])
def test_create_post_rejects_short_title(posts: PostStore, title: str) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        posts.create_post(title, LONG_CONTENT, author_id=1)

    assert exc_info.value.code == "invalid_title"
    assert exc_info.value.details["min_value"] == 3


def test_title_and_content_are_escaped(posts: PostStore) -> None:
    post = posts.create_post("<b>Bold</b>", '<script>alert("x")</script>', author_id=1)

    assert post.title == "&lt;b&gt;Bold&lt;&#x2F;b&gt;"
    assert "<script>" not in post.content
    assert "&quot;x&quot;" in post.content


def test_returned_posts_are_copies(posts: PostStore) -> None:
    post = posts.create_post("Hello", LONG_CONTENT, author_id=1)
    post.title = "mutated"

    assert posts.get_post_by_id(post.id).title == "Hello"


def test_publish_post(posts: PostStore) -> None:
    post = posts.create_post("Hello", LONG_CONTENT, author_id=1)

    published = posts.publish_post(post.id)

    assert published.published is True
    assert published.published_at is not None


def test_publish_keeps_first_timestamp(posts: PostStore) -> None:
    post = posts.create_post("Hello", LONG_CONTENT, author_id=1)

    first = posts.publish_post(post.id)
    second = posts.publish_post(post.id)

    assert second.published_at == first.published_at


def test_publish_rejects_short_content(posts: PostStore) -> None:
    post = posts.create_post("Hello", "too short", author_id=1)

    with pytest.raises(ValidationAppError) as exc_info:
        posts.publish_post(post.id)

    assert exc_info.value.code == "content_too_short"
    assert exc_info.value.details["actual_value"] == 9
    assert posts.get_post_by_id(post.id).published is False


def test_publish_missing_post(posts: PostStore) -> None:
    with pytest.raises(NotFoundAppError) as exc_info:
        posts.publish_post(42)

    assert exc_info.value.code == "post_not_found"


def test_list_posts_filters_and_sorts(posts: PostStore) -> None:
    first = posts.create_post("First", LONG_CONTENT, author_id=1)
    second = posts.create_post("Second", LONG_CONTENT, author_id=2)
    third = posts.create_post("Third", LONG_CONTENT, author_id=1)
    posts.publish_post(third.id)

    assert [p.id for p in posts.list_posts()] == [first.id, second.id, third.id]
    assert [p.id for p in posts.list_posts(author_id=1)] == [first.id, third.id]
    assert [p.id for p in posts.list_posts(published=True)] == [third.id]
    assert [p.id for p in posts.list_posts(published=False)] == [first.id, second.id]
    assert [p.id for p in posts.list_posts(sort_by="date")] == [third.id, second.id, first.id]
    assert [p.id for p in posts.list_posts(sort_by="date", limit=2)] == [third.id, second.id]


def test_delete_posts_by_author(posts: PostStore) -> None:
    posts.create_post("First", LONG_CONTENT, author_id=1)
    posts.create_post("Second", LONG_CONTENT, author_id=2)
    posts.create_post("Third", LONG_CONTENT, author_id=1)

    assert posts.delete_posts_by_author(1) == 2
    assert [p.author_id for p in posts.list_posts()] == [2]


def test_excerpt_truncates_content() -> None:
    store = PostStore(min_title_chars=3, min_publish_chars=10)
    post = store.create_post("Long", "x" * 150, author_id=1)

    assert post.get_excerpt() == "x" * 97 + "..."
    assert post.get_excerpt(200) == "x" * 150

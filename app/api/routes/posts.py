from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from app.core.auth import SessionDep
from app.core.dependencies import PostStoreDep
from app.core.errors import AuthorizationAppError, NotFoundAppError
from app.core.rate_limit import enforce_rate_limit
from app.models.post import Post
from app.schemas.posts import PostCreateRequest, PostResponse

router = APIRouter(tags=["Posts"], dependencies=[Depends(enforce_rate_limit)])


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(payload: PostCreateRequest, session: SessionDep, posts: PostStoreDep) -> Post:
    """Create a draft post authored by the caller."""
    return posts.create_post(payload.title, payload.content, session.user_id)


@router.get("/posts", response_model=list[PostResponse])
def list_posts(
    posts: PostStoreDep,
    author_id: int | None = None,
    published: bool | None = None,
    sort_by: Literal["date"] | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> list[Post]:
    return posts.list_posts(
        author_id=author_id,
        published=published,
        sort_by=sort_by,
        limit=limit,
    )


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(post_id: int, posts: PostStoreDep) -> Post:
    post = posts.get_post_by_id(post_id)
    if post is None:
        raise NotFoundAppError(code="post_not_found", message="Post not found")
    return post


@router.post("/posts/{post_id}/publish", response_model=PostResponse)
def publish_post(post_id: int, session: SessionDep, posts: PostStoreDep) -> Post:
    """Publish one of the caller's posts.

    Raises:
        NotFoundAppError: 404 if the post does not exist.
        ValidationAppError: 400 if the content is too short.
    """
    post = posts.get_post_by_id(post_id)
    if post is not None and post.author_id != session.user_id:
        raise AuthorizationAppError(
            code="forbidden",
            message="You can only publish your own posts",
        )
    return posts.publish_post(post_id)

"""Service layer for post (bookmark) CRUD operations."""
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.base import utcnow
from models.post import Post
from schemas.bookmark import PostCreate, PostUpdate
from services.exceptions import DuplicateUrlError, PostNotFoundError
from services.tag_service import get_or_create_tags, update_post_tags

logger = logging.getLogger(__name__)

# Fields an import record may write through upsert_by_url
UPSERT_FIELDS = frozenset({
    "title", "description", "notes", "unread", "shared",
    "tag_names", "created_at", "updated_at",
})


def _is_url_conflict(error: IntegrityError) -> bool:
    """True if the IntegrityError comes from the unique constraint on posts.url."""
    return "posts.url" in str(error)


async def get_post_by_url(db: AsyncSession, url: str) -> Post | None:
    """
    Look up a post by its exact URL.

    Returns:
        The post with its tags loaded, or None.
    """
    result = await db.execute(
        select(Post).options(selectinload(Post.tags)).where(Post.url == url),
    )
    return result.scalar_one_or_none()


async def get_post(db: AsyncSession, post_id: int) -> Post:
    """
    Get a post by ID with its tags loaded.

    Raises:
        PostNotFoundError: If the post doesn't exist.
    """
    result = await db.execute(
        select(Post).options(selectinload(Post.tags)).where(Post.id == post_id),
    )
    post = result.scalar_one_or_none()
    if post is None:
        raise PostNotFoundError(post_id)
    return post


async def create_post(db: AsyncSession, data: PostCreate) -> Post:
    """
    Create a new post.

    Client-facing creation never merges into an existing post: a URL that is
    already stored is rejected. Tags that don't exist yet are created and the
    associations are written in the same flush as the post.

    Args:
        db: Database session.
        data: Post creation data (tags already normalized by the schema).

    Returns:
        The created post, tags loaded.

    Raises:
        DuplicateUrlError: If a post with this URL already exists.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    existing = await get_post_by_url(db, data.url)
    if existing is not None:
        raise DuplicateUrlError(data.url)

    tags = await get_or_create_tags(db, data.tag_names)
    now = utcnow()
    post = Post(
        url=data.url,
        title=data.title,
        description=data.description,
        notes=data.notes,
        unread=data.unread,
        shared=data.shared,
        created_at=now,
        updated_at=now,
    )
    post.tags = tags
    db.add(post)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Fallback for race condition: another request inserted the URL first
        if _is_url_conflict(e):
            raise DuplicateUrlError(data.url) from e
        raise
    logger.info("Created bookmark %s for %s", post.id, post.url)
    return post


async def update_post(
    db: AsyncSession,
    post_id: int,
    data: PostUpdate,
) -> Post:
    """
    Partially update a post.

    Only fields explicitly present in ``data`` change. If ``tag_names`` is
    present the post's tag set is replaced, not merged.

    Raises:
        PostNotFoundError: If the post doesn't exist.
        DuplicateUrlError: If the new URL belongs to a different post.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    post = await get_post(db, post_id)

    update_data = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }

    new_url = update_data.get("url")
    if new_url is not None and new_url != post.url:
        other = await get_post_by_url(db, new_url)
        if other is not None and other.id != post.id:
            raise DuplicateUrlError(new_url)

    # Handle tag updates separately via junction table
    new_tags = update_data.pop("tag_names", None)

    for field, value in update_data.items():
        setattr(post, field, value)

    if new_tags is not None:
        await update_post_tags(db, post, new_tags)

    post.updated_at = utcnow()

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if _is_url_conflict(e):
            raise DuplicateUrlError(str(new_url)) from e
        raise
    return post


async def delete_post(db: AsyncSession, post_id: int) -> None:
    """
    Permanently delete a post and its tag associations.

    Tags stay in place even when no other post uses them.

    Raises:
        PostNotFoundError: If the post doesn't exist (also on a repeated call).
    """
    post = await get_post(db, post_id)
    await db.delete(post)
    await db.flush()
    logger.info("Deleted bookmark %s", post_id)


async def upsert_by_url(
    db: AsyncSession,
    url: str,
    fields: Mapping[str, Any],
) -> tuple[Post, bool]:
    """
    Create a post for ``url`` or update the one that already has it.

    This is the import path. Unlike create_post, an existing URL is merged
    into: fields present in ``fields`` overwrite, everything else is left as
    it was. ``created_at`` is only used when the post is created.

    Args:
        db: Database session.
        url: The bookmark URL (lookup key).
        fields: Subset of UPSERT_FIELDS. None values and other keys are ignored.

    Returns:
        Tuple of (post, was_created).
    """
    values = {
        field: value
        for field, value in fields.items()
        if field in UPSERT_FIELDS and value is not None
    }
    tag_names = values.pop("tag_names", None)
    created_at = values.pop("created_at", None)
    updated_at = values.pop("updated_at", None)

    post = await get_post_by_url(db, url)

    if post is None:
        created_at = created_at or utcnow()
        tags = await get_or_create_tags(db, tag_names or [])
        post = Post(
            url=url,
            created_at=created_at,
            updated_at=updated_at or created_at,
            **values,
        )
        post.tags = tags
        db.add(post)
        await db.flush()
        logger.debug("Import created bookmark %s for %s", post.id, url)
        return post, True

    for field, value in values.items():
        setattr(post, field, value)
    if tag_names is not None:
        await update_post_tags(db, post, tag_names)
    post.updated_at = updated_at or utcnow()
    await db.flush()
    logger.debug("Import updated bookmark %s for %s", post.id, url)
    return post, False

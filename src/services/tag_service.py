"""Service layer for tag operations."""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.post import Post
from models.tag import Tag, post_tags
from schemas.validators import normalize_tag, normalize_tags
from services.exceptions import TagNotFoundError

logger = logging.getLogger(__name__)


async def get_or_create_tags(
    db: AsyncSession,
    tag_names: list[str],
) -> list[Tag]:
    """
    Get existing tags or create new ones.

    Args:
        db: Database session.
        tag_names: List of tag names to get or create (normalized here).

    Returns:
        List of Tag objects (existing or newly created), in the order of the
        normalized names.
    """
    normalized = normalize_tags(tag_names)
    if not normalized:
        return []

    # Fetch existing tags
    result = await db.execute(select(Tag).where(Tag.name.in_(normalized)))
    existing_tags = {tag.name: tag for tag in result.scalars()}

    # Create missing tags
    tags = []
    for name in normalized:
        if name in existing_tags:
            tags.append(existing_tags[name])
        else:
            new_tag = Tag(name=name)
            db.add(new_tag)
            tags.append(new_tag)
            logger.debug("Creating tag %r", name)

    await db.flush()
    return tags


async def list_tags(
    db: AsyncSession,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[Tag], int]:
    """
    List every tag, including tags no post uses any more.

    Args:
        db: Database session.
        offset: Pagination offset.
        limit: Pagination limit (None for all tags).

    Returns:
        Tuple of (tags ordered by name, total count).
    """
    total = (await db.execute(select(func.count()).select_from(Tag))).scalar() or 0

    query = select(Tag).order_by(Tag.name.asc(), Tag.id.asc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_tag(db: AsyncSession, tag_id: int) -> Tag:
    """
    Get a tag by ID.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
    """
    tag = await db.get(Tag, tag_id)
    if tag is None:
        raise TagNotFoundError(tag_id)
    return tag


async def get_tag_by_name(db: AsyncSession, tag_name: str) -> Tag | None:
    """Get a tag by (normalized) name, or None."""
    normalized = normalize_tag(tag_name)
    if not normalized:
        return None
    result = await db.execute(select(Tag).where(Tag.name == normalized))
    return result.scalar_one_or_none()


async def create_tag(db: AsyncSession, tag_name: str) -> tuple[Tag, bool]:
    """
    Create a tag, or return the existing tag with the same normalized name.

    Returns:
        Tuple of (tag, was_created).

    Raises:
        ValueError: If the name normalizes to an empty string or contains a
            comma.
    """
    normalized = normalize_tag(tag_name)
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if "," in normalized:
        raise ValueError("Tag name cannot contain commas")

    existing = await get_tag_by_name(db, normalized)
    if existing is not None:
        return existing, False

    tag = Tag(name=normalized)
    db.add(tag)
    await db.flush()
    logger.info("Created tag %s (%r)", tag.id, tag.name)
    return tag, True


async def delete_tag(db: AsyncSession, tag_id: int) -> None:
    """
    Delete a tag together with every post association that references it.

    The posts themselves are left alone.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
    """
    tag = await get_tag(db, tag_id)

    await db.execute(delete(post_tags).where(post_tags.c.tag_id == tag.id))
    await db.delete(tag)
    await db.flush()

    # Expire cached tag collections so posts re-fetched in this session
    # don't still carry the deleted tag
    for obj in list(db.identity_map.values()):
        if isinstance(obj, Post):
            db.expire(obj, ["tags"])

    logger.info("Deleted tag %s (%r)", tag_id, tag.name)


async def update_post_tags(
    db: AsyncSession,
    post: Post,
    tag_names: list[str],
) -> None:
    """
    Replace a post's tags using the junction table.

    Clears existing tags and sets new ones (no merging). The post's tags
    collection must already be loaded.

    Args:
        db: Database session.
        post: The post to update.
        tag_names: New list of tag names.
    """
    post.tags = await get_or_create_tags(db, tag_names)
    await db.flush()

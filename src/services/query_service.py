"""
Search and filtering of posts.

The list endpoint accepts linkding's query parameters. They are parsed
tolerantly into a PostFilter: anything malformed turns into "no constraint"
(or the default page size) instead of an error, because linkding clients send
parameters this server doesn't know or formats it doesn't expect.
"""
from dataclasses import dataclass, field
from typing import Literal, get_args

from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from core.config import Settings, get_settings
from models.post import Post
from models.tag import Tag, post_tags
from schemas.validators import normalize_tags, parse_tristate
from services.utils import escape_like

SortOrder = Literal["added_desc", "added_asc", "title_asc", "title_desc"]

DEFAULT_SORT: SortOrder = "added_desc"

# SQLite stores integers as signed 64-bit values
MAX_SQL_INTEGER = 2**63 - 1


def parse_limit(value: str | int | None, settings: Settings) -> int:
    """Parse a page size, falling back to the default and capping at the maximum."""
    try:
        limit = int(value) if value is not None else settings.default_page_limit
    except (TypeError, ValueError):
        return settings.default_page_limit
    if limit <= 0:
        return settings.default_page_limit
    return min(limit, settings.max_page_limit)


def parse_offset(value: str | int | None) -> int:
    """
    Parse a pagination offset; anything invalid starts from the beginning.

    Offsets the database can't represent count as invalid.
    """
    try:
        offset = int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0
    if offset < 0 or offset > MAX_SQL_INTEGER:
        return 0
    return offset


def parse_search(query: str | None) -> tuple[list[str], list[str]]:
    """
    Split linkding's ``q`` parameter into text terms and tags.

    Tokens are whitespace separated; ``#name`` tokens are tag filters, all
    other tokens are text terms. ``q="#python async"`` gives
    (["async"], ["python"]).

    Returns:
        Tuple of (text terms, normalized tag names).
    """
    if not query:
        return [], []
    text_terms = []
    raw_tags = []
    for token in query.split():
        if token.startswith("#"):
            raw_tags.append(token[1:])
        else:
            text_terms.append(token)
    return text_terms, normalize_tags(raw_tags)


@dataclass
class PostFilter:
    """
    Filter, ordering and pagination for a post query.

    All constraints are optional and AND-combined.

    Attributes:
        text_terms: Each term must appear (case-insensitive) in the title,
            description or notes.
        tags: The post must carry every one of these tags.
        unread: True = unread only, False = read only, None = any.
        shared: True = shared only, False = private only, None = any.
        offset: Pagination offset.
        limit: Pagination limit; None returns every match.
        sort: Result ordering; id is always the tiebreaker.
    """

    text_terms: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    unread: bool | None = None
    shared: bool | None = None
    offset: int = 0
    limit: int | None = None
    sort: SortOrder = DEFAULT_SORT

    @classmethod
    def from_query_params(
        cls,
        q: str | None = None,
        unread: str | None = None,
        shared: str | None = None,
        limit: str | int | None = None,
        offset: str | int | None = None,
        sort: str | None = None,
        settings: Settings | None = None,
    ) -> "PostFilter":
        """Build a filter from raw query parameters without ever rejecting them."""
        settings = settings or get_settings()
        text_terms, tags = parse_search(q)
        return cls(
            text_terms=text_terms,
            tags=tags,
            unread=parse_tristate(unread),
            shared=parse_tristate(shared),
            offset=parse_offset(offset),
            limit=parse_limit(limit, settings),
            sort=sort if sort in get_args(SortOrder) else DEFAULT_SORT,
        )


def _apply_text_filter(query: Select[tuple[Post]], terms: list[str]) -> Select[tuple[Post]]:
    """Require every term to match at least one of title, description and notes."""
    for term in terms:
        pattern = f"%{escape_like(term)}%"
        query = query.where(
            or_(
                Post.title.ilike(pattern, escape="\\"),
                Post.description.ilike(pattern, escape="\\"),
                Post.notes.ilike(pattern, escape="\\"),
            ),
        )
    return query


def _apply_tag_filter(query: Select[tuple[Post]], tags: list[str]) -> Select[tuple[Post]]:
    """Require ALL given tags (one EXISTS subquery per tag)."""
    for tag_name in normalize_tags(tags):
        subq = (
            select(post_tags.c.post_id)
            .join(Tag, post_tags.c.tag_id == Tag.id)
            .where(
                post_tags.c.post_id == Post.id,
                Tag.name == tag_name,
            )
        )
        query = query.where(exists(subq))
    return query


def _apply_sorting(query: Select[tuple[Post]], sort: SortOrder) -> Select[tuple[Post]]:
    """Apply ordering with id as the final tiebreaker."""
    if sort == "added_asc":
        return query.order_by(Post.created_at.asc(), Post.id.asc())
    if sort == "title_asc":
        return query.order_by(func.lower(Post.title).asc(), Post.id.asc())
    if sort == "title_desc":
        return query.order_by(func.lower(Post.title).desc(), Post.id.desc())
    return query.order_by(Post.created_at.desc(), Post.id.desc())


async def query_posts(
    db: AsyncSession,
    post_filter: PostFilter,
) -> tuple[list[Post], int]:
    """
    Search and filter posts with pagination.

    Args:
        db: Database session.
        post_filter: Constraints, ordering and page.

    Returns:
        Tuple of (page of posts with tags loaded, total count before pagination).
    """
    base_query = select(Post).options(selectinload(Post.tags))

    if post_filter.text_terms:
        base_query = _apply_text_filter(base_query, post_filter.text_terms)

    if post_filter.tags:
        base_query = _apply_tag_filter(base_query, post_filter.tags)

    if post_filter.unread is not None:
        base_query = base_query.where(Post.unread == post_filter.unread)

    if post_filter.shared is not None:
        base_query = base_query.where(Post.shared == post_filter.shared)

    # Get total count before pagination
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    base_query = _apply_sorting(base_query, post_filter.sort)

    base_query = base_query.offset(post_filter.offset)
    if post_filter.limit is not None:
        base_query = base_query.limit(post_filter.limit)

    result = await db.execute(base_query)
    return list(result.scalars().all()), total


async def fetch_all_posts(db: AsyncSession) -> list[Post]:
    """Every post in the default order (newest first), tags loaded."""
    posts, _ = await query_posts(db, PostFilter())
    return posts

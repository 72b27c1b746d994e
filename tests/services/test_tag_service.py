"""Tests for tag service layer functionality."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.post import Post
from models.tag import Tag, post_tags
from schemas.bookmark import PostCreate
from services.exceptions import TagNotFoundError
from services.post_service import create_post, delete_post, get_post
from services.tag_service import (
    create_tag,
    delete_tag,
    get_or_create_tags,
    get_tag,
    get_tag_by_name,
    list_tags,
    update_post_tags,
)


# =============================================================================
# get_or_create_tags Tests
# =============================================================================


async def test__get_or_create_tags__creates_new_tags(db_session: AsyncSession) -> None:
    """Test that get_or_create_tags creates tags that don't exist."""
    tags = await get_or_create_tags(db_session, ["python", "web"])

    assert [t.name for t in tags] == ["python", "web"]
    for tag in tags:
        assert tag.id is not None


async def test__get_or_create_tags__returns_existing_tags(db_session: AsyncSession) -> None:
    """Test that get_or_create_tags returns existing tags without duplicating."""
    existing = await get_or_create_tags(db_session, ["python"])
    existing_id = existing[0].id

    tags = await get_or_create_tags(db_session, ["python"])

    assert len(tags) == 1
    assert tags[0].id == existing_id
    count = (await db_session.execute(select(func.count()).select_from(Tag))).scalar()
    assert count == 1


async def test__get_or_create_tags__normalizes_names(db_session: AsyncSession) -> None:
    """Mixed case and padded variants resolve to one tag."""
    tags = await get_or_create_tags(db_session, ["Rust", "RUST", "rust ", "  "])

    assert [t.name for t in tags] == ["rust"]


async def test__get_or_create_tags__splits_comma_joined_entries(db_session: AsyncSession) -> None:
    """A comma inside an entry separates tags, so none is stored with a comma."""
    tags = await get_or_create_tags(db_session, ["a,b", "B"])

    assert [t.name for t in tags] == ["a", "b"]


async def test__get_or_create_tags__empty_list(db_session: AsyncSession) -> None:
    """No names gives no tags."""
    assert await get_or_create_tags(db_session, []) == []


# =============================================================================
# list_tags / get_tag Tests
# =============================================================================


async def test__list_tags__ordered_by_name_with_total(db_session: AsyncSession) -> None:
    """Tags come back alphabetically and total counts all of them."""
    await get_or_create_tags(db_session, ["web", "api", "python"])

    tags, total = await list_tags(db_session)

    assert [t.name for t in tags] == ["api", "python", "web"]
    assert total == 3


async def test__list_tags__pagination(db_session: AsyncSession) -> None:
    """Offset and limit slice the ordered list; total ignores them."""
    await get_or_create_tags(db_session, ["a", "b", "c", "d"])

    tags, total = await list_tags(db_session, offset=1, limit=2)

    assert [t.name for t in tags] == ["b", "c"]
    assert total == 4


async def test__get_tag__not_found(db_session: AsyncSession) -> None:
    """Unknown ids raise TagNotFoundError."""
    with pytest.raises(TagNotFoundError):
        await get_tag(db_session, 999)


async def test__get_tag_by_name__normalizes_lookup(db_session: AsyncSession) -> None:
    """Lookup by name is case-insensitive for ASCII letters."""
    created = await get_or_create_tags(db_session, ["python"])

    found = await get_tag_by_name(db_session, "  PYTHON ")

    assert found is not None
    assert found.id == created[0].id
    assert await get_tag_by_name(db_session, "ruby") is None
    assert await get_tag_by_name(db_session, "   ") is None


# =============================================================================
# create_tag Tests
# =============================================================================


async def test__create_tag__creates_normalized(db_session: AsyncSession) -> None:
    """A new name creates a tag stored in canonical form."""
    tag, created = await create_tag(db_session, " Django ")

    assert created is True
    assert tag.name == "django"
    assert tag.created_at is not None


async def test__create_tag__returns_existing(db_session: AsyncSession) -> None:
    """Creating an existing name is a lookup, not an error."""
    first, _ = await create_tag(db_session, "django")

    second, created = await create_tag(db_session, "DJANGO")

    assert created is False
    assert second.id == first.id


async def test__create_tag__empty_name_raises(db_session: AsyncSession) -> None:
    """Names that normalize to nothing are rejected."""
    with pytest.raises(ValueError, match="empty"):
        await create_tag(db_session, "   ")


async def test__create_tag__comma_raises(db_session: AsyncSession) -> None:
    """Comma-joined names are rejected."""
    with pytest.raises(ValueError, match="commas"):
        await create_tag(db_session, "a,b")


# =============================================================================
# delete_tag Tests
# =============================================================================


async def test__delete_tag__removes_associations_keeps_posts(db_session: AsyncSession) -> None:
    """Deleting a tag detaches it from posts but leaves the posts alone."""
    post = await create_post(
        db_session,
        PostCreate(url="https://example.com", tag_names=["python", "web"]),
    )
    python_tag = await get_tag_by_name(db_session, "python")
    assert python_tag is not None
    tag_id = python_tag.id
    post_id = post.id

    await delete_tag(db_session, tag_id)
    db_session.expire_all()

    reloaded = await get_post(db_session, post_id)
    assert reloaded.tag_names == ["web"]
    links = (
        await db_session.execute(
            select(func.count()).select_from(post_tags).where(post_tags.c.tag_id == tag_id),
        )
    ).scalar()
    assert links == 0


async def test__delete_tag__not_found(db_session: AsyncSession) -> None:
    """Deleting an unknown tag raises TagNotFoundError."""
    with pytest.raises(TagNotFoundError):
        await delete_tag(db_session, 12345)


async def test__delete_post__keeps_shared_tag(db_session: AsyncSession) -> None:
    """A tag used by two posts survives deletion of one and stays on the other."""
    first = await create_post(
        db_session, PostCreate(url="https://one.example", tag_names=["shared"]),
    )
    second = await create_post(
        db_session, PostCreate(url="https://two.example", tag_names=["shared"]),
    )
    second_id = second.id

    await delete_post(db_session, first.id)
    db_session.expire_all()

    assert await get_tag_by_name(db_session, "shared") is not None
    remaining = await get_post(db_session, second_id)
    assert remaining.tag_names == ["shared"]
    assert (await db_session.execute(select(func.count()).select_from(Post))).scalar() == 1


async def test__delete_post__keeps_orphaned_tag(db_session: AsyncSession) -> None:
    """Tags are vocabulary: they persist when their last post goes away."""
    post = await create_post(
        db_session, PostCreate(url="https://only.example", tag_names=["lonely"]),
    )

    await delete_post(db_session, post.id)

    tags, total = await list_tags(db_session)
    assert total == 1
    assert tags[0].name == "lonely"


# =============================================================================
# update_post_tags Tests
# =============================================================================


async def test__update_post_tags__replaces_not_merges(db_session: AsyncSession) -> None:
    """The new set replaces the old one."""
    post = await create_post(
        db_session, PostCreate(url="https://example.com", tag_names=["a", "b"]),
    )

    await update_post_tags(db_session, post, ["b", "C"])

    assert post.tag_names == ["b", "c"]

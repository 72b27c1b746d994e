"""Tag model and the post/tag junction table."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from models.post import Post


# Junction table for many-to-many relationship between posts and tags
post_tags = Table(
    "post_tags",
    Base.metadata,
    Column(
        "post_id",
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    # Index for lookups by tag (composite PK already indexes post_id first)
    Index("ix_post_tags_tag_id", "tag_id"),
)


class Tag(Base):
    """Tag model - a normalized label shared by every post that uses it."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
    )

    # passive_deletes: junction rows are removed by ON DELETE CASCADE, so the
    # collection never has to be loaded just to delete a tag.
    posts: Mapped[list["Post"]] = relationship(
        secondary=post_tags,
        back_populates="tags",
        passive_deletes=True,
    )

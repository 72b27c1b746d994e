"""Post model for storing bookmarks."""
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin
from models.tag import post_tags

if TYPE_CHECKING:
    from models.tag import Tag


class Post(Base, TimestampMixin):
    """Post model - a bookmarked URL with its metadata and tags."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unread: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    shared: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )

    tags: Mapped[list["Tag"]] = relationship(
        secondary=post_tags,
        back_populates="posts",
        passive_deletes=True,
        order_by="Tag.name",
    )

    @property
    def tag_names(self) -> list[str]:
        """Sorted names of the attached tags (the collection must already be loaded)."""
        return sorted(tag.name for tag in self.tags)

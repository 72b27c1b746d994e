"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UTCDateTime
from models.tag import Tag, post_tags  # Must be before post due to import
from models.post import Post

__all__ = [
    "Base",
    "Post",
    "Tag",
    "TimestampMixin",
    "UTCDateTime",
    "post_tags",
]

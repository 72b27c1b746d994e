"""Pydantic schemas for bookmark endpoints (linkding wire format)."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schemas.validators import coerce_tag_field, empty_if_none, validate_url


class PostCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    Unknown fields (linkding's is_archived, auto-fetch flags, ...) are ignored.
    """

    url: str
    title: str = ""
    description: str = ""
    notes: str = ""
    unread: bool = False
    shared: bool = False
    tag_names: list[str] = []

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Require a non-empty URL."""
        return validate_url(v)

    @field_validator("title", "description", "notes", mode="before")
    @classmethod
    def null_text_to_empty(cls, v: Any) -> Any:
        """Treat null text fields as empty."""
        return empty_if_none(v)

    @field_validator("unread", "shared", mode="before")
    @classmethod
    def null_flag_to_false(cls, v: Any) -> Any:
        """Treat null flags as unset (false)."""
        return False if v is None else v

    @field_validator("tag_names", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Normalize tags; accepts a list or a delimited string."""
        return coerce_tag_field(v)


class PostUpdate(BaseModel):
    """
    Schema for updating an existing bookmark.

    Both PUT and PATCH are partial: only fields present in the body change.
    A null url/unread/shared/tag_names is treated as "not supplied".
    """

    url: str | None = None
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    unread: bool | None = None
    shared: bool | None = None
    tag_names: list[str] | None = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str | None) -> str | None:
        """Require a non-empty URL when one is given."""
        if v is None:
            return None
        return validate_url(v)

    @field_validator("title", "description", "notes", mode="before")
    @classmethod
    def null_text_to_empty(cls, v: Any) -> Any:
        """Treat null text fields as a request to clear them."""
        return empty_if_none(v)

    @field_validator("tag_names", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str] | None:
        """Normalize tags if provided."""
        if v is None:
            return None
        return coerce_tag_field(v)


class BookmarkResponse(BaseModel):
    """
    Schema for a bookmark as linkding clients expect it.

    Fields this server never fills (archive snapshot, favicon, preview image,
    scraped website metadata) are present with empty values so strict clients
    keep parsing.

    Note: Uses model_validator to map the Post model (created_at/updated_at,
    tags relationship) onto linkding's field names.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    description: str
    notes: str
    web_archive_snapshot_url: str = ""
    favicon_url: str | None = None
    preview_image_url: str | None = None
    is_archived: bool = False
    unread: bool
    shared: bool
    tag_names: list[str]
    date_added: datetime
    date_modified: datetime
    website_title: str | None = None
    website_description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def from_post(cls, data: Any) -> Any:
        """
        Map a Post model onto the response fields.

        Only accesses tags if already loaded (not lazy) to avoid triggering
        database queries outside async context.
        """
        # Handle SQLAlchemy model objects
        if hasattr(data, "__dict__") and hasattr(data, "created_at"):
            loaded_tags = data.__dict__.get("tags") or []
            return {
                "id": data.id,
                "url": data.url,
                "title": data.title or "",
                "description": data.description or "",
                "notes": data.notes or "",
                "unread": bool(data.unread),
                "shared": bool(data.shared),
                "tag_names": sorted(tag.name for tag in loaded_tags),
                "date_added": data.created_at,
                "date_modified": data.updated_at,
            }
        return data


class BookmarkListResponse(BaseModel):
    """Paginated bookmark list in linkding's shape."""

    count: int  # Total matches before pagination
    next: str | None
    previous: str | None
    results: list[BookmarkResponse]


class CheckMetadata(BaseModel):
    """
    Metadata block of the check response.

    No page fetching happens, so only the URL is ever filled in.
    """

    url: str
    title: str | None = None
    description: str | None = None
    preview_image: str | None = None


class BookmarkCheckResponse(BaseModel):
    """Response of GET /api/bookmarks/check/."""

    bookmark: BookmarkResponse | None
    metadata: CheckMetadata
    auto_tags: list[str] = []

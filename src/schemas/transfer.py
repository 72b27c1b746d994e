"""Pydantic schemas for bulk import and export."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schemas.validators import (
    coerce_flag,
    coerce_tag_field,
    coerce_text,
    parse_timestamp,
    validate_url,
)


class LinkdingRecord(BaseModel):
    """
    One bookmark from a linkding JSON export.

    Parsing is tolerant: unknown keys (is_archived, web_archive_snapshot_url,
    favicon_url, ...) are dropped, tags may come as ``tag_names`` (list) or
    ``tags`` (list or delimited string), numbers in text fields are written
    out, unrecognized flags fall back to false and unparseable dates become
    None. Only a missing or empty ``url`` makes a record invalid.
    """

    model_config = ConfigDict(extra="ignore")

    url: str
    title: str = ""
    description: str = ""
    notes: str = ""
    tag_names: list[str] = []
    unread: bool = False
    shared: bool = False
    date_added: datetime | None = None
    date_modified: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_tags_alias(cls, data: Any) -> Any:
        """Use ``tags`` when a record has no ``tag_names``."""
        if isinstance(data, dict) and "tag_names" not in data and "tags" in data:
            data = {**data, "tag_names": data["tags"]}
        return data

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Require a non-empty URL."""
        return validate_url(v)

    @field_validator("title", "description", "notes", mode="before")
    @classmethod
    def lenient_text(cls, v: Any) -> str:
        """Coerce text fields to strings; null and unusable values become empty."""
        return coerce_text(v)

    @field_validator("unread", "shared", mode="before")
    @classmethod
    def lenient_flag(cls, v: Any) -> bool:
        """Coerce flags to booleans; null and unrecognized values become false."""
        return coerce_flag(v)

    @field_validator("tag_names", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Normalize tags from either tag representation."""
        return coerce_tag_field(v)

    @field_validator("date_added", "date_modified", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> datetime | None:
        """Parse ISO 8601 strings or epoch seconds; give up quietly otherwise."""
        return parse_timestamp(v)


class ImportFailure(BaseModel):
    """A record that was skipped during import."""

    index: int  # Position of the record in the input
    url: str | None
    reason: str


class ImportSummaryResponse(BaseModel):
    """Result of a bulk import."""

    model_config = ConfigDict(from_attributes=True)

    imported: int
    created: int
    updated: int
    skipped: int
    failures: list[ImportFailure]

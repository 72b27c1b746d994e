"""Pydantic schemas for tag endpoints."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import normalize_tag


class TagCreate(BaseModel):
    """Schema for creating (or looking up) a tag by name."""

    name: str

    @field_validator("name", mode="before")
    @classmethod
    def normalize_and_validate(cls, v: Any) -> str:
        """Normalize the name and reject empty names or names with commas."""
        normalized = normalize_tag(v)
        if not normalized:
            raise ValueError("Tag name cannot be empty")
        if "," in normalized:
            raise ValueError("Tag name cannot contain commas")
        return normalized


class TagResponse(BaseModel):
    """Schema for a single tag."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    date_added: datetime = Field(validation_alias="created_at")


class TagListResponse(BaseModel):
    """Paginated tag list in linkding's shape."""

    count: int
    next: str | None
    previous: str | None
    results: list[TagResponse]

"""Tag endpoints (linkding's /api/tags/)."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings, verify_token
from api.helpers import page_links
from core.config import Settings
from schemas.tag import TagCreate, TagListResponse, TagResponse
from services import tag_service
from services.exceptions import TagNotFoundError
from services.query_service import parse_limit, parse_offset

router = APIRouter(
    prefix="/api/tags",
    tags=["tags"],
    dependencies=[Depends(verify_token)],
)


@router.get("", response_model=TagListResponse)
async def list_tags(
    request: Request,
    limit: str | None = Query(default=None, description="Page size"),
    offset: str | None = Query(default=None, description="Pagination offset"),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """
    List all tags alphabetically.

    Includes tags that are no longer used by any bookmark.
    """
    page_limit = parse_limit(limit, settings)
    page_offset = parse_offset(offset)
    tags, total = await tag_service.list_tags(db, offset=page_offset, limit=page_limit)
    next_url, previous_url = page_links(request, total, page_offset, page_limit)
    return TagListResponse(
        count=total,
        next=next_url,
        previous=previous_url,
        results=[TagResponse.model_validate(tag) for tag in tags],
    )


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    data: TagCreate,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """
    Create a tag.

    If a tag with the same normalized name exists it is returned with 200
    instead of 201.
    """
    tag, created = await tag_service.create_tag(db, data.name)
    if not created:
        response.status_code = status.HTTP_200_OK
    return TagResponse.model_validate(tag)


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """Get a single tag by ID."""
    try:
        tag = await tag_service.get_tag(db, tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete a tag.

    The tag is removed from every bookmark that has it; the bookmarks stay.
    """
    try:
        await tag_service.delete_tag(db, tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

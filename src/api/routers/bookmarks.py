"""Bookmark endpoints (linkding's /api/bookmarks/)."""
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings, verify_token
from api.helpers import page_links
from core.config import Settings
from schemas.bookmark import (
    BookmarkCheckResponse,
    BookmarkListResponse,
    BookmarkResponse,
    CheckMetadata,
    PostCreate,
    PostUpdate,
)
from schemas.transfer import ImportSummaryResponse
from services import export_service, import_service, post_service, query_service
from services.exceptions import DuplicateUrlError, InvalidInputError, PostNotFoundError

router = APIRouter(
    prefix="/api/bookmarks",
    tags=["bookmarks"],
    dependencies=[Depends(verify_token)],
)


@router.get("", response_model=BookmarkListResponse)
async def list_bookmarks(
    request: Request,
    q: str | None = Query(default=None, description="Search terms; #name tokens filter by tag"),
    unread: str | None = Query(default=None, description="yes/no: only unread or only read"),
    shared: str | None = Query(default=None, description="yes/no: only shared or only private"),
    limit: str | None = Query(default=None, description="Page size"),
    offset: str | None = Query(default=None, description="Pagination offset"),
    sort: str | None = Query(
        default=None, description="added_desc (default), added_asc, title_asc, title_desc",
    ),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List bookmarks, newest first.

    Query parameters are parsed leniently: values that can't be understood
    are ignored instead of rejected, so every linkding client keeps working.

    - **q**: Every plain term must appear in title, description or notes;
      every `#tag` must be on the bookmark
    - **unread** / **shared**: Tri-state flag filters
    - **limit** / **offset**: Pagination (limit defaults to 100)
    """
    post_filter = query_service.PostFilter.from_query_params(
        q=q,
        unread=unread,
        shared=shared,
        limit=limit,
        offset=offset,
        sort=sort,
        settings=settings,
    )
    posts, total = await query_service.query_posts(db, post_filter)
    next_url, previous_url = page_links(request, total, post_filter.offset, post_filter.limit)
    return BookmarkListResponse(
        count=total,
        next=next_url,
        previous=previous_url,
        results=[BookmarkResponse.model_validate(post) for post in posts],
    )


@router.get("/check", response_model=BookmarkCheckResponse)
async def check_bookmark(
    url: str | None = Query(default=None, description="URL to look up"),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkCheckResponse:
    """
    Check whether a URL is already bookmarked.

    No page is fetched, so the metadata block only echoes the URL and there
    are never auto tags.
    """
    url = (url or "").strip()
    post = await post_service.get_post_by_url(db, url) if url else None
    return BookmarkCheckResponse(
        bookmark=BookmarkResponse.model_validate(post) if post is not None else None,
        metadata=CheckMetadata(url=url),
        auto_tags=[],
    )


@router.post("/import", response_model=ImportSummaryResponse)
async def import_bookmarks(
    payload: Any = Body(..., description="linkding JSON export: an array, or an object with 'results'"),  # noqa: E501
    db: AsyncSession = Depends(get_async_session),
) -> ImportSummaryResponse:
    """
    Bulk import a linkding JSON export.

    Records are upserted by URL. Invalid records are skipped and listed in
    `failures`; they don't abort the import.
    """
    try:
        records = import_service.extract_records(payload)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        ) from e
    summary = await import_service.import_posts(db, records)
    return ImportSummaryResponse.model_validate(summary)


@router.get("/export")
async def export_bookmarks(
    format: str = Query(default="html", description="html (Netscape bookmark file) or json"),  # noqa: A002
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """
    Export every bookmark, newest first.

    `html` is a Netscape bookmark file (notes are dropped); `json` is the
    record format POST /api/bookmarks/import/ reads back.
    """
    posts = await query_service.fetch_all_posts(db)
    if format.lower() == "json":
        return JSONResponse(
            content=export_service.export_json(posts),
            headers={"Content-Disposition": "attachment; filename=bookmarks.json"},
        )
    return Response(
        content=export_service.export_netscape_html(posts),
        media_type="text/html",
        headers={"Content-Disposition": "attachment; filename=bookmarks.html"},
    )


@router.post("", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: PostCreate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Create a new bookmark.

    Returns 409 if a bookmark with the same URL already exists.
    """
    try:
        post = await post_service.create_post(db, data)
    except DuplicateUrlError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return BookmarkResponse.model_validate(post)


@router.get("/{post_id}", response_model=BookmarkResponse)
async def get_bookmark(
    post_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    try:
        post = await post_service.get_post(db, post_id)
    except PostNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return BookmarkResponse.model_validate(post)


@router.api_route("/{post_id}", methods=["PUT", "PATCH"], response_model=BookmarkResponse)
async def update_bookmark(
    post_id: int,
    data: PostUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Update a bookmark.

    PUT and PATCH behave the same: only the fields in the body change. A
    `tag_names` list replaces the bookmark's tags.
    """
    try:
        post = await post_service.update_post(db, post_id, data)
    except PostNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DuplicateUrlError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return BookmarkResponse.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    post_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark. Its tags are kept."""
    try:
        await post_service.delete_post(db, post_id)
    except PostNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

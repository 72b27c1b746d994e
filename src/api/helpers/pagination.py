"""Helpers for linkding-style limit/offset pagination links."""
from fastapi import Request


def page_links(
    request: Request,
    total: int,
    offset: int,
    limit: int | None,
) -> tuple[str | None, str | None]:
    """
    Build the ``next`` and ``previous`` URLs of a paginated response.

    The links repeat the request's own query string with ``limit`` and
    ``offset`` replaced, the way linkding (Django REST framework) renders them.

    Returns:
        Tuple of (next URL or None, previous URL or None).
    """
    if limit is None:
        return None, None

    next_url = None
    if offset + limit < total:
        next_url = str(request.url.include_query_params(limit=limit, offset=offset + limit))

    previous_url = None
    if offset > 0:
        previous_offset = max(offset - limit, 0)
        if previous_offset == 0:
            previous_url = str(request.url.include_query_params(limit=limit).remove_query_params("offset"))
        else:
            previous_url = str(request.url.include_query_params(limit=limit, offset=previous_offset))

    return next_url, previous_url

"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, health, tags
from core.config import get_settings
from db.session import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - create the schema on startup."""
    await init_db()
    if not get_settings().api_token:
        logger.warning("API_TOKEN is not set; every API request will be rejected")
    yield


class TrailingSlashMiddleware(BaseHTTPMiddleware):
    """
    Make the trailing slash optional.

    linkding clients call ``/api/bookmarks/`` while others drop the slash.
    Routes are declared without it and request paths are trimmed before
    routing, so both forms reach the same endpoint without a redirect.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Strip trailing slashes from the request path."""
        path = request.scope["path"]
        if len(path) > 1 and path.endswith("/"):
            request.scope["path"] = path.rstrip("/") or "/"
        return await call_next(request)


app_settings = get_settings()

app = FastAPI(
    title="Bookmarks API",
    description="A single-user bookmark server compatible with the linkding REST API.",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(TrailingSlashMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(bookmarks.router)
app.include_router(tags.router)

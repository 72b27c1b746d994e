"""Liveness endpoint for container orchestrators and uptime checks."""
import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

ComponentStatus = Literal["healthy", "unhealthy"]


class HealthResponse(BaseModel):
    """Overall status plus the state of the SQLite database."""

    status: Literal["healthy", "degraded"]
    database: ComponentStatus


async def _ping_database(db: AsyncSession) -> ComponentStatus:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return "unhealthy"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Report whether the database answers. Needs no API token."""
    database = await _ping_database(db)
    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
    )

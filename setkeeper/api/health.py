"""
Liveness and readiness checks.

/ready counts card sets rather than pinging the connection, so it also
fails while the checklist schema has not been created.
"""

from importlib.metadata import version as pkg_version
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from setkeeper.db.database import get_session
from setkeeper.models.db import CardSetDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check result."""

    status: str
    version: str
    database: str | None = None
    set_count: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Process is up; touches nothing else."""
    return HealthResponse(status="healthy", version=pkg_version("setkeeper"))


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Database reachable and schema present; 503 otherwise."""
    try:
        result = await session.execute(select(func.count()).select_from(CardSetDB))
    except (SQLAlchemyError, OSError):
        await session.rollback()
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready", version=pkg_version("setkeeper"), database="disconnected"
        )
    return HealthResponse(
        status="ready",
        version=pkg_version("setkeeper"),
        database="connected",
        set_count=result.scalar_one(),
    )

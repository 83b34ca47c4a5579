"""
Card set API endpoints.

Sets are the catalog entries that own a checklist. Every set comes back
with its completion counts so a set list can show progress at a glance.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from setkeeper.api.checklist import StatsResponse, stats_to_response
from setkeeper.db import count_statuses_by_set, create_set, get_set_or_fail, list_sets
from setkeeper.db.database import get_session
from setkeeper.models.card_record import SetType
from setkeeper.models.db import CardSetDB
from setkeeper.services.aggregator import ChecklistStats, stats_from_counts
from setkeeper.services.player_search import SetSummary

router = APIRouter(prefix="/sets", tags=["sets"])


class SetCreateRequest(BaseModel):
    """Request model for creating a card set."""

    name: str = Field(..., min_length=1, description="Set name")
    year: int = Field(..., ge=1900, le=2100)
    brand: str = Field(..., min_length=1)
    product_line: str = Field(..., min_length=1)
    set_type: SetType = SetType.BASE
    insert_set_name: str | None = None
    notes: str = ""


class SetResponse(BaseModel):
    """Response model for a card set."""

    id: str
    name: str
    year: int
    brand: str
    product_line: str
    set_type: SetType
    insert_set_name: str | None = None
    notes: str = ""
    stats: StatsResponse | None = None


class SetListResponse(BaseModel):
    """Response model for a list of sets."""

    sets: list[SetResponse]
    count: int


def set_to_response(card_set: CardSetDB, stats: ChecklistStats | None = None) -> SetResponse:
    return SetResponse(
        id=card_set.id,
        name=card_set.name,
        year=card_set.year,
        brand=card_set.brand,
        product_line=card_set.product_line,
        set_type=SetType(card_set.set_type),
        insert_set_name=card_set.insert_set_name,
        notes=card_set.notes,
        stats=stats_to_response(stats) if stats is not None else None,
    )


def set_to_summary(card_set: CardSetDB) -> SetSummary:
    return SetSummary(
        id=card_set.id,
        name=card_set.name,
        year=card_set.year,
        brand=card_set.brand,
        product_line=card_set.product_line,
        set_type=SetType(card_set.set_type),
        insert_set_name=card_set.insert_set_name,
    )


@router.post("", response_model=SetResponse, status_code=status.HTTP_201_CREATED)
async def create_card_set(
    request: SetCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SetResponse:
    """Create a new card set with an empty checklist."""
    card_set = await create_set(
        session,
        name=request.name.strip(),
        year=request.year,
        brand=request.brand.strip(),
        product_line=request.product_line.strip(),
        set_type=request.set_type,
        insert_set_name=request.insert_set_name,
        notes=request.notes,
    )
    return set_to_response(card_set, ChecklistStats())


@router.get("", response_model=SetListResponse)
async def get_card_sets(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=500)] = 200,
) -> SetListResponse:
    """List card sets, newest year first, each with its completion counts."""
    sets = await list_sets(session, limit=limit)
    counts = await count_statuses_by_set(session, [s.id for s in sets])
    return SetListResponse(
        sets=[set_to_response(s, stats_from_counts(counts.get(s.id, {}))) for s in sets],
        count=len(sets),
    )


@router.get("/{set_id}", response_model=SetResponse)
async def get_card_set(
    set_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SetResponse:
    """Get one card set with its completion counts."""
    card_set = await get_set_or_fail(session, set_id)
    counts = await count_statuses_by_set(session, [set_id])
    return set_to_response(card_set, stats_from_counts(counts.get(set_id, {})))

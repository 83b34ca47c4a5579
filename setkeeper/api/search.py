"""
Cross-set player search endpoint.

Finds every checklist item for a player across all sets, narrowed by the
set catalog filters, so the collector can see where a player appears
and what is still needed.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from setkeeper.api.checklist import CardResponse, card_to_response
from setkeeper.api.sets import set_to_summary
from setkeeper.config import MAX_SEARCH_RESULTS
from setkeeper.db import list_sets, search_player_cards
from setkeeper.db.database import get_session
from setkeeper.models.card_record import SetType
from setkeeper.services.player_search import (
    PlayerSearchHit,
    SetFilters,
    SetSummary,
    collect_player_hits,
    filter_sets,
    player_search_term,
)

router = APIRouter(prefix="/cards", tags=["search"])


class SearchSetResponse(BaseModel):
    id: str
    name: str
    year: int
    brand: str
    product_line: str
    set_type: SetType
    insert_set_name: str | None = None


class PlayerSearchHitResponse(BaseModel):
    card: CardResponse
    card_set: SearchSetResponse


class PlayerSearchResponse(BaseModel):
    """Response model for a player search."""

    player: str
    results: list[PlayerSearchHitResponse]
    count: int


def _summary_response(card_set: SetSummary) -> SearchSetResponse:
    return SearchSetResponse(
        id=card_set.id,
        name=card_set.name,
        year=card_set.year,
        brand=card_set.brand,
        product_line=card_set.product_line,
        set_type=card_set.set_type,
        insert_set_name=card_set.insert_set_name,
    )


def _hit_response(hit: PlayerSearchHit) -> PlayerSearchHitResponse:
    return PlayerSearchHitResponse(
        card=card_to_response(hit.card),
        card_set=_summary_response(hit.card_set),
    )


@router.get("/search", response_model=PlayerSearchResponse)
async def search_player(
    session: Annotated[AsyncSession, Depends(get_session)],
    player: Annotated[str, Query(description="Part of a player name")] = "",
    year: int | None = None,
    brand: str | None = None,
    set_type: SetType | None = None,
    insert_set_name: str | None = None,
) -> PlayerSearchResponse:
    """Cards for a player across sets, newest set year first."""
    term = player_search_term(player)
    filters = SetFilters(
        year=year, brand=brand, set_type=set_type, insert_set_name=insert_set_name
    )
    sets = filter_sets([set_to_summary(s) for s in await list_sets(session, limit=None)], filters)
    cards_by_set = await search_player_cards(
        session, term, [s.id for s in sets], limit=MAX_SEARCH_RESULTS
    )
    hits = collect_player_hits(term, sets, cards_by_set)
    return PlayerSearchResponse(
        player=term,
        results=[_hit_response(hit) for hit in hits],
        count=len(hits),
    )

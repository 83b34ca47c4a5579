"""
Checklist API endpoints.

Thin adapters over the reconciliation services: parse previews, duplicate
safe imports, bulk status preview/apply, multi-select edits, display view
and CSV export for one set's checklist.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from setkeeper.config import MAX_IMPORT_LINES, settings
from setkeeper.db import SqlChecklistStore, get_set_or_fail, set_type_of
from setkeeper.db.database import get_session
from setkeeper.models.card_record import (
    CardRecord,
    CardStatus,
    ParsedLineResult,
    ParsedParallel,
    SetType,
)
from setkeeper.models.db import CardSetDB
from setkeeper.models.failure import FailureKind, KnownError
from setkeeper.parsers import fold_accents, parse_checklist_text, parse_rainbow_text, split_lines
from setkeeper.services.aggregator import ChecklistGroup, ChecklistStats, build_checklist_view
from setkeeper.services.bulk_status import (
    BulkStatusPreview,
    apply_bulk_status,
    apply_selected_status,
    apply_selected_year,
    delete_selected,
    preview_bulk_status,
)
from setkeeper.services.csv_export import export_checklist_csv, export_filename
from setkeeper.services.guard import operation_guard
from setkeeper.services.reconciler import DuplicateMatch, import_checklist, import_rainbow

router = APIRouter(prefix="/sets/{set_id}", tags=["checklist"])


# --- Response models ---


class CardResponse(BaseModel):
    """A checklist item."""

    id: str | None
    card_number: str
    player_name: str
    team: str | None = None
    subset_name: str | None = None
    year: int | None = None
    parallel: str | None = None
    parallel_print_run: str | None = None
    serial_owned: str | None = None
    status: CardStatus = CardStatus.NEED
    display_order: int | None = None


class StatsResponse(BaseModel):
    """Completion counts."""

    total: int
    owned: int
    pending: int
    need: int
    percentage: int


class ParallelGroupResponse(BaseModel):
    parallel: str
    cards: list[CardResponse]


class GroupResponse(BaseModel):
    """One display section (a year, or the whole checklist)."""

    year: int | None
    base: list[CardResponse]
    parallels: list[ParallelGroupResponse]
    stats: StatsResponse


class ChecklistResponse(BaseModel):
    """Response model for the checklist view."""

    set_id: str
    set_type: SetType
    stats: StatsResponse
    groups: list[GroupResponse]
    grouped_by_year: bool
    years: list[int] = Field(default_factory=list)
    visible_count: int


class ParsedLineResponse(BaseModel):
    line_number: int
    raw_line: str
    card_number: str
    player_name: str
    team: str | None = None
    year: int | None = None
    error: str | None = None


class ParsedParallelResponse(BaseModel):
    line_number: int
    raw_line: str
    parallel: str
    parallel_print_run: str | None = None
    error: str | None = None


class ImportPreviewResponse(BaseModel):
    """Parsed rows of a paste, shown before importing."""

    lines: list[ParsedLineResponse] = Field(default_factory=list)
    parallels: list[ParsedParallelResponse] = Field(default_factory=list)
    valid_count: int
    error_count: int


class DuplicateMatchResponse(BaseModel):
    candidate: str
    key: str
    matched_existing: str


class ImportResponse(BaseModel):
    """Response model for checklist and rainbow imports."""

    inserted: list[CardResponse]
    inserted_count: int
    skipped: int
    message: str
    diagnostics: list[DuplicateMatchResponse] = Field(
        default_factory=list,
        description="Which existing row each candidate matched, when all were duplicates",
    )


class StatusMatchResponse(BaseModel):
    identifier: str
    matched: CardResponse | None = None


class BulkStatusResponse(BaseModel):
    """Preview (or result) of a bulk status change."""

    target: CardStatus
    matches: list[StatusMatchResponse]
    matched_count: int
    unmatched_count: int
    already_correct_count: int
    will_update_count: int
    updated_ids: list[str] = Field(default_factory=list)


class SelectionResponse(BaseModel):
    """How many selected items of the set changed; ids of other sets never count."""

    affected: int


# --- Request models ---


class ImportRequest(BaseModel):
    """Request model for a pasted checklist import."""

    text: str = Field(
        ...,
        description="Pasted checklist, one card per line",
        examples=["577 Trevor Story - Boston Red Sox\n581 Andruw Monasterio - Milwaukee Brewers"],
    )
    year: int | None = Field(default=None, description="Year stamped on every row")
    parallel_label: str | None = Field(
        default=None,
        description="Shared parallel name for the whole batch (e.g. 'Refractor')",
    )


class RainbowImportRequest(BaseModel):
    """Request model for a pasted rainbow parallel list."""

    text: str = Field(..., examples=["Sky Blue – /499\nGold – /50\nPlatinum – 1/1"])
    card_number: str
    player_name: str
    team: str | None = None


class BulkStatusRequest(BaseModel):
    text: str = Field(..., description="Card numbers, one per line; extra tokens are ignored")
    target: CardStatus = CardStatus.OWNED


class SelectionStatusRequest(BaseModel):
    ids: list[str]
    status: CardStatus


class SelectionYearRequest(BaseModel):
    ids: list[str]
    year: int = Field(..., ge=1900, le=2100)


class SelectionRequest(BaseModel):
    ids: list[str]


class CardCreateRequest(BaseModel):
    """Request model for adding a single card or parallel by hand."""

    card_number: str
    player_name: str
    team: str | None = None
    year: int | None = None
    parallel: str | None = None
    parallel_print_run: str | None = None
    serial_owned: str | None = None
    status: CardStatus = CardStatus.NEED


class CardUpdateRequest(BaseModel):
    """Partial update of a single item; only provided fields change."""

    card_number: str | None = None
    player_name: str | None = None
    team: str | None = None
    subset_name: str | None = None
    year: int | None = None
    parallel: str | None = None
    parallel_print_run: str | None = None
    serial_owned: str | None = None
    status: CardStatus | None = None
    display_order: int | None = None


# --- Converters ---


def card_to_response(card: CardRecord) -> CardResponse:
    return CardResponse(
        id=card.id,
        card_number=card.card_number,
        player_name=card.player_name,
        team=card.team,
        subset_name=card.subset_name,
        year=card.year,
        parallel=card.parallel,
        parallel_print_run=card.parallel_print_run,
        serial_owned=card.serial_owned,
        status=card.status,
        display_order=card.display_order,
    )


def stats_to_response(stats: ChecklistStats) -> StatsResponse:
    return StatsResponse(
        total=stats.total,
        owned=stats.owned,
        pending=stats.pending,
        need=stats.need,
        percentage=stats.percentage,
    )


def _group_response(group: ChecklistGroup) -> GroupResponse:
    return GroupResponse(
        year=group.year,
        base=[card_to_response(c) for c in group.base],
        parallels=[
            ParallelGroupResponse(parallel=p.parallel, cards=[card_to_response(c) for c in p.cards])
            for p in group.parallels
        ],
        stats=stats_to_response(group.stats),
    )


def _line_response(line: ParsedLineResult) -> ParsedLineResponse:
    return ParsedLineResponse(
        line_number=line.line_number,
        raw_line=line.raw_line,
        card_number=line.card_number,
        player_name=line.player_name,
        team=line.team,
        year=line.year,
        error=line.error,
    )


def _parallel_response(parallel: ParsedParallel) -> ParsedParallelResponse:
    return ParsedParallelResponse(
        line_number=parallel.line_number,
        raw_line=parallel.raw_line,
        parallel=parallel.parallel,
        parallel_print_run=parallel.parallel_print_run,
        error=parallel.error,
    )


def _match_response(match: DuplicateMatch) -> DuplicateMatchResponse:
    return DuplicateMatchResponse(
        candidate=match.candidate, key=match.key, matched_existing=match.matched_existing
    )


def _bulk_response(preview: BulkStatusPreview, updated_ids: list[str]) -> BulkStatusResponse:
    return BulkStatusResponse(
        target=preview.target,
        matches=[
            StatusMatchResponse(
                identifier=m.identifier,
                matched=card_to_response(m.matched) if m.matched else None,
            )
            for m in preview.matches
        ],
        matched_count=preview.matched_count,
        unmatched_count=preview.unmatched_count,
        already_correct_count=preview.already_correct_count,
        will_update_count=preview.will_update_count,
        updated_ids=updated_ids,
    )


def _require_multi_year(card_set: CardSetDB) -> None:
    if not set_type_of(card_set).is_multi_year:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Only multi-year sets track a year per card",
        )


def _check_paste(text: str) -> None:
    if not text or not text.strip():
        raise KnownError(kind=FailureKind.INVALID_INPUT, message="Pasted text cannot be empty")
    if len(split_lines(text)) > MAX_IMPORT_LINES:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Paste at most {MAX_IMPORT_LINES} lines at a time",
        )


# --- Endpoints ---


@router.get("/checklist", response_model=ChecklistResponse)
async def get_checklist(
    set_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    search: str | None = None,
    status: CardStatus | None = None,
    year: int | None = None,
) -> ChecklistResponse:
    """
    Checklist view: overall stats plus filtered, grouped cards.

    A search term suspends the status filter.
    """
    card_set = await get_set_or_fail(session, set_id)
    set_type = set_type_of(card_set)
    cards = await SqlChecklistStore(session).list_cards(set_id)

    view = build_checklist_view(cards, set_type, search=search, status=status, year=year)
    return ChecklistResponse(
        set_id=set_id,
        set_type=set_type,
        stats=stats_to_response(view.stats),
        groups=[_group_response(g) for g in view.groups],
        grouped_by_year=view.grouped_by_year,
        years=view.years,
        visible_count=view.visible_count,
    )


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    set_id: str,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportPreviewResponse:
    """Parse a paste without writing; rainbow sets parse parallels."""
    _check_paste(request.text)
    card_set = await get_set_or_fail(session, set_id)

    if set_type_of(card_set).is_rainbow:
        parallels = parse_rainbow_text(request.text)
        valid = sum(1 for p in parallels if p.is_valid)
        return ImportPreviewResponse(
            parallels=[_parallel_response(p) for p in parallels],
            valid_count=valid,
            error_count=len(parallels) - valid,
        )

    lines = parse_checklist_text(request.text, request.year)
    valid = sum(1 for line in lines if line.is_valid)
    return ImportPreviewResponse(
        lines=[_line_response(line) for line in lines],
        valid_count=valid,
        error_count=len(lines) - valid,
    )


@router.post("/import", response_model=ImportResponse)
async def import_set_checklist(
    set_id: str,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Import a pasted checklist, skipping rows already in the set.

    Rows with parse errors are ignored. Rows are written in chunks; if a
    chunk fails the response is a persistence failure naming the row it
    started at, and earlier chunks remain saved.
    """
    _check_paste(request.text)
    card_set = await get_set_or_fail(session, set_id)
    set_type = set_type_of(card_set)

    async with operation_guard.hold(("import", set_id)):
        parsed = parse_checklist_text(request.text, request.year)
        result = await import_checklist(
            SqlChecklistStore(session),
            set_id,
            parsed,
            multi_year=set_type.is_multi_year,
            parallel_label=request.parallel_label,
            chunk_size=settings.import_chunk_size,
        )

    return ImportResponse(
        inserted=[card_to_response(c) for c in result.inserted],
        inserted_count=result.inserted_count,
        skipped=result.skipped,
        message=result.get_user_message(),
        diagnostics=[_match_response(m) for m in result.diagnostics],
    )


@router.post("/import/rainbow", response_model=ImportResponse)
async def import_rainbow_parallels(
    set_id: str,
    request: RainbowImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """Import pasted parallels of one card into a rainbow set."""
    _check_paste(request.text)
    card_set = await get_set_or_fail(session, set_id)
    if not set_type_of(card_set).is_rainbow:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Parallel lists can only be imported into rainbow sets",
        )

    async with operation_guard.hold(("import", set_id)):
        result = await import_rainbow(
            SqlChecklistStore(session),
            set_id,
            card_number=request.card_number,
            player_name=request.player_name,
            team=request.team,
            parsed=parse_rainbow_text(request.text),
            chunk_size=settings.import_chunk_size,
        )

    return ImportResponse(
        inserted=[card_to_response(c) for c in result.inserted],
        inserted_count=result.inserted_count,
        skipped=result.skipped,
        message=result.get_user_message(),
    )


@router.post("/bulk-status/preview", response_model=BulkStatusResponse)
async def preview_set_bulk_status(
    set_id: str,
    request: BulkStatusRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkStatusResponse:
    """Match pasted card numbers against the checklist without writing."""
    _check_paste(request.text)
    await get_set_or_fail(session, set_id)
    cards = await SqlChecklistStore(session).list_cards(set_id)
    return _bulk_response(preview_bulk_status(request.text, cards, request.target), [])


@router.post("/bulk-status/apply", response_model=BulkStatusResponse)
async def apply_set_bulk_status(
    set_id: str,
    request: BulkStatusRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkStatusResponse:
    """Re-run the preview against current data and apply it in one batched update."""
    _check_paste(request.text)
    await get_set_or_fail(session, set_id)
    store = SqlChecklistStore(session)

    async with operation_guard.hold(("bulk_status", set_id)):
        cards = await store.list_cards(set_id)
        preview = preview_bulk_status(request.text, cards, request.target)
        updated = await apply_bulk_status(store, set_id, preview)

    return _bulk_response(preview, updated)


@router.post("/cards", response_model=CardResponse, status_code=201)
async def add_card(
    set_id: str,
    request: CardCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Add one card (or one parallel of a card) by hand."""
    await get_set_or_fail(session, set_id)
    card_number = request.card_number.strip()
    player_name = fold_accents(request.player_name.strip())
    if not card_number or not player_name:
        raise KnownError(
            kind=FailureKind.MISSING_REQUIRED,
            message="Card number and player name are required",
        )

    record = CardRecord(
        card_number=card_number,
        player_name=player_name,
        team=fold_accents(request.team.strip()) if request.team and request.team.strip() else None,
        year=request.year,
        parallel=(request.parallel or "").strip() or None,
        parallel_print_run=(request.parallel_print_run or "").strip() or None,
        serial_owned=(request.serial_owned or "").strip() or None,
        status=request.status,
    )
    inserted = await SqlChecklistStore(session).insert_cards(set_id, [record])
    return card_to_response(inserted[0])


@router.patch("/cards/{card_id}", response_model=CardResponse)
async def update_card(
    set_id: str,
    card_id: str,
    request: CardUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Edit fields of one item of this set; blank strings clear optional fields."""
    card_set = await get_set_or_fail(session, set_id)
    fields: dict[str, Any] = request.model_dump(exclude_unset=True)
    if not fields:
        raise KnownError(kind=FailureKind.INVALID_INPUT, message="No fields to update")
    if fields.get("year") is not None:
        _require_multi_year(card_set)
    card = await SqlChecklistStore(session).update_card_fields(set_id, card_id, fields)
    return card_to_response(card)


@router.post("/cards/status", response_model=SelectionResponse)
async def set_selected_status(
    set_id: str,
    request: SelectionStatusRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SelectionResponse:
    """Set status on selected items in one write."""
    await get_set_or_fail(session, set_id)
    async with operation_guard.hold(("selection", set_id)):
        affected = await apply_selected_status(
            SqlChecklistStore(session), set_id, request.ids, request.status
        )
    return SelectionResponse(affected=affected)


@router.post("/cards/year", response_model=SelectionResponse)
async def set_selected_year(
    set_id: str,
    request: SelectionYearRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SelectionResponse:
    """Move selected items to another year in one write."""
    card_set = await get_set_or_fail(session, set_id)
    _require_multi_year(card_set)
    async with operation_guard.hold(("selection", set_id)):
        affected = await apply_selected_year(
            SqlChecklistStore(session), set_id, request.ids, request.year
        )
    return SelectionResponse(affected=affected)


@router.post("/cards/delete", response_model=SelectionResponse)
async def delete_selected_cards(
    set_id: str,
    request: SelectionRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SelectionResponse:
    """Delete selected items in one write."""
    await get_set_or_fail(session, set_id)
    async with operation_guard.hold(("selection", set_id)):
        deleted = await delete_selected(SqlChecklistStore(session), set_id, request.ids)
    return SelectionResponse(affected=deleted)


@router.get("/export.csv")
async def export_checklist(
    set_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    status: Annotated[CardStatus | None, Query()] = None,
) -> Response:
    """Download the checklist as CSV, in card-number order."""
    card_set = await get_set_or_fail(session, set_id)
    cards = await SqlChecklistStore(session).list_cards(set_id)
    view = build_checklist_view(cards, set_type_of(card_set), status=status)
    ordered = [card for group in view.groups for card in group.cards]

    return Response(
        content=export_checklist_csv(ordered),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(card_set.name)}"'
        },
    )

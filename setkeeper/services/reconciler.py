"""
Duplicate reconciliation for bulk checklist imports.

Pasting the same checklist twice must not create the same cards twice.
Before anything is written, every candidate row is reduced to a natural
key and compared against the keys of the rows already in the set:

    card_number|player_name                        (single-year sets)
    card_number|player_name|year|parallel          (multi-year sets)

All parts are trimmed and lowercased. A batch imported under a shared
parallel label ("Refractor") carries that label in its keys, so a base
card and its labeled parallel can coexist in a multi-year set.

INVARIANT: Re-importing an already imported batch inserts nothing and
reports every row as skipped.

New rows are written in sequential chunks. A failed chunk stops the
import; earlier chunks stay committed.
"""

import logging
from dataclasses import dataclass, field

from setkeeper.config import DEFAULT_IMPORT_CHUNK_SIZE
from setkeeper.models.card_record import CardRecord, ParsedLineResult, ParsedParallel
from setkeeper.models.failure import FailureKind, KnownError, PersistenceError
from setkeeper.parsers.checklist_text import fold_accents
from setkeeper.services.store import ChecklistStore

logger = logging.getLogger(__name__)


def normalize_key(
    card_number: str,
    player_name: str,
    year: int | None = None,
    parallel: str | None = None,
    multi_year: bool = False,
) -> str:
    """
    Natural identity key of a checklist row.

    Year and parallel only take part for multi-year sets.
    """
    base = f"{card_number.strip().lower()}|{player_name.strip().lower()}"
    if not multi_year:
        return base
    year_part = "" if year is None else str(year)
    return f"{base}|{year_part}|{(parallel or '').strip().lower()}"


def record_key(card: CardRecord, multi_year: bool) -> str:
    """Natural key of a persisted record."""
    return normalize_key(card.card_number, card.player_name, card.year, card.parallel, multi_year)


@dataclass
class DuplicateMatch:
    """Which existing row a duplicate candidate collided with."""

    candidate: str
    key: str
    matched_existing: str


@dataclass
class ReconcileResult:
    """Outcome of comparing an import batch against the existing checklist."""

    new: list[ParsedLineResult]
    """Candidates whose key is not in the checklist (or earlier in the batch)."""

    duplicates: list[ParsedLineResult]
    """Candidates skipped as duplicates."""

    diagnostics: list[DuplicateMatch] = field(default_factory=list)
    """Per-candidate matches, filled only when every candidate was a duplicate."""

    @property
    def skipped(self) -> int:
        return len(self.duplicates)

    @property
    def all_duplicates(self) -> bool:
        return not self.new and bool(self.duplicates)


@dataclass
class ImportResult:
    """Outcome of a bulk import."""

    inserted: list[CardRecord]
    skipped: int
    diagnostics: list[DuplicateMatch] = field(default_factory=list)
    noun: str = "cards"

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)

    def get_user_message(self) -> str:
        """Short summary for the operator."""
        if not self.inserted:
            if self.skipped:
                return f"All {self.skipped} {self.noun} already exist in this set"
            return f"No {self.noun} to import"
        if self.skipped:
            return (
                f"Imported {self.inserted_count} {self.noun} "
                f"({self.skipped} duplicates skipped)"
            )
        return f"Imported {self.inserted_count} {self.noun}"


def reconcile(
    candidates: list[ParsedLineResult],
    existing: list[CardRecord],
    multi_year: bool,
    parallel_label: str | None = None,
) -> ReconcileResult:
    """
    Partition candidates into new rows and duplicates.

    Args:
        candidates: Parsed rows; rows carrying an error are ignored
        existing: Every row currently persisted for the set
        multi_year: Whether the owning set spans multiple years
        parallel_label: Shared parallel label of the import batch

    Returns:
        ReconcileResult. When every candidate is a duplicate, diagnostics
        names the existing row each one matched.
    """
    existing_by_key: dict[str, CardRecord] = {}
    for card in existing:
        existing_by_key.setdefault(record_key(card, multi_year), card)

    new: list[ParsedLineResult] = []
    duplicates: list[ParsedLineResult] = []
    seen: set[str] = set()

    for candidate in candidates:
        if not candidate.is_valid:
            continue
        key = normalize_key(
            candidate.card_number, candidate.player_name, candidate.year, parallel_label, multi_year
        )
        if key in existing_by_key or key in seen:
            duplicates.append(candidate)
            continue
        seen.add(key)
        new.append(candidate)

    result = ReconcileResult(new=new, duplicates=duplicates)
    if result.all_duplicates:
        result.diagnostics = _explain_duplicates(
            duplicates, existing_by_key, multi_year, parallel_label
        )
    return result


def _explain_duplicates(
    duplicates: list[ParsedLineResult],
    existing_by_key: dict[str, CardRecord],
    multi_year: bool,
    parallel_label: str | None,
) -> list[DuplicateMatch]:
    matches: list[DuplicateMatch] = []
    for candidate in duplicates:
        key = normalize_key(
            candidate.card_number, candidate.player_name, candidate.year, parallel_label, multi_year
        )
        label = candidate.to_record(parallel=parallel_label).label(multi_year)
        matches.append(
            DuplicateMatch(
                candidate=label,
                key=key,
                matched_existing=existing_by_key[key].label(multi_year),
            )
        )
    return matches


async def insert_in_chunks(
    store: ChecklistStore,
    set_id: str,
    rows: list[CardRecord],
    chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE,
) -> list[CardRecord]:
    """
    Insert rows one chunk at a time, strictly in sequence.

    Raises:
        PersistenceError: On the first failed chunk, with its index, the
            1-based row it started at, and how many rows were committed.
    """
    if chunk_size < 1:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)

    inserted: list[CardRecord] = []
    for chunk_index, start in enumerate(range(0, len(rows), chunk_size)):
        chunk = rows[start : start + chunk_size]
        try:
            inserted.extend(await store.insert_cards(set_id, chunk))
        except PersistenceError as e:
            logger.warning(
                "checklist_import_chunk_failed",
                extra={
                    "set_id": set_id,
                    "chunk_index": chunk_index,
                    "first_row": start + 1,
                    "inserted_count": len(inserted),
                },
            )
            raise PersistenceError(
                f"Import failed at row {start + 1}: {e.message}",
                chunk_index=chunk_index,
                first_row=start + 1,
                inserted_count=len(inserted),
                detail=e.detail,
            ) from e
    return inserted


async def import_checklist(
    store: ChecklistStore,
    set_id: str,
    parsed: list[ParsedLineResult],
    multi_year: bool,
    parallel_label: str | None = None,
    chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE,
) -> ImportResult:
    """
    Import parsed checklist rows into a set, skipping duplicates.

    Rows with parse errors are never persisted. When a parallel label is
    given it is stamped on every inserted row.
    """
    label = parallel_label.strip() if parallel_label and parallel_label.strip() else None
    valid = [row for row in parsed if row.is_valid]
    if not valid:
        return ImportResult(inserted=[], skipped=0)

    existing = await store.list_cards(set_id)
    result = reconcile(valid, existing, multi_year, label)

    if not result.new:
        logger.info(
            "all_candidates_duplicate",
            extra={
                "set_id": set_id,
                "multi_year": multi_year,
                "parallel_label": label,
                "existing_count": len(existing),
                "candidate_count": len(valid),
                "matched_pairs": [
                    (m.candidate, m.matched_existing) for m in result.diagnostics[:10]
                ],
            },
        )
        return ImportResult(inserted=[], skipped=result.skipped, diagnostics=result.diagnostics)

    rows = [row.to_record(parallel=label) for row in result.new]
    inserted = await insert_in_chunks(store, set_id, rows, chunk_size)

    logger.info(
        "checklist_import_completed",
        extra={"set_id": set_id, "inserted": len(inserted), "skipped": result.skipped},
    )
    return ImportResult(inserted=inserted, skipped=result.skipped)


# --- Rainbow parallels ---


def reconcile_parallels(
    parsed: list[ParsedParallel],
    existing: list[CardRecord],
) -> tuple[list[ParsedParallel], int]:
    """
    Drop parallels the rainbow card already has.

    Parallels of one card are identified by lowercase parallel name; the
    unnamed base row counts as "".

    Returns:
        (new_parallels, skipped_count)
    """
    seen = {(card.parallel or "").lower() for card in existing}
    valid = [p for p in parsed if p.is_valid]
    new: list[ParsedParallel] = []
    for parallel in valid:
        key = parallel.parallel.lower()
        if key in seen:
            continue
        seen.add(key)
        new.append(parallel)
    return new, len(valid) - len(new)


async def import_rainbow(
    store: ChecklistStore,
    set_id: str,
    card_number: str,
    player_name: str,
    team: str | None,
    parsed: list[ParsedParallel],
    chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE,
) -> ImportResult:
    """
    Add parsed parallels of one card to a rainbow checklist.

    Raises:
        KnownError: If card number or player name is blank.
        PersistenceError: If a chunk fails to insert.
    """
    card_number = card_number.strip()
    player_name = fold_accents(player_name.strip())
    if not card_number or not player_name:
        raise KnownError(
            kind=FailureKind.MISSING_REQUIRED,
            message="Card number and player name are required for rainbow import",
        )

    if not any(p.is_valid for p in parsed):
        return ImportResult(inserted=[], skipped=0, noun="parallels")

    existing = await store.list_cards(set_id, card_number=card_number)
    new, skipped = reconcile_parallels(parsed, existing)
    if not new:
        logger.info(
            "all_parallels_duplicate",
            extra={"set_id": set_id, "card_number": card_number, "skipped": skipped},
        )
        return ImportResult(inserted=[], skipped=skipped, noun="parallels")

    team_value = fold_accents(team.strip()) if team and team.strip() else None
    rows = [
        CardRecord(
            card_number=card_number,
            player_name=player_name,
            team=team_value,
            year=None,
            parallel=p.parallel,
            parallel_print_run=p.parallel_print_run,
        )
        for p in new
    ]
    inserted = await insert_in_chunks(store, set_id, rows, chunk_size)

    logger.info(
        "rainbow_import_completed",
        extra={"set_id": set_id, "card_number": card_number, "inserted": len(inserted)},
    )
    return ImportResult(inserted=inserted, skipped=skipped, noun="parallels")

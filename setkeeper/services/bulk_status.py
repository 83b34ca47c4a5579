"""
Bulk status updates from pasted card numbers.

The operator pastes card numbers (or whole checklist rows, only the first
token is used), previews how they match the checklist, and confirms. The
preview is pure; nothing is written until apply_bulk_status() runs, and
that issues one batched update for every matched card whose status
actually changes.

INVARIANT: every pasted line appears exactly once in the preview, matched
or not, and will_update_count == matched_count - already_correct_count.
"""

import logging
from dataclasses import dataclass, replace

from setkeeper.models.card_record import CardRecord, CardStatus, StatusMatch
from setkeeper.parsers.checklist_text import split_lines
from setkeeper.services.store import ChecklistStore

logger = logging.getLogger(__name__)


def extract_identifiers(text: str) -> list[str]:
    """First token of every non-blank line ("577 Trevor Story" -> "577")."""
    return [line.split(" ", 1)[0] for line in split_lines(text)]


@dataclass
class BulkStatusPreview:
    """What a bulk status change would do, computed without writing."""

    target: CardStatus
    matches: list[StatusMatch]

    @property
    def matched_count(self) -> int:
        return sum(1 for m in self.matches if m.is_matched)

    @property
    def unmatched_count(self) -> int:
        return sum(1 for m in self.matches if not m.is_matched)

    @property
    def already_correct_count(self) -> int:
        return sum(
            1 for m in self.matches if m.matched is not None and m.matched.status == self.target
        )

    @property
    def will_update_count(self) -> int:
        return self.matched_count - self.already_correct_count

    @property
    def unmatched_identifiers(self) -> list[str]:
        return [m.identifier for m in self.matches if not m.is_matched]

    @property
    def ids_to_update(self) -> list[str]:
        """Ids whose status differs from the target, once each, in paste order."""
        ids: list[str] = []
        seen: set[str] = set()
        for m in self.matches:
            card = m.matched
            if card is None or card.id is None or card.status == self.target:
                continue
            if card.id not in seen:
                seen.add(card.id)
                ids.append(card.id)
        return ids


def preview_bulk_status(
    text: str,
    cards: list[CardRecord],
    target: CardStatus,
) -> BulkStatusPreview:
    """
    Match pasted card numbers against a checklist snapshot.

    Matching is case-insensitive on card_number. When several items share
    a card number (parallels), the last one in the snapshot wins.
    """
    by_number: dict[str, CardRecord] = {}
    for card in cards:
        by_number[card.card_number.lower()] = card

    matches = [
        StatusMatch(identifier=identifier, matched=by_number.get(identifier.lower()))
        for identifier in extract_identifiers(text)
    ]
    return BulkStatusPreview(target=target, matches=matches)


async def apply_bulk_status(
    store: ChecklistStore, set_id: str, preview: BulkStatusPreview
) -> list[str]:
    """
    Apply a confirmed preview with a single batched status update.

    Returns:
        The ids that were updated (empty when nothing needed changing,
        in which case no write is issued).
    """
    ids = preview.ids_to_update
    if not ids:
        return []

    await store.update_card_status(set_id, ids, preview.target)
    logger.info(
        "bulk_status_applied",
        extra={
            "set_id": set_id,
            "target": preview.target.value,
            "updated": len(ids),
            "unmatched": preview.unmatched_count,
        },
    )
    return ids


# --- Multi-select actions ---
# Selected ids outside set_id are ignored; each returns how many items it wrote.


def _unique(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


async def apply_selected_status(
    store: ChecklistStore, set_id: str, ids: list[str], status: CardStatus
) -> int:
    """Set status on selected items in one batched write."""
    ids = _unique(ids)
    if not ids:
        return 0
    return await store.update_card_status(set_id, ids, status)


async def apply_selected_year(
    store: ChecklistStore, set_id: str, ids: list[str], year: int
) -> int:
    """Move selected items to another year in one batched write."""
    ids = _unique(ids)
    if not ids:
        return 0
    return await store.update_card_year(set_id, ids, year)


async def delete_selected(store: ChecklistStore, set_id: str, ids: list[str]) -> int:
    """Delete selected items in one batched write."""
    ids = _unique(ids)
    if not ids:
        return 0
    return await store.delete_cards(set_id, ids)


def apply_status_locally(
    cards: list[CardRecord], ids: list[str], status: CardStatus
) -> list[CardRecord]:
    """
    Checklist snapshot with confirmed status changes applied.

    Call only after the write returned; the input list is not modified.
    """
    targets = set(ids)
    updated: list[CardRecord] = []
    for card in cards:
        if card.id in targets and card.status != status:
            card = replace(card, status=status)
        updated.append(card)
    return updated

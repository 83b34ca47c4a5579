"""
Player search across every set.

Answers "which of my sets have this player, and do I own those cards?".
Sets are narrowed first by catalog filters, then the checklist items of
the remaining sets are matched on player name. Hits come back newest
set year first, then by product line, then by card number.
"""

from dataclasses import dataclass

from setkeeper.models.card_record import CardRecord, SetType
from setkeeper.models.failure import FailureKind, KnownError
from setkeeper.parsers.checklist_text import fold_accents
from setkeeper.services.ordering import card_number_key


@dataclass
class SetSummary:
    """Catalog fields of a set, as search filters and results need them."""

    id: str
    name: str
    year: int
    brand: str
    product_line: str
    set_type: SetType = SetType.BASE
    insert_set_name: str | None = None


@dataclass
class SetFilters:
    """Optional catalog filters; None means any."""

    year: int | None = None
    brand: str | None = None
    set_type: SetType | None = None
    insert_set_name: str | None = None

    def accepts(self, card_set: SetSummary) -> bool:
        if self.year is not None and card_set.year != self.year:
            return False
        if self.brand is not None and card_set.brand != self.brand:
            return False
        if self.set_type is not None and card_set.set_type != self.set_type:
            return False
        return self.insert_set_name is None or card_set.insert_set_name == self.insert_set_name


@dataclass
class PlayerSearchHit:
    card: CardRecord
    card_set: SetSummary


def player_search_term(raw: str | None) -> str:
    """
    Trimmed, accent-folded search term.

    Raises:
        KnownError: MISSING_REQUIRED when the term is blank.
    """
    term = (raw or "").strip()
    if not term:
        raise KnownError(
            kind=FailureKind.MISSING_REQUIRED,
            message="Enter a player name to search",
        )
    return fold_accents(term)


def filter_sets(sets: list[SetSummary], filters: SetFilters) -> list[SetSummary]:
    return [s for s in sets if filters.accepts(s)]


def _hit_key(hit: PlayerSearchHit) -> tuple:
    return (
        -hit.card_set.year,
        hit.card_set.product_line.casefold(),
        hit.card_set.name.casefold(),
        card_number_key(hit.card.card_number),
    )


def collect_player_hits(
    term: str,
    sets: list[SetSummary],
    cards_by_set: dict[str, list[CardRecord]],
) -> list[PlayerSearchHit]:
    """
    Join matching cards with their set and order them for display.

    Only cards of the given sets whose player name contains the term
    (case- and accent-insensitive) are kept.
    """
    needle = fold_accents(term).lower()
    hits = [
        PlayerSearchHit(card=card, card_set=card_set)
        for card_set in sets
        for card in cards_by_set.get(card_set.id, [])
        if needle in fold_accents(card.player_name).lower()
    ]
    return sorted(hits, key=_hit_key)

"""
Checklist statistics and display grouping.

Turns the flat list of a set's checklist items into what the checklist
screen shows: completion counts, and the filtered cards grouped by year
(multi-year sets) and then split into base cards and per-parallel groups.
"""

from dataclasses import dataclass, field

from setkeeper.models.card_record import CardRecord, CardStatus, SetType
from setkeeper.parsers.checklist_text import fold_accents
from setkeeper.services.ordering import sort_by_card_number, sort_rainbow


@dataclass
class ChecklistStats:
    """Completion counts for a list of checklist items."""

    total: int = 0
    owned: int = 0
    pending: int = 0
    need: int = 0

    @property
    def percentage(self) -> int:
        """Owned share rounded to a whole percent; 0 for an empty list."""
        if self.total == 0:
            return 0
        # Round half up in integer arithmetic
        return (self.owned * 200 + self.total) // (self.total * 2)


def compute_stats(cards: list[CardRecord]) -> ChecklistStats:
    """Count items by status."""
    stats = ChecklistStats(total=len(cards))
    for card in cards:
        if card.status is CardStatus.OWNED:
            stats.owned += 1
        elif card.status is CardStatus.PENDING:
            stats.pending += 1
        else:
            stats.need += 1
    return stats


def stats_from_counts(counts: dict[str, int]) -> ChecklistStats:
    """Stats from per-status item counts keyed by status value."""
    owned = counts.get(CardStatus.OWNED.value, 0)
    pending = counts.get(CardStatus.PENDING.value, 0)
    total = sum(counts.values())
    return ChecklistStats(total=total, owned=owned, pending=pending, need=total - owned - pending)


def _normalize_search(value: str) -> str:
    return fold_accents(value).lower()


def matches_search(card: CardRecord, term: str) -> bool:
    """Case- and accent-insensitive substring match on number, player and team."""
    needle = _normalize_search(term)
    fields = (card.card_number, card.player_name, card.team or "")
    return any(needle in _normalize_search(value) for value in fields)


def filter_cards(
    cards: list[CardRecord],
    search: str | None = None,
    status: CardStatus | None = None,
    year: int | None = None,
) -> list[CardRecord]:
    """
    Apply search, status and year filters.

    An active search suspends the status filter so a search can find a
    card whatever its status.
    """
    term = search.strip() if search else ""
    result = list(cards)

    if status is not None and not term:
        result = [card for card in result if card.status == status]

    if year is not None:
        result = [card for card in result if card.year == year]

    if term:
        result = [card for card in result if matches_search(card, term)]

    return result


def available_years(cards: list[CardRecord]) -> list[int]:
    """Distinct years present in the checklist, ascending."""
    return sorted({card.year for card in cards if card.year is not None})


@dataclass
class ParallelGroup:
    """Cards of one parallel, in display order."""

    parallel: str
    cards: list[CardRecord]


@dataclass
class ChecklistGroup:
    """
    One display section of a checklist.

    year is set only when the checklist is grouped by year; None then
    means "no year" (that group sorts last).
    """

    year: int | None
    base: list[CardRecord] = field(default_factory=list)
    parallels: list[ParallelGroup] = field(default_factory=list)
    stats: ChecklistStats = field(default_factory=ChecklistStats)

    @property
    def cards(self) -> list[CardRecord]:
        """All cards in display order: base first, then each parallel."""
        ordered = list(self.base)
        for group in self.parallels:
            ordered.extend(group.cards)
        return ordered


@dataclass
class ChecklistView:
    """Everything the checklist screen needs to render."""

    stats: ChecklistStats
    groups: list[ChecklistGroup]
    grouped_by_year: bool
    years: list[int]
    visible_count: int


def order_cards(cards: list[CardRecord], set_type: SetType) -> list[CardRecord]:
    """Cards in the display order for the set type."""
    if set_type.is_rainbow:
        return sort_rainbow(cards)
    return sort_by_card_number(cards)


def split_base_and_parallels(
    cards: list[CardRecord],
) -> tuple[list[CardRecord], list[ParallelGroup]]:
    """
    Split already-ordered cards into base cards and per-parallel groups.

    Parallel groups appear in the order their first card appears, and
    keep the incoming order inside each group.
    """
    base: list[CardRecord] = []
    by_parallel: dict[str, list[CardRecord]] = {}
    for card in cards:
        if card.parallel:
            by_parallel.setdefault(card.parallel, []).append(card)
        else:
            base.append(card)
    return base, [ParallelGroup(parallel=name, cards=group) for name, group in by_parallel.items()]


def _make_group(year: int | None, cards: list[CardRecord]) -> ChecklistGroup:
    base, parallels = split_base_and_parallels(cards)
    return ChecklistGroup(year=year, base=base, parallels=parallels, stats=compute_stats(cards))


def group_checklist(
    cards: list[CardRecord],
    set_type: SetType,
    year_filter: int | None = None,
) -> list[ChecklistGroup]:
    """
    Group filtered cards for display.

    Multi-year sets without a year filter get one group per year
    (ascending, no-year last); everything else is a single group.
    """
    ordered = order_cards(cards, set_type)

    if not set_type.is_multi_year or year_filter is not None:
        return [_make_group(None, ordered)]

    by_year: dict[int | None, list[CardRecord]] = {}
    for card in ordered:
        by_year.setdefault(card.year, []).append(card)

    years = sorted(by_year, key=lambda y: (y is None, y or 0))
    return [_make_group(year, by_year[year]) for year in years]


def build_checklist_view(
    cards: list[CardRecord],
    set_type: SetType,
    search: str | None = None,
    status: CardStatus | None = None,
    year: int | None = None,
) -> ChecklistView:
    """
    Stats over the whole checklist plus the filtered, grouped cards.

    The year filter only applies to multi-year sets.
    """
    year_filter = year if set_type.is_multi_year else None
    visible = filter_cards(cards, search=search, status=status, year=year_filter)
    groups = group_checklist(visible, set_type, year_filter)
    return ChecklistView(
        stats=compute_stats(cards),
        groups=groups,
        grouped_by_year=set_type.is_multi_year and year_filter is None,
        years=available_years(cards) if set_type.is_multi_year else [],
        visible_count=len(visible),
    )

"""
Checklist card records.

A CardRecord is one row of a set's checklist: a specific card and, for
rainbow and parallel checklists, a specific print variant of it.

Parsed rows carry their source line so the operator can see exactly
which pasted line produced which record (and why it was rejected).
"""

from dataclasses import dataclass
from enum import Enum


class CardStatus(str, Enum):
    """Collection status of a checklist item."""

    NEED = "need"
    PENDING = "pending"
    OWNED = "owned"


class SetType(str, Enum):
    """Kind of card set a checklist belongs to."""

    BASE = "base"
    INSERT = "insert"
    RAINBOW = "rainbow"
    MULTI_YEAR_INSERT = "multi_year_insert"

    @property
    def is_multi_year(self) -> bool:
        return self is SetType.MULTI_YEAR_INSERT

    @property
    def is_rainbow(self) -> bool:
        return self is SetType.RAINBOW


@dataclass
class CardRecord:
    """
    A persisted (or about-to-be-persisted) checklist item.

    Attributes:
        card_number: Card number as printed, may carry prefixes ("90AS-12")
        player_name: Player name, accent-folded when it came from a paste
        team: Team name, if known
        year: Year for multi-year sets, None otherwise
        parallel: Parallel/insert variant name, None for the base card
        parallel_print_run: Print run denominator as text ("50" for /50)
        serial_owned: Serial numerator the collector owns ("17" for 17/50)
        status: need / pending / owned
        display_order: Manual ordering override for rainbow checklists
        subset_name: Subset the card belongs to, if any
        id: Persistence identity, None until inserted
    """

    card_number: str
    player_name: str
    team: str | None = None
    year: int | None = None
    parallel: str | None = None
    parallel_print_run: str | None = None
    serial_owned: str | None = None
    status: CardStatus = CardStatus.NEED
    display_order: int | None = None
    subset_name: str | None = None
    id: str | None = None

    @property
    def is_parallel(self) -> bool:
        return bool(self.parallel)

    def label(self, multi_year: bool = False) -> str:
        """Short human label, e.g. "577 - Trevor Story (2023, Refractor)"."""
        text = f"{self.card_number} - {self.player_name}"
        if multi_year:
            year = self.year if self.year is not None else "no year"
            suffix = f", {self.parallel}" if self.parallel else ""
            text += f" ({year}{suffix})"
        return text


@dataclass
class ParsedLineResult:
    """One non-blank line of a pasted checklist after parsing."""

    card_number: str
    player_name: str
    raw_line: str
    line_number: int
    team: str | None = None
    year: int | None = None
    parallel: str | None = None
    parallel_print_run: str | None = None
    serial_owned: str | None = None
    status: CardStatus = CardStatus.NEED
    display_order: int | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def to_record(self, parallel: str | None = None) -> CardRecord:
        """
        Convert to a CardRecord ready for insertion.

        Args:
            parallel: Shared parallel label for the whole import batch;
                overrides the parsed value when given.

        Raises:
            ValueError: If the line carries a parse error.
        """
        if self.error is not None:
            msg = f"Line {self.line_number} cannot be imported: {self.error}"
            raise ValueError(msg)
        return CardRecord(
            card_number=self.card_number,
            player_name=self.player_name,
            team=self.team,
            year=self.year,
            parallel=parallel if parallel is not None else self.parallel,
            parallel_print_run=self.parallel_print_run,
            serial_owned=self.serial_owned,
            status=self.status,
            display_order=self.display_order,
        )


@dataclass
class ParsedParallel:
    """One line of a pasted rainbow parallel list after parsing."""

    parallel: str
    parallel_print_run: str | None
    raw_line: str
    line_number: int
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass
class StatusMatch:
    """A pasted identifier and the checklist item it matched, if any."""

    identifier: str
    matched: CardRecord | None = None

    @property
    def is_matched(self) -> bool:
        return self.matched is not None

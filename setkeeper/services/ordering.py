"""
Checklist ordering.

Two orders are used when displaying a checklist:

- Card-number order: natural alphanumeric sort, so "90AS-2" comes before
  "90AS-10" while cards still group by their prefix.
- Rainbow order: manually ordered parallels first, then unnumbered
  parallels, then numbered parallels from the largest print run down to
  the 1/1.

Both are built on sort keys so the comparators are total orders and
never raise, whatever text ends up in the card number or print run.
"""

import re

from setkeeper.models.card_record import CardRecord

# Groups: (prefix, trailing_digits)
CARD_NUMBER_PATTERN = re.compile(r"^(.*?)(\d+)$")


def card_number_key(card_number: str) -> tuple[str, int, str]:
    """
    Sort key for natural card-number order.

    "90AS-12" -> ("90AS-", 12, "90AS-12")
    "BASE"    -> ("BASE", -1, "BASE")

    The full string is the last element so "7" and "07" still order
    deterministically.
    """
    match = CARD_NUMBER_PATTERN.match(card_number)
    if match:
        return match.group(1), int(match.group(2)), card_number
    return card_number, -1, card_number


def _sign(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def compare_card_numbers(a: str, b: str) -> int:
    """
    Compare two card numbers in natural order.

    Prefixes compare lexicographically; on equal prefixes the trailing
    numbers compare as integers. Numbers without trailing digits compare
    as plain strings.

    Returns:
        -1, 0 or 1.
    """
    return _sign(card_number_key(a), card_number_key(b))


def print_run_value(print_run: str | None) -> int | None:
    """
    Numeric print run, or None when the text is not a plain number.

    "50" -> 50, "/50" -> 50, "1 of 1" -> None.
    """
    if print_run is None:
        return None
    text = print_run.strip().lstrip("/").strip()
    if not text.isdigit():
        return None
    return int(text)


def rainbow_key(card: CardRecord) -> tuple[int, int, int, str]:
    """
    Sort key for rainbow order.

    Tiers, in order:
        0. explicit display_order, ascending
        1. unnumbered (no print run)
        2. numbered, print run descending
        3. print run text that is not a number, by text
    """
    if card.display_order is not None:
        return 0, card.display_order, 0, ""

    run = card.parallel_print_run
    if run is None or not run.strip():
        return 1, 0, 0, ""

    value = print_run_value(run)
    if value is None:
        return 3, 0, 0, run
    return 2, 0, -value, ""


def compare_by_print_run(a: CardRecord, b: CardRecord) -> int:
    """
    Compare two rainbow records.

    Returns:
        -1, 0 or 1.
    """
    return _sign(rainbow_key(a), rainbow_key(b))


def sort_by_card_number(cards: list[CardRecord]) -> list[CardRecord]:
    """Cards in natural card-number order (new list)."""
    return sorted(cards, key=lambda card: card_number_key(card.card_number))


def sort_rainbow(cards: list[CardRecord]) -> list[CardRecord]:
    """Cards in rainbow order (new list, stable for ties)."""
    return sorted(cards, key=rainbow_key)

"""
Parser for pasted rainbow parallel lists.

Each line is one parallel of a single card:
- "Sky Blue – /499"
- "Gold - /50"
- "Platinum – 1/1"
- "Base"  (no dash: unnumbered parallel)

Hyphen, en dash and em dash are all accepted as the separator.
"""

import re

from setkeeper.models.card_record import ParsedParallel
from setkeeper.parsers.checklist_text import split_lines

MISSING_NAME_ERROR = "Missing parallel name"

DASHES = "-–—"

# "Gold Refractor - /50": whitespace before the dash, last such dash wins
# so hyphenated names ("Black-White - /25") keep their hyphen.
# Groups: (name, serial_part)
SPACED_DASH_PATTERN = re.compile(rf"^(.*\S)\s+[{DASHES}]\s*(.*)$")

# "Gold-/50", "–/10": bare dash, only when a serial number follows
# Groups: (name, serial_part)
BARE_DASH_PATTERN = re.compile(rf"^(.*?)\s*[{DASHES}]\s*(/\s*\d+|\d+(?:\s*/\s*\d+)?)$")

DIGITS_PATTERN = re.compile(r"^\d+$")


def parse_serial_part(part: str) -> str | None:
    """
    Extract the print run (denominator) from a serial fragment.

    "/499" -> "499", "1/1" -> "1", "25" -> "25", anything else -> None.
    """
    part = part.strip()
    if part.startswith("/"):
        return part[1:].strip() or None
    if "/" in part:
        return part.rsplit("/", 1)[1].strip() or None
    if DIGITS_PATTERN.match(part):
        return part
    return None


def parse_parallel_line(line: str, line_number: int) -> ParsedParallel:
    """Parse one trimmed, non-blank parallel line."""
    match = SPACED_DASH_PATTERN.match(line) or BARE_DASH_PATTERN.match(line)
    if not match:
        return ParsedParallel(
            parallel=line,
            parallel_print_run=None,
            raw_line=line,
            line_number=line_number,
        )

    name = match.group(1).strip()
    print_run = parse_serial_part(match.group(2))
    return ParsedParallel(
        parallel=name,
        parallel_print_run=print_run,
        raw_line=line,
        line_number=line_number,
        error=None if name else MISSING_NAME_ERROR,
    )


def parse_rainbow_text(text: str) -> list[ParsedParallel]:
    """
    Parse a pasted list of parallels for one rainbow card.

    Returns:
        One result per non-blank line, in input order. Lines without a
        dash are valid unnumbered parallels; a dash with nothing before
        it is a "Missing parallel name" error.
    """
    return [
        parse_parallel_line(line, index) for index, line in enumerate(split_lines(text), start=1)
    ]

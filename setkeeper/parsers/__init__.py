from setkeeper.parsers.checklist_text import (
    fold_accents,
    parse_checklist_text,
    split_lines,
)
from setkeeper.parsers.rainbow import (
    parse_rainbow_text,
    parse_serial_part,
)

__all__ = [
    "fold_accents",
    "parse_checklist_text",
    "parse_rainbow_text",
    "parse_serial_part",
    "split_lines",
]

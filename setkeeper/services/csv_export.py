"""
CSV export of a checklist.

Every cell is double-quoted; embedded quotes are doubled.
"""

import csv
import re
from io import StringIO

from setkeeper.models.card_record import CardRecord

CSV_HEADERS = [
    "Card Number",
    "Player Name",
    "Team",
    "Subset",
    "Parallel",
    "Serial Owned",
    "Status",
]


def export_checklist_csv(cards: list[CardRecord]) -> str:
    """Render checklist items as CSV text, one row per item."""
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for card in cards:
        writer.writerow(
            [
                card.card_number,
                card.player_name,
                card.team or "",
                card.subset_name or "",
                card.parallel or "",
                card.serial_owned or "",
                card.status.value,
            ]
        )
    return buffer.getvalue()


def export_filename(set_name: str) -> str:
    """Download filename for a set ("2023 Topps" -> "2023_Topps_checklist.csv")."""
    return f"{re.sub(r'[^a-z0-9]', '_', set_name, flags=re.IGNORECASE)}_checklist.csv"

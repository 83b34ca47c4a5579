"""
Parser for pasted plain-text checklists.

One card per line:
- "577 Trevor Story - Boston Red Sox"
- "100 Pete Crow-Armstrong - Chicago Cubs"
- "27 Mike Trout, Angels"
- "BDC-7 Jackson Holliday"

The card number is everything before the first space. The rest is split
into player and team on the last " - ", else on the last comma, else it
is all player name. Bad lines are returned with an error, never dropped.
"""

import unicodedata

from setkeeper.models.card_record import ParsedLineResult

PLAYER_NAME_ERROR = "Could not parse player name"

TEAM_DELIMITER = " - "


def fold_accents(value: str) -> str:
    """
    Strip diacritics so matching is accent-insensitive.

    "José Ramírez" -> "Jose Ramirez"
    """
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def split_lines(text: str) -> list[str]:
    """Trimmed, non-blank lines of a paste, in order."""
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line]


def split_player_team(remainder: str) -> tuple[str, str | None]:
    """
    Split "Player - Team" / "Player, Team" into its parts.

    Uses the last delimiter so hyphens and commas inside the player
    name survive ("Pete Crow-Armstrong - Chicago Cubs").
    """
    dash_index = remainder.rfind(TEAM_DELIMITER)
    if dash_index != -1:
        player = remainder[:dash_index].strip()
        team = remainder[dash_index + len(TEAM_DELIMITER) :].strip()
        return player, team or None

    comma_index = remainder.rfind(",")
    if comma_index != -1:
        player = remainder[:comma_index].strip()
        team = remainder[comma_index + 1 :].strip()
        return player, team or None

    return remainder, None


def parse_checklist_line(line: str, line_number: int, year: int | None) -> ParsedLineResult:
    """Parse one trimmed, non-blank checklist line."""
    space_index = line.find(" ")
    if space_index == -1:
        return ParsedLineResult(
            card_number=line,
            player_name="",
            team=None,
            year=year,
            raw_line=line,
            line_number=line_number,
            error=PLAYER_NAME_ERROR,
        )

    card_number = line[:space_index].strip()
    remainder = line[space_index + 1 :].strip()
    player, team = split_player_team(remainder)

    player = fold_accents(player)
    if team is not None:
        team = fold_accents(team)

    return ParsedLineResult(
        card_number=card_number,
        player_name=player,
        team=team,
        year=year,
        raw_line=line,
        line_number=line_number,
        error=None if player else PLAYER_NAME_ERROR,
    )


def parse_checklist_text(text: str, default_year: int | None = None) -> list[ParsedLineResult]:
    """
    Parse a pasted checklist into one result per non-blank line.

    Args:
        text: Raw pasted text, one card per line
        default_year: Year stamped on every row (multi-year sets)

    Returns:
        Results in input order. line_number counts non-blank lines from 1.
        Rows with an unparseable player name carry an error and must not
        be imported.
    """
    year = default_year or None
    return [
        parse_checklist_line(line, index, year)
        for index, line in enumerate(split_lines(text), start=1)
    ]

"""Tests for the rainbow parallel parser."""

import pytest

from setkeeper.parsers.rainbow import MISSING_NAME_ERROR, parse_rainbow_text, parse_serial_part


class TestParseRainbowText:
    def test_en_dash_with_slash(self) -> None:
        result = parse_rainbow_text("Sky Blue – /499")

        assert len(result) == 1
        assert result[0].parallel == "Sky Blue"
        assert result[0].parallel_print_run == "499"
        assert result[0].error is None

    def test_one_of_one_keeps_denominator(self) -> None:
        result = parse_rainbow_text("Platinum – 1/1")

        assert result[0].parallel == "Platinum"
        assert result[0].parallel_print_run == "1"

    def test_no_dash_is_unnumbered(self) -> None:
        result = parse_rainbow_text("Base")

        assert result[0].parallel == "Base"
        assert result[0].parallel_print_run is None
        assert result[0].error is None

    @pytest.mark.parametrize("dash", ["-", "–", "—"])
    def test_all_dashes_accepted(self, dash: str) -> None:
        result = parse_rainbow_text(f"Gold {dash} /50")

        assert result[0].parallel == "Gold"
        assert result[0].parallel_print_run == "50"

    def test_dash_without_spaces(self) -> None:
        result = parse_rainbow_text("Gold–/50")

        assert result[0].parallel == "Gold"
        assert result[0].parallel_print_run == "50"

    def test_bare_number(self) -> None:
        result = parse_rainbow_text("Red Refractor - 5")

        assert result[0].parallel == "Red Refractor"
        assert result[0].parallel_print_run == "5"

    def test_hyphenated_name_kept(self) -> None:
        result = parse_rainbow_text("Black-White Checker - /25")

        assert result[0].parallel == "Black-White Checker"
        assert result[0].parallel_print_run == "25"

    def test_hyphenated_name_without_serial(self) -> None:
        result = parse_rainbow_text("Black-White Checker")

        assert result[0].parallel == "Black-White Checker"
        assert result[0].parallel_print_run is None

    def test_unrecognized_serial_part(self) -> None:
        result = parse_rainbow_text("Superfractor - one of one")

        assert result[0].parallel == "Superfractor"
        assert result[0].parallel_print_run is None
        assert result[0].error is None

    def test_missing_name_is_error(self) -> None:
        result = parse_rainbow_text("– /50")

        assert result[0].parallel == ""
        assert result[0].error == MISSING_NAME_ERROR
        assert not result[0].is_valid

    def test_blank_lines_skipped_and_numbered(self, sample_rainbow_text: str) -> None:
        result = parse_rainbow_text("\n" + sample_rainbow_text.replace("\n", "\n\n"))

        assert [p.parallel for p in result] == ["Base", "Sky Blue", "Gold", "Orange", "Platinum"]
        assert [p.parallel_print_run for p in result] == [None, "499", "50", "25", "1"]
        assert [p.line_number for p in result] == [1, 2, 3, 4, 5]

    def test_empty_input(self) -> None:
        assert parse_rainbow_text("") == []
        assert parse_rainbow_text("  \n ") == []


class TestParseSerialPart:
    @pytest.mark.parametrize(
        ("part", "expected"),
        [
            ("/499", "499"),
            ("/ 99", "99"),
            ("1/1", "1"),
            ("12/25", "25"),
            ("75", "75"),
            ("", None),
            ("/", None),
            ("SP", None),
        ],
    )
    def test_values(self, part: str, expected: str | None) -> None:
        assert parse_serial_part(part) == expected

"""Tests for cross-set player search."""

import pytest

from setkeeper.models.card_record import CardRecord, CardStatus, SetType
from setkeeper.models.failure import FailureKind, KnownError
from setkeeper.services.player_search import (
    SetFilters,
    SetSummary,
    collect_player_hits,
    filter_sets,
    player_search_term,
)


def _sets() -> list[SetSummary]:
    return [
        SetSummary(
            id="topps-22", name="2022 Topps", year=2022, brand="Topps", product_line="Series 1"
        ),
        SetSummary(
            id="bowman-23", name="2023 Bowman", year=2023, brand="Bowman", product_line="Chrome"
        ),
        SetSummary(
            id="topps-23",
            name="2023 Topps Heritage",
            year=2023,
            brand="Topps",
            product_line="Heritage",
            set_type=SetType.MULTI_YEAR_INSERT,
            insert_set_name="Clubhouse Collection",
        ),
    ]


class TestPlayerSearchTerm:
    def test_trims_and_folds(self) -> None:
        assert player_search_term("  Ramírez ") == "Ramirez"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_is_rejected(self, raw: str | None) -> None:
        with pytest.raises(KnownError) as exc_info:
            player_search_term(raw)

        assert exc_info.value.kind == FailureKind.MISSING_REQUIRED


class TestFilterSets:
    def test_no_filters_keeps_everything(self) -> None:
        assert filter_sets(_sets(), SetFilters()) == _sets()

    def test_filters_combine(self) -> None:
        """Every given filter must match."""
        result = filter_sets(_sets(), SetFilters(year=2023, brand="Topps"))

        assert [s.id for s in result] == ["topps-23"]

    def test_set_type_and_insert_name(self) -> None:
        by_type = filter_sets(_sets(), SetFilters(set_type=SetType.MULTI_YEAR_INSERT))
        by_insert = filter_sets(_sets(), SetFilters(insert_set_name="Clubhouse Collection"))

        assert [s.id for s in by_type] == ["topps-23"]
        assert [s.id for s in by_insert] == ["topps-23"]

    def test_no_match(self) -> None:
        assert filter_sets(_sets(), SetFilters(brand="Panini")) == []


class TestCollectPlayerHits:
    def test_newest_year_then_product_line(self) -> None:
        sets = _sets()
        cards_by_set = {
            "topps-22": [CardRecord(card_number="27", player_name="Mike Trout")],
            "topps-23": [CardRecord(card_number="10", player_name="Mike Trout")],
            "bowman-23": [
                CardRecord(card_number="BCP-12", player_name="Mike Trout"),
                CardRecord(card_number="BCP-2", player_name="Mike Trout"),
            ],
        }

        hits = collect_player_hits("trout", sets, cards_by_set)

        assert [(h.card_set.id, h.card.card_number) for h in hits] == [
            ("bowman-23", "BCP-2"),
            ("bowman-23", "BCP-12"),
            ("topps-23", "10"),
            ("topps-22", "27"),
        ]

    def test_accent_and_case_insensitive(self) -> None:
        sets = _sets()[:1]
        cards_by_set = {
            "topps-22": [
                CardRecord(card_number="599", player_name="José Ramírez", status=CardStatus.OWNED),
                CardRecord(card_number="600", player_name="Harold Ramirez"),
                CardRecord(card_number="601", player_name="Shane Bieber"),
            ]
        }

        hits = collect_player_hits("RAMIREZ", sets, cards_by_set)

        assert [h.card.card_number for h in hits] == ["599", "600"]
        assert hits[0].card.status == CardStatus.OWNED

    def test_cards_of_unlisted_sets_dropped(self) -> None:
        hits = collect_player_hits(
            "trout",
            _sets()[:1],
            {"other": [CardRecord(card_number="1", player_name="Mike Trout")]},
        )

        assert hits == []

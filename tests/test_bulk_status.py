"""Tests for bulk status matching and multi-select actions."""

import pytest

from setkeeper.models.card_record import CardRecord, CardStatus
from setkeeper.services.bulk_status import (
    apply_bulk_status,
    apply_selected_status,
    apply_selected_year,
    apply_status_locally,
    delete_selected,
    extract_identifiers,
    preview_bulk_status,
)


def _checklist() -> list[CardRecord]:
    return [
        CardRecord(card_number="577", player_name="Trevor Story", id="c1"),
        CardRecord(
            card_number="581", player_name="Andruw Monasterio", status=CardStatus.OWNED, id="c2"
        ),
        CardRecord(card_number="BDC-7", player_name="Jackson Holliday", id="c3"),
        CardRecord(
            card_number="599", player_name="Jose Ramirez", status=CardStatus.PENDING, id="c4"
        ),
    ]


class TestExtractIdentifiers:
    def test_first_token_of_each_line(self) -> None:
        text = "577 Trevor Story - Boston Red Sox\n\n  BDC-7\n999 Nobody"

        assert extract_identifiers(text) == ["577", "BDC-7", "999"]

    def test_empty(self) -> None:
        assert extract_identifiers(" \n\n") == []


class TestPreviewBulkStatus:
    def test_every_line_appears_once(self) -> None:
        text = "577\n581\n999\nbdc-7\n577"

        preview = preview_bulk_status(text, _checklist(), CardStatus.OWNED)

        assert [m.identifier for m in preview.matches] == ["577", "581", "999", "bdc-7", "577"]
        assert preview.matched_count + preview.unmatched_count == 5

    def test_counts(self) -> None:
        preview = preview_bulk_status("577\n581\n999\nbdc-7", _checklist(), CardStatus.OWNED)

        assert preview.matched_count == 3
        assert preview.unmatched_count == 1
        assert preview.already_correct_count == 1
        assert preview.will_update_count == 2
        assert preview.unmatched_identifiers == ["999"]

    @pytest.mark.parametrize("target", list(CardStatus))
    def test_will_update_identity(self, target: CardStatus) -> None:
        preview = preview_bulk_status("577\n581\n599\nBDC-7\nX1", _checklist(), target)

        assert (
            preview.will_update_count == preview.matched_count - preview.already_correct_count
        )
        assert len(preview.ids_to_update) == preview.will_update_count

    def test_case_insensitive_match(self) -> None:
        preview = preview_bulk_status("bdc-7", _checklist(), CardStatus.OWNED)

        assert preview.matches[0].matched is not None
        assert preview.matches[0].matched.id == "c3"

    def test_last_item_with_same_number_wins(self) -> None:
        cards = [
            CardRecord(card_number="1", player_name="A", parallel="Gold", id="gold"),
            CardRecord(card_number="1", player_name="A", parallel="Red", id="red"),
        ]

        preview = preview_bulk_status("1", cards, CardStatus.OWNED)

        assert preview.ids_to_update == ["red"]

    def test_repeated_identifier_updates_once(self) -> None:
        preview = preview_bulk_status("577\n577", _checklist(), CardStatus.OWNED)

        assert preview.matched_count == 2
        assert preview.ids_to_update == ["c1"]

    def test_preview_does_not_modify_cards(self) -> None:
        cards = _checklist()

        preview_bulk_status("577\n581", cards, CardStatus.PENDING)

        assert cards[0].status == CardStatus.NEED
        assert cards[1].status == CardStatus.OWNED


class TestApplyBulkStatus:
    async def test_single_batched_write(self, store_factory) -> None:
        store = store_factory(_checklist())
        cards = await store.list_cards("set-1")
        preview = preview_bulk_status("577\n581\nBDC-7\n599", cards, CardStatus.OWNED)

        updated = await apply_bulk_status(store, "set-1", preview)

        assert updated == ["c1", "c3", "c4"]
        assert store.status_calls == [(["c1", "c3", "c4"], CardStatus.OWNED)]
        assert {c.status for c in await store.list_cards("set-1")} == {CardStatus.OWNED}

    async def test_no_write_when_nothing_changes(self, store_factory) -> None:
        store = store_factory(_checklist())
        cards = await store.list_cards("set-1")
        preview = preview_bulk_status("581\n999", cards, CardStatus.OWNED)

        assert await apply_bulk_status(store, "set-1", preview) == []
        assert store.status_calls == []

    async def test_unmatched_only(self, store) -> None:
        preview = preview_bulk_status("999", [], CardStatus.OWNED)

        assert await apply_bulk_status(store, "set-1", preview) == []
        assert store.status_calls == []


class TestSelectionActions:
    async def test_selected_status_deduplicates(self, store_factory) -> None:
        store = store_factory(_checklist())

        affected = await apply_selected_status(
            store, "set-1", ["c1", "c2", "c1"], CardStatus.PENDING
        )

        assert affected == 2
        assert store.status_calls == [(["c1", "c2"], CardStatus.PENDING)]

    async def test_selected_status_empty(self, store) -> None:
        assert await apply_selected_status(store, "set-1", [], CardStatus.OWNED) == 0
        assert store.status_calls == []

    async def test_selected_year(self, store_factory) -> None:
        store = store_factory(_checklist())

        affected = await apply_selected_year(store, "set-1", ["c3"], 2024)

        assert affected == 1
        assert store.year_calls == [(["c3"], 2024)]
        cards = {c.id: c for c in await store.list_cards("set-1")}
        assert cards["c3"].year == 2024

    async def test_delete_selected(self, store_factory) -> None:
        store = store_factory(_checklist())

        removed = await delete_selected(store, "set-1", ["c1", "c1", "c4"])

        assert removed == 2
        assert store.delete_calls == [["c1", "c4"]]
        assert [c.id for c in await store.list_cards("set-1")] == ["c2", "c3"]

    async def test_delete_nothing(self, store) -> None:
        assert await delete_selected(store, "set-1", []) == 0
        assert store.delete_calls == []

    async def test_ids_of_another_set_untouched(self, store_factory) -> None:
        """Selections only reach items of the set they were made in."""
        store = store_factory(_checklist())
        other = store.add("set-2", CardRecord(card_number="1", player_name="Mike Trout", id="o1"))

        status_affected = await apply_selected_status(
            store, "set-1", ["c1", other.id], CardStatus.OWNED
        )
        year_affected = await apply_selected_year(store, "set-1", [other.id], 2024)
        removed = await delete_selected(store, "set-1", [other.id])

        assert status_affected == 1
        assert year_affected == 0
        assert removed == 0
        assert await store.list_cards("set-2") == [other]


class TestApplyStatusLocally:
    def test_only_targets_change(self) -> None:
        cards = _checklist()

        result = apply_status_locally(cards, ["c1", "c3"], CardStatus.OWNED)

        assert [c.status for c in result] == [
            CardStatus.OWNED,
            CardStatus.OWNED,
            CardStatus.OWNED,
            CardStatus.PENDING,
        ]
        assert cards[0].status == CardStatus.NEED

    def test_unchanged_cards_are_same_objects(self) -> None:
        cards = _checklist()

        result = apply_status_locally(cards, ["c1"], CardStatus.OWNED)

        assert result[1] is cards[1]
        assert result[0] is not cards[0]

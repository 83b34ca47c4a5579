import itertools
from dataclasses import replace
from typing import Any

import pytest

from setkeeper.models.card_record import CardRecord, CardStatus
from setkeeper.models.failure import NotFoundError, PersistenceError


class InMemoryChecklistStore:
    """
    Checklist store kept in a list, for service tests.

    Records every write so tests can assert how many calls were made.
    fail_on_insert_call makes the Nth insert_cards call (1-based) fail.
    """

    def __init__(self, cards: list[CardRecord] | None = None, fail_on_insert_call: int = 0):
        self._ids = itertools.count(1)
        self.cards: dict[str, list[CardRecord]] = {}
        self.insert_calls: list[list[CardRecord]] = []
        self.status_calls: list[tuple[list[str], CardStatus]] = []
        self.year_calls: list[tuple[list[str], int]] = []
        self.delete_calls: list[list[str]] = []
        self.fail_on_insert_call = fail_on_insert_call
        for card in cards or []:
            self.add("set-1", card)

    def add(self, set_id: str, card: CardRecord) -> CardRecord:
        stored = replace(card, id=card.id or f"card-{next(self._ids)}")
        self.cards.setdefault(set_id, []).append(stored)
        return stored

    def all_cards(self) -> list[CardRecord]:
        return [card for cards in self.cards.values() for card in cards]

    async def list_cards(self, set_id: str, card_number: str | None = None) -> list[CardRecord]:
        cards = list(self.cards.get(set_id, []))
        if card_number is not None:
            cards = [c for c in cards if c.card_number == card_number]
        return cards

    async def insert_cards(self, set_id: str, rows: list[CardRecord]) -> list[CardRecord]:
        self.insert_calls.append(list(rows))
        if self.fail_on_insert_call and len(self.insert_calls) == self.fail_on_insert_call:
            raise PersistenceError("Failed to insert checklist items", detail="constraint violation")
        return [self.add(set_id, row) for row in rows]

    async def update_card_status(self, set_id: str, ids: list[str], status: CardStatus) -> int:
        self.status_calls.append((list(ids), status))
        return self._update(set_id, ids, status=status)

    async def update_card_year(self, set_id: str, ids: list[str], year: int) -> int:
        self.year_calls.append((list(ids), year))
        return self._update(set_id, ids, year=year)

    async def update_card_fields(
        self, set_id: str, card_id: str, fields: dict[str, Any]
    ) -> CardRecord:
        cards = self.cards.get(set_id, [])
        for index, card in enumerate(cards):
            if card.id == card_id:
                cards[index] = replace(card, **fields)
                return cards[index]
        raise NotFoundError("card", card_id)

    async def delete_cards(self, set_id: str, ids: list[str]) -> int:
        self.delete_calls.append(list(ids))
        targets = set(ids)
        cards = self.cards.get(set_id, [])
        kept = [c for c in cards if c.id not in targets]
        self.cards[set_id] = kept
        return len(cards) - len(kept)

    def _update(self, set_id: str, ids: list[str], **changes: Any) -> int:
        targets = set(ids)
        cards = self.cards.get(set_id, [])
        updated = 0
        for index, card in enumerate(cards):
            if card.id in targets:
                cards[index] = replace(card, **changes)
                updated += 1
        return updated


@pytest.fixture
def store() -> InMemoryChecklistStore:
    """Empty in-memory checklist store."""
    return InMemoryChecklistStore()


@pytest.fixture
def store_factory():
    """Build in-memory stores with seeded cards or injected failures."""
    return InMemoryChecklistStore


@pytest.fixture
def sample_checklist_text() -> str:
    """Sample pasted base checklist."""
    return """577 Trevor Story - Boston Red Sox
581 Andruw Monasterio - Milwaukee Brewers
599 José Ramírez - Cleveland Guardians
100 Pete Crow-Armstrong - Chicago Cubs"""


@pytest.fixture
def sample_rainbow_text() -> str:
    """Sample pasted rainbow parallel list."""
    return """Base
Sky Blue – /499
Gold - /50
Orange — /25
Platinum – 1/1"""

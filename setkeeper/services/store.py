"""
Persistence collaborator contract.

The reconciliation core never talks to a database client directly. It is
handed something that satisfies ChecklistStore and only ever sees
CardRecord values going in and out.

Every method is a single awaited write or read. Implementations raise
PersistenceError when a write does not go through; they do not retry.
"""

from typing import Any, Protocol

from setkeeper.models.card_record import CardRecord, CardStatus


class ChecklistStore(Protocol):
    """Narrow interface the core uses to read and write checklist items."""

    async def list_cards(self, set_id: str, card_number: str | None = None) -> list[CardRecord]:
        """All items of a set, optionally limited to one card number."""
        ...

    async def insert_cards(self, set_id: str, rows: list[CardRecord]) -> list[CardRecord]:
        """Insert rows in one write and return them with ids assigned."""
        ...

    async def update_card_status(self, set_id: str, ids: list[str], status: CardStatus) -> int:
        """
        Set status on the listed items of one set in one batched write.

        Ids that belong to another set are left alone. Returns how many
        items of the set were written.
        """
        ...

    async def update_card_year(self, set_id: str, ids: list[str], year: int) -> int:
        """Set year on the listed items of one set in one batched write."""
        ...

    async def update_card_fields(
        self, set_id: str, card_id: str, fields: dict[str, Any]
    ) -> CardRecord:
        """Apply a partial update to one item of a set and return the result."""
        ...

    async def delete_cards(self, set_id: str, ids: list[str]) -> int:
        """Delete the listed items of one set and return how many were removed."""
        ...

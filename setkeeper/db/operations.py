"""
Database CRUD operations.

Provides async functions for card sets and SqlChecklistStore, the
SQLAlchemy implementation of the checklist persistence collaborator.
"""

import logging
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from setkeeper.models.card_record import CardRecord, CardStatus, SetType
from setkeeper.models.db import CardSetDB, ChecklistItemDB
from setkeeper.models.failure import FailureKind, KnownError, NotFoundError, PersistenceError
from setkeeper.parsers.checklist_text import fold_accents

logger = logging.getLogger(__name__)

# Fields a single-item edit may touch
EDITABLE_FIELDS = frozenset(
    {
        "card_number",
        "player_name",
        "team",
        "subset_name",
        "year",
        "parallel",
        "parallel_print_run",
        "serial_owned",
        "status",
        "display_order",
    }
)

# Fields that must stay non-empty on a persisted item
REQUIRED_FIELDS = ("card_number", "player_name")

# Free-text fields stored accent-folded, like pasted rows
FOLDED_FIELDS = ("player_name", "team")

# --- Card Set Operations ---


async def create_set(
    session: AsyncSession,
    name: str,
    year: int,
    brand: str,
    product_line: str,
    set_type: SetType = SetType.BASE,
    insert_set_name: str | None = None,
    notes: str = "",
) -> CardSetDB:
    """Create a new card set."""
    card_set = CardSetDB(
        name=name,
        year=year,
        brand=brand,
        product_line=product_line,
        set_type=set_type.value,
        insert_set_name=insert_set_name,
        notes=notes,
    )
    session.add(card_set)
    await session.flush()
    return card_set


async def get_set(session: AsyncSession, set_id: str) -> CardSetDB | None:
    """
    Get a card set by id.

    Returns None if no set exists with this id.
    """
    result = await session.execute(select(CardSetDB).where(CardSetDB.id == set_id))
    return result.scalar_one_or_none()


async def get_set_or_fail(session: AsyncSession, set_id: str) -> CardSetDB:
    """Get a card set by id, raising NotFoundError if missing."""
    card_set = await get_set(session, set_id)
    if card_set is None:
        raise NotFoundError("set", set_id)
    return card_set


async def list_sets(session: AsyncSession, limit: int | None = 200) -> list[CardSetDB]:
    """List card sets, newest year first. limit=None lists every set."""
    result = await session.execute(
        select(CardSetDB).order_by(CardSetDB.year.desc(), CardSetDB.name).limit(limit)
    )
    return list(result.scalars().all())


def set_type_of(card_set: CardSetDB) -> SetType:
    """Typed set type of a stored set."""
    return SetType(card_set.set_type)


# --- Checklist Items ---


def item_to_record(item: ChecklistItemDB) -> CardRecord:
    """Convert a database checklist item to a domain record."""
    return CardRecord(
        id=item.id,
        card_number=item.card_number,
        player_name=item.player_name,
        team=item.team,
        subset_name=item.subset_name,
        year=item.year,
        parallel=item.parallel,
        parallel_print_run=item.parallel_print_run,
        serial_owned=item.serial_owned,
        status=CardStatus(item.status),
        display_order=item.display_order,
    )


def record_to_item(set_id: str, record: CardRecord) -> ChecklistItemDB:
    """Build a new database checklist item from a domain record."""
    return ChecklistItemDB(
        set_id=set_id,
        card_number=record.card_number,
        player_name=record.player_name,
        team=record.team,
        subset_name=record.subset_name,
        year=record.year,
        parallel=record.parallel,
        parallel_print_run=record.parallel_print_run,
        serial_owned=record.serial_owned,
        status=record.status.value,
        display_order=record.display_order,
    )


def _validate_fields(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Unknown checklist fields: {', '.join(sorted(unknown))}",
        )

    cleaned: dict[str, Any] = {}
    for name, value in fields.items():
        if isinstance(value, str):
            value = value.strip() or None
        if name in REQUIRED_FIELDS and not value:
            raise KnownError(
                kind=FailureKind.MISSING_REQUIRED,
                message=f"{name.replace('_', ' ').capitalize()} cannot be empty",
            )
        if name in FOLDED_FIELDS and value is not None:
            value = fold_accents(value)
        if name == "status" and value is not None:
            value = CardStatus(value).value
        cleaned[name] = value
    return cleaned


class SqlChecklistStore:
    """
    Checklist persistence backed by an AsyncSession.

    Each write commits on success so that a later failure (for example a
    failed import chunk) never rolls back work that already went through.
    Writes are always scoped to one set; ids from another set match nothing.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _commit_or_fail(self, action: str) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning("checklist_write_failed", extra={"action": action, "error": str(e)})
            raise PersistenceError(f"Failed to {action}", detail=str(e)) from e

    async def _execute_write(self, stmt: Any, action: str) -> int:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning("checklist_write_failed", extra={"action": action, "error": str(e)})
            raise PersistenceError(f"Failed to {action}", detail=str(e)) from e
        await self._commit_or_fail(action)
        # rowcount is available on UPDATE/DELETE results; type stubs incomplete for async
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def list_cards(self, set_id: str, card_number: str | None = None) -> list[CardRecord]:
        stmt = select(ChecklistItemDB).where(ChecklistItemDB.set_id == set_id)
        if card_number is not None:
            stmt = stmt.where(ChecklistItemDB.card_number == card_number)
        result = await self._session.execute(stmt)
        return [item_to_record(item) for item in result.scalars().all()]

    async def insert_cards(self, set_id: str, rows: list[CardRecord]) -> list[CardRecord]:
        items = [record_to_item(set_id, row) for row in rows]
        try:
            self._session.add_all(items)
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning("checklist_insert_failed", extra={"rows": len(rows), "error": str(e)})
            raise PersistenceError("Failed to insert checklist items", detail=str(e)) from e
        await self._commit_or_fail("insert checklist items")
        return [item_to_record(item) for item in items]

    async def update_card_status(self, set_id: str, ids: list[str], status: CardStatus) -> int:
        if not ids:
            return 0
        return await self._execute_write(
            update(ChecklistItemDB)
            .where(ChecklistItemDB.set_id == set_id, ChecklistItemDB.id.in_(ids))
            .values(status=status.value),
            "update status",
        )

    async def update_card_year(self, set_id: str, ids: list[str], year: int) -> int:
        if not ids:
            return 0
        return await self._execute_write(
            update(ChecklistItemDB)
            .where(ChecklistItemDB.set_id == set_id, ChecklistItemDB.id.in_(ids))
            .values(year=year),
            "update year",
        )

    async def update_card_fields(
        self, set_id: str, card_id: str, fields: dict[str, Any]
    ) -> CardRecord:
        cleaned = _validate_fields(fields)
        item = await self._session.get(ChecklistItemDB, card_id)
        if item is None or item.set_id != set_id:
            raise NotFoundError("card", card_id)
        for name, value in cleaned.items():
            setattr(item, name, value)
        await self._commit_or_fail("update card")
        return item_to_record(item)

    async def delete_cards(self, set_id: str, ids: list[str]) -> int:
        if not ids:
            return 0
        return await self._execute_write(
            delete(ChecklistItemDB).where(
                ChecklistItemDB.set_id == set_id, ChecklistItemDB.id.in_(ids)
            ),
            "delete cards",
        )


# --- Cross-set Queries ---


async def count_statuses_by_set(
    session: AsyncSession, set_ids: list[str]
) -> dict[str, dict[str, int]]:
    """
    Item counts per status for each listed set.

    Sets without items are absent from the result.
    """
    if not set_ids:
        return {}
    result = await session.execute(
        select(ChecklistItemDB.set_id, ChecklistItemDB.status, func.count())
        .where(ChecklistItemDB.set_id.in_(set_ids))
        .group_by(ChecklistItemDB.set_id, ChecklistItemDB.status)
    )
    counts: dict[str, dict[str, int]] = {}
    for set_id, status, count in result.all():
        counts.setdefault(set_id, {})[status] = count
    return counts


async def search_player_cards(
    session: AsyncSession,
    player: str,
    set_ids: list[str],
    limit: int = 500,
) -> dict[str, list[CardRecord]]:
    """
    Items of the listed sets whose player name contains `player`.

    Matching is case-insensitive. Stored names are accent-folded, so
    pass a folded term. Results are grouped by set id.
    """
    if not set_ids:
        return {}
    result = await session.execute(
        select(ChecklistItemDB)
        .where(
            ChecklistItemDB.set_id.in_(set_ids),
            ChecklistItemDB.player_name.icontains(player, autoescape=True),
        )
        .order_by(ChecklistItemDB.set_id, ChecklistItemDB.display_order)
        .limit(limit)
    )
    by_set: dict[str, list[CardRecord]] = {}
    for item in result.scalars().all():
        by_set.setdefault(item.set_id, []).append(item_to_record(item))
    return by_set

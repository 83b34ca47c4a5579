"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardSetDB(Base):
    """
    A card set in the shared catalog.

    A set owns one checklist. Multi-year insert sets carry a year on each
    checklist item; rainbow sets track one card across its parallels.
    """

    __tablename__ = "card_sets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    year: Mapped[int] = mapped_column(Integer)
    brand: Mapped[str] = mapped_column(String(255))
    product_line: Mapped[str] = mapped_column(String(255))
    set_type: Mapped[str] = mapped_column(String(32), default="base")
    insert_set_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items: Mapped[list["ChecklistItemDB"]] = relationship(
        back_populates="card_set", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CardSetDB(id={self.id}, name={self.name})>"


class ChecklistItemDB(Base):
    """
    One checklist row: a card, or one parallel of a card, within a set.

    No uniqueness constraint on the natural key: duplicates are filtered
    at import time by natural-key reconciliation.
    """

    __tablename__ = "checklist_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    set_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("card_sets.id", ondelete="CASCADE"), index=True
    )
    card_number: Mapped[str] = mapped_column(String(64), index=True)
    player_name: Mapped[str] = mapped_column(String(255))
    team: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subset_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    parallel: Mapped[str | None] = mapped_column(String(255), nullable=True)
    parallel_print_run: Mapped[str | None] = mapped_column(String(64), nullable=True)
    serial_owned: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="need", index=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    card_set: Mapped["CardSetDB"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<ChecklistItemDB(card={self.card_number}, player={self.player_name})>"

"""SQLModel table definitions for the ticket store."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class TicketTable(SQLModel, table=True):
    """Translation tickets and their latest provider outcome."""

    __tablename__ = "tickets"

    id: str = Field(primary_key=True, index=True)
    original_text: str = Field(sa_column=Column(Text, nullable=False))
    source_lang: str = Field(sa_column=Column(String(35), nullable=False))
    target_lang: str = Field(sa_column=Column(String(35), nullable=False))
    status: str = Field(sa_column=Column(String(20), nullable=False, index=True))
    translated_text: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    translated_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

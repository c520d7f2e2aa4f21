from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from lingoticket.db.models import TicketTable

from .models import Ticket
from .state import TicketStatus


class TicketRepository(Protocol):
    """Persistence contract used by the workflow service.

    Implementations store whatever ticket state they are handed and apply no
    lifecycle rules of their own.
    """

    async def ensure_schema(self) -> None:
        ...

    async def create_ticket(self, ticket: Ticket) -> Ticket:
        ...

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        ...

    async def list_tickets(self, *, status: TicketStatus | None = None) -> Sequence[Ticket]:
        ...

    async def save_ticket(self, ticket: Ticket) -> Ticket | None:
        ...


class InMemoryTicketRepository:
    """Process-local ticket store, used when no database is configured."""

    def __init__(self) -> None:
        self._tickets: dict[str, Ticket] = {}

    async def ensure_schema(self) -> None:
        return None

    async def create_ticket(self, ticket: Ticket) -> Ticket:
        if ticket.id in self._tickets:
            raise RuntimeError(f"Ticket {ticket.id} already exists")
        self._tickets[ticket.id] = ticket
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        return self._tickets.get(ticket_id)

    async def list_tickets(self, *, status: TicketStatus | None = None) -> Sequence[Ticket]:
        tickets = [ticket for ticket in self._tickets.values() if status is None or ticket.status == status]
        return sorted(tickets, key=lambda ticket: ticket.created_at, reverse=True)

    async def save_ticket(self, ticket: Ticket) -> Ticket | None:
        current = self._tickets.get(ticket.id)
        if current is None:
            return None
        # only lifecycle fields are written; the request fields stay as created
        stored = replace(
            current,
            status=ticket.status,
            translated_text=ticket.translated_text,
            translated_at=ticket.translated_at,
        )
        self._tickets[ticket.id] = stored
        return stored


class SqlTicketRepository:
    """Ticket persistence backed by SQLModel async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def create_ticket(self, ticket: Ticket) -> Ticket:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    TicketTable(
                        id=ticket.id,
                        original_text=ticket.original_text,
                        source_lang=ticket.source_lang,
                        target_lang=ticket.target_lang,
                        status=ticket.status.value,
                        translated_text=ticket.translated_text,
                        created_at=ticket.created_at,
                        translated_at=ticket.translated_at,
                    )
                )
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        async with self._session_factory() as session:
            row = await session.get(TicketTable, ticket_id)
            if row is None:
                return None
            return self._table_to_ticket(row)

    async def list_tickets(self, *, status: TicketStatus | None = None) -> Sequence[Ticket]:
        statement = select(TicketTable)
        if status is not None:
            statement = statement.where(TicketTable.status == status.value)
        statement = statement.order_by(TicketTable.created_at.desc())
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return [self._table_to_ticket(row) for row in result.scalars().all()]

    async def save_ticket(self, ticket: Ticket) -> Ticket | None:
        async with self._session_factory() as session:
            row = await session.get(TicketTable, ticket.id)
            if row is None:
                return None
            row.status = ticket.status.value
            row.translated_text = ticket.translated_text
            row.translated_at = ticket.translated_at
            await session.commit()
            await session.refresh(row)
            return self._table_to_ticket(row)

    @staticmethod
    def _table_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(
            id=row.id,
            original_text=row.original_text,
            source_lang=row.source_lang,
            target_lang=row.target_lang,
            status=TicketStatus(row.status),
            translated_text=row.translated_text,
            created_at=_ensure_datetime(row.created_at),
            translated_at=_ensure_datetime(row.translated_at) if row.translated_at is not None else None,
        )


def _ensure_datetime(value: datetime | None) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise TypeError("Expected datetime value from database")

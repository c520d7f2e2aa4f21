from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence

from lingoticket.services.deepl import ProviderFailure, TranslationProvider, TranslationSuccess

from .models import DeliveryPayload, DeliveryReceipt, Ticket, TranslationStatusView
from .repository import TicketRepository
from .state import TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)


class TicketServiceError(RuntimeError):
    """Base error for ticket service issues."""


class TicketValidationError(TicketServiceError):
    """Raised when ticket input is missing or malformed."""


class TicketNotFoundError(TicketServiceError):
    """Raised when a ticket could not be located."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket with id {ticket_id} not found")
        self.ticket_id = ticket_id


class TicketConflictError(TicketServiceError):
    """Raised when an operation is not allowed in the ticket's current state."""

    def __init__(self, ticket_id: str, message: str) -> None:
        super().__init__(message)
        self.ticket_id = ticket_id


class TicketAlreadyTranslatedError(TicketConflictError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(ticket_id, f"Ticket with id {ticket_id} is already translated")


class TicketNotTranslatedError(TicketConflictError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(ticket_id, f"Ticket with id {ticket_id} is not translated yet")


class TranslationProviderError(TicketServiceError):
    """Raised after a provider failure has been recorded on the ticket."""

    def __init__(self, ticket_id: str, cause: str) -> None:
        super().__init__(f"Translation provider failed: {cause}")
        self.ticket_id = ticket_id
        self.cause = cause


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketLocks:
    """Per-ticket mutual exclusion for read-modify-write sequences."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, ticket_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(ticket_id, asyncio.Lock())
        self._waiters[ticket_id] = self._waiters.get(ticket_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters[ticket_id] - 1
            if remaining:
                self._waiters[ticket_id] = remaining
            else:
                del self._waiters[ticket_id]
                del self._locks[ticket_id]

    def __contains__(self, ticket_id: str) -> bool:
        return ticket_id in self._locks


class TicketService:
    """Translation workflow: ticket creation, translation attempts and delivery."""

    def __init__(
        self,
        repository: TicketRepository,
        provider: TranslationProvider,
        *,
        state_machine: type[TicketStateMachine] = TicketStateMachine,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._state_machine = state_machine
        self._clock = clock
        self._locks = TicketLocks()

    async def ensure_schema(self) -> None:
        await self._repository.ensure_schema()

    async def create_ticket(self, *, original_text: str, source_lang: str, target_lang: str) -> Ticket:
        if not (original_text or "").strip():
            raise TicketValidationError("originalText: originalText is required")
        if not (target_lang or "").strip():
            raise TicketValidationError("targetLang: targetLang is required")

        ticket = Ticket(
            id=str(uuid.uuid4()),
            original_text=original_text,
            source_lang=source_lang or "",
            target_lang=target_lang,
            status=self._state_machine.initial_state(),
            created_at=self._clock(),
        )
        created = await self._repository.create_ticket(ticket)
        logger.info("Created ticket %s (%s -> %s)", created.id, created.source_lang or "auto", created.target_lang)
        return created

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    async def list_tickets(self, *, status: TicketStatus | None = None) -> Sequence[Ticket]:
        return await self._repository.list_tickets(status=status)

    async def get_status(self, ticket_id: str) -> TranslationStatusView:
        ticket = await self.get_ticket(ticket_id)
        return TranslationStatusView(id=ticket.id, status=ticket.status, translated_text=ticket.translated_text)

    async def translate(self, ticket_id: str) -> Ticket:
        async with self._locks.hold(ticket_id):
            ticket = await self.get_ticket(ticket_id)
            if self._state_machine.is_terminal(ticket.status):
                raise TicketAlreadyTranslatedError(ticket_id)

            outcome = await self._provider.translate(ticket.original_text, ticket.source_lang, ticket.target_lang)

            if isinstance(outcome, TranslationSuccess):
                self._state_machine.assert_transition(ticket.status, TicketStatus.TRANSLATED)
                translated = replace(
                    ticket,
                    status=TicketStatus.TRANSLATED,
                    translated_text=outcome.text,
                    translated_at=self._clock(),
                )
                saved = await self._persist(translated)
                logger.info("Ticket %s translated", ticket_id)
                return saved

            if isinstance(outcome, ProviderFailure):
                self._state_machine.assert_transition(ticket.status, TicketStatus.FAILED)
                failed = replace(ticket, status=TicketStatus.FAILED, translated_text=None, translated_at=None)
                await self._persist(failed)
                logger.warning("Ticket %s marked FAILED: %s", ticket_id, outcome.message)
                raise TranslationProviderError(ticket_id, outcome.message)

            raise TypeError(f"Unexpected translation outcome: {outcome!r}")

    async def deliver(self, ticket_id: str) -> DeliveryReceipt:
        ticket = await self.get_ticket(ticket_id)
        if ticket.status != TicketStatus.TRANSLATED or ticket.translated_text is None:
            raise TicketNotTranslatedError(ticket_id)

        payload = DeliveryPayload(
            original_text=ticket.original_text,
            translated_text=ticket.translated_text,
            source_lang=ticket.source_lang,
            target_lang=ticket.target_lang,
        )
        return DeliveryReceipt(ticket_id=ticket.id, delivered_at=self._clock(), payload=payload)

    async def _persist(self, ticket: Ticket) -> Ticket:
        saved = await self._repository.save_ticket(ticket)
        if saved is None:
            raise TicketNotFoundError(ticket.id)
        return saved

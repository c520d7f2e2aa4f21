from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .state import TicketStatus


@dataclass(slots=True, frozen=True)
class Ticket:
    """Aggregate representing one translation request and its result."""

    id: str
    original_text: str
    source_lang: str
    target_lang: str
    status: TicketStatus
    created_at: datetime
    translated_text: str | None = None
    translated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class DeliveryPayload:
    """Snapshot of a completed translation handed to a partner."""

    original_text: str
    translated_text: str
    source_lang: str
    target_lang: str


@dataclass(slots=True, frozen=True)
class DeliveryReceipt:
    """Read-only delivery confirmation; producing one never mutates the ticket."""

    ticket_id: str
    delivered_at: datetime
    payload: DeliveryPayload
    delivered: bool = True


@dataclass(slots=True, frozen=True)
class TranslationStatusView:
    id: str
    status: TicketStatus
    translated_text: str | None

"""Translation ticket domain models and services."""

from .models import DeliveryPayload, DeliveryReceipt, Ticket, TranslationStatusView
from .repository import InMemoryTicketRepository, SqlTicketRepository, TicketRepository
from .service import (
    TicketAlreadyTranslatedError,
    TicketConflictError,
    TicketNotFoundError,
    TicketNotTranslatedError,
    TicketService,
    TicketServiceError,
    TicketValidationError,
    TranslationProviderError,
)
from .state import TicketStateMachine, TicketStatus

__all__ = [
    "DeliveryPayload",
    "DeliveryReceipt",
    "InMemoryTicketRepository",
    "SqlTicketRepository",
    "Ticket",
    "TicketAlreadyTranslatedError",
    "TicketConflictError",
    "TicketNotFoundError",
    "TicketNotTranslatedError",
    "TicketRepository",
    "TicketService",
    "TicketServiceError",
    "TicketStateMachine",
    "TicketStatus",
    "TicketValidationError",
    "TranslationProviderError",
    "TranslationStatusView",
]

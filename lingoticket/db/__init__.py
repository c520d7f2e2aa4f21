"""Database table definitions."""

from .models import TicketTable

__all__ = ["TicketTable"]

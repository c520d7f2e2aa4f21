from __future__ import annotations

from enum import Enum


class TicketStatus(str, Enum):
    """Supported states for a translation ticket's lifecycle."""

    CREATED = "CREATED"
    TRANSLATED = "TRANSLATED"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, token: str) -> TicketStatus:
        """Case-insensitive lookup; raises ``ValueError`` for unknown tokens."""

        normalized = (token or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid status: {token}") from None


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
        TicketStatus.CREATED: {TicketStatus.TRANSLATED, TicketStatus.FAILED},
        # a failed retry leaves the ticket failed
        TicketStatus.FAILED: {TicketStatus.TRANSLATED, TicketStatus.FAILED},
        TicketStatus.TRANSLATED: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.CREATED

    @classmethod
    def is_terminal(cls, status: TicketStatus) -> bool:
        return not cls._TRANSITIONS.get(status)

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def assert_transition(cls, current: TicketStatus, new: TicketStatus) -> None:
        if not cls.can_transition(current, new):
            raise ValueError(f"Invalid ticket status transition: {current.value} -> {new.value}")

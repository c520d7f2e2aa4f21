from __future__ import annotations

import pytest

from lingoticket.services.deepl import ProviderFailure, TranslationSuccess
from lingoticket.tickets.repository import InMemoryTicketRepository
from lingoticket.tickets.service import TicketService


class StubProvider:
    """Translation provider double returning queued outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or [TranslationSuccess(text="Olá")]
        self.calls: list[tuple[str, str | None, str | None]] = []

    async def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]

    def fail_with(self, message: str) -> None:
        self.outcomes = [ProviderFailure(message=message)]

    def succeed_with(self, text: str) -> None:
        self.outcomes = [TranslationSuccess(text=text)]


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def repository() -> InMemoryTicketRepository:
    return InMemoryTicketRepository()


@pytest.fixture
def service(repository, provider) -> TicketService:
    return TicketService(repository, provider)

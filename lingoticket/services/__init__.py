"""Outbound integrations."""

from .deepl import (
    DeeplConfig,
    DeeplTranslationClient,
    ProviderFailure,
    TranslationOutcome,
    TranslationProvider,
    TranslationSuccess,
    to_deepl_lang,
)

__all__ = [
    "DeeplConfig",
    "DeeplTranslationClient",
    "ProviderFailure",
    "TranslationOutcome",
    "TranslationProvider",
    "TranslationSuccess",
    "to_deepl_lang",
]

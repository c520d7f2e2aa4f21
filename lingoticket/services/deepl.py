"""Minimal DeepL client.

Endpoint: ``POST <base_url>/translate`` with ``Authorization: DeepL-Auth-Key <key>``.
Every call returns either :class:`TranslationSuccess` or :class:`ProviderFailure`;
provider problems are reported as values, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Union

import httpx
from opentelemetry import trace

from lingoticket.core.config import Settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SNIPPET_LIMIT = 400


@dataclass(frozen=True, slots=True)
class DeeplConfig:
    """Provider settings, fixed at startup."""

    base_url: str = "https://api-free.deepl.com/v2"
    api_key: str = ""
    timeout_ms: int = 8000
    auth_scheme: str = "DeepL-Auth-Key"

    @classmethod
    def from_settings(cls, settings: Settings) -> DeeplConfig:
        return cls(
            base_url=settings.deepl_base_url,
            api_key=settings.deepl_api_key,
            timeout_ms=settings.deepl_timeout_ms,
            auth_scheme=settings.deepl_auth_scheme,
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True, slots=True)
class TranslationSuccess:
    text: str


@dataclass(frozen=True, slots=True)
class ProviderFailure:
    message: str


TranslationOutcome = Union[TranslationSuccess, ProviderFailure]


class TranslationProvider(Protocol):
    async def translate(self, text: str, source_lang: str | None, target_lang: str | None) -> TranslationOutcome:
        ...


class _ProviderError(RuntimeError):
    """Internal signal converted into a ``ProviderFailure`` at the call boundary."""


def to_deepl_lang(lang: str | None) -> str:
    """Trim and upper-case a language code; ``None`` and blanks become ``""``."""

    return (lang or "").strip().upper()


def _snippet(body: str) -> str:
    if len(body) > SNIPPET_LIMIT:
        return body[:SNIPPET_LIMIT] + "..."
    return body


def _extract_translation(payload: Any) -> str:
    translations = payload.get("translations") if isinstance(payload, dict) else None
    if not isinstance(translations, list) or not translations:
        raise _ProviderError("DeepL response missing translations")
    first = translations[0]
    text = first.get("text") if isinstance(first, dict) else None
    if text is None:
        raise _ProviderError("DeepL response missing translations[0].text")
    return str(text)


class DeeplTranslationClient:
    """Single-attempt DeepL translation calls."""

    def __init__(self, config: DeeplConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    @property
    def config(self) -> DeeplConfig:
        return self._config

    async def translate(self, text: str, source_lang: str | None, target_lang: str | None) -> TranslationOutcome:
        target = to_deepl_lang(target_lang)
        with tracer.start_as_current_span("deepl.translate") as span:
            span.set_attribute("deepl.target_lang", target)
            try:
                translated = await self._request_translation(text, to_deepl_lang(source_lang), target)
            except _ProviderError as exc:
                span.set_attribute("deepl.outcome", "failure")
                logger.warning("DeepL translation failed: %s", exc)
                return ProviderFailure(message=str(exc))
            span.set_attribute("deepl.outcome", "success")
            return TranslationSuccess(text=translated)

    async def _request_translation(self, text: str, source: str, target: str) -> str:
        base_url = (self._config.base_url or "").strip()
        if not base_url:
            raise _ProviderError("DeepL baseUrl is blank")
        api_key = (self._config.api_key or "").strip()
        if not api_key:
            raise _ProviderError("DeepL API key is missing (DEEPL_API_KEY)")
        if not target:
            raise _ProviderError("targetLang is required")

        body: dict[str, Any] = {"text": [text], "target_lang": target}
        if source:
            body["source_lang"] = source

        url = base_url.rstrip("/") + "/translate"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"{self._config.auth_scheme} {api_key}",
        }

        logger.debug("Requesting DeepL translation %s -> %s", source or "auto", target)
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise _ProviderError(f"DeepL request timed out after {self._config.timeout_ms} ms") from exc
        except httpx.HTTPError as exc:
            raise _ProviderError(f"DeepL request failed: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            # Raised while building the request, e.g. a non-ASCII key in the Authorization header.
            raise _ProviderError(f"DeepL request could not be built: {exc}") from exc

        if response.status_code != 200:
            raise _ProviderError(f"DeepL HTTP {response.status_code}: {_snippet(response.text or '')}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise _ProviderError("Failed to parse DeepL response JSON") from exc
        return _extract_translation(payload)

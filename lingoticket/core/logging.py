"""Log routing for the ticket workflow and the optional OTLP span pipeline.

Only the ``lingoticket`` logger tree follows ``LOG_LEVEL``. Third-party
loggers stay at WARNING so DeepL request chatter from httpx does not drown
out workflow transitions, unless the service itself runs at DEBUG.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any
from urllib.parse import unquote, urlsplit

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from lingoticket import __version__
from lingoticket.core.config import Settings

PACKAGE_LOGGER = "lingoticket"
_HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")

_active_provider: TracerProvider | None = None


def _level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for the service."""

    level = _level(settings.log_level)
    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    loggers: dict[str, Any] = {PACKAGE_LOGGER: {"level": level}}
    for name in _HTTP_CLIENT_LOGGERS:
        loggers[name] = {"level": http_level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": settings.log_format}},
        "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "plain"}},
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": logging.WARNING},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    dictConfig(build_logging_config(settings))
    return logging.getLogger(PACKAGE_LOGGER)


def parse_otlp_headers(raw: str | None) -> dict[str, str]:
    """Parse ``OTEL_EXPORTER_OTLP_HEADERS`` (comma separated, percent-encoded values)."""

    headers: dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.partition("=")
        key = key.strip()
        if sep and key:
            headers[key] = unquote(value.strip())
    return headers


def tracer_resource(settings: Settings) -> Resource:
    """Describe this process and the translation backend it calls."""

    attributes: dict[str, str] = {
        "service.name": settings.otel_service_name,
        "service.version": __version__,
        "deployment.environment": settings.environment,
        "translation.provider": "deepl",
    }
    deepl_host = urlsplit(settings.deepl_base_url.strip()).hostname
    if deepl_host:
        attributes["translation.provider.host"] = deepl_host
    return Resource.create(attributes)


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP/HTTP span exporter when ``OTEL_ENABLED`` is set.

    Returns ``None`` when tracing is off or a provider is already installed
    by this module; ``deepl.translate`` spans then go to the no-op tracer.
    """

    global _active_provider

    if _active_provider is not None or not settings.otel_enabled:
        return None

    exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint or None,
        headers=parse_otlp_headers(settings.otel_exporter_otlp_headers) or None,
    )
    provider = TracerProvider(resource=tracer_resource(settings))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    logging.getLogger(__name__).info(
        "Tracing enabled for %s (%s)", settings.otel_service_name, settings.environment
    )
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    """Flush and stop ``provider`` if it came from :func:`init_tracer`."""

    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None

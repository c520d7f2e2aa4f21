from __future__ import annotations

import logging

import pytest

from lingoticket import __version__
from lingoticket.core.config import Settings, get_settings
from lingoticket.core.logging import (
    build_logging_config,
    configure_logging,
    init_tracer,
    parse_otlp_headers,
    tracer_resource,
)
from lingoticket.main import build_repository, to_asyncpg_dsn
from lingoticket.tickets.repository import InMemoryTicketRepository, SqlTicketRepository


@pytest.fixture
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_read_environment(monkeypatch, clear_settings_cache):
    monkeypatch.setenv("DEEPL_API_KEY", "env-key")
    monkeypatch.setenv("DEEPL_TIMEOUT_MS", "1500")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.deepl_api_key == "env-key"
    assert settings.deepl_timeout_ms == 1500
    assert settings.deepl_base_url == "https://api-free.deepl.com/v2"
    assert settings.log_level == "debug"
    assert get_settings() is settings


def test_parse_otlp_headers_skips_malformed_items():
    assert parse_otlp_headers(None) == {}
    assert parse_otlp_headers("api-key=abc, x-team = lingo ,broken,=empty") == {"api-key": "abc", "x-team": "lingo"}
    assert parse_otlp_headers("authorization=Basic%20dXNlcg%3D%3D") == {"authorization": "Basic dXNlcg=="}


def test_logging_config_scopes_level_to_service_loggers():
    config = build_logging_config(Settings(log_level="debug"))

    assert config["loggers"]["lingoticket"]["level"] == logging.DEBUG
    assert config["loggers"]["httpx"]["level"] == logging.DEBUG
    assert config["root"]["level"] == logging.WARNING


def test_configure_logging_quiets_http_client_loggers():
    logger = configure_logging(Settings(log_level="info"))

    assert logger.name == "lingoticket"
    assert logger.level == logging.INFO
    assert logging.getLogger("lingoticket.tickets.service").getEffectiveLevel() == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
    assert logging.getLogger().level == logging.WARNING


def test_unknown_log_level_falls_back_to_info():
    assert build_logging_config(Settings(log_level="chatty"))["loggers"]["lingoticket"]["level"] == logging.INFO


def test_tracer_resource_describes_deployment_and_provider():
    settings = Settings(
        environment="staging",
        otel_service_name="lingoticket-api",
        deepl_base_url="https://api.deepl.com/v2",
    )

    attributes = tracer_resource(settings).attributes

    assert attributes["service.name"] == "lingoticket-api"
    assert attributes["service.version"] == __version__
    assert attributes["deployment.environment"] == "staging"
    assert attributes["translation.provider"] == "deepl"
    assert attributes["translation.provider.host"] == "api.deepl.com"


def test_tracer_disabled_by_default():
    assert init_tracer(Settings(otel_enabled=False)) is None


@pytest.mark.parametrize(
    ("dsn", "expected"),
    [
        ("postgresql://u:p@db/tickets", "postgresql+asyncpg://u:p@db/tickets"),
        ("postgresql+asyncpg://u:p@db/tickets", "postgresql+asyncpg://u:p@db/tickets"),
        ("sqlite+aiosqlite:///tickets.db", "sqlite+aiosqlite:///tickets.db"),
    ],
)
def test_to_asyncpg_dsn(dsn, expected):
    assert to_asyncpg_dsn(dsn) == expected


def test_build_repository_defaults_to_memory():
    repository, engine = build_repository(Settings(database_url=None))

    assert isinstance(repository, InMemoryTicketRepository)
    assert engine is None


def test_build_repository_uses_sql_when_configured():
    repository, engine = build_repository(Settings(database_url="postgresql://u:p@localhost/tickets"))

    assert isinstance(repository, SqlTicketRepository)
    assert engine is not None
    assert engine.url.drivername == "postgresql+asyncpg"

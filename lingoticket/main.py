from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from lingoticket.api.errors import register_exception_handlers
from lingoticket.api.routes import ping, tickets
from lingoticket.core.config import Settings, get_settings
from lingoticket.core.logging import configure_logging, init_tracer, shutdown_tracer
from lingoticket.services.deepl import DeeplConfig, DeeplTranslationClient
from lingoticket.tickets.repository import InMemoryTicketRepository, SqlTicketRepository, TicketRepository
from lingoticket.tickets.service import TicketService


def to_asyncpg_dsn(dsn: str) -> str:
    """Ensure the SQLAlchemy DSN uses the asyncpg driver."""

    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://") :]
    return dsn


def build_repository(settings: Settings) -> tuple[TicketRepository, AsyncEngine | None]:
    if not settings.database_url:
        return InMemoryTicketRepository(), None
    engine = create_async_engine(to_asyncpg_dsn(settings.database_url), future=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return SqlTicketRepository(session_factory, engine=engine), engine


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)
    app.state.logger = logger
    app.state.tracer_provider = tracer_provider

    deepl_config = DeeplConfig.from_settings(settings)
    if not deepl_config.api_key.strip():
        logger.warning("DEEPL_API_KEY is not set; translation attempts will fail")

    db_engine: AsyncEngine | None = None
    app.state.ticket_service = None
    try:
        repository, db_engine = build_repository(settings)
        service = TicketService(repository, DeeplTranslationClient(deepl_config))
        await service.ensure_schema()
        app.state.ticket_service = service
    except Exception:
        logger.exception("Ticket service initialisation failed")
        if db_engine is not None:
            await db_engine.dispose()
            db_engine = None
    try:
        yield
    finally:
        if db_engine is not None:
            await db_engine.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(ping.router)
    app.include_router(tickets.router)
    return app


app = create_app()

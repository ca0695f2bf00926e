"""Engine, session factory and schema bootstrap for the marketplace store."""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine; in-memory SQLite shares one connection."""

    options: dict = {"future": True, "echo": False}
    if database_url.startswith("sqlite+"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
    return create_async_engine(database_url, **options)


settings = get_settings()
engine = build_engine(settings.database_url)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async SQLAlchemy session per request."""

    async with AsyncSessionLocal() as session:
        yield session


async def create_schema(bind: AsyncEngine = engine) -> None:
    """Create any missing tables; migrations remain the source of truth in production."""

    from . import models

    async with bind.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    logger.info("Schema ready on %s", bind.url.render_as_string(hide_password=True))


async def ping(session: AsyncSession) -> None:
    """Round-trip a trivial query; raises SQLAlchemyError when the store is down."""

    await session.execute(text("SELECT 1"))

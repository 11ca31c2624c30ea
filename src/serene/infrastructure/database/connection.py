"""
Database Connection Management

Async SQLAlchemy engine and session lifecycle for the SQL
repositories.

SECURITY: Connection strings contain credentials and must
never be logged.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from serene.config.logging_config import get_logger
from serene.config.settings import DatabaseSettings

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""


class DatabaseManager:
    """
    Manages database connections and sessions.

    Usage:
        db = DatabaseManager(settings.database)
        await db.initialize()
        async with db.session() as session:
            ...
        await db.close()
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        *,
        url: Optional[str] = None,
        echo: bool = False,
    ) -> None:
        if settings is None and url is None:
            raise ValueError("DatabaseManager needs settings or a url")

        self._settings = settings
        self._url = url or settings.async_url  # type: ignore[union-attr]
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized = False

    def _engine_options(self) -> dict:
        if self._url.startswith("sqlite"):
            # One shared connection so in-memory databases survive across sessions
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        options: dict = {"pool_pre_ping": True, "pool_recycle": 3600}
        if self._settings is not None:
            options["pool_size"] = self._settings.pool_size
            options["max_overflow"] = self._settings.max_overflow
        return options

    async def initialize(self, create_schema: bool = True) -> None:
        """
        Create the engine and session factory.

        Args:
            create_schema: Create missing tables
        """
        if self._initialized:
            logger.warning("Database already initialized")
            return

        # Register ORM models on Base.metadata
        from serene.infrastructure.database import models  # noqa: F401

        self._engine = create_async_engine(self._url, echo=self._echo, **self._engine_options())
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        self._initialized = True
        logger.info("Database connection pool initialized")

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._initialized = False
            logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session that commits on success and rolls back on error.

        Yields:
            AsyncSession: Database session
        """
        if not self._session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        if not self._engine:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

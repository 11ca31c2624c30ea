"""
Base SQL Repository

Shared session handling for the SQL repository implementations.
Every SQLAlchemy failure is re-raised as StorageError so services
handle one error type regardless of backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from serene.config.logging_config import get_logger
from serene.domain.errors import StorageError
from serene.infrastructure.database.connection import Base, DatabaseManager

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseSQLRepository(Generic[ModelT]):
    """
    Generic base for SQL repositories.

    Usage:
        class SQLProfileRepository(BaseSQLRepository[EmotionalProfileModel], ProfileRepository):
            model = EmotionalProfileModel
    """

    model: Type[ModelT]

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Session scope mapping SQLAlchemy errors to StorageError."""
        try:
            async with self._db.session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(
                "Storage operation failed",
                table=self.model.__tablename__,
                operation=operation,
                error_type=type(e).__name__,
            )
            raise StorageError(
                f"{self.model.__tablename__}.{operation} failed",
                operation=operation,
                original_error=e,
            ) from e

"""
Base repository with connection handling and row conversion helpers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from retiros.core.database import Database
from retiros.core.exceptions import DataIntegrityError, StorageError
from retiros.models.validation import describe_errors

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository:
    """
    Repository bound to a shared connection pool.

    Each operation checks a connection out of the pool for the duration of a
    single statement (or a short fixed sequence), so concurrent callers never
    share a connection.
    """

    def __init__(self, pool: Union[AsyncEngine, Database]):
        """
        Initialize the repository.

        Args:
            pool: Engine (or Database wrapping one) owned by the caller
        """
        self.engine: AsyncEngine = pool.engine if isinstance(pool, Database) else pool

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[AsyncConnection]:
        """Connection for queries."""
        try:
            async with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__} query failed: {e}")
            raise StorageError(str(e)) from e

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[AsyncConnection]:
        """Connection that commits on success and rolls back on error."""
        try:
            async with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__} write failed: {e}")
            raise StorageError(str(e)) from e


def parse_uuid(value: str) -> UUID:
    """Parse an id column; a bad value means the row is corrupt."""
    try:
        return UUID(str(value))
    except ValueError as e:
        raise DataIntegrityError(f"Invalid UUID: {value!r}") from e


def as_float(value) -> float:
    """SUM() over no rows is NULL; treat it as zero."""
    return float(value) if value is not None else 0.0


def build_row(model_cls: Type[ModelT], **fields) -> ModelT:
    """
    Build an entity from stored column values.

    Raises:
        DataIntegrityError: If the stored values break a model constraint
    """
    try:
        return model_cls(**fields)
    except ValidationError as e:
        raise DataIntegrityError(
            f"Stored {model_cls.__name__} row is invalid: {describe_errors(e)}"
        ) from e


def latest_first(column):
    """
    Descending order on the instant a timestamp column holds.

    Stored text mixes RFC 3339 and naive "YYYY-MM-DD HH:MM:SS" forms, which
    do not sort correctly as strings; julianday() reads both and applies
    offsets.
    """
    return func.julianday(column).desc()

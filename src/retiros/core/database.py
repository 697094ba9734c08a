"""
Database handle for the retreat ledger.

Owns the async SQLAlchemy engine, which is the connection pool shared by
every repository bound to it.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from retiros.config import get_database_url
from retiros.core.exceptions import StorageError
from retiros.core.schema import metadata

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class Database:
    """
    Connection pool wrapper.

    One instance is created by the caller and shared by all repositories;
    nothing in the package keeps a module-level engine.
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        """
        Create the engine.

        Args:
            database_url: SQLAlchemy URL or the short "sqlite:path" form.
                         If None, uses DATABASE_URL or the default file.
            echo: Log every SQL statement
        """
        self.database_url = get_database_url(database_url)
        self.engine: AsyncEngine = create_async_engine(self.database_url, echo=echo)

        if self.engine.dialect.name == "sqlite":
            self._ensure_db_directory()
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    def _ensure_db_directory(self) -> None:
        database = self.engine.url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def init_schema(self) -> None:
        """Create any missing tables and indexes."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Error initializing schema: {e}")
            raise StorageError(str(e)) from e
        logger.debug(f"Schema ready at {self.engine.url.render_as_string(hide_password=True)}")

    async def is_available(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

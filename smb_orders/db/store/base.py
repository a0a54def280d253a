"""
Base Repository for order store operations.

This module provides an abstract base class for the store repositories,
implementing common functionality like connection management, session
scoping, dialect-aware inserts and error translation.

Every public repository method accepts an optional ``session``. When one
is given the method runs inside the caller's transaction and never
commits; otherwise it opens its own session and commits before returning.
"""

import functools
import logging
from abc import ABC
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.connection import ConnDB, get_db_connection
from smb_orders.utils.error_handler import StoreException

logger = logging.getLogger(__name__)


def log_operation(operation_name: str = None) -> Callable:
    """
    Decorator for logging store operations and translating driver errors.

    SQLAlchemy errors are re-raised as StoreException so callers only deal
    with the application's error taxonomy.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except IntegrityError as e:
                logger.error(f"Operation failed: {op_name} - integrity violation: {e.orig}")
                raise StoreException(
                    message=f"Integrity constraint violated in {op_name}: {e.orig}",
                    operation=op_name,
                    constraint_violation=True,
                ) from e
            except SQLAlchemyError as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise StoreException(message=f"Store operation {op_name} failed: {e}", operation=op_name) from e

        return wrapper

    return decorator


class BaseRepository(ABC):
    """
    Abstract base repository for the order store.

    Derived repositories implement their domain operations on top of the
    session helpers provided here.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Initialize the base repository.

        Args:
            conn_db: Optional database connection. If not provided, uses global connection.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self._repository_name: str = self.__class__.__name__
        logger.debug(f"{self._repository_name} instantiated")

    def get_session(self) -> AsyncSession:
        """
        Get a new database session from the connection pool.

        Returns:
            AsyncSession: Database session usable as async context manager
        """
        return self.conn_db.get_session()

    @asynccontextmanager
    async def session_scope(self, session: Optional[AsyncSession] = None) -> AsyncIterator[AsyncSession]:
        """
        Yield the caller's session, or a new one committed on success.

        Args:
            session: Session of an enclosing transaction, if any
        """
        if session is not None:
            yield session
            return

        async with self.get_session() as own_session:
            yield own_session
            await own_session.commit()

    def insert(self, table: Table):
        """
        Build a dialect-specific INSERT supporting ON CONFLICT clauses.

        Args:
            table: Target table

        Returns:
            Insert construct for PostgreSQL or SQLite
        """
        if self.conn_db.dialect_name == "postgresql":
            return pg_insert(table)
        return sqlite_insert(table)

    @property
    def supports_row_locks(self) -> bool:
        """SELECT ... FOR UPDATE is only meaningful on PostgreSQL."""
        return self.conn_db.dialect_name == "postgresql"

    def __repr__(self) -> str:
        return f"{self._repository_name}(conn_db={self.conn_db!r})"

# smb_orders/db/connection.py
"""
Clase ConnDB para gestión de conexiones a la base de datos de pedidos.

Esta clase maneja la conexión, configuración del pool, creación del
esquema y ciclo de vida de las conexiones (PostgreSQL vía asyncpg o
SQLite vía aiosqlite).
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from smb_orders.core.config import get_settings
from smb_orders.db.schema import metadata
from smb_orders.utils.error_handler import StoreException

settings = get_settings()
logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite no aplica ON DELETE CASCADE sin este pragma."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ConnDB:
    """
    Gestión de conexiones a la base de datos de pedidos.

    La aplicación usa una instancia global (ver get_db_connection);
    los tests crean instancias propias apuntando a un archivo temporal.
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Inicializa la clase ConnDB.

        Args:
            database_url: URL asíncrona de SQLAlchemy. Por defecto DATABASE_URL.
        """
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[sessionmaker] = None
        self.connection_string = database_url or settings.DATABASE_URL
        self._connection_tested = False
        logger.info("ConnDB instance created")

    @property
    def dialect_name(self) -> str:
        """Nombre del dialecto activo (postgresql o sqlite)."""
        if self.engine is not None:
            return self.engine.dialect.name
        return "sqlite" if self.connection_string.startswith("sqlite") else "postgresql"

    async def initialize(self):
        """
        Inicializa el engine de base de datos y el pool de conexiones.

        Raises:
            StoreException: Si falla la inicialización
        """
        try:
            if self.engine is not None:
                logger.info("Database connection already initialized")
                return

            logger.info("Initializing database connection...")

            engine_kwargs = {
                "echo": settings.DB_ECHO,
                "pool_pre_ping": True,
            }
            if self.dialect_name == "postgresql":
                engine_kwargs.update(
                    {
                        "pool_size": settings.DB_POOL_SIZE,
                        "max_overflow": settings.DB_MAX_OVERFLOW,
                        "pool_recycle": 3600,
                        "pool_timeout": 30,
                        "connect_args": {
                            "server_settings": {"application_name": f"{settings.APP_NAME}_v{settings.APP_VERSION}"}
                        },
                    }
                )

            self.engine = create_async_engine(self.connection_string, **engine_kwargs)

            if self.dialect_name == "sqlite":
                event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            self.session_factory = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

            await self._test_connection()

            logger.info(f"✅ Database connection initialized successfully ({self.dialect_name})")

        except Exception as e:
            logger.error(f"❌ Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise StoreException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialize",
            ) from e

    async def _test_connection(self):
        """
        Prueba la conexión a la base de datos.

        Raises:
            StoreException: Si la prueba de conexión falla
        """
        logger.info("Testing database connection...")

        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise StoreException(
                    message="Connection test returned unexpected value",
                    operation="test_connection",
                )

        self._connection_tested = True

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
        self.session_factory = None
        self._connection_tested = False

    async def create_schema(self):
        """
        Crea las tablas faltantes del esquema de pedidos.

        Raises:
            StoreException: Si la creación falla
        """
        if self.engine is None:
            raise StoreException(message="Database connection not initialized", operation="create_schema")

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            logger.info("🔧 Order schema verified")
        except Exception as e:
            logger.error(f"❌ Failed to create schema: {e}")
            raise StoreException(message=f"Failed to create schema: {str(e)}", operation="create_schema") from e

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            StoreException: Si no hay conexión inicializada
        """
        if not self.is_initialized():
            raise StoreException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )

        return self.session_factory()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Abre una sesión con una transacción que se confirma al salir.

        Cualquier excepción dentro del bloque revierte la transacción completa.
        """
        async with self.get_session() as session:
            async with session.begin():
                yield session

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False

        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        logger.info("Closing database connection...")

        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")

        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_engine_info(self) -> dict:
        """
        Obtiene información sobre el engine de base de datos.

        Returns:
            dict: Información del engine y pool de conexiones
        """
        if not self.engine:
            return {"status": "not_initialized"}

        pool = self.engine.pool

        return {
            "status": "initialized",
            "dialect": self.dialect_name,
            "pool_size": getattr(pool, "size", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "is_tested": self._connection_tested,
        }

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        start_time = time.time()
        test_passed = await self.test_connection()

        return {
            "connection_initialized": self.is_initialized(),
            "engine_info": self.get_engine_info(),
            "test_passed": test_passed,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    def __repr__(self) -> str:
        return f"ConnDB(dialect={self.dialect_name}, initialized={self.is_initialized()})"


_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia global de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance

"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación,
incluyendo la conexión a la base de datos, la creación del esquema y
el cableado de los servicios de pedidos.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smb_orders.core.config import get_environment_info, get_settings
from smb_orders.core.logging_config import setup_logging
from smb_orders.db.connection import ConnDB, get_db_connection
from smb_orders.services.orders import create_batch_importer, create_orchestrator

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Si ``app.state.conn_db`` ya existe (por ejemplo en tests) se usa esa
    conexión en lugar de la global.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Conectar base de datos
        conn_db = await startup_connect_database(app)

        # 3. Inicializar servicios
        await startup_initialize_services(app, conn_db)

        logger.info("🎉 Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await shutdown_close_connections(app)
        raise

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        await shutdown_close_connections(app)
        logger.info("👋 Aplicación cerrada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info(f"✅ Sistema de logging configurado - {get_environment_info()}")


async def startup_connect_database(app: FastAPI) -> ConnDB:
    """
    Inicializa la conexión y, si está habilitado, crea el esquema.

    Returns:
        ConnDB: Conexión inicializada, guardada en ``app.state.conn_db``
    """
    conn_db = getattr(app.state, "conn_db", None) or get_db_connection()

    if not conn_db.is_initialized():
        await conn_db.initialize()

    if settings.DB_CREATE_SCHEMA:
        await conn_db.create_schema()
        logger.info("✅ Esquema de base de datos verificado")

    app.state.conn_db = conn_db
    logger.info(f"✅ Base de datos conectada ({conn_db.dialect_name})")
    return conn_db


async def startup_initialize_services(app: FastAPI, conn_db: ConnDB):
    """Crea los orquestadores de pedidos e importación."""
    orders_service = create_orchestrator(conn_db)
    app.state.orders_service = orders_service
    app.state.import_service = create_batch_importer(conn_db, orchestrator=orders_service)

    logger.info("✅ Servicios de pedidos inicializados")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections(app: FastAPI):
    """Cierra conexiones de manera limpia."""
    conn_db = getattr(app.state, "conn_db", None)
    if conn_db is None:
        return

    try:
        await conn_db.close()
        logger.info("✅ Conexión a base de datos cerrada")
    except Exception as e:
        logger.error(f"Error cerrando conexión a base de datos: {e}")

"""
SMB Order Consolidation - FastAPI Application Entry Point

Servicio de pedidos para pequeños comercios: consolida todas las líneas de
un cliente en un mismo día en un único pedido, con código legible, totales
recalculados y notas acumuladas, además de importación masiva de planillas.

Este archivo actúa como el punto de entrada principal de la aplicación,
orquestando todos los componentes de manera modular.
"""

import logging

import uvicorn
from fastapi import FastAPI

from smb_orders.core.config import get_settings
from smb_orders.core.exception_handlers import configure_exception_handlers
from smb_orders.core.lifespan import lifespan
from smb_orders.core.middleware import configure_all_middleware
from smb_orders.core.routers import configure_all_routers

# Configuración
settings = get_settings()
logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    logger.info("🏗️ Creando aplicación FastAPI...")

    docs_enabled = settings.DEBUG or settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.APP_NAME,
        description="Consolidación de pedidos por cliente y día",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    # 1. Middleware (orden inverso de ejecución)
    configure_all_middleware(app)

    # 2. Manejadores de excepciones
    configure_exception_handlers(app)

    # 3. Routers y endpoints
    configure_all_routers(app)

    logger.info("✅ Aplicación FastAPI creada y configurada")
    return app


# Instancia principal que usa el servidor ASGI
app = create_application()


if __name__ == "__main__":
    """
    Ejecutar la aplicación directamente para desarrollo.

    Para producción:
    uvicorn smb_orders.main:app --host 0.0.0.0 --port 8080
    """
    logger.info("🚀 Iniciando aplicación desde main.py...")

    try:
        uvicorn.run(
            "smb_orders.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")

"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from smb_orders.api.v1.endpoints.orders import router as orders_router
from smb_orders.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        return {
            "message": settings.APP_NAME,
            "description": "Consolidación de pedidos por cliente y día",
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "api_v1": "/api/v1",
                "orders": "/api/v1/orders",
                "import": "/api/v1/orders/import",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.

        Returns:
            Dict con pong y timestamp
        """
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Verifica la base de datos con un round-trip ``SELECT 1``.

        Returns:
            JSONResponse: 200 si la base responde, 503 en caso contrario
        """
        conn_db = getattr(request.app.state, "conn_db", None)

        try:
            database = await conn_db.health_check() if conn_db is not None else {"test_passed": False}
            healthy = bool(database.get("test_passed"))

            return JSONResponse(
                status_code=200 if healthy else 503,
                content={
                    "status": "healthy" if healthy else "unhealthy",
                    "version": settings.APP_VERSION,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "services": {"database": database},
                    "environment": settings.ENVIRONMENT,
                    "debug": settings.DEBUG,
                },
            )

        except Exception as e:
            logger.error(f"Error en health check: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "version": settings.APP_VERSION,
                },
            )


def configure_api_routers(app: FastAPI) -> None:
    """
    Registra los routers versionados de la API.

    Args:
        app: Instancia de FastAPI
    """
    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])
    logger.info("✅ Router de pedidos registrado en /api/v1/orders")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers y endpoints de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers...")

    create_root_endpoints(app)
    create_health_endpoints(app)
    configure_api_routers(app)

    logger.info("✅ Routers configurados correctamente")

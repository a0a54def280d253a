"""
Configuración de Middleware para la aplicación FastAPI.

Este módulo centraliza la configuración de middleware:
- CORS
- TrustedHost (solo producción)
- Request logging con ID de request
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from smb_orders.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_cors_middleware(app: FastAPI) -> None:
    """
    Configura middleware CORS para el front de pedidos.

    Args:
        app: Instancia de FastAPI
    """
    allowed_origins = settings.ALLOWED_HOSTS or ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allowed_origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    logger.info(f"✅ CORS configurado - Origins permitidos: {allowed_origins}")


def configure_trusted_host_middleware(app: FastAPI) -> None:
    """
    Configura middleware TrustedHost para validar hosts permitidos.
    Solo se aplica en producción.

    Args:
        app: Instancia de FastAPI
    """
    if settings.is_production and settings.ALLOWED_HOSTS:
        allowed_hosts = settings.ALLOWED_HOSTS + ["localhost", "127.0.0.1"]

        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

        logger.info(f"✅ TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI) -> None:
    """
    Configura middleware para logging de todas las requests/responses.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """
        Loggea cada request con su tiempo de proceso y agrega
        ``X-Request-ID`` y ``X-Process-Time`` a la respuesta.
        """
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        start_time = time.time()

        logger.info(f"📨 [{request_id}] {request.method} {request.url.path} - Client: {get_client_ip(request)}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"❌ [{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{get_status_emoji(response.status_code)} [{request_id}] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        response.headers["X-Request-ID"] = request_id

        if process_time > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"🐌 [{request_id}] Slow request detected: {process_time:.3f}s > {settings.SLOW_REQUEST_THRESHOLD}s"
            )

        return response


def configure_all_middleware(app: FastAPI) -> None:
    """
    Configura todos los middlewares de la aplicación.
    El orden importa: se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando middlewares...")

    configure_request_logging_middleware(app)
    configure_trusted_host_middleware(app)

    # CORS último en agregarse, primero en ejecutarse para OPTIONS
    configure_cors_middleware(app)

    logger.info("✅ Todos los middlewares configurados correctamente")


# Funciones auxiliares


def generate_request_id() -> str:
    """
    Genera un ID corto para la request.

    Returns:
        str: ID único de 8 caracteres
    """
    return uuid.uuid4().hex[:8]


def get_client_ip(request: Request) -> str:
    """
    Obtiene la IP real del cliente considerando proxies.

    Args:
        request: Request de FastAPI

    Returns:
        str: IP del cliente
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_status_emoji(status_code: int) -> str:
    """Emoji según la clase del código de estado HTTP."""
    if 200 <= status_code < 300:
        return "✅"
    elif 400 <= status_code < 500:
        return "⚠️"
    elif status_code >= 500:
        return "❌"
    return "↩️"

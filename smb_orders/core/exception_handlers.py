"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define todos los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para diferentes tipos de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smb_orders.core.config import get_settings
from smb_orders.utils.error_handler import (
    AppException,
    ErrorCode,
    NotFoundException,
    StoreException,
    ValidationException,
)

settings = get_settings()
logger = logging.getLogger(__name__)


def _base_content(request: Request, error_type: str, message: Any) -> Dict[str, Any]:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("X-Request-ID"),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    logger.error(
        f"App Exception: {exc.message} - "
        f"Code: {exc.error_code.value} - "
        f"URL: {request.url} - "
        f"Details: {exc.details}"
    )

    content = _base_content(request, "application_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "details": exc.details if settings.DEBUG else None,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - "
        f"Field: {exc.field} - "
        f"Value: {exc.invalid_value} - "
        f"URL: {request.url}"
    )

    content = _base_content(request, "validation_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "field": exc.field,
            "invalid_value": str(exc.invalid_value) if settings.DEBUG and exc.invalid_value is not None else None,
            "expected_format": exc.expected_format,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """
    Manejador para recursos inexistentes (pedido, cliente o producto).
    """
    logger.warning(f"Not Found: {exc.message} - Resource: {exc.resource} - URL: {request.url}")

    content = _base_content(request, "not_found_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "resource": exc.resource,
            "resource_id": exc.resource_id,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def store_exception_handler(request: Request, exc: StoreException) -> JSONResponse:
    """
    Manejador para fallas del almacenamiento.

    Las violaciones de restricciones (por ejemplo un reemplazo que choca con
    otro pedido del mismo día y cliente) responden 409; el resto 503.
    """
    logger.error(
        f"Store Exception: {exc.message} - "
        f"Operation: {exc.operation} - "
        f"Constraint: {exc.constraint_violation} - "
        f"URL: {request.url}"
    )

    content = _base_content(request, "store_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "operation": exc.operation,
            "details": exc.details if settings.DEBUG else None,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para bodies o parámetros que no pasan el esquema Pydantic.

    Responde con el mismo formato que ValidationException.
    """
    errors = exc.errors()
    logger.warning(f"Request Validation Error: {len(errors)} errors - URL: {request.url}")

    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None

    content = _base_content(request, "validation_error", first.get("msg", "Invalid request"))
    content.update(
        {
            "error_code": ErrorCode.VALIDATION_ERROR.value,
            "field": field,
            "errors": [{"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in errors],
        }
    )
    return JSONResponse(status_code=422, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Manejador para HTTPException estándar de FastAPI y Starlette.

    Args:
        request: Request de FastAPI
        exc: HTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    content = _base_content(request, "http_error", exc.detail)
    content["status_code"] = exc.status_code
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    # Respuesta genérica (sin exponer detalles internos)
    error_message = "Internal server error occurred"
    if settings.DEBUG:
        error_message = f"{type(exc).__name__}: {str(exc)}"

    content = _base_content(request, "internal_server_error", error_message)
    content["traceback"] = traceback.format_exc() if settings.DEBUG else None
    return JSONResponse(status_code=500, content=content)


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(NotFoundException, not_found_exception_handler)
    app.add_exception_handler(StoreException, store_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")

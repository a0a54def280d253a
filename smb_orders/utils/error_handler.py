"""
Sistema de manejo de errores personalizado.

Este módulo define las excepciones del motor de consolidación de pedidos
y proporciona utilidades para manejo consistente de errores.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de datos
    NOT_FOUND = "NOT_FOUND"
    INVALID_ORDER_DATA = "INVALID_ORDER_DATA"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Errores de almacenamiento
    STORE_FAILURE = "STORE_FAILURE"
    STORE_CONSTRAINT_VIOLATION = "STORE_CONSTRAINT_VIOLATION"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para entradas mal formadas o incompletas.

    Se lanza antes de cualquier mutación: una operación rechazada
    no deja efectos en el almacenamiento.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.VALIDATION_ERROR),
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class NotFoundException(AppException):
    """
    Excepción para entidades referenciadas que no existen.
    """

    def __init__(self, message: str, resource: str, resource_id: Any = None, **kwargs):
        """
        Inicializa la excepción de entidad inexistente.

        Args:
            message: Mensaje de error
            resource: Tipo de recurso (order, customer, product)
            resource_id: Identificador buscado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.resource = resource
        self.resource_id = resource_id

        self.details.update({"resource": resource, "resource_id": resource_id})


class StoreException(AppException):
    """
    Excepción para fallos del almacenamiento persistente.

    La transacción en curso se revierte completa; no hay reintentos
    automáticos.
    """

    def __init__(self, message: str, operation: str, constraint_violation: bool = False, **kwargs):
        """
        Inicializa la excepción de almacenamiento.

        Args:
            message: Mensaje de error
            operation: Operación de repositorio que falló
            constraint_violation: Si el fallo proviene de una restricción de integridad
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=(
                ErrorCode.STORE_CONSTRAINT_VIOLATION if constraint_violation else ErrorCode.STORE_FAILURE
            ),
            status_code=409 if constraint_violation else 503,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.operation = operation
        self.constraint_violation = constraint_violation

        self.details.update({"operation": operation, "constraint_violation": constraint_violation})


# === FUNCIONES DE UTILIDAD ===


def convert_to_app_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> AppException:
    """
    Convierte una excepción estándar a AppException.

    Args:
        exception: Excepción a convertir
        context: Contexto adicional

    Returns:
        AppException: Excepción convertida
    """
    if isinstance(exception, AppException):
        return exception

    context = context or {}
    exception_type = type(exception).__name__

    if isinstance(exception, (ValueError, TypeError)):
        return ValidationException(
            message=str(exception),
            field=context.get("field", "unknown"),
            invalid_value=context.get("value"),
            details=dict(context),
        )

    return AppException(
        message=f"{exception_type}: {exception}",
        details={"original_exception": exception_type, **context},
    )


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update({"error_code": exception.error_code.value, "severity": exception.severity.value})
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {exception}"

    logger.log(level, message, extra=log_data)


class ErrorAggregator:
    """
    Agregador de errores para importaciones batch.

    Cada grupo fallido se registra con su clave para que el
    llamador sepa qué pedidos no se aplicaron.
    """

    def __init__(self):
        """Inicializa el agregador."""
        self.errors: List[Dict[str, Any]] = []
        self.total_processed = 0
        self.start_time = datetime.now(timezone.utc)

    def add_error(self, exception: Union[AppException, Exception], context: Optional[Dict] = None):
        """
        Agrega un error al agregador.

        Args:
            exception: Excepción a agregar
            context: Contexto adicional (clave de grupo, cliente, fecha)
        """
        context = context or {}
        app_exception = convert_to_app_exception(exception, context)

        self.errors.append(
            {
                **context,
                "error_code": app_exception.error_code.value,
                "message": app_exception.message,
            }
        )

        level = logging.ERROR if app_exception.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logging.WARNING
        log_error(app_exception, context, level)

    def increment_processed(self):
        """Incrementa contador de procesados."""
        self.total_processed += 1

    def get_summary(self) -> Dict[str, Any]:
        """
        Obtiene resumen de errores.

        Returns:
            Dict: Resumen de errores
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - self.start_time).total_seconds()

        return {
            "total_processed": self.total_processed,
            "error_count": len(self.errors),
            "success_count": self.total_processed - len(self.errors),
            "duration_seconds": duration,
            "errors": list(self.errors),
        }

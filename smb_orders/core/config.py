"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
del motor de consolidación de pedidos usando Pydantic Settings para
validación automática.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo local (SQLite).
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "SMB Order Consolidation"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    ALLOWED_HOSTS: Optional[List[str]] = Field(default=None)
    SLOW_REQUEST_THRESHOLD: float = Field(default=2.0)

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    # postgresql+asyncpg://... en producción, sqlite+aiosqlite://... en desarrollo
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./smb_orders.db")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_ECHO: bool = Field(default=False)
    DB_CREATE_SCHEMA: bool = Field(default=True)

    # === CONFIGURACIÓN DE PEDIDOS ===
    ORDER_NOTES_SEPARATOR: str = Field(default=" | ")
    ORDER_RECENT_LIMIT: int = Field(default=100)
    IMPORT_MAX_ROWS: int = Field(default=5000)
    CURRENCY: str = Field(default="THB")

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE_PATH: Optional[str] = Field(default="logs/app.log")
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # === CONFIGURACIÓN DE DOCUMENTACIÓN ===
    ENABLE_DOCS: bool = Field(default=True)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Valida que la URL use un driver asíncrono soportado."""
        supported = ("postgresql+asyncpg://", "sqlite+aiosqlite://")
        if not v.startswith(supported):
            raise ValueError(f"DATABASE_URL debe comenzar con uno de: {list(supported)}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("ORDER_RECENT_LIMIT", "IMPORT_MAX_ROWS")
    @classmethod
    def validate_positive_limits(cls, v):
        """Los límites de lectura e importación deben ser positivos."""
        if v < 1:
            raise ValueError("El límite debe ser mayor que 0")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        """Indica si la base de datos configurada es SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "is_production": settings.is_production,
        "log_level": settings.LOG_LEVEL,
        "database": "sqlite" if settings.is_sqlite else "postgresql",
        "features": {
            "docs": settings.ENABLE_DOCS,
            "create_schema": settings.DB_CREATE_SCHEMA,
        },
    }

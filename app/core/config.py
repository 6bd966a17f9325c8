import os
from typing import Any, List, Optional, Union
from functools import lru_cache
import logging

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api/v1"

    # Información del proyecto
    PROJECT_NAME: str = "GymSchedule"
    PROJECT_DESCRIPTION: str = "Motor de horarios, recurrencia y reservas de clases del gimnasio"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "True").lower() in ("true", "1", "t")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "False").lower() in ("true", "1", "t")

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./gym_schedule.db")
    SQLALCHEMY_DATABASE_URI: Optional[str] = None  # Definir explícitamente este campo

    @field_validator("DATABASE_URL", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str], info) -> str:
        """Asegura que DATABASE_URL esté en el formato correcto."""
        # No loguear el valor completo por seguridad
        if not v:
            logger.warning("DATABASE_URL vacía, usando SQLite local")
            return "sqlite:///./gym_schedule.db"

        # Asegurar formato postgresql://
        if v.startswith('postgres://'):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return 'postgresql://' + v[len('postgres://'):]
        return v

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info) -> Any:
        """Configura la URI de SQLAlchemy basada en DATABASE_URL si no se define explícitamente."""
        if isinstance(v, str) and v:
            return v
        return info.data.get("DATABASE_URL")

    # Configuración de Redis (vacía = caché deshabilitada)
    REDIS_URL: str = os.getenv("REDIS_URL", "")

    # Configuración del pool de conexiones Redis
    REDIS_POOL_MAX_CONNECTIONS: int = int(os.getenv("REDIS_POOL_MAX_CONNECTIONS", "50"))
    REDIS_POOL_SOCKET_TIMEOUT: int = int(os.getenv("REDIS_POOL_SOCKET_TIMEOUT", "5"))
    REDIS_POOL_HEALTH_CHECK_INTERVAL: int = int(os.getenv("REDIS_POOL_HEALTH_CHECK_INTERVAL", "30"))
    REDIS_POOL_RETRY_ON_TIMEOUT: bool = os.getenv("REDIS_POOL_RETRY_ON_TIMEOUT", "True").lower() in ("true", "1", "t")
    REDIS_POOL_SOCKET_KEEPALIVE: bool = os.getenv("REDIS_POOL_SOCKET_KEEPALIVE", "True").lower() in ("true", "1", "t")

    @field_validator("REDIS_URL", mode="before")
    def clean_redis_url(cls, v: Optional[str]) -> str:
        if not v:
            return ""
        # Eliminar comentarios (todo lo que sigue a #) y espacios
        if '#' in v:
            v = v.split('#')[0]
        return v.strip()

    # TTLs de caché
    CACHE_TTL_REFERENCE_DATA: int = 3600  # salas, disciplinas y tracks cambian poco

    # Horarios
    GYM_TIMEZONE: str = os.getenv("GYM_TIMEZONE", "Europe/Brussels")
    SCHEDULE_MONTH_VIEW_LIMIT: int = 3  # clases visibles por día en la vista mensual
    SCHEDULE_MAX_RANGE_DAYS: int = 366

    @field_validator("SCHEDULE_MONTH_VIEW_LIMIT", "SCHEDULE_MAX_RANGE_DAYS")
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("El valor debe ser mayor que 0")
        return v


# Usar una función con caché para obtener la configuración
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings

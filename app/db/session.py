from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración
settings_instance = get_settings()

# Obtener la URL directamente de la instancia de configuración
db_url = str(settings_instance.SQLALCHEMY_DATABASE_URI)


def _display_url(url: str) -> str:
    """Ocultar credenciales antes de loguear la URL."""
    if '@' in url:
        scheme = url.split('://')[0]
        host_info = url.split('@', 1)[1]
        return f"{scheme}://***@{host_info}"
    return url


def build_engine(url: str) -> Engine:
    """
    Crear el engine adecuado para el backend.

    SQLite necesita check_same_thread=False (FastAPI ejecuta endpoints sync en un
    threadpool) y un busy timeout para que los escritores concurrentes esperen
    el lock en lugar de fallar de inmediato.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=180,
        connect_args={
            "connect_timeout": 10,  # Timeout de conexión explícito
            "options": "-c statement_timeout=30000",
        },
        execution_options={
            "isolation_level": "READ COMMITTED",
        }
    )


display_url = _display_url(db_url)
logger.info(f"URL utilizada para crear el engine: {display_url}")

engine = build_engine(db_url)

# Crear clase de sesión
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()  # Hacer rollback en caso de error
        raise  # Relanzar la excepción para que FastAPI la maneje
    finally:
        # Asegurarse siempre de cerrar la sesión
        db.close()

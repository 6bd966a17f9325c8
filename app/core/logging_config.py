import logging
import sys
import os
from datetime import datetime
from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(filename)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers de terceros que en DEBUG inundan la salida
NOISY_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "redis": logging.WARNING,
    "timing_middleware": logging.INFO,
}


def setup_logging():
    """
    Configura el logging de la aplicación, respetando DEBUG_MODE.

    Todos los módulos usan logging.getLogger(__name__); aquí solo se configura
    el logger raíz (consola y, con LOG_TO_FILE, un fichero diario en logs/).
    """
    settings = get_settings()
    log = logging.getLogger()
    level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO
    log.setLevel(level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Limpiar handlers existentes si Uvicorn/otro añadió alguno antes
    if log.hasHandlers():
        log.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        os.makedirs("logs", exist_ok=True)
        log_file = f"logs/schedule_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    for name, logger_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(logger_level)

    log.info(
        "Configuración de logging aplicada. Nivel %s, zona horaria del gimnasio %s.",
        logging.getLevelName(level),
        settings.GYM_TIMEZONE,
    )
    if settings.DEBUG_MODE:
        log.debug("Logs de nivel DEBUG habilitados (entorno de desarrollo).")

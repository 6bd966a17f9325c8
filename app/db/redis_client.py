"""
Cliente Redis asíncrono con connection pooling.

Redis es opcional: solo cachea los listados de datos de referencia. Con
REDIS_URL vacía la dependencia `get_redis_client` entrega None y los
servicios consultan la BD directamente.

Configuración ajustable mediante variables de entorno:
- REDIS_POOL_MAX_CONNECTIONS: Número máximo de conexiones en el pool
- REDIS_POOL_SOCKET_TIMEOUT: Timeout para operaciones de socket (segundos)
- REDIS_POOL_HEALTH_CHECK_INTERVAL: Intervalo para verificar salud de conexiones
- REDIS_POOL_RETRY_ON_TIMEOUT: Si se debe reintentar automáticamente en timeout
- REDIS_POOL_SOCKET_KEEPALIVE: Si se debe mantener la conexión TCP viva

Para usar en endpoints:
```python
@router.get("/rooms")
async def read_rooms(redis_client: Optional[Redis] = Depends(get_redis_client)):
    ...
```
"""
import logging
from typing import AsyncGenerator, Optional

from redis.asyncio import ConnectionPool, Redis

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Pool de conexiones compartido por todos los requests
REDIS_POOL: Optional[ConnectionPool] = None


async def initialize_redis_pool() -> Optional[ConnectionPool]:
    """
    Inicializa el pool de conexiones a Redis si hay REDIS_URL.
    Debe llamarse una sola vez al iniciar la aplicación.
    """
    global REDIS_POOL
    if REDIS_POOL is not None:
        return REDIS_POOL

    settings = get_settings()
    redis_url = settings.REDIS_URL
    if not redis_url:
        logger.info("REDIS_URL no configurada; caché de datos de referencia desactivada.")
        return None

    logger.info("Inicializando connection pool de Redis...")
    REDIS_POOL = ConnectionPool.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.REDIS_POOL_MAX_CONNECTIONS,
        socket_keepalive=settings.REDIS_POOL_SOCKET_KEEPALIVE,
        socket_timeout=settings.REDIS_POOL_SOCKET_TIMEOUT,
        health_check_interval=settings.REDIS_POOL_HEALTH_CHECK_INTERVAL,
        retry_on_timeout=settings.REDIS_POOL_RETRY_ON_TIMEOUT
    )
    logger.info(
        f"Connection pool de Redis inicializado (max_connections={settings.REDIS_POOL_MAX_CONNECTIONS})."
    )
    return REDIS_POOL


async def get_redis_client() -> AsyncGenerator[Optional[Redis], None]:
    """
    Dependencia FastAPI: cliente Redis nuevo por request sobre el pool compartido,
    o None si Redis no está configurado.
    """
    pool = await initialize_redis_pool()
    if pool is None:
        yield None
        return

    client = Redis(connection_pool=pool)
    try:
        yield client
    finally:
        # Devolver la conexión al pool
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(f"Error cerrando cliente Redis: {e}")


async def close_redis_client() -> None:
    """
    Cierra el pool de conexiones Redis al finalizar la aplicación.
    """
    global REDIS_POOL

    if REDIS_POOL:
        logger.info("Cerrando connection pool de Redis...")
        await REDIS_POOL.disconnect()
        REDIS_POOL = None
        logger.info("Connection pool de Redis cerrado.")

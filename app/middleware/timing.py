import time
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger("timing_middleware")

# Umbrales en milisegundos
MEDIUM_MS = 300
SLOW_MS = 700
VERY_SLOW_MS = 1500


def speed_category(process_time_ms: float) -> str:
    if process_time_ms > VERY_SLOW_MS:
        return "VERY_SLOW"
    if process_time_ms > SLOW_MS:
        return "SLOW"
    if process_time_ms > MEDIUM_MS:
        return "MEDIUM"
    return "FAST"


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware que mide el tiempo de respuesta de cada solicitud y lo expone en
    cabeceras. Las rejillas mensuales grandes son las primeras en aparecer aquí.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = (time.perf_counter() - start_time) * 1000

        category = speed_category(process_time)
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        response.headers["X-Process-Speed"] = category

        if category in ("SLOW", "VERY_SLOW"):
            logger.warning(
                f"Petición lenta {request.method} {request.url.path}: {process_time:.2f}ms ({category})"
            )
        return response

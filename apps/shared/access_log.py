"""Access logging for API services, one line per request."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import Response

logger = logging.getLogger("access")


def format_access_line(request: Request, status_code: int, duration_ms: float) -> str:
    client = request.client.host if request.client else "-"
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    version = request.scope.get("http_version", "1.1")
    return f'{client} "{request.method} {path} HTTP/{version}" {status_code} {duration_ms:.1f}ms'


def setup_access_log(app: FastAPI) -> None:
    """Log method, path, status and duration of every request."""

    @app.middleware("http")
    async def log_request(request: Request, call_next) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The outermost error middleware turns this into the 500 response
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(format_access_line(request, 500, duration_ms))
            raise
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(format_access_line(request, response.status_code, duration_ms))
        return response

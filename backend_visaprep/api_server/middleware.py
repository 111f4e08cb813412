"""
HTTP middleware: request logging with correlation IDs and timing.

Each request gets a request_id (the client's X-Request-ID header when sent,
otherwise a new UUID) bound into the structlog context, so every record
logged while scoring the request carries it. The id is echoed back in the
response header.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from backend_visaprep.visaprep_logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        clear_request_context()
        bind_request_context(request_id=request_id, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("http_request_failed", method=request.method)
            raise
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.info(
            "http_request_completed",
            method=request.method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

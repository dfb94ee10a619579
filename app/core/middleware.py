"""
HTTP middleware: request IDs, access logging and request deadlines.

Order (outermost first): RequestIDMiddleware -> RequestLoggingMiddleware
-> RequestTimeoutMiddleware, so the timeout response is still logged and
still carries X-Request-ID.
"""

import asyncio
import logging
import re
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.exceptions import RequestTimeoutError

logger = logging.getLogger("app.access")

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Accepted shape for a client-supplied X-Request-ID
REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a unique ID to each request for tracing.

    A client-supplied X-Request-ID is reused when it is at most 64
    letters, digits or dashes; otherwise a short UUID is generated.
    The ID is stored in a ContextVar for loggers, on request.state for
    handlers, and echoed in the response headers.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")
        if not REQUEST_ID_PATTERN.fullmatch(rid):
            rid = str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Health checks are too noisy to log
        if path.startswith("/health"):
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """
    Bounds every request by a deadline and answers 504 when it is exceeded.

    Sync handlers run in the threadpool; the worker thread is not killed,
    but the client gets an answer and the connection is released.
    """

    def __init__(self, app, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            exc = RequestTimeoutError(self.timeout)
            logger.error(
                f"{request.method} {request.url.path} exceeded {self.timeout}s deadline"
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": exc.message, "request_id": request_id_var.get("")},
            )

"""
Request Logging Middleware

This module provides middleware that logs one line per request with its
method, path, status and duration. It also binds a request id for the log
records written while the request is served and returns it in the
``X-Request-ID`` header.
"""

import re
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from patient_dashboard.common.logger import bind_request_id, get_logger, reset_request_id
from patient_dashboard.common.utils import new_id

# Setup module logger
logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are echoed into logs and headers, so only short safe tokens are kept
_CLIENT_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(request: Request) -> str:
    """The client's ``X-Request-ID`` when well formed, otherwise a new id."""
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied and _CLIENT_REQUEST_ID.match(supplied):
        return supplied
    return new_id()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log every request and how long it took."""

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and log its outcome.

        Args:
            request: The incoming request
            call_next: The next middleware/route handler

        Returns:
            The response from the next handler
        """
        request_id = resolve_request_id(request)
        token = bind_request_id(request_id)
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            try:
                response = await call_next(request)
            except Exception:
                duration = time.perf_counter() - start_time
                logger.error(
                    f"{request.method} {request.url.path} failed after {duration:.3f}s, ip={client_ip}"
                )
                raise

            duration = time.perf_counter() - start_time
            status_code = response.status_code
            log = logger.warning if status_code >= 500 else logger.info
            log(
                f"{request.method} {request.url.path} {status_code} {duration * 1000:.1f}ms",
                extra={"data": {
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "duration_ms": round(duration * 1000, 1),
                    "ip": client_ip,
                }},
            )
            response.headers["X-Response-Time"] = f"{duration * 1000:.1f}ms"
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            reset_request_id(token)

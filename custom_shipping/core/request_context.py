"""
Request context middleware

Tags every request with an id (reused from X-Request-ID when the caller sends
one) and logs method, path, status and duration.
"""
import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"
DURATION_HEADER = "x-request-duration"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach request id and duration headers to every response."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[DURATION_HEADER] = f"{duration_ms:.2f}ms"

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} ({duration_ms:.2f}ms)"
        )
        return response

"""Request logging middleware."""

import logging
import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("emailbuilder.api")

# Caller-supplied IDs end up in log lines; keep them short and printable
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def client_ip(request: Request) -> str:
    """Best-effort client address, honouring the first proxy hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and one per response, tagged with a request ID.

    Only method, path, status and timing are written. Query strings and
    bodies are left out: they carry passwords, tokens and substitution values.
    """

    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/ready"]

    def _request_id(self, request: Request) -> str:
        supplied = request.headers.get("X-Request-ID", "")
        if _REQUEST_ID_PATTERN.match(supplied):
            return supplied
        return uuid.uuid4().hex[:8]

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if any(path.startswith(p) for p in self.exclude_paths):
            return await call_next(request)

        request_id = self._request_id(request)
        request.state.request_id = request_id
        started = time.perf_counter()

        logger.info(f"[{request_id}] {request.method} {path} - Client: {client_ip(request)}")

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"[{request_id}] {request.method} {path} - ERROR - {elapsed_ms:.2f}ms - {e.__class__.__name__}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.log(
            level_for_status(response.status_code),
            f"[{request_id}] {request.method} {path} - {response.status_code} - {elapsed_ms:.2f}ms",
        )
        response.headers["X-Request-ID"] = request_id
        return response

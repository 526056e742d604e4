"""API middleware for EmailBuilder."""

from emailbuilder.api.middleware.logging import LoggingMiddleware, client_ip
from emailbuilder.api.middleware.security import SecurityConfig, SecurityHeadersMiddleware

__all__ = [
    "client_ip",
    "LoggingMiddleware",
    "SecurityConfig",
    "SecurityHeadersMiddleware",
]

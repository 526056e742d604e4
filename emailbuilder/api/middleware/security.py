"""Security headers middleware."""

from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


@dataclass
class SecurityConfig:
    """Security headers configuration."""

    # Responses are JSON or HTML downloads; neither should run scripts or be framed
    content_security_policy: str = "default-src 'none'; frame-ancestors 'none'"
    x_frame_options: str = "DENY"
    referrer_policy: str = "strict-origin-when-cross-origin"

    # Only meaningful behind HTTPS, switched on together with secure cookies
    enable_hsts: bool = False
    hsts_max_age: int = 31536000  # 1 year

    def headers(self) -> dict[str, str]:
        """Static header set added to every response."""
        headers = {"X-Content-Type-Options": "nosniff"}
        if self.content_security_policy:
            headers["Content-Security-Policy"] = self.content_security_policy
        if self.x_frame_options:
            headers["X-Frame-Options"] = self.x_frame_options
        if self.referrer_policy:
            headers["Referrer-Policy"] = self.referrer_policy
        if self.enable_hsts:
            headers["Strict-Transport-Security"] = f"max-age={self.hsts_max_age}; includeSubDomains"
        return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the configured security headers unless a route already set them."""

    def __init__(self, app, config: SecurityConfig | None = None):
        super().__init__(app)
        self.config = config or SecurityConfig()
        self._headers = self.config.headers()

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response

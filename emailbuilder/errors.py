"""Error taxonomy shared by services and the HTTP layer.

Services raise these; the API maps each one to a status code and a
``{"message", "detail"}`` JSON body.
"""

from typing import Any


class EmailBuilderError(Exception):
    """Base class for all expected application failures."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for a JSON error response."""
        body: dict[str, Any] = {"message": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidInput(EmailBuilderError):
    """Malformed or missing request data."""

    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(EmailBuilderError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    default_message = "Invalid or expired token."


class InvalidCredential(Unauthenticated):
    """Password did not match."""

    default_message = "Invalid email or password."


class Forbidden(EmailBuilderError):
    status_code = 403
    default_message = "Access denied"


class NotFound(EmailBuilderError):
    """Entity missing, or owned by someone else."""

    status_code = 404
    default_message = "Not found"


class Conflict(EmailBuilderError):
    status_code = 409
    default_message = "Already exists"


class Unavailable(EmailBuilderError):
    """Persistent store or blob store failed or timed out."""

    status_code = 503
    default_message = "Service temporarily unavailable"

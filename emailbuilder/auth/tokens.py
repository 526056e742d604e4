"""Token generation and management."""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import NamedTuple


ACCESS_TOKEN_DAYS = 1
REFRESH_TOKEN_DAYS = 7


class TokenData(NamedTuple):
    """Token with metadata."""
    token: str
    token_hash: str
    expires_at: datetime


def generate_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token.

    Args:
        length: Number of bytes (actual string will be longer due to base64).

    Returns:
        URL-safe base64 encoded token.
    """
    return secrets.token_urlsafe(length)


def hash_token(token: str) -> str:
    """Hash a token for storage and lookup.

    Uses SHA-256 which is sufficient for high-entropy tokens.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def _token_data(lifetime: timedelta, now: datetime) -> TokenData:
    token = generate_token(32)
    return TokenData(
        token=token,
        token_hash=hash_token(token),
        expires_at=now + lifetime,
    )


def generate_session_tokens(
    access_expires_days: int = ACCESS_TOKEN_DAYS,
    refresh_expires_days: int = REFRESH_TOKEN_DAYS,
    now: datetime | None = None,
) -> tuple[TokenData, TokenData]:
    """Generate access and refresh tokens for a session.

    Args:
        access_expires_days: Days until access token expires.
        refresh_expires_days: Days until refresh token expires.
        now: Issue time, defaults to the current UTC time.

    Returns:
        Tuple of (access_token_data, refresh_token_data).
    """
    now = now or datetime.utcnow()
    return (
        _token_data(timedelta(days=access_expires_days), now),
        _token_data(timedelta(days=refresh_expires_days), now),
    )

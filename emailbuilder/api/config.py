"""
config.py — Environment configuration for the API.

Values come from environment variables, optionally seeded from a ``.env``
file at the project root (variables already set in the environment win).
"""

import os
from functools import lru_cache
from pathlib import Path


# Load .env file if it exists
def _load_dotenv():
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if key and value and key not in os.environ:
                        os.environ[key] = value

_load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Server settings
        self.app_name: str = os.environ.get("APP_NAME", "EmailBuilder")
        self.app_version: str = "1.0.0"
        self.host: str = os.environ.get("HOST", "0.0.0.0")
        self.port: int = int(os.environ.get("PORT", "5000"))
        self.debug: bool = _flag("DEBUG")
        self.log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()

        # CORS settings
        self.cors_origins: list = [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        # Database
        self.database_url: str = os.environ.get("DATABASE_URL", "sqlite:///./emailbuilder.db")
        self.db_timeout_seconds: float = float(os.environ.get("DB_TIMEOUT_SECONDS", "10"))
        self.sql_echo: bool = _flag("SQL_ECHO")

        # Tokens
        self.access_token_days: int = int(os.environ.get("ACCESS_TOKEN_DAYS", "1"))
        self.refresh_token_days: int = int(os.environ.get("REFRESH_TOKEN_DAYS", "7"))
        self.refresh_cookie_name: str = os.environ.get("REFRESH_COOKIE_NAME", "refreshtoken")
        self.refresh_cookie_path: str = os.environ.get("REFRESH_COOKIE_PATH", "/user/refresh_token")
        self.cookie_secure: bool = _flag("COOKIE_SECURE")

        # Image storage
        self.blob_backend: str = os.environ.get("BLOB_BACKEND", "local").lower()
        self.blob_local_dir: str = os.environ.get("BLOB_LOCAL_DIR", "./uploads")
        self.blob_public_base_url: str = os.environ.get("BLOB_PUBLIC_BASE_URL", "/uploads")
        self.blob_timeout_seconds: float = float(os.environ.get("BLOB_TIMEOUT_SECONDS", "10"))
        self.asset_namespace: str = os.environ.get("ASSET_NAMESPACE", "emailbuilder")
        self.s3_bucket: str = os.environ.get("S3_BUCKET", "")
        self.s3_endpoint_url: str | None = os.environ.get("S3_ENDPOINT_URL") or None
        self.s3_access_key_id: str | None = os.environ.get("S3_ACCESS_KEY_ID") or None
        self.s3_secret_access_key: str | None = os.environ.get("S3_SECRET_ACCESS_KEY") or None
        self.s3_public_base_url: str | None = os.environ.get("S3_PUBLIC_BASE_URL") or None

    @property
    def uses_s3(self) -> bool:
        """Check if uploads go to S3-compatible storage."""
        return self.blob_backend == "s3"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

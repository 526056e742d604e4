"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from emailbuilder.api.config import Settings
from emailbuilder.api.main import create_app
from emailbuilder.assets import LocalBlobStore
from emailbuilder.auth import IdentityService
from emailbuilder.db.base import Database


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment."""
    settings = Settings()
    settings.database_url = "sqlite://"
    settings.blob_backend = "local"
    settings.asset_namespace = "emailbuilder"
    settings.cors_origins = ["*"]
    settings.cookie_secure = False
    return settings


@pytest.fixture(scope="function")
def database():
    """Fresh in-memory database per test."""
    database = Database("sqlite://")
    database.init()
    yield database
    database.drop()
    database.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads", base_url="/uploads")


@pytest.fixture
def client(settings, database, blob_store):
    """Create a test client bound to the in-memory database."""
    app = create_app(settings=settings, database=database, blob_store=blob_store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_user(db_session):
    """Factory: register a user and return ``(user, access_token)``."""

    def _make_user(name: str = "Test User", email: str = "test@example.com", password: str = "password123"):
        identity = IdentityService(db_session)
        user = identity.register(name, email, password)
        tokens = identity.issue_tokens(user)
        return user, tokens.access.token

    return _make_user


@pytest.fixture
def sample_blocks() -> list[dict]:
    """One block of every type."""
    return [
        {"type": "heading", "content": "Hi {{name}}"},
        {"type": "paragraph", "content": "Welcome to {{team}}."},
        {
            "type": "member-card",
            "content": {"initials": "{{initials}}", "name": "{{name}}", "status": "Active"},
        },
        {"type": "button", "content": "Join {{team}}"},
        {
            "type": "image",
            "content": {"url": "https://cdn.example.com/{{logo}}", "alt": "{{team}} logo"},
            "style": {"width": "120px"},
        },
    ]

"""FastAPI dependencies for authentication and service construction."""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from emailbuilder.api.config import Settings
from emailbuilder.assets import BlobStore, ImageAssetService
from emailbuilder.auth import IdentityService
from emailbuilder.db.base import get_db
from emailbuilder.db.models import User
from emailbuilder.errors import Unauthenticated
from emailbuilder.renderer import BlockRenderer
from emailbuilder.templates.store import TemplateStore


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_token_from_header(
    authorization: str | None = Header(default=None),
) -> str:
    """Extract the bearer token from the Authorization header.

    Raises:
        Unauthenticated: Header missing or not of the form ``Bearer <token>``.
    """
    if not authorization:
        raise Unauthenticated("No token, authorization denied.")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Invalid or expired token.")
    return token.strip()


def get_identity_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_from_app),
) -> IdentityService:
    return IdentityService(
        db,
        access_token_days=settings.access_token_days,
        refresh_token_days=settings.refresh_token_days,
    )


def get_current_user(
    token: str = Depends(get_token_from_header),
    identity: IdentityService = Depends(get_identity_service),
) -> User:
    """Get the current authenticated user.

    Raises:
        Unauthenticated: If the token is unknown or expired.
    """
    return identity.verify(token)


def get_template_store(db: Session = Depends(get_db)) -> TemplateStore:
    return TemplateStore(db)


def get_renderer() -> BlockRenderer:
    return BlockRenderer()


def get_image_service(
    blob_store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings_from_app),
) -> ImageAssetService:
    return ImageAssetService(blob_store, namespace=settings.asset_namespace)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AccessToken = Annotated[str, Depends(get_token_from_header)]
Identity = Annotated[IdentityService, Depends(get_identity_service)]
Templates = Annotated[TemplateStore, Depends(get_template_store)]
Renderer = Annotated[BlockRenderer, Depends(get_renderer)]
Images = Annotated[ImageAssetService, Depends(get_image_service)]
AppSettings = Annotated[Settings, Depends(get_settings_from_app)]

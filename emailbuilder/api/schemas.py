"""
schemas.py — Request/response models for the API.

Field names follow the builder client's JSON contract (``isFavorite``,
``accesstoken``), hence the aliases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# USERS
# =============================================================================

class RegisterRequest(BaseModel):
    """Registration request. Presence is checked by the identity service."""
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    """Login request."""
    email: str | None = None
    password: str | None = None


class TokenResponse(BaseModel):
    """Access token response. The refresh token travels only as a cookie."""
    accesstoken: str


class TemplateRefs(BaseModel):
    all: list[str]
    fav: list[str]
    recents: list[str]


class ProfileResponse(BaseModel):
    name: str
    email: str
    templates: TemplateRefs


# =============================================================================
# TEMPLATES
# =============================================================================

class TemplateCreate(BaseModel):
    """Request to create a template."""

    model_config = ConfigDict(populate_by_name=True)

    name: Any = None
    content: Any = Field(default_factory=list, description="Ordered block list")
    is_favorite: bool | None = Field(default=False, alias="isFavorite")


class TemplateUpdate(BaseModel):
    """Partial update; at least one field must be present."""

    model_config = ConfigDict(populate_by_name=True)

    name: Any = None
    content: Any = None
    is_favorite: bool | None = Field(default=None, alias="isFavorite")


class TemplateOut(BaseModel):
    """Template as seen by the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    content: list[dict[str, Any]]
    is_favorite: bool = Field(alias="isFavorite")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class ListCounts(BaseModel):
    templatesCount: int
    favoritesCount: int
    recentsCount: int


class TemplateMutationResponse(BaseModel):
    message: str
    template: TemplateOut
    user: ListCounts


class TemplateResponse(BaseModel):
    message: str
    template: TemplateOut


class TemplateGroupsResponse(BaseModel):
    all: list[TemplateOut]
    favorites: list[TemplateOut]
    recent: list[TemplateOut]


class TemplateCategoryResponse(BaseModel):
    category: str
    templates: list[TemplateOut]


# =============================================================================
# RENDERING & IMAGES
# =============================================================================

class RenderRequest(BaseModel):
    """Substitution values for ``{{key}}`` placeholders."""
    values: dict[str, Any] | None = None


class ImageOut(BaseModel):
    public_id: str
    url: str
    format: str
    size: int


class UploadResponse(BaseModel):
    message: str
    image: ImageOut


class DeleteImageResponse(BaseModel):
    message: str
    detail: dict[str, Any]


# =============================================================================
# ERRORS
# =============================================================================

class ErrorResponse(BaseModel):
    message: str
    detail: Any | None = None

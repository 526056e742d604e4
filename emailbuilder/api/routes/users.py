"""User routes: registration, login, token refresh and profile."""

from fastapi import APIRouter, Request, Response

from emailbuilder.api.config import Settings
from emailbuilder.api.dependencies import AccessToken, AppSettings, CurrentUser, Identity
from emailbuilder.api.middleware import client_ip
from emailbuilder.api.schemas import LoginRequest, ProfileResponse, RegisterRequest, TokenResponse
from emailbuilder.auth import IssuedTokens

router = APIRouter()


def set_refresh_cookie(response: Response, tokens: IssuedTokens, settings: Settings) -> None:
    """Attach the refresh token as an HTTP-only cookie scoped to the refresh path."""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=tokens.refresh.token,
        max_age=settings.refresh_token_days * 24 * 60 * 60,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.post("/register", response_model=TokenResponse)
def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    identity: Identity,
    settings: AppSettings,
):
    """Register a new user and start a session."""
    user = identity.register(body.name, body.email, body.password)
    tokens = identity.issue_tokens(
        user,
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    set_refresh_cookie(response, tokens, settings)
    return TokenResponse(accesstoken=tokens.access.token)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    identity: Identity,
    settings: AppSettings,
):
    """Login with email and password."""
    user = identity.authenticate(body.email, body.password)
    tokens = identity.issue_tokens(
        user,
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    set_refresh_cookie(response, tokens, settings)
    return TokenResponse(accesstoken=tokens.access.token)


@router.post("/refresh_token", response_model=TokenResponse)
def refresh_token(
    request: Request,
    response: Response,
    identity: Identity,
    settings: AppSettings,
):
    """Rotate the session tokens using the refresh cookie."""
    tokens = identity.refresh(request.cookies.get(settings.refresh_cookie_name))
    set_refresh_cookie(response, tokens, settings)
    return TokenResponse(accesstoken=tokens.access.token)


@router.post("/logout")
def logout(
    current_user: CurrentUser,
    token: AccessToken,
    response: Response,
    identity: Identity,
    settings: AppSettings,
):
    """Logout and invalidate current session."""
    identity.logout(token)
    response.delete_cookie(settings.refresh_cookie_name, path=settings.refresh_cookie_path)
    return {"msg": "Logged out"}


@router.get("/profile", response_model=ProfileResponse)
def get_user_profile(
    current_user: CurrentUser,
    identity: Identity,
):
    """Get name, email and template references of the current user."""
    return identity.profile(current_user)

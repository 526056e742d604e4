"""API routes for EmailBuilder."""

from fastapi import APIRouter

from emailbuilder.api.routes.health import router as health_router
from emailbuilder.api.routes.users import router as users_router
from emailbuilder.api.routes.templates import router as templates_router
from emailbuilder.api.routes.render import router as render_router
from emailbuilder.api.routes.images import router as images_router
from emailbuilder.api.schemas import ErrorResponse

# Error bodies shared by every authenticated route, for the OpenAPI schema
ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 403, 404, 409, 503)
}

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(users_router, prefix="/user", tags=["Users"], responses=ERROR_RESPONSES)
api_router.include_router(templates_router, prefix="/api", tags=["Templates"], responses=ERROR_RESPONSES)
api_router.include_router(render_router, prefix="/api", tags=["Rendering"], responses=ERROR_RESPONSES)
api_router.include_router(images_router, prefix="/api", tags=["Images"], responses=ERROR_RESPONSES)

__all__ = ["api_router"]

"""Template routes."""

from fastapi import APIRouter, status

from emailbuilder.api.dependencies import CurrentUser, Templates
from emailbuilder.api.schemas import (
    TemplateCategoryResponse,
    TemplateCreate,
    TemplateGroupsResponse,
    TemplateMutationResponse,
    TemplateResponse,
    TemplateUpdate,
)

router = APIRouter()


@router.post(
    "/templates",
    response_model=TemplateMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    request: TemplateCreate,
    current_user: CurrentUser,
    store: Templates,
):
    """Create a new template."""
    template, lists = store.create(
        current_user.id,
        name=request.name,
        content=request.content,
        is_favorite=request.is_favorite,
    )
    return {
        "message": "Template saved successfully",
        "template": template.to_dict(),
        "user": lists.counts(),
    }


@router.get("/templates", response_model=TemplateGroupsResponse)
def list_templates(
    current_user: CurrentUser,
    store: Templates,
):
    """List templates grouped by all/favorites/recent."""
    groups = store.list_grouped(current_user.id)
    return {key: [t.to_dict() for t in templates] for key, templates in groups.items()}


@router.get("/templates/{category}", response_model=TemplateCategoryResponse)
def list_category(
    category: str,
    current_user: CurrentUser,
    store: Templates,
):
    """List one category: all, favorites or recent."""
    templates = store.list_category(current_user.id, category)
    return {"category": category, "templates": [t.to_dict() for t in templates]}


@router.get("/templateById/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: str,
    current_user: CurrentUser,
    store: Templates,
):
    """Get a specific template."""
    template = store.get(template_id, current_user.id)
    return {"message": "Template retrieved successfully", "template": template.to_dict()}


@router.put("/templates/{template_id}", response_model=TemplateMutationResponse)
def update_template(
    template_id: str,
    request: TemplateUpdate,
    current_user: CurrentUser,
    store: Templates,
):
    """Update a template."""
    template, lists = store.update(
        template_id,
        current_user.id,
        name=request.name,
        content=request.content,
        is_favorite=request.is_favorite,
    )
    return {
        "message": "Template updated successfully",
        "template": template.to_dict(),
        "user": lists.counts(),
    }


@router.delete("/templates/{template_id}")
def delete_template(
    template_id: str,
    current_user: CurrentUser,
    store: Templates,
):
    """Delete a template."""
    lists = store.delete(template_id, current_user.id)
    return {"message": "Template deleted successfully", "user": lists.counts()}

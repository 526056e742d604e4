"""Render route: template + values -> downloadable HTML document."""

import re
from urllib.parse import quote

from fastapi import APIRouter, Response

from emailbuilder.api.dependencies import CurrentUser, Renderer, Templates
from emailbuilder.api.schemas import RenderRequest

router = APIRouter()


def attachment_header(name: str) -> str:
    """Build a Content-Disposition value for ``<name>.html``.

    The plain ``filename`` is reduced to safe ASCII; ``filename*`` keeps the
    original name.
    """
    filename = f"{name}.html"
    ascii_name = re.sub(r'[^A-Za-z0-9._ -]', "_", filename).strip() or "template.html"
    return f'attachment; filename="{ascii_name}"; filename*=UTF-8\'\'{quote(filename)}'


@router.post("/render-template/{template_id}")
def render_template(
    template_id: str,
    current_user: CurrentUser,
    store: Templates,
    renderer: Renderer,
    request: RenderRequest | None = None,
):
    """Render an owned template with substitution values."""
    values = (request.values if request else None) or {}
    template = store.get(template_id, current_user.id)
    html = renderer.render(template, values)
    return Response(
        content=html,
        media_type="text/html; charset=utf-8",
        headers={"Content-Disposition": attachment_header(template.name)},
    )

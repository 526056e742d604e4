"""HTML rendering of block templates."""

from emailbuilder.renderer.html import BlockRenderer, render_template, substitute, placeholder

__all__ = [
    "BlockRenderer",
    "render_template",
    "substitute",
    "placeholder",
]

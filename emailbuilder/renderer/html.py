"""
html.py — HTML document generation from template blocks.

This renderer turns an ordered block list plus a substitution map into one
standalone HTML document. It never looks anything up: ownership checks and
loading happen in the template store.

Substitution is plain string replacement. Values are inserted verbatim and
are NOT HTML-escaped; callers that accept untrusted values must escape them
before rendering.
"""

from typing import Any, Mapping, Optional, Protocol, Sequence, Union

from emailbuilder.templates.blocks import (
    AnyBlock,
    ButtonBlock,
    HeadingBlock,
    ImageBlock,
    MemberCardBlock,
    ParagraphBlock,
    coerce_block,
    coerce_blocks,
)


# =============================================================================
# CONSTANTS
# =============================================================================

UTILITY_CSS_SCRIPT = "https://cdn.tailwindcss.com"

BASE_STYLE = """
      body {
        font-family: Arial, sans-serif;
        line-height: 1.6;
        margin: 0;
        padding: 20px;
      }"""

DOCUMENT_SHELL = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <script src="{script}"></script>
    <style>{style}
    </style>
  </head>
  <body>
{body}
  </body>
</html>
"""

MEMBER_CARD_LAYOUT = """<div class="bg-gray-50 p-5 rounded-lg">
  <div class="flex items-center gap-4">
    <div class="w-12 h-12 bg-gray-200 rounded-full flex items-center justify-center">
      <span class="text-xl">{initials}</span>
    </div>
    <div>
      <h3 class="font-medium">{name}</h3>
      <p class="text-sm text-gray-600">{status}</p>
    </div>
  </div>
</div>"""


# =============================================================================
# SUBSTITUTION
# =============================================================================

def placeholder(key: str) -> str:
    """Return the placeholder token for ``key``, e.g. ``{{firstName}}``."""
    return "{{" + key + "}}"


def substitute(text: str, values: Optional[Mapping[str, Any]]) -> str:
    """Replace every ``{{key}}`` occurrence for each key in ``values``.

    Keys are matched literally. Placeholders whose key is absent from
    ``values`` stay in the output unchanged.
    """
    if not isinstance(text, str):
        return ""
    if not values:
        return text
    for key, value in values.items():
        text = text.replace(placeholder(str(key)), "" if value is None else str(value))
    return text


# =============================================================================
# HTML RENDERER
# =============================================================================

class RenderableTemplate(Protocol):
    name: str
    content: Any


class BlockRenderer:
    """
    Renders template blocks to an HTML document.

    The renderer is stateless; the same blocks and values always produce
    byte-identical output.
    """

    def __init__(self, fragment_separator: str = "\n"):
        self.fragment_separator = fragment_separator

    def render(
        self,
        template: RenderableTemplate,
        values: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Render a stored template.

        Args:
            template: Object exposing ``name`` and ``content`` (stored block list,
                entries that are not block objects are skipped)
            values: Placeholder substitutions

        Returns:
            Complete HTML document
        """
        return self.render_document(template.name, coerce_blocks(template.content), values)

    def render_document(
        self,
        title: str,
        blocks: Sequence[Union[AnyBlock, Mapping[str, Any]]],
        values: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render blocks in order and wrap them in the document shell."""
        fragments = [self.render_block(block, values) for block in blocks]
        return DOCUMENT_SHELL.format(
            title=title,
            script=UTILITY_CSS_SCRIPT,
            style=BASE_STYLE,
            body=self.fragment_separator.join(fragments),
        )

    def render_block(
        self,
        block: Union[AnyBlock, Mapping[str, Any]],
        values: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render a single block to a markup fragment. Never raises."""
        if isinstance(block, Mapping):
            block = coerce_block(block)

        if isinstance(block, HeadingBlock):
            return self._render_heading(block, values)
        elif isinstance(block, ParagraphBlock):
            return self._render_paragraph(block, values)
        elif isinstance(block, MemberCardBlock):
            return self._render_member_card(block, values)
        elif isinstance(block, ButtonBlock):
            return self._render_button(block, values)
        elif isinstance(block, ImageBlock):
            return self._render_image(block, values)
        else:
            return self._render_fallback(block, values)

    # =========================================================================
    # FRAGMENTS
    # =========================================================================

    def _render_heading(self, block: HeadingBlock, values) -> str:
        return f'<h2 class="text-2xl">{substitute(block.content, values)}</h2>'

    def _render_paragraph(self, block: ParagraphBlock, values) -> str:
        return f"<p>{substitute(block.content, values)}</p>"

    def _render_member_card(self, block: MemberCardBlock, values) -> str:
        content = block.content
        return MEMBER_CARD_LAYOUT.format(
            initials=substitute(content.initials, values),
            name=substitute(content.name, values),
            status=substitute(content.status, values),
        )

    def _render_button(self, block: ButtonBlock, values) -> str:
        return (
            '<button class="px-6 py-3 rounded-md text-white">'
            f"{substitute(block.content, values)}</button>"
        )

    def _render_image(self, block: ImageBlock, values) -> str:
        width = block.style.get("width")
        style_attr = f' style="width: {width};"' if width else ""
        return (
            f'<img src="{substitute(block.content.url, values)}"'
            f' alt="{substitute(block.content.alt, values)}"'
            f' class="max-w-full h-auto rounded"{style_attr} />'
        )

    def _render_fallback(self, block: Any, values) -> str:
        # Unknown tags and anything that is not a block at all
        return f"<p>{substitute(getattr(block, 'content', None), values)}</p>"


def render_template(template: RenderableTemplate, values: Optional[Mapping[str, Any]] = None) -> str:
    """
    Convenience function to render a stored template.

    Args:
        template: Object exposing ``name`` and ``content``
        values: Placeholder substitutions

    Returns:
        Complete HTML document
    """
    return BlockRenderer().render(template, values)

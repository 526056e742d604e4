"""Pydantic v2 models for template content blocks.

A template body is an ordered list of blocks. Each block is tagged by
``type`` and carries a ``content`` payload whose shape depends on the tag,
plus an optional string-to-string ``style`` map.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from emailbuilder.errors import InvalidInput


class BlockType(str, Enum):
    """Supported block types."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    MEMBER_CARD = "member-card"
    BUTTON = "button"
    IMAGE = "image"


# ============================================================================
# Content payloads
# ============================================================================


class MemberCardContent(BaseModel):
    """Sub-fields of a member card. Missing fields render as empty text."""

    model_config = ConfigDict(frozen=True)

    initials: str = Field(default="", description="Short badge text, e.g. 'JD'")
    name: str = Field(default="")
    status: str = Field(default="")


class ImageContent(BaseModel):
    """Image source and alternate text."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default="")
    alt: str = Field(default="")


# ============================================================================
# Block variants
# ============================================================================


class _BaseBlock(BaseModel):
    # Builder clients attach their own keys (ids, ordering hints); keep them.
    model_config = ConfigDict(frozen=True, extra="allow")

    style: dict[str, str] = Field(default_factory=dict, description="CSS-like hints")


class HeadingBlock(_BaseBlock):
    type: Literal["heading"] = "heading"
    content: str


class ParagraphBlock(_BaseBlock):
    type: Literal["paragraph"] = "paragraph"
    content: str


class MemberCardBlock(_BaseBlock):
    type: Literal["member-card"] = "member-card"
    content: MemberCardContent


class ButtonBlock(_BaseBlock):
    type: Literal["button"] = "button"
    content: str


class ImageBlock(_BaseBlock):
    type: Literal["image"] = "image"
    content: ImageContent


class UnknownBlock(_BaseBlock):
    """Anything stored with a tag this version does not know about."""

    type: str
    content: Any = None


Block = Annotated[
    Union[HeadingBlock, ParagraphBlock, MemberCardBlock, ButtonBlock, ImageBlock],
    Field(discriminator="type"),
]

AnyBlock = Union[HeadingBlock, ParagraphBlock, MemberCardBlock, ButtonBlock, ImageBlock, UnknownBlock]

_BLOCK_LIST_ADAPTER = TypeAdapter(list[Block])
_BLOCK_ADAPTER = TypeAdapter(Block)


def validate_blocks(raw_blocks: Any) -> list[Block]:
    """Strictly validate a block list submitted by a client.

    Raises:
        InvalidInput: If the payload is not a list, a tag is unknown, or a
            ``content`` shape does not match its tag.
    """
    if not isinstance(raw_blocks, list):
        raise InvalidInput("Invalid template data", detail="content must be a list of blocks")
    try:
        return _BLOCK_LIST_ADAPTER.validate_python(raw_blocks)
    except ValidationError as e:
        raise InvalidInput(
            "Invalid template data",
            detail=[
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in e.errors(include_url=False)
            ],
        ) from e


def dump_blocks(blocks: list[AnyBlock]) -> list[dict[str, Any]]:
    """Serialize blocks for storage."""
    return [block.model_dump(mode="json") for block in blocks]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _style(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


def coerce_block(raw: Mapping[str, Any]) -> AnyBlock:
    """Leniently turn a stored block into a variant.

    Never raises: mismatched content degrades to empty sub-fields and unknown
    tags become :class:`UnknownBlock`.
    """
    try:
        return _BLOCK_ADAPTER.validate_python(raw)
    except ValidationError:
        pass

    block_type = raw.get("type")
    content = raw.get("content")
    style = _style(raw.get("style"))

    if block_type == BlockType.MEMBER_CARD.value:
        fields = content if isinstance(content, Mapping) else {}
        return MemberCardBlock(
            content=MemberCardContent(
                initials=_text(fields.get("initials")),
                name=_text(fields.get("name")),
                status=_text(fields.get("status")),
            ),
            style=style,
        )
    if block_type == BlockType.IMAGE.value:
        fields = content if isinstance(content, Mapping) else {}
        return ImageBlock(
            content=ImageContent(url=_text(fields.get("url")), alt=_text(fields.get("alt"))),
            style=style,
        )
    if block_type == BlockType.HEADING.value:
        return HeadingBlock(content=_text(content), style=style)
    if block_type == BlockType.PARAGRAPH.value:
        return ParagraphBlock(content=_text(content), style=style)
    if block_type == BlockType.BUTTON.value:
        return ButtonBlock(content=_text(content), style=style)

    return UnknownBlock(type=str(block_type), content=content, style=style)


def coerce_blocks(raw_blocks: Any) -> list[AnyBlock]:
    """Lenient counterpart of :func:`validate_blocks` for stored data."""
    if not isinstance(raw_blocks, list):
        return []
    return [coerce_block(raw) for raw in raw_blocks if isinstance(raw, Mapping)]

"""Template system module - blocks, membership lists and storage.

``emailbuilder.templates.store`` depends on the ORM models, import it directly.
"""

from emailbuilder.templates.lists import TemplateLists, RECENTS_CAP
from emailbuilder.templates.blocks import Block, BlockType, validate_blocks, coerce_blocks

__all__ = [
    "TemplateLists",
    "RECENTS_CAP",
    "Block",
    "BlockType",
    "validate_blocks",
    "coerce_blocks",
]

"""Per-user template membership lists.

A user carries three lists of template ids:

- ``all``: every owned template, insertion order
- ``fav``: subset of ``all``, set semantics
- ``recents``: most-recently-touched first, deduplicated, capped

The operations here are pure list manipulations so they can be used (and
tested) without a database.
"""

from dataclasses import dataclass, field
from typing import Iterable


RECENTS_CAP = 5


def add_unique(items: list[str], item: str) -> list[str]:
    """Append ``item`` unless already present."""
    if item in items:
        return list(items)
    return [*items, item]


def remove_if_present(items: list[str], item: str) -> list[str]:
    """Remove every occurrence of ``item``."""
    return [existing for existing in items if existing != item]


def promote_to_front(items: list[str], item: str, cap: int = RECENTS_CAP) -> list[str]:
    """Move (or insert) ``item`` to the head, truncating to ``cap`` entries."""
    return [item, *remove_if_present(items, item)][:cap]


@dataclass
class TemplateLists:
    """The all/fav/recents triple for one user.

    Every mutation keeps ``fav`` and ``recents`` subsets of ``all``.
    """

    all: list[str] = field(default_factory=list)
    fav: list[str] = field(default_factory=list)
    recents: list[str] = field(default_factory=list)

    @classmethod
    def from_lists(
        cls,
        all_ids: Iterable[str] | None,
        fav_ids: Iterable[str] | None,
        recent_ids: Iterable[str] | None,
    ) -> "TemplateLists":
        return cls(
            all=list(all_ids or []),
            fav=list(fav_ids or []),
            recents=list(recent_ids or []),
        )

    def add(self, template_id: str, favorite: bool = False) -> None:
        """Register a newly created template."""
        self.all = add_unique(self.all, template_id)
        if favorite:
            self.fav = add_unique(self.fav, template_id)
        self.touch(template_id)

    def touch(self, template_id: str) -> None:
        """Mark a template as most recently used."""
        if template_id not in self.all:
            raise ValueError(f"Template {template_id} is not in the user's list")
        self.recents = promote_to_front(self.recents, template_id)

    def set_favorite(self, template_id: str, favorite: bool) -> None:
        """Idempotently add to or remove from favorites."""
        if favorite:
            if template_id not in self.all:
                raise ValueError(f"Template {template_id} is not in the user's list")
            self.fav = add_unique(self.fav, template_id)
        else:
            self.fav = remove_if_present(self.fav, template_id)

    def remove(self, template_id: str) -> None:
        """Forget a template entirely."""
        self.all = remove_if_present(self.all, template_id)
        self.fav = remove_if_present(self.fav, template_id)
        self.recents = remove_if_present(self.recents, template_id)

    def counts(self) -> dict[str, int]:
        return {
            "templatesCount": len(self.all),
            "favoritesCount": len(self.fav),
            "recentsCount": len(self.recents),
        }

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "all": list(self.all),
            "fav": list(self.fav),
            "recents": list(self.recents),
        }

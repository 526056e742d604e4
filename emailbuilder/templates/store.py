"""Template storage with per-user membership bookkeeping.

Every template mutation also updates the owner's ``all``/``fav``/``recents``
lists. ``Template.is_favorite`` and membership in ``fav`` describe the same
fact and are always written together.

Create is a two-step write: the template row is committed first, then the
owner's lists. If the second step fails the template is deleted again before
the error is raised, so a failed create leaves nothing behind. Update and
delete change the template and the lists in one transaction.

Writers lock the owner row before reading the template. Where the database
does not honour row locks (SQLite), the ``User.version`` counter turns a lost
update into ``StaleDataError`` and the whole read-modify-write is retried.
"""

import logging
from datetime import datetime
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from emailbuilder.db.base import commit
from emailbuilder.db.models import Template, User
from emailbuilder.errors import Conflict, InvalidInput, NotFound, Unavailable
from emailbuilder.templates.blocks import dump_blocks, validate_blocks
from emailbuilder.templates.lists import TemplateLists

logger = logging.getLogger(__name__)

CATEGORIES = ("all", "favorites", "recent")

MAX_WRITE_ATTEMPTS = 3

T = TypeVar("T")


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput("Invalid template data", detail="name is required")
    return name.strip()


class TemplateStore:
    """CRUD over templates owned by a single user.

    A template owned by someone else is reported exactly like a missing one.
    """

    def __init__(self, db: Session) -> None:
        """Initialize the template store.

        Args:
            db: Session used for every read and write of this store.
        """
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_owner(self, user_id: str, lock: bool = False) -> User:
        query = self.db.query(User).filter(User.id == user_id)
        if lock:
            # Re-read the lists under a row lock before modifying them
            query = query.with_for_update().populate_existing()
        user = query.first()
        if not user:
            raise NotFound("User not found.")
        return user

    def _get_owned(self, template_id: str, user_id: str, lock: bool = False) -> Template:
        query = self.db.query(Template).filter(
            Template.id == template_id,
            Template.user_id == user_id,
        )
        if lock:
            query = query.with_for_update().populate_existing()
        template = query.first()
        if not template:
            raise NotFound("Template not found")
        return template

    def _retry_stale(self, operation: Callable[..., T], *args: Any) -> T:
        """Run a read-modify-write, starting over when the owner row changed underneath.

        Concurrent writers are detected through ``User.version``; each retry
        re-reads everything, so a template deleted meanwhile ends in NotFound.
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                return operation(*args)
            except StaleDataError as e:
                self.db.rollback()
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise Conflict("Template was modified concurrently, please retry") from e
                logger.warning(f"Concurrent write detected, retrying ({attempt}/{MAX_WRITE_ATTEMPTS})")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(
        self,
        owner_id: str,
        name: Any,
        content: Any,
        is_favorite: bool | None = False,
    ) -> tuple[Template, TemplateLists]:
        """Create a template and register it on its owner.

        Returns:
            The template and the owner's updated lists.

        Raises:
            NotFound: Owner does not exist.
            InvalidInput: Name missing or blocks malformed.
            Unavailable: Store failure; nothing is left persisted.
        """
        owner = self._get_owner(owner_id)
        favorite = bool(is_favorite)
        template = Template(
            user_id=owner.id,
            name=_clean_name(name),
            content=dump_blocks(validate_blocks(content if content is not None else [])),
            is_favorite=favorite,
        )
        self.db.add(template)
        commit(self.db)

        try:
            lists = self._retry_stale(self._register, owner_id, template.id, favorite)
        except (Unavailable, Conflict, SQLAlchemyError) as e:
            self.db.rollback()
            self._discard(template.id)
            raise Unavailable("Failed to update user with new template.") from e

        logger.info(f"Created template {template.id} for user {owner_id}")
        return template, lists

    def _register(self, owner_id: str, template_id: str, favorite: bool) -> TemplateLists:
        owner = self._get_owner(owner_id, lock=True)
        lists = owner.template_lists
        lists.add(template_id, favorite=favorite)
        owner.apply_template_lists(lists)
        commit(self.db)
        return lists

    def _discard(self, template_id: str) -> None:
        """Compensating delete for a template whose owner update failed."""
        try:
            self.db.query(Template).filter(Template.id == template_id).delete()
            self.db.commit()
            logger.warning(f"Rolled back template {template_id} after failed list update")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Could not roll back template {template_id}; it is orphaned")

    def get(self, template_id: str, requester_id: str) -> Template:
        """Fetch one template owned by ``requester_id``."""
        return self._get_owned(template_id, requester_id)

    def update(
        self,
        template_id: str,
        requester_id: str,
        name: Any = None,
        content: Any = None,
        is_favorite: bool | None = None,
    ) -> tuple[Template, TemplateLists]:
        """Apply a partial update and mark the template as recently touched.

        Raises:
            InvalidInput: No field given, or a given field is invalid.
            NotFound: Template missing or not owned by the requester.
        """
        if name is None and content is None and is_favorite is None:
            raise InvalidInput("Please provide at least one field to update")

        new_name = _clean_name(name) if name is not None else None
        new_content = dump_blocks(validate_blocks(content)) if content is not None else None
        favorite = bool(is_favorite) if is_favorite is not None else None

        return self._retry_stale(
            self._apply_update, template_id, requester_id, new_name, new_content, favorite
        )

    def _apply_update(
        self,
        template_id: str,
        requester_id: str,
        new_name: str | None,
        new_content: list | None,
        favorite: bool | None,
    ) -> tuple[Template, TemplateLists]:
        # Owner first, then the template: both read fresh under the owner lock
        owner = self._get_owner(requester_id, lock=True)
        template = self._get_owned(template_id, requester_id, lock=True)
        lists = owner.template_lists

        if new_name is not None:
            template.name = new_name
        if new_content is not None:
            template.content = new_content
        if favorite is not None:
            if favorite != template.is_favorite:
                logger.info(f"Template {template.id} favorite -> {favorite}")
            template.is_favorite = favorite

        if template.id not in lists.all:
            lists.add(template.id, favorite=template.is_favorite)
        lists.set_favorite(template.id, template.is_favorite)
        lists.touch(template.id)

        template.updated_at = datetime.utcnow()
        owner.apply_template_lists(lists)
        commit(self.db)
        return template, lists

    def delete(self, template_id: str, requester_id: str) -> TemplateLists:
        """Delete a template and drop it from every owner list."""
        lists = self._retry_stale(self._apply_delete, template_id, requester_id)
        logger.info(f"Deleted template {template_id} for user {requester_id}")
        return lists

    def _apply_delete(self, template_id: str, requester_id: str) -> TemplateLists:
        owner = self._get_owner(requester_id, lock=True)
        template = self._get_owned(template_id, requester_id, lock=True)
        lists = owner.template_lists
        lists.remove(template.id)
        owner.apply_template_lists(lists)
        self.db.delete(template)
        commit(self.db)
        return lists

    def list_grouped(self, owner_id: str) -> dict[str, list[Template]]:
        """Group the owner's templates into all/favorites/recent.

        ``recent`` follows the owner's recents order; ids that no longer
        resolve are skipped.
        """
        owner = self._get_owner(owner_id)
        owned = self.db.query(Template).filter(
            Template.user_id == owner.id,
        ).order_by(Template.updated_at.desc(), Template.created_at.desc()).all()

        by_id = {t.id: t for t in owned}
        return {
            "all": owned,
            "favorites": [t for t in owned if t.is_favorite],
            "recent": [by_id[i] for i in (owner.templates_recents or []) if i in by_id],
        }

    def list_category(self, owner_id: str, category: str) -> list[Template]:
        if category not in CATEGORIES:
            raise InvalidInput(
                "Invalid category",
                detail=f"Category must be one of: {', '.join(CATEGORIES)}",
            )
        return self.list_grouped(owner_id)[category]

"""Database module for EmailBuilder."""

from emailbuilder.db.base import Base, Database, commit, get_db
from emailbuilder.db.models import User, Session, Template

__all__ = [
    "Base",
    "Database",
    "commit",
    "get_db",
    "User",
    "Session",
    "Template",
]

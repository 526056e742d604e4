"""Database models for EmailBuilder."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import relationship

from emailbuilder.db.base import Base
from emailbuilder.templates.lists import TemplateLists


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid4())


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)

    # Template membership lists (ids), see emailbuilder.templates.lists
    templates_all = Column(JSON, default=list, nullable=False)
    templates_fav = Column(JSON, default=list, nullable=False)
    templates_recents = Column(JSON, default=list, nullable=False)

    # Bumped on every write; a flush against a stale row raises StaleDataError
    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan")
    templates = relationship("Template", back_populates="user", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    @property
    def template_lists(self) -> TemplateLists:
        """Snapshot of the membership lists."""
        return TemplateLists.from_lists(
            self.templates_all, self.templates_fav, self.templates_recents
        )

    def apply_template_lists(self, lists: TemplateLists) -> None:
        """Write lists back. New list objects so the JSON columns are marked dirty."""
        self.templates_all = list(lists.all)
        self.templates_fav = list(lists.fav)
        self.templates_recents = list(lists.recents)
        self.updated_at = datetime.utcnow()


class Session(Base):
    """User session model.

    Holds hashes of an access token and its refresh token, never the tokens.
    """

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(255), nullable=False, index=True)
    refresh_token_hash = Column(String(255), nullable=True, index=True)

    # Session info
    user_agent = Column(String(500), nullable=True)
    ip_address = Column(String(45), nullable=True)

    # Expiration
    expires_at = Column(DateTime, nullable=False)
    refresh_expires_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    last_used_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<Session {self.id[:8]}>"

    @property
    def is_expired(self) -> bool:
        """Check if the access token is expired."""
        return datetime.utcnow() > self.expires_at

    @property
    def is_refresh_expired(self) -> bool:
        return self.refresh_expires_at is None or datetime.utcnow() > self.refresh_expires_at


class Template(Base):
    """Email template: a named, owned, ordered list of blocks."""

    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    content = Column(JSON, default=list, nullable=False)  # Serialized blocks
    is_favorite = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="templates")

    def __repr__(self) -> str:
        return f"<Template {self.name}>"

    def to_dict(self) -> dict[str, Any]:
        """Client representation."""
        return {
            "_id": self.id,
            "name": self.name,
            "content": self.content or [],
            "isFavorite": bool(self.is_favorite),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

"""Database base configuration."""

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, TimeoutError as SQLAlchemyTimeoutError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from emailbuilder.errors import Unavailable

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def normalize_url(url: str) -> str:
    """Fix legacy ``postgres://`` URLs (SQLAlchemy 1.4+ needs ``postgresql://``)."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


class Database:
    """Explicitly constructed handle around an engine and its session factory.

    Created once at startup, ``init()`` creates tables, ``dispose()`` releases
    the connection pool at shutdown.
    """

    def __init__(self, url: str, timeout_seconds: float = 10, echo: bool = False):
        self.url = normalize_url(url)

        # Create engine with appropriate settings
        if self.url.startswith("sqlite"):
            kwargs = {
                "connect_args": {"check_same_thread": False, "timeout": timeout_seconds},
                "echo": echo,
            }
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite+pysqlite://"):
                # One shared connection, otherwise each session sees an empty database
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.url, **kwargs)
        else:
            self.engine = create_engine(
                self.url,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,
                pool_timeout=timeout_seconds,
                connect_args={"connect_timeout": int(timeout_seconds)},
                echo=echo,
            )

        # Session factory
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    def init(self) -> None:
        """Initialize database tables."""
        # Models must be imported so their tables are registered on Base
        from emailbuilder.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialized")

    def drop(self) -> None:
        """Drop all database tables."""
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
        logger.info("Database connections disposed")

    def session(self) -> Session:
        return self.session_factory()

    def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True


def commit(db: Session) -> None:
    """Commit, translating connectivity failures into ``Unavailable``.

    The session is rolled back before the error propagates.
    """
    try:
        db.commit()
    except (OperationalError, SQLAlchemyTimeoutError) as e:
        db.rollback()
        logger.error(f"Database commit failed: {e.__class__.__name__}")
        raise Unavailable("Database unavailable") from e


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get database session for the current request.

    Yields:
        Database session.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()

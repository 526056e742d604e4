"""Tests for the database handle and models."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from emailbuilder.db import Database, Session, Template, User, commit
from emailbuilder.db.base import normalize_url
from emailbuilder.errors import Unavailable
from emailbuilder.templates.lists import TemplateLists


class TestDatabase:
    """Test engine setup and lifecycle."""

    def test_normalize_postgres_url(self):
        assert normalize_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"
        assert normalize_url("sqlite://") == "sqlite://"

    def test_in_memory_sessions_share_data(self, database):
        first = database.session()
        first.add(User(email="a@example.com", password_hash="x", name="A"))
        first.commit()
        first.close()

        second = database.session()
        assert second.query(User).count() == 1
        second.close()

    def test_ping(self, database):
        assert database.ping() is True

    def test_file_database(self, tmp_path):
        database = Database(f"sqlite:///{tmp_path / 'app.db'}")
        database.init()
        try:
            assert database.ping() is True
            assert (tmp_path / "app.db").exists()
        finally:
            database.dispose()

    def test_commit_failure_is_unavailable(self, db_session, monkeypatch):
        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(Unavailable):
            commit(db_session)


class TestModels:
    """Test model defaults and helpers."""

    def test_user_defaults(self, db_session):
        user = User(email="a@example.com", password_hash="x", name="A")
        db_session.add(user)
        db_session.commit()

        assert len(user.id) == 36
        assert user.template_lists == TemplateLists()
        assert user.created_at is not None

    def test_apply_template_lists_persists(self, db_session):
        user = User(email="a@example.com", password_hash="x", name="A")
        db_session.add(user)
        db_session.commit()

        lists = user.template_lists
        lists.add("t1", favorite=True)
        user.apply_template_lists(lists)
        db_session.commit()
        db_session.expire_all()

        reloaded = db_session.get(User, user.id)
        assert reloaded.templates_all == ["t1"]
        assert reloaded.templates_fav == ["t1"]
        assert reloaded.templates_recents == ["t1"]

    def test_template_to_dict(self, db_session):
        user = User(email="a@example.com", password_hash="x", name="A")
        db_session.add(user)
        db_session.commit()

        template = Template(user_id=user.id, name="T", content=[{"type": "paragraph", "content": "x"}])
        db_session.add(template)
        db_session.commit()

        data = template.to_dict()
        assert data["_id"] == template.id
        assert data["name"] == "T"
        assert data["isFavorite"] is False
        assert data["content"] == [{"type": "paragraph", "content": "x"}]
        assert data["createdAt"] is not None

    def test_session_expiry(self):
        session = Session(
            expires_at=datetime.utcnow() - timedelta(minutes=1),
            refresh_expires_at=datetime.utcnow() + timedelta(days=1),
        )
        assert session.is_expired is True
        assert session.is_refresh_expired is False
        assert Session(expires_at=datetime.utcnow()).is_refresh_expired is True

    def test_deleting_user_removes_templates(self, db_session):
        user = User(email="a@example.com", password_hash="x", name="A")
        db_session.add(user)
        db_session.commit()
        db_session.add(Template(user_id=user.id, name="T", content=[]))
        db_session.commit()

        db_session.delete(user)
        db_session.commit()

        assert db_session.query(Template).count() == 0

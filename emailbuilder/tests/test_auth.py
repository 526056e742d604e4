"""Tests for password hashing, tokens and the identity service."""

from datetime import datetime, timedelta

import pytest

from emailbuilder.auth import (
    IdentityService,
    generate_session_tokens,
    generate_token,
    hash_password,
    hash_token,
    verify_password,
)
from emailbuilder.auth.password import BCRYPT_COST, needs_rehash
from emailbuilder.db.models import Session as UserSession, User
from emailbuilder.errors import Conflict, InvalidCredential, InvalidInput, NotFound, Unauthenticated


class TestPasswordHashing:
    """Test password hashing functions."""

    def test_hash_password(self):
        """Test password hashing."""
        password = "secure_password123"
        hashed = hash_password(password)

        assert hashed != password
        assert hashed.startswith("$2b$")

    def test_verify_password_correct(self):
        password = "secure_password123"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("secure_password123")

        assert verify_password("wrong_password", hashed) is False

    def test_verify_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_different_hashes_for_same_password(self):
        """Test that same password produces different hashes (due to salt)."""
        password = "secure_password123"

        assert hash_password(password) != hash_password(password)

    def test_needs_rehash(self):
        assert needs_rehash(hash_password("pw1234", rounds=4)) is True
        assert needs_rehash(hash_password("pw1234", rounds=BCRYPT_COST)) is False
        assert needs_rehash("plaintext") is True


class TestTokens:
    """Test token generation."""

    def test_generate_token_is_random(self):
        assert generate_token() != generate_token()
        assert len(generate_token()) > 32

    def test_hash_token_is_stable(self):
        assert hash_token("abc") == hash_token("abc")
        assert len(hash_token("abc")) == 64

    def test_session_token_lifetimes(self):
        now = datetime(2024, 1, 1)
        access, refresh = generate_session_tokens(1, 7, now=now)

        assert access.expires_at == now + timedelta(days=1)
        assert refresh.expires_at == now + timedelta(days=7)
        assert access.token != refresh.token
        assert access.token_hash == hash_token(access.token)


class TestRegister:
    """Test account registration."""

    def test_register(self, db_session):
        user = IdentityService(db_session).register("Jane", "Jane@Example.com", "secret1")

        assert user.id
        assert user.email == "jane@example.com"
        assert user.password_hash != "secret1"
        assert user.templates_all == []

    @pytest.mark.parametrize(
        "name,email,password",
        [
            ("", "a@example.com", "secret1"),
            ("Jane", None, "secret1"),
            ("Jane", "a@example.com", ""),
        ],
    )
    def test_missing_fields(self, db_session, name, email, password):
        with pytest.raises(InvalidInput) as exc_info:
            IdentityService(db_session).register(name, email, password)
        assert exc_info.value.message == "All fields are required."

    def test_invalid_email(self, db_session):
        with pytest.raises(InvalidInput):
            IdentityService(db_session).register("Jane", "not-an-email", "secret1")

    def test_short_password(self, db_session):
        with pytest.raises(InvalidInput) as exc_info:
            IdentityService(db_session).register("Jane", "jane@example.com", "12345")
        assert exc_info.value.message == "Password too short, try for a longer one."

    def test_duplicate_email_case_insensitive(self, db_session):
        identity = IdentityService(db_session)
        identity.register("Jane", "jane@example.com", "secret1")

        with pytest.raises(Conflict) as exc_info:
            identity.register("Other Jane", "JANE@example.com", "secret2")
        assert exc_info.value.message == "Email already registered."
        assert db_session.query(User).count() == 1


class TestAuthenticate:
    """Test email/password login."""

    def test_authenticate(self, db_session, make_user):
        make_user(email="jane@example.com", password="secret1")
        user = IdentityService(db_session).authenticate("jane@example.com", "secret1")

        assert user.email == "jane@example.com"
        assert user.last_login_at is not None

    def test_email_lookup_ignores_case(self, db_session, make_user):
        make_user(email="jane@example.com", password="secret1")
        user = IdentityService(db_session).authenticate("JANE@example.com", "secret1")
        assert user.email == "jane@example.com"

    def test_unknown_email(self, db_session):
        with pytest.raises(NotFound) as exc_info:
            IdentityService(db_session).authenticate("nobody@example.com", "secret1")
        assert exc_info.value.message == "User not found."

    def test_wrong_password(self, db_session, make_user):
        make_user(email="jane@example.com", password="secret1")
        with pytest.raises(InvalidCredential):
            IdentityService(db_session).authenticate("jane@example.com", "wrong-one")

    def test_missing_fields(self, db_session):
        with pytest.raises(InvalidInput):
            IdentityService(db_session).authenticate("jane@example.com", None)

    def test_low_cost_hash_is_upgraded(self, db_session, make_user):
        user, _ = make_user(email="jane@example.com", password="secret1")
        user.password_hash = hash_password("secret1", rounds=4)
        db_session.commit()

        IdentityService(db_session).authenticate("jane@example.com", "secret1")
        assert needs_rehash(user.password_hash) is False


class TestSessions:
    """Test access token verification, refresh and logout."""

    def test_verify_access_token(self, db_session, make_user):
        user, token = make_user()
        assert IdentityService(db_session).verify(token).id == user.id

    def test_session_stores_only_hashes(self, db_session, make_user):
        _, token = make_user()
        session = db_session.query(UserSession).one()
        assert session.token_hash == hash_token(token)
        assert token not in (session.token_hash, session.refresh_token_hash)

    def test_verify_missing_token(self, db_session):
        with pytest.raises(Unauthenticated) as exc_info:
            IdentityService(db_session).verify(None)
        assert exc_info.value.message == "No token, authorization denied."

    def test_verify_unknown_token(self, db_session):
        with pytest.raises(Unauthenticated):
            IdentityService(db_session).verify("garbage")

    def test_verify_expired_token(self, db_session, make_user):
        _, token = make_user()
        session = db_session.query(UserSession).one()
        session.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db_session.commit()

        with pytest.raises(Unauthenticated):
            IdentityService(db_session).verify(token)

    def test_refresh_rotates_tokens(self, db_session, make_user):
        user, old_access = make_user()
        identity = IdentityService(db_session)
        issued = identity.issue_tokens(user)

        rotated = identity.refresh(issued.refresh.token)

        assert identity.verify(rotated.access.token).id == user.id
        with pytest.raises(Unauthenticated):
            identity.verify(issued.access.token)
        with pytest.raises(Unauthenticated):
            identity.refresh(issued.refresh.token)
        # Other sessions are untouched
        assert identity.verify(old_access).id == user.id

    def test_refresh_without_cookie(self, db_session):
        with pytest.raises(Unauthenticated) as exc_info:
            IdentityService(db_session).refresh(None)
        assert exc_info.value.message == "Please login or register."

    def test_refresh_expired(self, db_session, make_user):
        user, _ = make_user()
        identity = IdentityService(db_session)
        issued = identity.issue_tokens(user)
        session = db_session.query(UserSession).filter(
            UserSession.token_hash == issued.access.token_hash,
        ).one()
        session.refresh_expires_at = datetime.utcnow() - timedelta(seconds=1)
        db_session.commit()

        with pytest.raises(Unauthenticated):
            identity.refresh(issued.refresh.token)

    def test_logout(self, db_session, make_user):
        _, token = make_user()
        identity = IdentityService(db_session)

        identity.logout(token)
        identity.logout(token)

        with pytest.raises(Unauthenticated):
            identity.verify(token)

    def test_profile(self, make_user):
        user, _ = make_user(name="Jane", email="jane@example.com")
        assert IdentityService.profile(user) == {
            "name": "Jane",
            "email": "jane@example.com",
            "templates": {"all": [], "fav": [], "recents": []},
        }

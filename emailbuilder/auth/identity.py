"""Identity service: registration, login and session tokens.

Tokens are opaque random strings. Only their SHA-256 hashes are stored, on a
``Session`` row that also carries the access and refresh expirations.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from emailbuilder.auth.password import (
    MIN_PASSWORD_LENGTH,
    hash_password,
    is_password_long_enough,
    needs_rehash,
    verify_password,
)
from emailbuilder.auth.tokens import (
    ACCESS_TOKEN_DAYS,
    REFRESH_TOKEN_DAYS,
    TokenData,
    generate_session_tokens,
    hash_token,
)
from emailbuilder.db.base import commit
from emailbuilder.db.models import Session as UserSession, User
from emailbuilder.errors import (
    Conflict,
    InvalidCredential,
    InvalidInput,
    NotFound,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class IssuedTokens:
    """Token pair handed to a client after login or refresh."""

    access: TokenData
    refresh: TokenData


class IdentityService:
    """Issues and verifies credentials for users."""

    def __init__(
        self,
        db: Session,
        access_token_days: int = ACCESS_TOKEN_DAYS,
        refresh_token_days: int = REFRESH_TOKEN_DAYS,
    ):
        self.db = db
        self.access_token_days = access_token_days
        self.refresh_token_days = refresh_token_days

    def _find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, name: str | None, email: str | None, password: str | None) -> User:
        """Create a new account.

        Raises:
            InvalidInput: A field is missing, the email is malformed or the
                password is too short.
            Conflict: The email (case-insensitive) is already registered.
        """
        name = (name or "").strip()
        email = normalize_email(email or "")
        if not name or not email or not password:
            raise InvalidInput("All fields are required.")

        if not EMAIL_PATTERN.match(email):
            raise InvalidInput("Please enter a valid email address")

        if self._find_by_email(email):
            raise Conflict("Email already registered.")

        if not is_password_long_enough(password):
            raise InvalidInput(
                "Password too short, try for a longer one.",
                detail=f"Minimum length is {MIN_PASSWORD_LENGTH} characters",
            )

        user = User(name=name, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            commit(self.db)
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise Conflict("Email already registered.") from e

        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, email: str | None, password: str | None) -> User:
        """Check an email/password pair.

        Raises:
            InvalidInput: A field is missing.
            NotFound: No account for this email.
            InvalidCredential: Password mismatch.
        """
        if not email or not password:
            raise InvalidInput("All fields are required.")

        user = self._find_by_email(email)
        if not user:
            raise NotFound("User not found.")

        if not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for user {user.id}")
            raise InvalidCredential()

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)

        user.last_login_at = datetime.utcnow()
        commit(self.db)
        return user

    def issue_tokens(
        self,
        user: User,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> IssuedTokens:
        """Open a session for ``user`` and return its token pair."""
        access_data, refresh_data = generate_session_tokens(
            access_expires_days=self.access_token_days,
            refresh_expires_days=self.refresh_token_days,
        )
        session = UserSession(
            user_id=user.id,
            token_hash=access_data.token_hash,
            refresh_token_hash=refresh_data.token_hash,
            expires_at=access_data.expires_at,
            refresh_expires_at=refresh_data.expires_at,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        self.db.add(session)
        commit(self.db)
        return IssuedTokens(access=access_data, refresh=refresh_data)

    def verify(self, token: str | None) -> User:
        """Resolve an access token to its user.

        Raises:
            Unauthenticated: Token missing, unknown or expired.
        """
        if not token:
            raise Unauthenticated("No token, authorization denied.")

        session = self.db.query(UserSession).filter(
            UserSession.token_hash == hash_token(token),
        ).first()

        if not session or session.is_expired:
            raise Unauthenticated()

        user = self.db.get(User, session.user_id)
        if not user:
            raise Unauthenticated()

        session.last_used_at = datetime.utcnow()
        commit(self.db)
        return user

    def refresh(self, refresh_token: str | None) -> IssuedTokens:
        """Rotate both tokens of the session owning ``refresh_token``."""
        if not refresh_token:
            raise Unauthenticated("Please login or register.")

        session = self.db.query(UserSession).filter(
            UserSession.refresh_token_hash == hash_token(refresh_token),
        ).first()

        if not session or session.is_refresh_expired:
            raise Unauthenticated("Please login or register.")

        access_data, refresh_data = generate_session_tokens(
            access_expires_days=self.access_token_days,
            refresh_expires_days=self.refresh_token_days,
        )
        session.token_hash = access_data.token_hash
        session.refresh_token_hash = refresh_data.token_hash
        session.expires_at = access_data.expires_at
        session.refresh_expires_at = refresh_data.expires_at
        session.last_used_at = datetime.utcnow()
        commit(self.db)
        return IssuedTokens(access=access_data, refresh=refresh_data)

    def logout(self, token: str | None) -> None:
        """Delete the session behind an access token. Unknown tokens are ignored."""
        if not token:
            return
        session = self.db.query(UserSession).filter(
            UserSession.token_hash == hash_token(token),
        ).first()
        if session:
            self.db.delete(session)
            commit(self.db)

    @staticmethod
    def profile(user: User) -> dict:
        return {
            "name": user.name,
            "email": user.email,
            "templates": user.template_lists.to_dict(),
        }

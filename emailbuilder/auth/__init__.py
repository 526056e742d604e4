"""Authentication module."""

from emailbuilder.auth.password import hash_password, verify_password
from emailbuilder.auth.tokens import generate_token, hash_token, generate_session_tokens
from emailbuilder.auth.identity import IdentityService, IssuedTokens

__all__ = [
    "hash_password",
    "verify_password",
    "generate_token",
    "hash_token",
    "generate_session_tokens",
    "IdentityService",
    "IssuedTokens",
]

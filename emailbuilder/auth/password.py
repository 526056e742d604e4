"""Password hashing and validation using bcrypt."""

import bcrypt


# Bcrypt cost factor
BCRYPT_COST = 10

MIN_PASSWORD_LENGTH = 6

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = BCRYPT_COST) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.
        rounds: Cost factor.

    Returns:
        Bcrypt hash string.
    """
    password_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify.
        password_hash: Bcrypt hash to check against.

    Returns:
        True if password matches, False otherwise (including malformed hashes).
    """
    try:
        password_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hash_bytes)
    except ValueError:
        return False


def is_password_long_enough(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


def needs_rehash(password_hash: str) -> bool:
    """Check if a bcrypt hash was made with a lower cost than the current one."""
    if not password_hash.startswith("$2"):
        return True
    try:
        cost = int(password_hash.split("$")[2])
    except (ValueError, IndexError):
        return True
    return cost < BCRYPT_COST

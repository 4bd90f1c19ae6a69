"""
Security utilities for password hashing and user identifiers.
"""
import secrets
import string

from passlib.context import CryptContext

# Argon2 with passlib's defaults: a fresh 16-byte salt from the OS CSPRNG per hash
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

USER_ID_PREFIX = "user_"
USER_ID_LENGTH = 50
_USER_ID_ALPHABET = string.ascii_letters + string.digits


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_user_id() -> str:
    """Generate an opaque, unguessable user ID."""
    return USER_ID_PREFIX + "".join(
        secrets.choice(_USER_ID_ALPHABET) for _ in range(USER_ID_LENGTH)
    )

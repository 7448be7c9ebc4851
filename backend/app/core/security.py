"""
Password hashing utilities.

Uses passlib with bcrypt; plaintext passwords are never stored or returned.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns False for a missing hash instead of raising.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

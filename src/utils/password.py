"""
Password hashing with passlib's bcrypt scheme.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login attempt against the stored hash.

    Returns False rather than raising for a mismatch.
    """
    return pwd_context.verify(plain_password, hashed_password)

"""
JWT session tokens.

The signed token travels in an httpOnly cookie; it carries only the
user id and role, everything else is re-read from the database.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from src.config import settings

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
COOKIE_NAME = "access_token"


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a session token for a user.

    Args:
        user_id: User's database ID
        role: UserRole value at login time
        expires_delta: Lifetime override, defaults to jwt_expire_hours
    """
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=settings.jwt_expire_hours))

    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "iat": issued_at,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Decode a session token.

    Returns {"user_id": int, "role": str}, or None when the token is
    malformed, expired, or not an access token.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        return None

    return {"user_id": int(user_id), "role": role}


def get_token_from_cookie(request) -> Optional[str]:
    return request.cookies.get(COOKIE_NAME)

"""Authentication module."""

from src.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    require_capability,
)
from src.auth.jwt import create_access_token, verify_token

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_user",
    "get_current_user_optional",
    "require_capability",
]

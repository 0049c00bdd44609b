"""
FastAPI dependencies for authentication and capability checks.
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.jwt import get_token_from_cookie, verify_token
from src.db import get_db
from src.models import User
from src.services.roles import RoleCapabilities, capabilities_for


async def _user_from_request(request: Request, db: AsyncSession) -> Optional[User]:
    token = get_token_from_cookie(request)
    if not token:
        return None
    payload = verify_token(token)
    if not payload:
        return None
    return await db.get(User, payload["user_id"])


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Current user if a valid session cookie is present.

    Returns None instead of raising, for routes that work either way.
    """
    user = await _user_from_request(request, db)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Current authenticated user.

    Raises 401 without a valid session and 403 for disabled
    (not yet verified) accounts.
    """
    if not get_token_from_cookie(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = await _user_from_request(request, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def require_capability(*names: str) -> Callable:
    """
    Dependency factory: the current user must hold at least one of the
    named RoleCapabilities flags.

        @router.post("/run")
        async def run(user: User = Depends(require_capability("can_process_payroll"))):
    """
    for name in names:
        if name not in RoleCapabilities.__dataclass_fields__:
            raise ValueError(f"Unknown capability: {name}")

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        capabilities = capabilities_for(current_user.role)
        if not any(getattr(capabilities, name) for name in names):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return current_user

    return dependency

"""Admin user management endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, User, UserRole
from src.schemas.user import UserResponse
from src.services.users import list_users, verify_user
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/users")

can_verify = require_capability("can_verify_users")


@router.get("", response_model=List[UserResponse])
async def get_users(
    role: Optional[UserRole] = Query(None),
    pending: bool = Query(False, description="Only accounts awaiting verification"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_verify),
):
    return await list_users(db, role=role, pending_only=pending)


@router.post("/{user_id}/verify", response_model=UserResponse)
async def verify(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_verify),
):
    """Enable an account created through signup."""
    user = await verify_user(db, current_user, user_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.VERIFY_USER,
        target_type="user",
        target_id=user.id,
        ip_address=get_client_ip(request),
    )
    return user

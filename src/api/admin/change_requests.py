"""Admin settings change request endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, RequestStatus, SettingsDomain, User
from src.schemas.change_request import ChangeRequestResponse
from src.services.change_requests import get_request, get_workflow, list_requests
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/change-requests")

can_view = require_capability("can_request_changes", "can_resolve_changes")
can_resolve = require_capability("can_resolve_changes")


@router.get("", response_model=List[ChangeRequestResponse])
async def get_change_requests(
    status: Optional[RequestStatus] = Query(None),
    domain: Optional[SettingsDomain] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_view),
):
    return await list_requests(db, status=status, domain=domain)


@router.post("/{request_id}/approve", response_model=ChangeRequestResponse)
async def approve_change_request(
    request: Request,
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_resolve),
):
    """Apply the proposed settings. Fails with 409 if settings moved on since submit."""
    change = await get_request(db, request_id)
    change = await get_workflow(change.domain).approve(db, current_user, request_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.APPROVE_SETTINGS_CHANGE,
        target_type="change_request",
        target_id=change.id,
        action_metadata={"domain": change.domain.value},
        ip_address=get_client_ip(request),
    )
    return change


@router.post("/{request_id}/reject", response_model=ChangeRequestResponse)
async def reject_change_request(
    request: Request,
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_resolve),
):
    change = await get_request(db, request_id)
    change = await get_workflow(change.domain).reject(db, current_user, request_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REJECT_SETTINGS_CHANGE,
        target_type="change_request",
        target_id=change.id,
        action_metadata={"domain": change.domain.value},
        ip_address=get_client_ip(request),
    )
    return change

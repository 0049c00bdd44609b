"""Admin settings API endpoints."""

from typing import Any, Optional

import pydantic
from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user, require_capability
from src.db import get_db
from src.models import AuditAction, SettingsDomain, User
from src.schemas.change_request import SettingsResponse, SettingsSubmitResponse
from src.services.change_requests import get_workflow
from src.services.errors import ValidationError
from src.services.settings_store import load_settings
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/settings")


@router.get("/{domain}", response_model=SettingsResponse)
async def get_settings(
    domain: SettingsDomain,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Live settings of one domain, plus the pending change request if any."""
    current, version = await load_settings(db, domain)
    pending = await get_workflow(domain).get_pending(db)
    return SettingsResponse(
        domain=domain,
        version=version,
        settings=current.model_dump(mode="json"),
        pending_request_id=pending.id if pending else None,
    )


@router.put("/{domain}", response_model=SettingsSubmitResponse)
async def update_settings(
    request: Request,
    domain: SettingsDomain,
    payload: dict[str, Any] = Body(...),
    expected_version: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability("can_bypass_approval", "can_request_changes")
    ),
):
    """
    Change settings.

    Super Admin writes apply immediately; Admin and HR submissions
    become a pending change request.
    """
    workflow = get_workflow(domain)
    try:
        new_settings = workflow.schema.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid {domain.value} settings: {exc}") from exc

    result = await workflow.submit(db, current_user, new_settings, expected_version)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_SETTINGS if result.applied else AuditAction.REQUEST_SETTINGS_CHANGE,
        target_type="change_request" if result.request else "settings",
        target_id=result.request.id if result.request else None,
        action_metadata={"domain": domain.value, "version": result.version},
        ip_address=get_client_ip(request),
    )

    return SettingsSubmitResponse(
        applied=result.applied,
        version=result.version,
        settings=result.settings.model_dump(mode="json"),
        request=result.request,
    )

"""Settings change request schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from src.models.change_request import RequestStatus, SettingsDomain


class ChangeRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: SettingsDomain
    requested_by_id: int
    request_date: datetime
    current_settings: dict[str, Any]
    new_settings: dict[str, Any]
    base_version: int
    status: RequestStatus
    resolved_by_id: Optional[int] = None
    resolved_date: Optional[datetime] = None


class SettingsResponse(BaseModel):
    """Live settings document of one domain."""

    domain: SettingsDomain
    version: int
    settings: dict[str, Any]
    pending_request_id: Optional[int] = None


class SettingsSubmitResponse(BaseModel):
    """Result of a settings PUT: applied directly, or queued for approval."""

    applied: bool
    version: Optional[int] = None
    settings: dict[str, Any]
    request: Optional[ChangeRequestResponse] = None

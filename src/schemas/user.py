"""User, signup and team schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.models.user import SalesmanStage, UserRole


class SignupRequest(BaseModel):
    """Public staff signup form."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    mobile_number: Optional[str] = Field(None, max_length=30)
    role: UserRole
    salesman_stage: Optional[SalesmanStage] = None
    referral_code: Optional[str] = Field(None, min_length=6, max_length=6)
    branch: Optional[str] = Field(None, max_length=100)

    @field_validator("referral_code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class UserResponse(BaseModel):
    """User information for admin lists."""

    id: int
    username: str
    name: str
    mobile_number: Optional[str] = None
    role: UserRole
    salesman_stage: Optional[SalesmanStage] = None
    referrer_id: Optional[int] = None
    referral_code: Optional[str] = None
    branch: Optional[str] = None
    total_income: Decimal = Decimal("0")
    is_disabled: bool
    created_at: datetime
    last_active_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TeamMemberResponse(BaseModel):
    """Downline member as shown to a manager."""

    id: int
    name: str
    role: UserRole
    salesman_stage: Optional[SalesmanStage] = None
    referrer_id: Optional[int] = None
    branch: Optional[str] = None
    is_disabled: bool

    model_config = {"from_attributes": True}


class TeamResponse(BaseModel):
    total: int
    members: list[TeamMemberResponse]


class ProfileResponse(BaseModel):
    """Current user, with balance and referral code."""

    id: int
    username: str
    name: str
    role: UserRole
    salesman_stage: Optional[SalesmanStage] = None
    referral_code: Optional[str] = None
    branch: Optional[str] = None
    total_income: Decimal = Decimal("0")
    last_active_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

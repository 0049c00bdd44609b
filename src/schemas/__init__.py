"""Pydantic schemas for request/response validation."""

from src.schemas.auth import LoginRequest, LoginResponse
from src.schemas.change_request import (
    ChangeRequestResponse,
    SettingsResponse,
    SettingsSubmitResponse,
)
from src.schemas.payroll import (
    AdhocPaymentCreate,
    AdhocPaymentResponse,
    IncomeRecordResponse,
    IncomeSummaryResponse,
    PayoutResponse,
    PayoutResultResponse,
    PayrollRunRequest,
)
from src.schemas.sales import (
    AssignRequest,
    CommissionRequestResponse,
    CustomerResponse,
    ProductSaleCreate,
    ProductSaleResponse,
    TokenRegistration,
)
from src.schemas.settings import (
    CommissionSettings,
    IncentiveSettings,
    ProductCommissionSettings,
    SalarySettings,
    SignupRoleSettings,
)
from src.schemas.user import (
    ProfileResponse,
    SignupRequest,
    TeamMemberResponse,
    TeamResponse,
    UserResponse,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    # User
    "SignupRequest",
    "UserResponse",
    "TeamMemberResponse",
    "TeamResponse",
    "ProfileResponse",
    # Sales
    "TokenRegistration",
    "ProductSaleCreate",
    "CustomerResponse",
    "CommissionRequestResponse",
    "ProductSaleResponse",
    "AssignRequest",
    # Payroll
    "PayrollRunRequest",
    "PayoutResultResponse",
    "PayoutResponse",
    "IncomeRecordResponse",
    "IncomeSummaryResponse",
    "AdhocPaymentCreate",
    "AdhocPaymentResponse",
    # Settings
    "CommissionSettings",
    "ProductCommissionSettings",
    "SalarySettings",
    "IncentiveSettings",
    "SignupRoleSettings",
    "ChangeRequestResponse",
    "SettingsResponse",
    "SettingsSubmitResponse",
]

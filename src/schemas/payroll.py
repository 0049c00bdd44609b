"""Payroll, income and ad-hoc payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.change_request import RequestStatus
from src.models.income import IncomeSource


class PayrollRunRequest(BaseModel):
    """Month to pay; defaults to the current month."""

    period: Optional[str] = Field(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")


class PayoutResultResponse(BaseModel):
    users_paid: int
    total_amount: Decimal
    payout_id: int


class PayoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    period: str
    payout_date: datetime
    processed_by_id: int
    total_users_paid: int
    total_amount_paid: Decimal
    is_reversed: bool
    reversed_by_id: Optional[int] = None
    reversal_date: Optional[datetime] = None


class IncomeRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    source_type: IncomeSource
    granted_for_role: str
    sale_date: datetime
    salesman_id: Optional[int] = None
    customer_id: Optional[int] = None
    product_sale_id: Optional[int] = None
    installment_number: Optional[int] = None
    payout_id: Optional[int] = None
    description: Optional[str] = None


class IncomeSummaryResponse(BaseModel):
    """Balance plus ledger of the current user."""

    total_income: Decimal
    currency: str
    records: list[IncomeRecordResponse]


class AdhocPaymentCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=1000)


class AdhocPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    reason: str
    requested_by_id: int
    request_date: datetime
    status: RequestStatus
    resolved_by_id: Optional[int] = None
    resolved_date: Optional[datetime] = None

"""Admin payroll and ad-hoc payment endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, RequestStatus, User
from src.schemas.payroll import (
    AdhocPaymentCreate,
    AdhocPaymentResponse,
    IncomeRecordResponse,
    PayoutResponse,
    PayoutResultResponse,
    PayrollRunRequest,
)
from src.services import payroll
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/payroll")

can_process = require_capability("can_process_payroll")
can_request = require_capability("can_request_changes", "can_bypass_approval")
can_resolve = require_capability("can_resolve_changes")


@router.post("/run", response_model=PayoutResultResponse)
async def run_payroll(
    request: Request,
    data: Optional[PayrollRunRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process),
):
    """Pay salaries and incentives for a month as one reversible batch."""
    period = (data.period if data else None) or payroll.current_period()
    result = await payroll.process_salaries(db, current_user, period)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.PROCESS_PAYROLL,
        target_type="payout",
        target_id=result.payout_id,
        action_metadata={
            "period": period,
            "users_paid": result.users_paid,
            "total": str(result.total_amount),
        },
        ip_address=get_client_ip(request),
    )
    return PayoutResultResponse(
        users_paid=result.users_paid,
        total_amount=result.total_amount,
        payout_id=result.payout_id,
    )


@router.get("/payouts", response_model=List[PayoutResponse])
async def get_payouts(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process),
):
    return await payroll.list_payouts(db)


@router.get("/payouts/{payout_id}/records", response_model=List[IncomeRecordResponse])
async def get_payout_records(
    payout_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process),
):
    return await payroll.records_for_payout(db, payout_id)


@router.post("/payouts/{payout_id}/reverse", response_model=PayoutResponse)
async def reverse_payout(
    request: Request,
    payout_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process),
):
    payout = await payroll.reverse_salary_payout(db, payout_id, current_user)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REVERSE_PAYROLL,
        target_type="payout",
        target_id=payout.id,
        action_metadata={"period": payout.period},
        ip_address=get_client_ip(request),
    )
    return payout


# Ad-hoc payments


@router.get("/adhoc", response_model=List[AdhocPaymentResponse])
async def get_adhoc_payments(
    status: Optional[RequestStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_request),
):
    return await payroll.list_adhoc_payments(db, status=status)


@router.post("/adhoc", response_model=AdhocPaymentResponse, status_code=201)
async def request_adhoc(
    request: Request,
    data: AdhocPaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_request),
):
    payment = await payroll.request_adhoc_payment(
        db, current_user, data.user_id, data.amount, data.reason
    )

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REQUEST_ADHOC_PAYMENT,
        target_type="adhoc_payment",
        target_id=payment.id,
        action_metadata={"user_id": data.user_id, "amount": str(data.amount)},
        ip_address=get_client_ip(request),
    )
    return payment


@router.post("/adhoc/{payment_id}/approve", response_model=IncomeRecordResponse)
async def approve_adhoc(
    request: Request,
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_resolve),
):
    record = await payroll.approve_adhoc_payment(db, current_user, payment_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.APPROVE_ADHOC_PAYMENT,
        target_type="adhoc_payment",
        target_id=payment_id,
        ip_address=get_client_ip(request),
    )
    return record


@router.post("/adhoc/{payment_id}/reject", response_model=AdhocPaymentResponse)
async def reject_adhoc(
    request: Request,
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_resolve),
):
    payment = await payroll.reject_adhoc_payment(db, current_user, payment_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REJECT_ADHOC_PAYMENT,
        target_type="adhoc_payment",
        target_id=payment_id,
        ip_address=get_client_ip(request),
    )
    return payment

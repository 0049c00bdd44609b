"""Admin token commission approval endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, CommissionStatus, User
from src.schemas.payroll import IncomeRecordResponse
from src.schemas.sales import CommissionRequestResponse
from src.services.commission import total_amount
from src.services.sales import (
    approve_token_commission,
    list_commission_requests,
    reject_token_commission,
)
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/commissions")

can_approve = require_capability("can_approve_commissions")


@router.get("", response_model=List[CommissionRequestResponse])
async def get_commission_requests(
    status: Optional[CommissionStatus] = Query(CommissionStatus.PENDING),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_approve),
):
    return await list_commission_requests(db, status=status)


@router.post("/{request_id}/approve", response_model=List[IncomeRecordResponse])
async def approve_commission(
    request: Request,
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_approve),
):
    """Distribute the token commission up the seller's chain."""
    records = await approve_token_commission(db, current_user, request_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.APPROVE_COMMISSION,
        target_type="commission_request",
        target_id=request_id,
        action_metadata={"records": len(records), "total": str(total_amount(records))},
        ip_address=get_client_ip(request),
    )
    return records


@router.post("/{request_id}/reject", response_model=CommissionRequestResponse)
async def reject_commission(
    request: Request,
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_approve),
):
    commission_request = await reject_token_commission(db, current_user, request_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REJECT_COMMISSION,
        target_type="commission_request",
        target_id=request_id,
        ip_address=get_client_ip(request),
    )
    return commission_request

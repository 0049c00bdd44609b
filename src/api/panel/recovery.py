"""Panel installment recovery endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, PaymentMethod, ProductSale, RecoveryStatus, User, UserRole
from src.schemas.payroll import IncomeRecordResponse
from src.schemas.sales import AssignRequest, ProductSaleResponse
from src.services import recovery
from src.services.commission import total_amount
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/recovery")

can_recover = require_capability("can_manage_recovery")


@router.get("", response_model=List[ProductSaleResponse])
async def open_installment_plans(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_recover),
):
    """Unsettled installment sales; a Recovery Officer sees only their own."""
    query = select(ProductSale).where(
        ProductSale.payment_method == PaymentMethod.INSTALLMENTS,
        ProductSale.recovery_status != RecoveryStatus.COMPLETED,
    )
    if current_user.role == UserRole.RECOVERY_OFFICER:
        query = query.where(ProductSale.recovery_officer_id == current_user.id)
    result = await db.execute(query.order_by(ProductSale.sale_date))
    return result.scalars().all()


async def _audit(db, request, user, action, sale_id, records=None):
    metadata = None
    if records is not None:
        metadata = {"records": len(records), "total": str(total_amount(records))}
    await log_action(
        db=db,
        user_id=user.id,
        action=action,
        target_type="product_sale",
        target_id=sale_id,
        action_metadata=metadata,
        ip_address=get_client_ip(request),
    )


@router.post("/{sale_id}/pay", response_model=List[IncomeRecordResponse])
async def pay_installment(
    request: Request,
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_recover),
):
    records = await recovery.mark_installment_paid(db, current_user, sale_id)
    await _audit(db, request, current_user, AuditAction.RECORD_INSTALLMENT, sale_id, records)
    return records


@router.post("/{sale_id}/pay-remaining", response_model=List[IncomeRecordResponse])
async def pay_remaining(
    request: Request,
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_recover),
):
    records = await recovery.pay_remaining_installments(db, current_user, sale_id)
    await _audit(db, request, current_user, AuditAction.RECORD_INSTALLMENT, sale_id, records)
    return records


@router.post("/{sale_id}/arrear", response_model=ProductSaleResponse)
async def arrear(
    request: Request,
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_recover),
):
    sale = await recovery.record_arrear(db, current_user, sale_id)
    await _audit(db, request, current_user, AuditAction.RECORD_ARREAR, sale_id)
    return sale


@router.post("/{sale_id}/assign", response_model=ProductSaleResponse)
async def assign(
    request: Request,
    sale_id: int,
    data: AssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_recover),
):
    """Hand an installment plan to a Recovery Officer."""
    sale = await recovery.assign_recovery(db, current_user, sale_id, data.user_id)
    await _audit(db, request, current_user, AuditAction.ASSIGN_RECOVERY, sale_id)
    return sale

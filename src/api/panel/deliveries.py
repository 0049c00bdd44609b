"""Panel delivery endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user, require_capability
from src.db import get_db
from src.models import AuditAction, DeliveryStatus, ProductSale, User
from src.schemas.sales import AssignRequest, ProductSaleResponse
from src.services import recovery
from src.services.roles import capabilities_for
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/deliveries")


@router.get("", response_model=List[ProductSaleResponse])
async def open_deliveries(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Undelivered sales; delivery staff see only those assigned to them."""
    query = select(ProductSale).where(ProductSale.delivery_status != DeliveryStatus.DELIVERED)
    if not capabilities_for(current_user.role).can_manage_deliveries:
        query = query.where(ProductSale.assigned_to_id == current_user.id)
    result = await db.execute(query.order_by(ProductSale.sale_date))
    return result.scalars().all()


@router.post("/{sale_id}/assign", response_model=ProductSaleResponse)
async def assign(
    request: Request,
    sale_id: int,
    data: AssignRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability("can_manage_deliveries")),
):
    sale = await recovery.assign_delivery(db, current_user, sale_id, data.user_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.ASSIGN_DELIVERY,
        target_type="product_sale",
        target_id=sale.id,
        action_metadata={"delivery_boy_id": data.user_id},
        ip_address=get_client_ip(request),
    )
    return sale


@router.post("/{sale_id}/delivered", response_model=ProductSaleResponse)
async def delivered(
    request: Request,
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = await recovery.mark_delivered(db, current_user, sale_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.MARK_DELIVERED,
        target_type="product_sale",
        target_id=sale.id,
        ip_address=get_client_ip(request),
    )
    return sale

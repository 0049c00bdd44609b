"""Panel sales endpoints: token registration and product sales."""

from typing import List

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import require_capability
from src.db import get_db
from src.models import AuditAction, Customer, User
from src.schemas.payroll import IncomeRecordResponse
from src.schemas.sales import (
    CommissionRequestResponse,
    CustomerResponse,
    ProductSaleCreate,
    ProductSaleResponse,
    TokenRegistration,
)
from src.services.commission import total_amount
from src.services.sales import record_product_sale, register_token_sale
from src.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/sales")

can_register = require_capability("can_register_tokens")
can_sell = require_capability("can_sell_products")


class TokenRegistrationResponse(BaseModel):
    customer: CustomerResponse
    commission_request: CommissionRequestResponse


class ProductSaleResult(BaseModel):
    sale: ProductSaleResponse
    commissions: List[IncomeRecordResponse]


@router.get("/tokens", response_model=List[CustomerResponse])
async def my_tokens(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_register),
):
    """Customers registered by the current user, newest first."""
    result = await db.execute(
        select(Customer)
        .where(Customer.salesman_id == current_user.id)
        .order_by(Customer.sale_date.desc())
    )
    return result.scalars().all()


@router.post("/tokens", response_model=TokenRegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_token(
    request: Request,
    data: TokenRegistration,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_register),
):
    """Register a customer token; its commission waits for approval."""
    customer, commission_request = await register_token_sale(db, current_user, data)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REGISTER_TOKEN,
        target_type="customer",
        target_id=customer.id,
        action_metadata={"token_serial": customer.token_serial},
        ip_address=get_client_ip(request),
    )
    return TokenRegistrationResponse(
        customer=CustomerResponse.model_validate(customer),
        commission_request=CommissionRequestResponse.model_validate(commission_request),
    )


@router.post("/products", response_model=ProductSaleResult, status_code=status.HTTP_201_CREATED)
async def sell_product(
    request: Request,
    data: ProductSaleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    """Sell a product against a customer's token. Cash sales pay commission at once."""
    sale, records = await record_product_sale(db, current_user, data)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.RECORD_PRODUCT_SALE,
        target_type="product_sale",
        target_id=sale.id,
        action_metadata={
            "token_serial": data.token_serial,
            "price": str(data.price),
            "payment_method": data.payment_method.value,
            "commission_total": str(total_amount(records)),
        },
        ip_address=get_client_ip(request),
    )
    return ProductSaleResult(
        sale=ProductSaleResponse.model_validate(sale),
        commissions=[IncomeRecordResponse.model_validate(r) for r in records],
    )

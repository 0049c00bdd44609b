"""
Token and product sales, and the commission payouts they trigger.

Every operation here runs inside the caller's transaction: it reads the
rows it gates on with SELECT ... FOR UPDATE, checks their status, then
writes. Nothing commits here; on any exception the caller rolls back
and no partial payout survives.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings as app_settings
from src.models import (
    CommissionRequest,
    CommissionStatus,
    Customer,
    DeliveryStatus,
    IncomeRecord,
    PaymentMethod,
    ProductSale,
    RecoveryStatus,
    SettingsDomain,
    User,
)
from src.schemas.sales import ProductSaleCreate, TokenRegistration
from src.services.commission import (
    ProductSaleEvent,
    TokenSale,
    distribute_commission,
    total_amount,
)
from src.services.errors import ConflictError, NotFoundError, PermissionDeniedError
from src.services.ledger import credit
from src.services.roles import capabilities_for
from src.services.settings_store import load_settings

logger = logging.getLogger(__name__)


async def load_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User))
    return list(result.scalars().all())


async def get_for_update(db: AsyncSession, model, row_id: int, label: str):
    """
    Lock a row by id and reload it from the database.

    populate_existing overwrites any copy already in the session, so
    status checks after the lock see the committed state.
    """
    result = await db.execute(
        select(model)
        .where(model.id == row_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"{label} not found.")
    return row


def salesman_of(users: List[User], customer: Customer) -> User:
    for user in users:
        if user.id == customer.salesman_id:
            return user
    raise NotFoundError(
        f"Could not find the original salesman (ID: {customer.salesman_id}) for this token."
    )


# ── Token sales ───────────────────────────────────────────


async def register_token_sale(
    db: AsyncSession,
    salesman: User,
    data: TokenRegistration,
) -> Tuple[Customer, CommissionRequest]:
    """Register a customer token and queue its commission for approval."""
    if not capabilities_for(salesman.role).can_register_tokens:
        raise PermissionDeniedError("You are not allowed to register tokens.")

    existing = await db.execute(
        select(Customer.id).where(Customer.token_serial == data.token_serial)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Token {data.token_serial} is already registered.")

    now = datetime.now(timezone.utc)
    customer = Customer(
        name=data.name,
        nic=data.nic,
        contact_info=data.contact_info,
        address=data.address,
        token_serial=data.token_serial,
        token_is_available=True,
        salesman_id=salesman.id,
        branch=salesman.branch,
        payment_method=data.payment_method,
        down_payment=data.down_payment,
        sale_date=now,
        commission_status=CommissionStatus.PENDING,
    )
    db.add(customer)
    await db.flush()

    request = CommissionRequest(
        customer_id=customer.id,
        salesman_id=salesman.id,
        token_serial=customer.token_serial,
        request_date=now,
        status=CommissionStatus.PENDING,
    )
    db.add(request)
    await db.flush()

    logger.info(f"Token {customer.token_serial} registered by salesman {salesman.id}")
    return customer, request


async def approve_token_commission(
    db: AsyncSession,
    actor: User,
    request_id: int,
) -> List[IncomeRecord]:
    """
    Release the commission for one token sale.

    The request must still be pending when read under lock; a second
    approval raises ConflictError and writes nothing.
    """
    if not capabilities_for(actor.role).can_approve_commissions:
        raise PermissionDeniedError("You are not allowed to approve commissions.")

    request = await get_for_update(db, CommissionRequest, request_id, "Commission request")
    if request.status != CommissionStatus.PENDING:
        raise ConflictError("Commission request has already been processed.")

    customer = await get_for_update(db, Customer, request.customer_id, "Associated customer")
    if customer.commission_status != CommissionStatus.PENDING:
        raise ConflictError("Commission for this customer has already been processed.")

    users = await load_users(db)
    salesman = salesman_of(users, customer)
    commission_settings, _ = await load_settings(db, SettingsDomain.COMMISSION)

    records = distribute_commission(
        TokenSale(customer_id=customer.id, commission_request_id=request.id),
        salesman,
        users,
        commission_settings,
        max_depth=app_settings.max_hierarchy_depth,
    )
    await credit(db, records)

    now = datetime.now(timezone.utc)
    request.status = CommissionStatus.APPROVED
    request.approver_id = actor.id
    request.processed_date = now
    customer.commission_status = CommissionStatus.APPROVED
    await db.flush()

    logger.info(
        f"Token commission {request.id} approved by user {actor.id}: "
        f"{len(records)} records, total {total_amount(records)}"
    )
    return records


async def reject_token_commission(
    db: AsyncSession,
    actor: User,
    request_id: int,
) -> CommissionRequest:
    if not capabilities_for(actor.role).can_approve_commissions:
        raise PermissionDeniedError("You are not allowed to reject commissions.")

    request = await get_for_update(db, CommissionRequest, request_id, "Commission request")
    if request.status != CommissionStatus.PENDING:
        raise ConflictError("Commission request has already been processed.")

    customer = await get_for_update(db, Customer, request.customer_id, "Associated customer")

    request.status = CommissionStatus.REJECTED
    request.approver_id = actor.id
    request.processed_date = datetime.now(timezone.utc)
    customer.commission_status = CommissionStatus.REJECTED
    await db.flush()

    logger.info(f"Token commission {request.id} rejected by user {actor.id}")
    return request


async def list_commission_requests(
    db: AsyncSession,
    status: Optional[CommissionStatus] = CommissionStatus.PENDING,
) -> List[CommissionRequest]:
    query = select(CommissionRequest)
    if status is not None:
        query = query.where(CommissionRequest.status == status)
    result = await db.execute(query.order_by(CommissionRequest.request_date.desc()))
    return list(result.scalars().all())


# ── Product sales ─────────────────────────────────────────


async def record_product_sale(
    db: AsyncSession,
    actor: User,
    data: ProductSaleCreate,
) -> Tuple[ProductSale, List[IncomeRecord]]:
    """
    Sell a product against an available token.

    The token is consumed. Cash sales pay their tier's cash commission
    in the same transaction; installment sales pay per recovered
    installment (see src.services.recovery).
    """
    if not capabilities_for(actor.role).can_sell_products:
        raise PermissionDeniedError("You are not allowed to record product sales.")

    result = await db.execute(
        select(Customer)
        .where(Customer.token_serial == data.token_serial)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError(f"No customer found with token: {data.token_serial}")
    if not customer.token_is_available:
        raise ConflictError(f"Token {data.token_serial} has already been used for a sale.")

    is_installment = data.payment_method == PaymentMethod.INSTALLMENTS
    sale = ProductSale(
        customer_id=customer.id,
        product_name=data.product_name,
        product_code=data.product_code,
        price=data.price,
        payment_method=data.payment_method,
        sale_date=datetime.now(timezone.utc),
        shop_manager_id=actor.id,
        commission_status=CommissionStatus.PENDING,
        delivery_status=DeliveryStatus.PENDING,
        arrears=0,
        installments=data.installments if is_installment else None,
        monthly_installment=data.monthly_installment if is_installment else None,
        paid_installments=0 if is_installment else None,
        recovery_status=RecoveryStatus.PENDING if is_installment else None,
    )
    db.add(sale)

    customer.token_is_available = False
    customer.purchasing_item = data.product_name
    customer.total_value = data.price
    customer.discount_value = data.discount_value
    customer.down_payment = data.down_payment
    customer.installments = sale.installments
    customer.monthly_installment = sale.monthly_installment
    await db.flush()

    records: List[IncomeRecord] = []
    if not is_installment:
        records = await release_product_commission(db, sale.id)

    logger.info(
        f"Product sale {sale.id} ({data.payment_method.value}) recorded by user {actor.id} "
        f"for token {data.token_serial}"
    )
    return sale, records


async def release_product_commission(db: AsyncSession, sale_id: int) -> List[IncomeRecord]:
    """
    Pay the cash commission of a cash product sale, exactly once.

    Raises:
        ConflictError: commission was already released, or the sale is
            an installment plan (paid per installment instead)
    """
    sale = await get_for_update(db, ProductSale, sale_id, "Product sale")
    if sale.payment_method != PaymentMethod.CASH:
        raise ConflictError("Installment sales pay commission per recovered installment.")
    if sale.commission_status != CommissionStatus.PENDING:
        raise ConflictError("Commission for this sale has already been processed.")

    customer = await db.get(Customer, sale.customer_id)
    users = await load_users(db)
    salesman = salesman_of(users, customer)
    product_settings, _ = await load_settings(db, SettingsDomain.PRODUCT_COMMISSION)

    records = distribute_commission(
        ProductSaleEvent(
            product_sale_id=sale.id,
            customer_id=customer.id,
            price=sale.price,
            payment_method=sale.payment_method,
        ),
        salesman,
        users,
        product_settings,
        max_depth=app_settings.max_hierarchy_depth,
    )
    await credit(db, records)
    sale.commission_status = CommissionStatus.APPROVED
    await db.flush()

    logger.info(
        f"Product sale {sale.id} commission released: "
        f"{len(records)} records, total {total_amount(records)}"
    )
    return records

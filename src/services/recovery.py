"""
Installment recovery and delivery tracking for product sales.

Each recovered installment pays the chain its share of the tier's
installment commission (amount / number of installments).
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings as app_settings
from src.models import (
    CommissionStatus,
    Customer,
    DeliveryStatus,
    IncomeRecord,
    PaymentMethod,
    ProductSale,
    RecoveryStatus,
    SettingsDomain,
    User,
    UserRole,
)
from src.services.commission import ProductSaleEvent, distribute_commission
from src.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.services.ledger import credit
from src.services.roles import capabilities_for
from src.services.sales import get_for_update, load_users, salesman_of
from src.services.settings_store import load_settings

logger = logging.getLogger(__name__)


def _require(actor: User, capability: str, action: str) -> None:
    if not getattr(capabilities_for(actor.role), capability):
        raise PermissionDeniedError(f"You are not allowed to {action}.")


async def _installment_sale(db: AsyncSession, sale_id: int) -> ProductSale:
    sale = await get_for_update(db, ProductSale, sale_id, "Product sale")
    if sale.payment_method != PaymentMethod.INSTALLMENTS or not sale.installments:
        raise ValidationError("This sale is not an installment plan.")
    return sale


async def _pay_installments(
    db: AsyncSession,
    sale: ProductSale,
    count: int,
) -> List[IncomeRecord]:
    customer = await db.get(Customer, sale.customer_id)
    if customer is None:
        raise NotFoundError("Could not find the customer for this sale.")
    users = await load_users(db)
    salesman = salesman_of(users, customer)
    product_settings, _ = await load_settings(db, SettingsDomain.PRODUCT_COMMISSION)

    first = (sale.paid_installments or 0) + 1
    records: List[IncomeRecord] = []
    for number in range(first, first + count):
        records.extend(
            distribute_commission(
                ProductSaleEvent(
                    product_sale_id=sale.id,
                    customer_id=customer.id,
                    price=sale.price,
                    payment_method=sale.payment_method,
                    installments=sale.installments,
                    installment_number=number,
                ),
                salesman,
                users,
                product_settings,
                max_depth=app_settings.max_hierarchy_depth,
            )
        )
    await credit(db, records)

    sale.paid_installments = (sale.paid_installments or 0) + count
    if sale.paid_installments >= sale.installments:
        sale.recovery_status = RecoveryStatus.COMPLETED
        sale.commission_status = CommissionStatus.APPROVED
    await db.flush()
    return records


async def mark_installment_paid(db: AsyncSession, actor: User, sale_id: int) -> List[IncomeRecord]:
    """Record the next installment of a plan and pay its commission share."""
    _require(actor, "can_manage_recovery", "record installment payments")
    sale = await _installment_sale(db, sale_id)
    if sale.remaining_installments <= 0:
        raise ConflictError("All installments have already been paid.")

    records = await _pay_installments(db, sale, 1)
    logger.info(
        f"Installment {sale.paid_installments}/{sale.installments} of sale {sale.id} "
        f"recorded by user {actor.id}"
    )
    return records


async def pay_remaining_installments(db: AsyncSession, actor: User, sale_id: int) -> List[IncomeRecord]:
    """Settle every outstanding installment at once."""
    _require(actor, "can_manage_recovery", "record installment payments")
    sale = await _installment_sale(db, sale_id)
    remaining = sale.remaining_installments
    if remaining <= 0:
        raise ConflictError("All installments have already been paid.")

    records = await _pay_installments(db, sale, remaining)
    logger.info(f"Sale {sale.id} fully settled ({remaining} installments) by user {actor.id}")
    return records


async def record_arrear(db: AsyncSession, actor: User, sale_id: int) -> ProductSale:
    """Count one missed installment payment."""
    _require(actor, "can_manage_recovery", "record arrears")
    sale = await _installment_sale(db, sale_id)
    if sale.remaining_installments <= 0:
        raise ConflictError("This installment plan is already settled.")

    sale.arrears = (sale.arrears or 0) + 1
    await db.flush()
    logger.info(f"Arrear recorded on sale {sale.id} (now {sale.arrears})")
    return sale


async def _staff_member(db: AsyncSession, user_id: int, role: UserRole) -> User:
    user = await db.get(User, user_id)
    if user is None or user.role != role:
        raise ValidationError(f"User {user_id} is not a {role.value}.")
    if user.is_disabled:
        raise ValidationError(f"{user.name} is disabled.")
    return user


async def assign_recovery(db: AsyncSession, actor: User, sale_id: int, officer_id: int) -> ProductSale:
    _require(actor, "can_manage_recovery", "assign recovery officers")
    sale = await _installment_sale(db, sale_id)
    if sale.recovery_status == RecoveryStatus.COMPLETED:
        raise ConflictError("This installment plan is already settled.")

    officer = await _staff_member(db, officer_id, UserRole.RECOVERY_OFFICER)
    sale.recovery_officer_id = officer.id
    sale.recovery_status = RecoveryStatus.ASSIGNED
    await db.flush()
    return sale


async def assign_delivery(db: AsyncSession, actor: User, sale_id: int, delivery_boy_id: int) -> ProductSale:
    _require(actor, "can_manage_deliveries", "assign deliveries")
    sale = await get_for_update(db, ProductSale, sale_id, "Product sale")
    if sale.delivery_status == DeliveryStatus.DELIVERED:
        raise ConflictError("This sale has already been delivered.")

    delivery_boy = await _staff_member(db, delivery_boy_id, UserRole.DELIVERY_BOY)
    sale.assigned_to_id = delivery_boy.id
    sale.assigned_at = datetime.now(timezone.utc)
    sale.delivery_status = DeliveryStatus.ASSIGNED
    await db.flush()
    return sale


async def mark_delivered(db: AsyncSession, actor: User, sale_id: int) -> ProductSale:
    """Close a delivery. Allowed for the assigned delivery boy or delivery managers."""
    sale = await get_for_update(db, ProductSale, sale_id, "Product sale")
    if sale.assigned_to_id != actor.id:
        _require(actor, "can_manage_deliveries", "close this delivery")
    if sale.delivery_status != DeliveryStatus.ASSIGNED:
        raise ConflictError(f"Sale is {sale.delivery_status.value}, not out for delivery.")

    sale.delivery_status = DeliveryStatus.DELIVERED
    sale.delivered_at = datetime.now(timezone.utc)
    await db.flush()
    return sale

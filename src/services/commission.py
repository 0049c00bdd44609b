"""
Commission calculation for token and product sales.

Rules:
- Token sale: flat amount per role from CommissionSettings
- Product sale: price tier lookup, then the role's cash or installments
  amount depending on how the customer pays
- Every commission-eligible member of the seller's upline is paid for
  its own role; the admin share is paid to every admin-pool user
- Unconfigured or zero amounts are skipped, never recorded
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, List, Optional, Sequence, Union

from src.models.customer import PaymentMethod
from src.models.income import IncomeRecord, IncomeSource
from src.models.user import UserRole
from src.schemas.settings import (
    CommissionSettings,
    ProductCommissionSettings,
    ProductCommissionTier,
)
from src.services.hierarchy import (
    DEFAULT_MAX_DEPTH,
    index_users,
    report_integrity_gap,
    resolve_upline,
)
from src.services.roles import ADMIN_KEY, capabilities_for

CENTS = Decimal("0.01")
ZERO = Decimal("0")


@dataclass
class TokenSale:
    """Token registration whose commission is being released."""

    customer_id: int
    commission_request_id: Optional[int] = None


@dataclass
class ProductSaleEvent:
    """Product sale (or one recovered installment of it) being paid out."""

    product_sale_id: int
    customer_id: int
    price: Decimal
    payment_method: PaymentMethod
    installments: Optional[int] = None
    installment_number: Optional[int] = None


Sale = Union[TokenSale, ProductSaleEvent]


def select_tier(
    tiers: Sequence[ProductCommissionTier],
    price: Decimal,
) -> Optional[ProductCommissionTier]:
    """
    First tier (ascending) whose range contains price.

    Returns None when no tier matches; callers treat that as
    "no commission configured", not as zero.
    """
    for tier in tiers:
        if tier.contains(price):
            return tier
    return None


def token_commission_amount(settings: CommissionSettings, commission_key: Optional[str]) -> Decimal:
    if commission_key is None:
        return ZERO
    return settings.amount_for(commission_key)


def product_commission_amount(
    tier: ProductCommissionTier,
    commission_key: Optional[str],
    payment_method: PaymentMethod,
) -> Decimal:
    """The role's amount in a tier for the given payment method."""
    values = tier.commissions.get(commission_key) if commission_key else None
    if values is None:
        return ZERO
    if PaymentMethod(payment_method) == PaymentMethod.CASH:
        return values.cash
    return values.installments


def per_installment(
    amount: Decimal,
    installments: int,
    installment_number: Optional[int] = None,
) -> Decimal:
    """
    Share of an installment commission paid for one recovered installment.

    Shares are truncated to cents and the final installment carries the
    remainder, so the shares of a completed plan add up to amount.
    """
    share = (amount / installments).quantize(CENTS, rounding=ROUND_DOWN)
    if installment_number is not None and installment_number >= installments:
        return amount - share * (installments - 1)
    return share


def _amount_for(sale: Sale, commission_key: Optional[str], settings, tier) -> Decimal:
    if isinstance(sale, TokenSale):
        return token_commission_amount(settings, commission_key)

    amount = product_commission_amount(tier, commission_key, sale.payment_method)
    if PaymentMethod(sale.payment_method) == PaymentMethod.INSTALLMENTS:
        if not sale.installments:
            return ZERO
        return per_installment(amount, sale.installments, sale.installment_number)
    return amount


def _record(sale: Sale, user, salesman, amount: Decimal) -> IncomeRecord:
    record = IncomeRecord(
        user_id=user.id,
        amount=amount,
        granted_for_role=UserRole(user.role).value,
        salesman_id=salesman.id,
        customer_id=sale.customer_id,
        sale_date=datetime.now(timezone.utc),
    )
    if isinstance(sale, TokenSale):
        record.source_type = IncomeSource.TOKEN_SALE
        record.commission_request_id = sale.commission_request_id
    else:
        record.source_type = IncomeSource.PRODUCT_SALE
        record.product_sale_id = sale.product_sale_id
        record.installment_number = sale.installment_number
    return record


def distribute_commission(
    sale: Sale,
    salesman,
    all_users: Iterable,
    settings: Union[CommissionSettings, ProductCommissionSettings],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[IncomeRecord]:
    """
    Build the income records a sale pays out, without saving them.

    Args:
        sale: TokenSale or ProductSaleEvent
        salesman: User who registered the customer's token
        all_users: Every user, used for the upline walk and the admin pool
        settings: CommissionSettings for tokens, ProductCommissionSettings for products
        max_depth: Maximum referrer hops to follow

    Returns:
        One unsaved IncomeRecord per paid user, chain first, admin pool last.
        Empty when the sale price matches no tier.
    """
    all_users = list(all_users)

    tier = None
    if isinstance(sale, ProductSaleEvent):
        tier = select_tier(settings.tiers, sale.price)
        if tier is None:
            report_integrity_gap(
                f"No commission tier covers price {sale.price} "
                f"(product sale {sale.product_sale_id}); nothing distributed"
            )
            return []

    records = []
    chain = resolve_upline(salesman, all_users, max_depth, users_by_id=index_users(all_users))
    for member in chain:
        commission_key = capabilities_for(member.role).commission_key
        amount = _amount_for(sale, commission_key, settings, tier)
        if amount > ZERO:
            records.append(_record(sale, member, salesman, amount))

    admin_amount = _amount_for(sale, ADMIN_KEY, settings, tier)
    if admin_amount > ZERO:
        for user in all_users:
            if capabilities_for(user.role).is_admin_pool and not user.is_disabled:
                records.append(_record(sale, user, salesman, admin_amount))

    return records


def total_amount(records: Iterable[IncomeRecord]) -> Decimal:
    return sum((record.amount for record in records), ZERO)

"""
Monthly salary payouts, incentive payments and ad-hoc payments.

A payout run credits every eligible user with their base salary plus the
incentive tier they reached for the month, and groups the records under
one MonthlySalaryPayout batch so the whole run can be reversed later.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import (
    AdhocPayment,
    CommissionStatus,
    Customer,
    IncomeRecord,
    IncomeSource,
    MonthlySalaryPayout,
    RequestStatus,
    SettingsDomain,
    User,
    UserRole,
)
from src.schemas.settings import SalarySettings
from src.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.services.incentive import count_period_sales, evaluate_incentive
from src.services.ledger import credit, debit_and_delete
from src.services.roles import capabilities_for, salary_key_for
from src.services.sales import get_for_update, load_users
from src.services.settings_store import load_settings

logger = logging.getLogger(__name__)

PERIOD_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


@dataclass
class PayoutResult:
    users_paid: int
    total_amount: Decimal
    payout_id: int


def current_period() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m")


def period_bounds(period: str) -> Tuple[datetime, datetime]:
    """[start, end) of a "YYYY-MM" period in UTC."""
    match = PERIOD_RE.match(period or "")
    if not match:
        raise ValidationError(f"Invalid payout period '{period}', expected YYYY-MM.")
    year, month = int(match.group(1)), int(match.group(2))
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def base_salary_for(user, settings: SalarySettings) -> Decimal:
    """Configured base salary for a user, zero when the role has none."""
    key = salary_key_for(user)
    if key is None:
        return Decimal("0")
    return settings.salaries.get(key, Decimal("0"))


def incentive_key_for(user) -> str:
    return salary_key_for(user) or UserRole(user.role).value


def _require_payroll(actor: User) -> None:
    if not capabilities_for(actor.role).can_process_payroll:
        raise PermissionDeniedError("You are not allowed to process salaries.")


async def _active_payout(db: AsyncSession, period: str) -> Optional[MonthlySalaryPayout]:
    result = await db.execute(
        select(MonthlySalaryPayout).where(MonthlySalaryPayout.active_period == period)
    )
    return result.scalar_one_or_none()


async def _period_customers(db: AsyncSession, start: datetime, end: datetime) -> List[Customer]:
    result = await db.execute(
        select(Customer).where(
            Customer.commission_status == CommissionStatus.APPROVED,
            Customer.sale_date >= start,
            Customer.sale_date < end,
        )
    )
    return list(result.scalars().all())


async def process_salaries(
    db: AsyncSession,
    actor: User,
    period: Optional[str] = None,
) -> PayoutResult:
    """
    Pay the month's salaries and incentives as one batch.

    Raises:
        PermissionDeniedError: actor cannot process payroll
        ValidationError: bad period, or no user is eligible for any amount
        ConflictError: the period already has a live batch
    """
    _require_payroll(actor)
    period = period or current_period()
    start, end = period_bounds(period)

    existing = await _active_payout(db, period)
    if existing is not None:
        raise ConflictError(
            f"Salaries for {period} were already processed (payout #{existing.id})."
        )

    salary_settings, _ = await load_settings(db, SettingsDomain.SALARY)
    incentive_settings, _ = await load_settings(db, SettingsDomain.INCENTIVE)

    users = await load_users(db)
    customers = await _period_customers(db, start, end)
    paid_at = datetime.now(timezone.utc)

    records: List[IncomeRecord] = []
    paid_user_ids = set()
    for user in users:
        if user.is_disabled:
            continue

        role_label = incentive_key_for(user)
        salary = base_salary_for(user, salary_settings)
        if salary > 0:
            records.append(
                IncomeRecord(
                    user_id=user.id,
                    amount=salary,
                    source_type=IncomeSource.SALARY,
                    granted_for_role=role_label,
                    salesman_id=user.id,
                    sale_date=paid_at,
                    description=f"Base salary for {period}",
                )
            )
            paid_user_ids.add(user.id)

        tiers = incentive_settings.incentives.get(role_label)
        if not tiers:
            continue
        achieved = count_period_sales(user, users, customers, start, end)
        tier = evaluate_incentive(tiers, achieved)
        if tier is not None and tier.incentive > 0:
            records.append(
                IncomeRecord(
                    user_id=user.id,
                    amount=tier.incentive,
                    source_type=IncomeSource.INCENTIVE,
                    granted_for_role=role_label,
                    salesman_id=user.id,
                    sale_date=paid_at,
                    description=f"Incentive for {achieved} sales (target {tier.target}) in {period}",
                )
            )
            paid_user_ids.add(user.id)

    if not records:
        raise ValidationError(f"No users are eligible for a salary or incentive in {period}.")

    total = sum((Decimal(r.amount) for r in records), Decimal("0"))
    payout = MonthlySalaryPayout(
        period=period,
        active_period=period,
        payout_date=paid_at,
        processed_by_id=actor.id,
        total_users_paid=len(paid_user_ids),
        total_amount_paid=total,
    )
    db.add(payout)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Concurrent run for the same month took the period slot first
        raise ConflictError(f"Salaries for {period} were already processed.") from exc

    for record in records:
        record.payout_id = payout.id
    await credit(db, records)

    logger.info(
        f"Payroll {period} processed by user {actor.id}: "
        f"{len(paid_user_ids)} users, total {total} (payout #{payout.id})"
    )
    return PayoutResult(users_paid=len(paid_user_ids), total_amount=total, payout_id=payout.id)


async def records_for_payout(db: AsyncSession, payout_id: int) -> List[IncomeRecord]:
    result = await db.execute(
        select(IncomeRecord)
        .where(IncomeRecord.payout_id == payout_id)
        .order_by(IncomeRecord.user_id, IncomeRecord.id)
    )
    return list(result.scalars().all())


async def reverse_salary_payout(db: AsyncSession, payout_id: int, actor: User) -> MonthlySalaryPayout:
    """
    Undo a payout batch.

    Deletes exactly the batch's income records, takes the same amounts
    back from each balance, and frees the period for a new run.
    """
    _require_payroll(actor)
    payout = await get_for_update(db, MonthlySalaryPayout, payout_id, "Salary payout")
    if payout.is_reversed:
        raise ConflictError("This salary payout has already been reversed.")

    records = await records_for_payout(db, payout.id)
    removed = await debit_and_delete(db, records)

    payout.is_reversed = True
    payout.active_period = None
    payout.reversed_by_id = actor.id
    payout.reversal_date = datetime.now(timezone.utc)
    await db.flush()

    logger.info(
        f"Payout #{payout.id} ({payout.period}) reversed by user {actor.id}: "
        f"{len(records)} records, {removed} debited"
    )
    return payout


async def list_payouts(db: AsyncSession) -> List[MonthlySalaryPayout]:
    result = await db.execute(
        select(MonthlySalaryPayout).order_by(
            MonthlySalaryPayout.payout_date.desc(), MonthlySalaryPayout.id.desc()
        )
    )
    return list(result.scalars().all())


# ── Ad-hoc payments ───────────────────────────────────────


async def request_adhoc_payment(
    db: AsyncSession,
    actor: User,
    user_id: int,
    amount: Decimal,
    reason: str,
) -> AdhocPayment:
    capabilities = capabilities_for(actor.role)
    if not (capabilities.can_request_changes or capabilities.can_bypass_approval):
        raise PermissionDeniedError("You are not allowed to request ad-hoc payments.")
    if amount <= 0:
        raise ValidationError("Ad-hoc payment amount must be positive.")

    recipient = await db.get(User, user_id)
    if recipient is None:
        raise NotFoundError(f"User {user_id} not found.")

    payment = AdhocPayment(
        user_id=recipient.id,
        amount=amount,
        reason=reason,
        requested_by_id=actor.id,
        request_date=datetime.now(timezone.utc),
        status=RequestStatus.PENDING,
    )
    db.add(payment)
    await db.flush()
    logger.info(f"Ad-hoc payment {payment.id} of {amount} to user {recipient.id} requested by {actor.id}")
    return payment


async def _lock_pending_payment(db: AsyncSession, actor: User, payment_id: int) -> AdhocPayment:
    if not capabilities_for(actor.role).can_resolve_changes:
        raise PermissionDeniedError("Only a Super Admin can resolve ad-hoc payments.")
    payment = await get_for_update(db, AdhocPayment, payment_id, "Ad-hoc payment")
    if payment.status != RequestStatus.PENDING:
        raise ConflictError("Ad-hoc payment has already been processed.")
    return payment


async def approve_adhoc_payment(db: AsyncSession, actor: User, payment_id: int) -> IncomeRecord:
    """Pay out a pending ad-hoc payment and credit the recipient."""
    payment = await _lock_pending_payment(db, actor, payment_id)
    recipient = await db.get(User, payment.user_id)
    if recipient is None:
        raise NotFoundError(f"User {payment.user_id} not found.")

    now = datetime.now(timezone.utc)
    record = IncomeRecord(
        user_id=recipient.id,
        amount=payment.amount,
        source_type=IncomeSource.ADHOC,
        granted_for_role=UserRole(recipient.role).value,
        adhoc_payment_id=payment.id,
        sale_date=now,
        description=payment.reason,
    )
    await credit(db, [record])

    payment.status = RequestStatus.APPROVED
    payment.resolved_by_id = actor.id
    payment.resolved_date = now
    await db.flush()
    logger.info(f"Ad-hoc payment {payment.id} approved by user {actor.id}")
    return record


async def reject_adhoc_payment(db: AsyncSession, actor: User, payment_id: int) -> AdhocPayment:
    payment = await _lock_pending_payment(db, actor, payment_id)
    payment.status = RequestStatus.REJECTED
    payment.resolved_by_id = actor.id
    payment.resolved_date = datetime.now(timezone.utc)
    await db.flush()
    logger.info(f"Ad-hoc payment {payment.id} rejected by user {actor.id}")
    return payment


async def list_adhoc_payments(
    db: AsyncSession,
    status: Optional[RequestStatus] = None,
) -> List[AdhocPayment]:
    query = select(AdhocPayment)
    if status is not None:
        query = query.where(AdhocPayment.status == status)
    result = await db.execute(query.order_by(AdhocPayment.request_date.desc(), AdhocPayment.id.desc()))
    return list(result.scalars().all())

"""
Monthly incentive evaluation.

A role (or salesman stage) has an ascending list of {target, incentive}
tiers. Reaching a higher target supersedes the lower ones: only the
highest achieved tier pays.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from src.models.customer import CommissionStatus
from src.models.user import UserRole
from src.schemas.settings import IncentiveTier
from src.services.hierarchy import resolve_downline


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def evaluate_incentive(
    tiers: Sequence[IncentiveTier],
    achieved_count: int,
) -> Optional[IncentiveTier]:
    """
    Highest tier whose target is at or below achieved_count.

    Returns None when achieved_count is below every target. If two tiers
    share a target, the one listed later wins.
    """
    best = None
    for tier in tiers:
        if tier.target <= achieved_count and (best is None or tier.target >= best.target):
            best = tier
    return best


def count_period_sales(
    user,
    all_users: Iterable,
    customers: Iterable,
    start: datetime,
    end: datetime,
) -> int:
    """
    Approved token sales in [start, end).

    Salesmen are measured on their own registrations, every other role
    on the registrations of its whole downline.
    """
    if user.role == UserRole.SALESMAN:
        seller_ids = {user.id}
    else:
        seller_ids = resolve_downline(user.id, all_users).ids

    start, end = _aware(start), _aware(end)
    return sum(
        1
        for customer in customers
        if customer.salesman_id in seller_ids
        and customer.commission_status == CommissionStatus.APPROVED
        and start <= _aware(customer.sale_date) < end
    )

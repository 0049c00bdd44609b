"""
Income ledger writes.

Balances are adjusted with UPDATE ... SET total_income = total_income + x
so concurrent credits to the same user never overwrite each other.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import IncomeRecord, User


def _totals(records: Iterable[IncomeRecord]) -> Dict[int, Decimal]:
    totals: Dict[int, Decimal] = defaultdict(Decimal)
    for record in records:
        totals[record.user_id] += Decimal(record.amount)
    return totals


async def _adjust_balances(db: AsyncSession, totals: Dict[int, Decimal]) -> None:
    for user_id, amount in totals.items():
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(total_income=User.total_income + amount)
            .execution_options(synchronize_session="fetch")
        )


async def credit(db: AsyncSession, records: List[IncomeRecord]) -> List[IncomeRecord]:
    """Insert income records and add their amounts to each user's balance."""
    if not records:
        return records
    db.add_all(records)
    await _adjust_balances(db, _totals(records))
    await db.flush()
    return records


async def debit_and_delete(db: AsyncSession, records: List[IncomeRecord]) -> Decimal:
    """Delete income records and take their amounts back from each balance."""
    totals = _totals(records)
    await _adjust_balances(db, {user_id: -amount for user_id, amount in totals.items()})
    for record in records:
        await db.delete(record)
    await db.flush()
    return sum(totals.values(), Decimal("0"))


async def records_for_user(db: AsyncSession, user_id: int) -> List[IncomeRecord]:
    """A user's income records, newest first."""
    result = await db.execute(
        select(IncomeRecord)
        .where(IncomeRecord.user_id == user_id)
        .order_by(IncomeRecord.sale_date.desc(), IncomeRecord.id.desc())
    )
    return list(result.scalars().all())

"""Stand-ins and helpers shared by the test modules."""

from decimal import Decimal
from types import SimpleNamespace

from src.models import SalesmanStage, UserRole


def make_node(user_id, role=UserRole.SALESMAN, referrer_id=None, **kwargs):
    """Plain stand-in for a User in pure hierarchy / commission tests."""
    defaults = {
        "id": user_id,
        "role": role,
        "referrer_id": referrer_id,
        "salesman_stage": SalesmanStage.BUSINESS_PROMOTER if role == UserRole.SALESMAN else None,
        "is_disabled": False,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


async def balance(db, user) -> Decimal:
    """Re-read a user's total_income from the database."""
    await db.refresh(user, ["total_income"])
    return Decimal(user.total_income)

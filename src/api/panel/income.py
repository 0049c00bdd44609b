"""Panel income endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user
from src.config import settings
from src.db import get_db
from src.models import User
from src.schemas.payroll import IncomeRecordResponse, IncomeSummaryResponse
from src.services.ledger import records_for_user

router = APIRouter(prefix="/income")


@router.get("", response_model=IncomeSummaryResponse)
async def get_income(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Current balance and every income record of the current user."""
    records = await records_for_user(db, current_user.id)
    return IncomeSummaryResponse(
        total_income=current_user.total_income,
        currency=settings.currency,
        records=[IncomeRecordResponse.model_validate(r) for r in records],
    )

"""Panel team endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user
from src.db import get_db
from src.models import User
from src.schemas.user import TeamMemberResponse, TeamResponse
from src.services.users import team_for

router = APIRouter(prefix="/team")


@router.get("", response_model=TeamResponse)
async def get_team(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Everyone in the current user's downline."""
    members = await team_for(db, current_user)
    return TeamResponse(
        total=len(members),
        members=[TeamMemberResponse.model_validate(m) for m in members],
    )

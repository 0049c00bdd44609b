"""
Staff accounts: referral signup, verification and team views.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import SalesmanStage, SettingsDomain, User, UserRole
from src.models.user import generate_referral_code
from src.schemas.user import SignupRequest
from src.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.services.hierarchy import resolve_downline
from src.services.roles import capabilities_for
from src.services.sales import load_users
from src.services.settings_store import load_settings
from src.utils.password import hash_password

logger = logging.getLogger(__name__)

REFERRAL_CODE_ATTEMPTS = 10


async def get_user_by_referral_code(db: AsyncSession, code: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.referral_code == code.strip().upper()))
    return result.scalar_one_or_none()


async def _unique_referral_code(db: AsyncSession) -> str:
    for _ in range(REFERRAL_CODE_ATTEMPTS):
        code = generate_referral_code()
        if await get_user_by_referral_code(db, code) is None:
            return code
    raise ConflictError("Could not allocate a referral code, please retry.")


async def signup_user(db: AsyncSession, data: SignupRequest) -> User:
    """
    Create a staff account from the public signup form.

    The account starts disabled until an HR or Admin user verifies it.

    Raises:
        ValidationError: role not offered, or referral code missing / unknown
        ConflictError: username already taken
    """
    role_settings, _ = await load_settings(db, SettingsDomain.SIGNUP_ROLES)
    if not role_settings.is_visible(data.role):
        raise ValidationError(f"Signup is not open for the {data.role.value} role.")

    existing = await db.execute(select(User.id).where(User.username == data.username))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Username '{data.username}' is already taken.")

    capabilities = capabilities_for(data.role)
    referrer = None
    if data.referral_code:
        referrer = await get_user_by_referral_code(db, data.referral_code)
        if referrer is None:
            raise ValidationError("Invalid referral code.")
    elif capabilities.needs_referrer:
        raise ValidationError(f"A referral code is required to sign up as {data.role.value}.")

    stage = None
    if data.role == UserRole.SALESMAN:
        stage = data.salesman_stage or SalesmanStage.BUSINESS_PROMOTER

    user = User(
        username=data.username,
        password_hash=hash_password(data.password),
        name=data.name,
        mobile_number=data.mobile_number,
        role=data.role,
        salesman_stage=stage,
        referrer_id=referrer.id if referrer else None,
        branch=data.branch or (referrer.branch if referrer else None),
        referral_code=await _unique_referral_code(db) if capabilities.issues_referral_code else None,
        is_disabled=True,
    )
    db.add(user)
    await db.flush()

    logger.info(
        f"New {user.role.value} signup '{user.username}' (id {user.id}), "
        f"referrer {user.referrer_id}"
    )
    return user


async def verify_user(db: AsyncSession, actor: User, user_id: int) -> User:
    """Enable a signed-up account."""
    if not capabilities_for(actor.role).can_verify_users:
        raise PermissionDeniedError("You are not allowed to verify users.")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found.")
    if not user.is_disabled:
        raise ConflictError(f"{user.name} is already verified.")

    user.is_disabled = False
    await db.flush()
    logger.info(f"User {user.id} verified by user {actor.id}")
    return user


async def list_users(
    db: AsyncSession,
    role: Optional[UserRole] = None,
    pending_only: bool = False,
) -> List[User]:
    query = select(User)
    if role is not None:
        query = query.where(User.role == role)
    if pending_only:
        query = query.where(User.is_disabled.is_(True))
    result = await db.execute(query.order_by(User.id))
    return list(result.scalars().all())


async def team_for(db: AsyncSession, user: User) -> List[User]:
    """Everyone below user in the referral tree, breadth first."""
    users = await load_users(db)
    return resolve_downline(user.id, users).users

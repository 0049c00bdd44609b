"""
Tests for staff signup, verification and team views.
"""

import pytest

from src.models import SalesmanStage, SettingsDomain, UserRole
from src.schemas.settings import SignupRoleSettings
from src.schemas.user import SignupRequest
from src.services.errors import ConflictError, PermissionDeniedError, ValidationError
from src.services.settings_store import write_settings
from src.services.users import list_users, signup_user, team_for, verify_user


def _signup(role=UserRole.SALESMAN, code=None, username="newbie", **kwargs):
    return SignupRequest(
        username=username,
        password="secret123",
        name="New Member",
        role=role,
        referral_code=code,
        **kwargs,
    )


class TestSignup:
    @pytest.mark.asyncio
    async def test_salesman_joins_under_referrer(self, db_session, make_user):
        tom = await make_user(UserRole.TEAM_OPERATION_MANAGER, referral_code="TOM001", branch="Galle")

        user = await signup_user(db_session, _signup(code="tom001"))

        assert user.referrer_id == tom.id
        assert user.is_disabled is True
        assert user.salesman_stage == SalesmanStage.BUSINESS_PROMOTER
        assert user.branch == "Galle"
        assert user.referral_code is None

    @pytest.mark.asyncio
    async def test_manager_gets_referral_code(self, db_session, make_user):
        await make_user(UserRole.GROUP_OPERATION_MANAGER, referral_code="GOM001")

        user = await signup_user(db_session, _signup(UserRole.TEAM_OPERATION_MANAGER, code="GOM001"))

        assert user.referral_code is not None
        assert len(user.referral_code) == 6

    @pytest.mark.asyncio
    async def test_referrer_required(self, db_session):
        with pytest.raises(ValidationError):
            await signup_user(db_session, _signup())

    @pytest.mark.asyncio
    async def test_regional_director_needs_no_referrer(self, db_session):
        user = await signup_user(db_session, _signup(UserRole.REGIONAL_DIRECTOR))
        assert user.referrer_id is None

    @pytest.mark.asyncio
    async def test_unknown_code(self, db_session):
        with pytest.raises(ValidationError):
            await signup_user(db_session, _signup(code="NOPE00"))

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_session, make_user):
        await make_user(UserRole.REGIONAL_DIRECTOR, username="taken")

        with pytest.raises(ConflictError):
            await signup_user(db_session, _signup(UserRole.REGIONAL_DIRECTOR, username="taken"))

    @pytest.mark.asyncio
    async def test_hidden_role_refused(self, db_session):
        await write_settings(
            db_session,
            SettingsDomain.SIGNUP_ROLES,
            SignupRoleSettings(visible_roles={UserRole.REGIONAL_DIRECTOR.value: False}),
        )

        with pytest.raises(ValidationError):
            await signup_user(db_session, _signup(UserRole.REGIONAL_DIRECTOR))


class TestVerify:
    @pytest.mark.asyncio
    async def test_hr_verifies(self, db_session, make_user):
        hr = await make_user(UserRole.HR)
        user = await signup_user(db_session, _signup(UserRole.REGIONAL_DIRECTOR))

        pending = await list_users(db_session, pending_only=True)
        assert [u.id for u in pending] == [user.id]

        await verify_user(db_session, hr, user.id)

        assert user.is_disabled is False
        assert await list_users(db_session, pending_only=True) == []
        with pytest.raises(ConflictError):
            await verify_user(db_session, hr, user.id)

    @pytest.mark.asyncio
    async def test_salesman_cannot_verify(self, db_session, make_user):
        salesman = await make_user(UserRole.SALESMAN)
        user = await signup_user(db_session, _signup(UserRole.REGIONAL_DIRECTOR))

        with pytest.raises(PermissionDeniedError):
            await verify_user(db_session, salesman, user.id)


class TestTeam:
    @pytest.mark.asyncio
    async def test_team_is_whole_downline(self, db_session, make_user):
        rd = await make_user(UserRole.REGIONAL_DIRECTOR)
        tom = await make_user(UserRole.TEAM_OPERATION_MANAGER, referrer=rd)
        salesman = await make_user(UserRole.SALESMAN, referrer=tom)
        await make_user(UserRole.SALESMAN)

        team = await team_for(db_session, rd)

        assert [u.id for u in team] == [tom.id, salesman.id]
        assert await team_for(db_session, salesman) == []

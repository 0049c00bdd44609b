"""
API tests: authentication, capability checks, error mapping and the
main sale / approval / settings flows over HTTP.
"""

from decimal import Decimal

import pytest

from src.auth.jwt import COOKIE_NAME, create_access_token
from src.models import UserRole
from src.utils.password import hash_password

from factories import balance


def auth(user):
    """Session cookie header for user, as set by /api/auth/login."""
    token = create_access_token(user.id, user.role.value)
    return {"Cookie": f"{COOKIE_NAME}={token}"}


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_sets_cookie(self, client, make_user):
        user = await make_user(UserRole.SALESMAN, username="tharindu", password_hash=hash_password("secret123"))

        response = await client.post("/api/auth/login", json={"username": "tharindu", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user_id"] == user.id
        assert response.json()["role"] == UserRole.SALESMAN.value
        assert COOKIE_NAME in response.cookies

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, make_user):
        await make_user(UserRole.SALESMAN, username="tharindu", password_hash=hash_password("secret123"))

        response = await client.post("/api/auth/login", json={"username": "tharindu", "password": "nope"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unverified_account_refused(self, client, make_user):
        await make_user(
            UserRole.SALESMAN,
            username="pending",
            password_hash=hash_password("secret123"),
            is_disabled=True,
        )

        response = await client.post("/api/auth/login", json={"username": "pending", "password": "secret123"})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_me(self, client, make_user):
        user = await make_user(UserRole.TEAM_OPERATION_MANAGER, referral_code="ABC123")

        response = await client.get("/api/auth/me", headers=auth(user))

        assert response.status_code == 200
        assert response.json()["referral_code"] == "ABC123"


class TestAccessControl:
    @pytest.mark.asyncio
    async def test_protected_prefix_needs_cookie(self, client):
        response = await client.get("/api/panel/team")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/panel/team", headers={"Cookie": f"{COOKIE_NAME}=garbage"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_capability(self, client, make_user):
        salesman = await make_user(UserRole.SALESMAN)

        response = await client.post("/api/admin/payroll/run", headers=auth(salesman))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_disabled_user_token_refused(self, client, make_user):
        user = await make_user(UserRole.SALESMAN, is_disabled=True)

        response = await client.get("/api/panel/team", headers=auth(user))

        assert response.status_code == 403


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_then_verify(self, client, make_user):
        tom = await make_user(UserRole.TEAM_OPERATION_MANAGER, referral_code="TOM001", branch="Kandy")
        hr = await make_user(UserRole.HR)

        response = await client.post(
            "/api/auth/signup",
            json={
                "username": "newbie",
                "password": "secret123",
                "name": "New Salesman",
                "role": UserRole.SALESMAN.value,
                "referral_code": "tom001",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["is_disabled"] is True
        assert body["referrer_id"] == tom.id
        assert body["branch"] == "Kandy"

        response = await client.post(f"/api/admin/users/{body['id']}/verify", headers=auth(hr))
        assert response.status_code == 200
        assert response.json()["is_disabled"] is False

        response = await client.post("/api/auth/login", json={"username": "newbie", "password": "secret123"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_referral_code(self, client):
        response = await client.post(
            "/api/auth/signup",
            json={
                "username": "newbie",
                "password": "secret123",
                "name": "New Salesman",
                "role": UserRole.SALESMAN.value,
                "referral_code": "XXXXXX",
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_signup_roles_hide_super_admin(self, client):
        response = await client.get("/api/auth/signup-roles")
        roles = response.json()["roles"]
        assert UserRole.SALESMAN.value in roles
        assert UserRole.SUPER_ADMIN.value not in roles


class TestSalesFlow:
    @pytest.mark.asyncio
    async def test_register_approve_and_read_income(self, client, db_session, make_user):
        tom = await make_user(UserRole.TEAM_OPERATION_MANAGER)
        salesman = await make_user(UserRole.SALESMAN, referrer=tom)
        admin = await make_user(UserRole.ADMIN)

        response = await client.post(
            "/api/panel/sales/tokens",
            headers=auth(salesman),
            json={"name": "Saman", "contact_info": "0771234567", "token_serial": "API-1"},
        )
        assert response.status_code == 201
        request_id = response.json()["commission_request"]["id"]

        response = await client.post(f"/api/admin/commissions/{request_id}/approve", headers=auth(admin))
        assert response.status_code == 200
        assert len(response.json()) == 3

        # Second approval maps to 409 and pays nothing more
        response = await client.post(f"/api/admin/commissions/{request_id}/approve", headers=auth(admin))
        assert response.status_code == 409
        assert await balance(db_session, salesman) == Decimal("600")

        response = await client.get("/api/panel/income", headers=auth(salesman))
        assert response.status_code == 200
        assert Decimal(response.json()["total_income"]) == Decimal("600")
        assert len(response.json()["records"]) == 1

    @pytest.mark.asyncio
    async def test_unknown_request_is_404(self, client, make_user):
        admin = await make_user(UserRole.ADMIN)

        response = await client.post("/api/admin/commissions/9999/approve", headers=auth(admin))

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_team(self, client, make_user):
        tom = await make_user(UserRole.TEAM_OPERATION_MANAGER)
        await make_user(UserRole.SALESMAN, referrer=tom)
        await make_user(UserRole.SALESMAN, referrer=tom)

        response = await client.get("/api/panel/team", headers=auth(tom))

        assert response.json()["total"] == 2


class TestSettingsApi:
    @pytest.mark.asyncio
    async def test_admin_submission_is_queued(self, client, make_user):
        admin = await make_user(UserRole.ADMIN)
        super_admin = await make_user(UserRole.SUPER_ADMIN)

        response = await client.put(
            "/api/admin/settings/commission",
            headers=auth(admin),
            json={"salesman": "750"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["applied"] is False
        request_id = body["request"]["id"]

        response = await client.get("/api/admin/settings/commission", headers=auth(admin))
        assert response.json()["pending_request_id"] == request_id
        assert Decimal(response.json()["settings"]["salesman"]) == Decimal("600")

        response = await client.post(f"/api/admin/change-requests/{request_id}/approve", headers=auth(super_admin))
        assert response.status_code == 200

        response = await client.get("/api/admin/settings/commission", headers=auth(admin))
        assert Decimal(response.json()["settings"]["salesman"]) == Decimal("750")
        assert response.json()["pending_request_id"] is None

    @pytest.mark.asyncio
    async def test_invalid_document(self, client, make_user):
        super_admin = await make_user(UserRole.SUPER_ADMIN)

        response = await client.put(
            "/api/admin/settings/commission",
            headers=auth(super_admin),
            json={"salesman": "-5"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stale_expected_version(self, client, make_user):
        super_admin = await make_user(UserRole.SUPER_ADMIN)
        await client.put("/api/admin/settings/commission", headers=auth(super_admin), json={"salesman": "700"})

        response = await client.put(
            "/api/admin/settings/commission?expected_version=1",
            headers=auth(super_admin),
            json={"salesman": "800"},
        )

        assert response.status_code == 409

"""
Tests for the role capability table.
"""

import pytest

from src.models import SalesmanStage, UserRole
from src.services.roles import (
    ADMIN_KEY,
    ROLE_CAPABILITIES,
    SALESMAN_KEY,
    capabilities_for,
    salary_key_for,
)

from factories import make_node


class TestCapabilityTable:
    def test_every_role_has_capabilities(self):
        assert set(ROLE_CAPABILITIES) == set(UserRole)

    def test_lookup_by_value(self):
        assert capabilities_for("Salesman") is capabilities_for(UserRole.SALESMAN)

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            capabilities_for("Owner")

    def test_only_super_admin_bypasses_approval(self):
        bypass = {role for role, caps in ROLE_CAPABILITIES.items() if caps.can_bypass_approval}
        assert bypass == {UserRole.SUPER_ADMIN}

    def test_change_requesters(self):
        requesters = {role for role, caps in ROLE_CAPABILITIES.items() if caps.can_request_changes}
        assert requesters == {UserRole.ADMIN, UserRole.HR}

    def test_admin_pool(self):
        pool = {role for role, caps in ROLE_CAPABILITIES.items() if caps.is_admin_pool}
        assert pool == {UserRole.ADMIN, UserRole.SUPER_ADMIN}

    def test_delivery_boy_earns_no_commission(self):
        assert not capabilities_for(UserRole.DELIVERY_BOY).commission_eligible

    def test_salesman_commission_key(self):
        assert capabilities_for(UserRole.SALESMAN).commission_key == SALESMAN_KEY
        assert ADMIN_KEY not in {
            caps.commission_key for caps in ROLE_CAPABILITIES.values()
        }

    def test_roles_without_referrer(self):
        free = {role for role, caps in ROLE_CAPABILITIES.items() if not caps.needs_referrer}
        assert free == {UserRole.REGIONAL_DIRECTOR, UserRole.ADMIN, UserRole.SUPER_ADMIN}

    def test_roles_without_referral_code(self):
        no_code = {
            role for role, caps in ROLE_CAPABILITIES.items() if not caps.issues_referral_code
        }
        assert no_code == {
            UserRole.SALESMAN,
            UserRole.DELIVERY_BOY,
            UserRole.RECOVERY_OFFICER,
            UserRole.BRANCH_ADMIN,
        }


class TestSalaryKey:
    def test_salesman_paid_by_stage(self):
        user = make_node(1, salesman_stage=SalesmanStage.MARKETING_EXECUTIVE)
        assert salary_key_for(user) == "MARKETING EXECUTIVE (stage 02)"

    def test_salesman_without_stage(self):
        user = make_node(1, salesman_stage=None)
        assert salary_key_for(user) is None

    def test_manager_paid_by_role(self):
        user = make_node(1, role=UserRole.TEAM_OPERATION_MANAGER)
        assert salary_key_for(user) == "Team Operation Manager"

    def test_shop_manager_has_no_salary_key(self):
        assert salary_key_for(make_node(1, role=UserRole.SHOP_MANAGER)) is None

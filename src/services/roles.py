"""
Role capability table.

Every per-role decision (who earns commission, who may approve what,
who needs a referrer at signup) is read from ROLE_CAPABILITIES instead
of comparing role names at the call site.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from src.models.user import SalesmanStage, UserRole

# Keys shared by token commission settings and product commission tiers
SALESMAN_KEY = "salesman"
TEAM_OPERATION_MANAGER_KEY = "team_operation_manager"
GROUP_OPERATION_MANAGER_KEY = "group_operation_manager"
HEAD_GROUP_MANAGER_KEY = "head_group_manager"
REGIONAL_DIRECTOR_KEY = "regional_director"
ADMIN_KEY = "admin"

CHAIN_COMMISSION_KEYS = (
    SALESMAN_KEY,
    TEAM_OPERATION_MANAGER_KEY,
    GROUP_OPERATION_MANAGER_KEY,
    HEAD_GROUP_MANAGER_KEY,
    REGIONAL_DIRECTOR_KEY,
)
COMMISSION_KEYS = CHAIN_COMMISSION_KEYS + (ADMIN_KEY,)


@dataclass(frozen=True)
class RoleCapabilities:
    """What a role is allowed to do and how it is paid."""

    level: int
    commission_key: Optional[str] = None
    salary_key: Optional[str] = None
    is_admin_pool: bool = False
    can_bypass_approval: bool = False
    can_request_changes: bool = False
    can_resolve_changes: bool = False
    can_approve_commissions: bool = False
    can_process_payroll: bool = False
    can_register_tokens: bool = False
    can_sell_products: bool = False
    can_manage_deliveries: bool = False
    can_manage_recovery: bool = False
    can_manage_branch: bool = False
    can_verify_users: bool = False
    needs_referrer: bool = True
    issues_referral_code: bool = True

    @property
    def commission_eligible(self) -> bool:
        return self.commission_key is not None


ROLE_CAPABILITIES: Dict[UserRole, RoleCapabilities] = {
    UserRole.SALESMAN: RoleCapabilities(
        level=1,
        commission_key=SALESMAN_KEY,
        can_register_tokens=True,
        issues_referral_code=False,
    ),
    UserRole.TEAM_OPERATION_MANAGER: RoleCapabilities(
        level=2,
        commission_key=TEAM_OPERATION_MANAGER_KEY,
        salary_key=UserRole.TEAM_OPERATION_MANAGER.value,
        can_register_tokens=True,
    ),
    UserRole.GROUP_OPERATION_MANAGER: RoleCapabilities(
        level=3,
        commission_key=GROUP_OPERATION_MANAGER_KEY,
        salary_key=UserRole.GROUP_OPERATION_MANAGER.value,
        can_register_tokens=True,
    ),
    UserRole.HEAD_GROUP_MANAGER: RoleCapabilities(
        level=4,
        commission_key=HEAD_GROUP_MANAGER_KEY,
        salary_key=UserRole.HEAD_GROUP_MANAGER.value,
        can_register_tokens=True,
    ),
    UserRole.REGIONAL_DIRECTOR: RoleCapabilities(
        level=5,
        commission_key=REGIONAL_DIRECTOR_KEY,
        salary_key=UserRole.REGIONAL_DIRECTOR.value,
        can_register_tokens=True,
        needs_referrer=False,
    ),
    UserRole.ADMIN: RoleCapabilities(
        level=6,
        is_admin_pool=True,
        can_request_changes=True,
        can_approve_commissions=True,
        can_process_payroll=True,
        can_sell_products=True,
        can_manage_deliveries=True,
        can_manage_recovery=True,
        can_manage_branch=True,
        can_verify_users=True,
        needs_referrer=False,
    ),
    UserRole.SUPER_ADMIN: RoleCapabilities(
        level=7,
        is_admin_pool=True,
        can_bypass_approval=True,
        can_resolve_changes=True,
        can_approve_commissions=True,
        can_process_payroll=True,
        can_sell_products=True,
        can_manage_deliveries=True,
        can_manage_recovery=True,
        can_manage_branch=True,
        can_verify_users=True,
        needs_referrer=False,
    ),
    UserRole.HR: RoleCapabilities(
        level=5,
        can_request_changes=True,
        can_process_payroll=True,
        can_verify_users=True,
    ),
    UserRole.BRANCH_ADMIN: RoleCapabilities(
        level=3,
        can_sell_products=True,
        can_manage_deliveries=True,
        can_manage_branch=True,
        issues_referral_code=False,
    ),
    UserRole.SHOP_MANAGER: RoleCapabilities(
        level=2,
        can_sell_products=True,
        can_manage_deliveries=True,
    ),
    UserRole.STORE_KEEPER: RoleCapabilities(level=1),
    UserRole.DELIVERY_BOY: RoleCapabilities(
        level=0,
        issues_referral_code=False,
    ),
    UserRole.RECOVERY_OFFICER: RoleCapabilities(
        level=1,
        can_manage_recovery=True,
        issues_referral_code=False,
    ),
    UserRole.RECOVERY_ADMIN: RoleCapabilities(
        level=3,
        can_manage_recovery=True,
    ),
    UserRole.CALL_CENTRE_OPERATOR: RoleCapabilities(level=1),
    UserRole.TECHNICAL_OFFICER: RoleCapabilities(level=1),
}


def capabilities_for(role: Union[UserRole, str]) -> RoleCapabilities:
    """Look up the capability record for a role (enum member or its value)."""
    return ROLE_CAPABILITIES[UserRole(role)]


def salary_key_for(user) -> Optional[str]:
    """
    Key into salary / incentive settings for a user.

    Salesmen are paid by stage; everyone else by role.
    """
    if user.role == UserRole.SALESMAN:
        return SalesmanStage(user.salesman_stage).value if user.salesman_stage else None
    return capabilities_for(user.role).salary_key

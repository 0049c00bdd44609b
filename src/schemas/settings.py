"""Settings document schemas, one per settings domain."""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from src.models.user import SalesmanStage, UserRole
from src.services.roles import COMMISSION_KEYS

Amount = Decimal


class CommissionSettings(BaseModel):
    """Flat token-sale commission per role."""

    token_price: Amount = Field(default=Decimal("2000"), ge=0)
    salesman: Amount = Field(default=Decimal("600"), ge=0)
    team_operation_manager: Amount = Field(default=Decimal("400"), ge=0)
    group_operation_manager: Amount = Field(default=Decimal("250"), ge=0)
    head_group_manager: Amount = Field(default=Decimal("150"), ge=0)
    regional_director: Amount = Field(default=Decimal("100"), ge=0)
    admin: Amount = Field(default=Decimal("400"), ge=0)

    def amount_for(self, key: str) -> Decimal:
        return getattr(self, key, Decimal("0"))


class CommissionValues(BaseModel):
    cash: Amount = Field(default=Decimal("0"), ge=0)
    installments: Amount = Field(default=Decimal("0"), ge=0)


class ProductCommissionTier(BaseModel):
    """Price range with per-role commission amounts. max_price None is unbounded."""

    id: str = Field(..., min_length=1, max_length=50)
    min_price: Amount = Field(..., ge=0)
    max_price: Optional[Amount] = Field(None, ge=0)
    commissions: Dict[str, CommissionValues] = Field(default_factory=dict)

    @field_validator("commissions")
    @classmethod
    def known_role_keys(cls, v: Dict[str, CommissionValues]) -> Dict[str, CommissionValues]:
        unknown = set(v) - set(COMMISSION_KEYS)
        if unknown:
            raise ValueError(f"Unknown commission roles: {', '.join(sorted(unknown))}")
        return v

    @model_validator(mode="after")
    def check_range(self) -> "ProductCommissionTier":
        if self.max_price is not None and self.max_price < self.min_price:
            raise ValueError(f"Tier {self.id}: max_price is below min_price")
        return self

    def contains(self, price: Decimal) -> bool:
        return self.min_price <= price and (self.max_price is None or price <= self.max_price)


def _tier(tier_id, min_price, max_price, rows):
    keys = COMMISSION_KEYS
    return ProductCommissionTier(
        id=tier_id,
        min_price=Decimal(min_price),
        max_price=Decimal(max_price) if max_price is not None else None,
        commissions={
            key: CommissionValues(cash=Decimal(cash), installments=Decimal(inst))
            for key, (cash, inst) in zip(keys, rows)
        },
    )


def default_product_tiers() -> List[ProductCommissionTier]:
    # (cash, installments) for salesman, TOM, GOM, HGM, RD, admin
    return [
        _tier("tier1", 20000, "29999.99", [(1600, 960), (1000, 600), (400, 240), (250, 150), (250, 150), (1500, 900)]),
        _tier("tier2", 30000, "49999.99", [(1920, 1280), (1200, 800), (480, 320), (300, 200), (300, 200), (1800, 1200)]),
        _tier("tier3", 50000, "74999.99", [(2560, 1600), (1600, 1000), (640, 400), (400, 250), (400, 250), (2400, 1500)]),
        _tier("tier4", 75000, "99999.99", [(3200, 2240), (2000, 1400), (800, 560), (500, 350), (500, 350), (3000, 2100)]),
        _tier("tier5", 100000, "249999.99", [(3520, 2560), (2200, 1600), (880, 640), (550, 400), (550, 400), (3300, 2400)]),
        _tier("tier6", 250000, None, [(4480, 3520), (2800, 2200), (1120, 880), (700, 550), (700, 550), (4200, 3300)]),
    ]


class ProductCommissionSettings(BaseModel):
    """Tiered product commission. Tiers are sorted and non-overlapping."""

    tiers: List[ProductCommissionTier] = Field(default_factory=default_product_tiers)

    @model_validator(mode="after")
    def check_tiers(self) -> "ProductCommissionSettings":
        for previous, tier in zip(self.tiers, self.tiers[1:]):
            if tier.min_price < previous.min_price:
                raise ValueError("Tiers must be sorted ascending by min_price")
            if previous.max_price is None:
                raise ValueError("Only the last tier may have an open max_price")
            if tier.min_price <= previous.max_price:
                raise ValueError(f"Tier {tier.id} overlaps tier {previous.id}")
        return self


def default_salaries() -> Dict[str, Decimal]:
    return {
        SalesmanStage.BUSINESS_PROMOTER.value: Decimal("21000"),
        SalesmanStage.MARKETING_EXECUTIVE.value: Decimal("30000"),
        UserRole.TEAM_OPERATION_MANAGER.value: Decimal("40000"),
        UserRole.GROUP_OPERATION_MANAGER.value: Decimal("45000"),
        UserRole.HEAD_GROUP_MANAGER.value: Decimal("55000"),
        UserRole.REGIONAL_DIRECTOR.value: Decimal("61000"),
    }


SALARY_KEYS = frozenset(default_salaries())


class SalarySettings(BaseModel):
    """Monthly base salary per role or salesman stage."""

    salaries: Dict[str, Amount] = Field(default_factory=default_salaries)

    @field_validator("salaries")
    @classmethod
    def check_salaries(cls, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        unknown = set(v) - SALARY_KEYS
        if unknown:
            raise ValueError(f"Unknown salary keys: {', '.join(sorted(unknown))}")
        if any(amount < 0 for amount in v.values()):
            raise ValueError("Salaries cannot be negative")
        return {**default_salaries(), **v}


class IncentiveTier(BaseModel):
    target: int = Field(..., ge=0)
    incentive: Amount = Field(..., ge=0)


def default_incentives() -> Dict[str, List[IncentiveTier]]:
    return {
        SalesmanStage.BUSINESS_PROMOTER.value: [IncentiveTier(target=40, incentive=Decimal("10000"))],
        SalesmanStage.MARKETING_EXECUTIVE.value: [IncentiveTier(target=60, incentive=Decimal("15000"))],
        UserRole.TEAM_OPERATION_MANAGER.value: [IncentiveTier(target=500, incentive=Decimal("25000"))],
    }


class IncentiveSettings(BaseModel):
    """Monthly sales targets per role or salesman stage, ascending by target."""

    incentives: Dict[str, List[IncentiveTier]] = Field(default_factory=default_incentives)

    @field_validator("incentives")
    @classmethod
    def check_tiers(cls, v: Dict[str, List[IncentiveTier]]) -> Dict[str, List[IncentiveTier]]:
        valid_keys = SALARY_KEYS | {role.value for role in UserRole}
        for key, tiers in v.items():
            if key not in valid_keys:
                raise ValueError(f"Unknown incentive key: {key}")
            targets = [tier.target for tier in tiers]
            if any(b <= a for a, b in zip(targets, targets[1:])):
                raise ValueError(f"Incentive tiers for {key} must have ascending targets")
        return v


HIDDEN_FROM_SIGNUP = frozenset({UserRole.SUPER_ADMIN.value})


def default_visible_roles() -> Dict[str, bool]:
    return {
        role.value: role.value not in HIDDEN_FROM_SIGNUP
        for role in UserRole
    }


class SignupRoleSettings(BaseModel):
    """Roles offered on the staff signup form."""

    visible_roles: Dict[str, bool] = Field(default_factory=default_visible_roles)

    @field_validator("visible_roles")
    @classmethod
    def merge_defaults(cls, v: Dict[str, bool]) -> Dict[str, bool]:
        unknown = set(v) - {role.value for role in UserRole}
        if unknown:
            raise ValueError(f"Unknown roles: {', '.join(sorted(unknown))}")
        if any(v.get(role) for role in HIDDEN_FROM_SIGNUP):
            raise ValueError("Super Admin cannot be offered at signup")
        return {**default_visible_roles(), **v}

    def is_visible(self, role: UserRole) -> bool:
        return self.visible_roles.get(UserRole(role).value, False)

"""
User model for authentication, hierarchy and role management.
"""

import secrets
import string
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.audit import AuditLog
    from src.models.income import IncomeRecord


class UserRole(str, Enum):
    """User roles. Behaviour per role lives in src.services.roles.ROLE_CAPABILITIES."""
    SALESMAN = "Salesman"
    TEAM_OPERATION_MANAGER = "Team Operation Manager"
    GROUP_OPERATION_MANAGER = "Group Operation Manager"
    HEAD_GROUP_MANAGER = "Head Group Manager"
    REGIONAL_DIRECTOR = "Regional Director"
    ADMIN = "Admin"
    SUPER_ADMIN = "Super Admin"
    HR = "HR"
    BRANCH_ADMIN = "Branch Admin"
    SHOP_MANAGER = "Shop Manager"
    STORE_KEEPER = "Store Keeper"
    DELIVERY_BOY = "Delivery Boy"
    RECOVERY_OFFICER = "Recovery Officer"
    RECOVERY_ADMIN = "Recovery Admin"
    CALL_CENTRE_OPERATOR = "Call Centre Operator"
    TECHNICAL_OFFICER = "Technical Officer"


class SalesmanStage(str, Enum):
    """Sub-stages of the Salesman role, used for salary and incentive keys."""
    BUSINESS_PROMOTER = "BUSINESS PROMOTER (stage 01)"
    MARKETING_EXECUTIVE = "MARKETING EXECUTIVE (stage 02)"


REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_LENGTH = 6


def generate_referral_code() -> str:
    """Generate a random 6-character referral code."""
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH)
    )


class User(Base, TimestampMixin):
    """
    Staff account.

    referrer_id points at the user who recruited / manages this user.
    Following it upwards must terminate within the hierarchy depth.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    mobile_number: Mapped[Optional[str]] = mapped_column(
        String(30),
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLAlchemyEnum(
            UserRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    salesman_stage: Mapped[Optional[SalesmanStage]] = mapped_column(
        SQLAlchemyEnum(
            SalesmanStage,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )
    referrer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    referral_code: Mapped[Optional[str]] = mapped_column(
        String(REFERRAL_CODE_LENGTH),
        unique=True,
        index=True,
        nullable=True,
    )
    assigned_manager_ids: Mapped[Optional[list]] = mapped_column(
        JSON,
        nullable=True,
        comment="Extra superiors for roles that report to several managers",
    )
    branch: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    total_income: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        default=Decimal("0"),
        server_default="0",
        nullable=False,
    )
    is_disabled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    income_records: Mapped[List["IncomeRecord"]] = relationship(
        "IncomeRecord",
        back_populates="user",
        foreign_keys="IncomeRecord.user_id",
    )
    audit_logs: Mapped[List["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="user",
    )

    @property
    def is_active(self) -> bool:
        return not self.is_disabled

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"

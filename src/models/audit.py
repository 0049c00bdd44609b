"""
AuditLog model for tracking user actions.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class AuditAction(str, Enum):
    """Types of auditable actions."""
    LOGIN = "login"
    LOGOUT = "logout"
    SIGNUP = "signup"
    VERIFY_USER = "verify_user"
    REGISTER_TOKEN = "register_token"
    RECORD_PRODUCT_SALE = "record_product_sale"
    APPROVE_COMMISSION = "approve_commission"
    REJECT_COMMISSION = "reject_commission"
    RECORD_INSTALLMENT = "record_installment"
    RECORD_ARREAR = "record_arrear"
    ASSIGN_RECOVERY = "assign_recovery"
    ASSIGN_DELIVERY = "assign_delivery"
    MARK_DELIVERED = "mark_delivered"
    UPDATE_SETTINGS = "update_settings"
    REQUEST_SETTINGS_CHANGE = "request_settings_change"
    APPROVE_SETTINGS_CHANGE = "approve_settings_change"
    REJECT_SETTINGS_CHANGE = "reject_settings_change"
    PROCESS_PAYROLL = "process_payroll"
    REVERSE_PAYROLL = "reverse_payroll"
    REQUEST_ADHOC_PAYMENT = "request_adhoc_payment"
    APPROVE_ADHOC_PAYMENT = "approve_adhoc_payment"
    REJECT_ADHOC_PAYMENT = "reject_adhoc_payment"


class AuditLog(Base):
    """
    Audit log for tracking all user actions.

    Every mutating action (sales, approvals, payroll, settings)
    is recorded here for Super Admin review.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(
            AuditAction,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of entity affected (customer, product_sale, payout, etc)",
    )
    target_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the affected entity",
    )
    action_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the action",
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
        comment="IPv4 or IPv6 address",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="audit_logs",
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, action={self.action})>"

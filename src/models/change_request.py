"""
Settings change request model, shared by every settings domain.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class RequestStatus(str, Enum):
    """Lifecycle of an approval request. approved and rejected are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SettingsDomain(str, Enum):
    """Settings documents guarded by the change request workflow."""
    COMMISSION = "commission"
    PRODUCT_COMMISSION = "product_commission"
    SALARY = "salary"
    INCENTIVE = "incentive"
    SIGNUP_ROLES = "signup_roles"


class ChangeRequest(Base):
    """
    Proposed change to a settings document.

    pending_domain equals domain while the request is pending and is NULL
    afterwards; its unique index allows one pending request per domain.
    """

    __tablename__ = "change_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    domain: Mapped[SettingsDomain] = mapped_column(
        SQLAlchemyEnum(
            SettingsDomain,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    pending_domain: Mapped[Optional[str]] = mapped_column(
        String(30),
        unique=True,
        nullable=True,
    )
    requested_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    current_settings: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        comment="Live settings at submit time",
    )
    new_settings: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
    )
    base_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Settings version the proposal was made against",
    )
    status: Mapped[RequestStatus] = mapped_column(
        SQLAlchemyEnum(
            RequestStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=RequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    resolved_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    resolved_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    requested_by: Mapped["User"] = relationship("User", foreign_keys=[requested_by_id])
    resolved_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[resolved_by_id])

    def __repr__(self) -> str:
        return f"<ChangeRequest(id={self.id}, domain={self.domain}, status={self.status})>"

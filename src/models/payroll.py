"""
Payroll models: monthly salary payout batches and ad-hoc payments.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base
from src.models.change_request import RequestStatus


class MonthlySalaryPayout(Base):
    """
    One salary run.

    active_period holds the "YYYY-MM" period while the batch stands and is
    cleared on reversal, so the unique index allows a single live batch per
    calendar month.
    """

    __tablename__ = "monthly_salary_payouts"

    id: Mapped[int] = mapped_column(primary_key=True)
    period: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    active_period: Mapped[Optional[str]] = mapped_column(
        String(7),
        unique=True,
        nullable=True,
    )
    payout_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    processed_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    total_users_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount_paid: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    is_reversed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    reversed_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    reversal_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlySalaryPayout(id={self.id}, period='{self.period}', "
            f"reversed={self.is_reversed})>"
        )


class AdhocPayment(Base):
    """One-off payment to a user, released only after Super Admin approval."""

    __tablename__ = "adhoc_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    requested_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
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

    def __repr__(self) -> str:
        return f"<AdhocPayment(id={self.id}, user_id={self.user_id}, status={self.status})>"

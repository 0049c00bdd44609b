"""
Income ledger model.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class IncomeSource(str, Enum):
    """What produced an income record."""
    TOKEN_SALE = "token_sale"
    PRODUCT_SALE = "product_sale"
    SALARY = "salary"
    INCENTIVE = "incentive"
    ADHOC = "adhoc"


class IncomeRecord(Base):
    """
    Immutable ledger entry crediting one user.

    Rows are never updated. A salary payout reversal deletes the rows of
    its batch and debits the same amounts from each user's total_income.
    """

    __tablename__ = "income_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    source_type: Mapped[IncomeSource] = mapped_column(
        SQLAlchemyEnum(
            IncomeSource,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    granted_for_role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Role (or salesman stage) the amount was granted for",
    )
    sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Origin references
    salesman_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        comment="Salesman behind the sale, or the user itself for payroll",
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customers.id"),
        nullable=True,
    )
    commission_request_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("commission_requests.id"),
        nullable=True,
    )
    product_sale_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("product_sales.id"),
        nullable=True,
        index=True,
    )
    installment_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    payout_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("monthly_salary_payouts.id"),
        nullable=True,
        index=True,
    )
    adhoc_payment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("adhoc_payments.id"),
        nullable=True,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="income_records",
        foreign_keys=[user_id],
    )

    def __repr__(self) -> str:
        return (
            f"<IncomeRecord(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, source={self.source_type})>"
        )

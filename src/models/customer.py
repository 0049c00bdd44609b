"""
Customer and token commission request models.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, BaseModel

if TYPE_CHECKING:
    from src.models.user import User


class CommissionStatus(str, Enum):
    """Approval status of a commission payout for a sale."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    CASH = "cash"
    INSTALLMENTS = "installments"


class Customer(BaseModel):
    """
    Customer holding a token (reservation) registered by a salesman.

    The token is consumed by the first product sale against it.
    """

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    nic: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    contact_info: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    token_serial: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    token_is_available: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    salesman_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    branch: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLAlchemyEnum(
            PaymentMethod,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=PaymentMethod.CASH,
        nullable=False,
    )
    sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    commission_status: Mapped[CommissionStatus] = mapped_column(
        SQLAlchemyEnum(
            CommissionStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CommissionStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Purchase details, filled in when the token is consumed
    purchasing_item: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    total_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    discount_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    down_payment: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    installments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    monthly_installment: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Relationships
    salesman: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, token='{self.token_serial}', status={self.commission_status})>"


class CommissionRequest(Base):
    """
    Queue entry asking an admin to release the token-sale commission
    for one customer.
    """

    __tablename__ = "commission_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
        index=True,
    )
    salesman_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    token_serial: Mapped[str] = mapped_column(String(50), nullable=False)
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    status: Mapped[CommissionStatus] = mapped_column(
        SQLAlchemyEnum(
            CommissionStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CommissionStatus.PENDING,
        nullable=False,
        index=True,
    )
    approver_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    processed_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    customer: Mapped["Customer"] = relationship("Customer")
    salesman: Mapped["User"] = relationship("User", foreign_keys=[salesman_id])

    def __repr__(self) -> str:
        return f"<CommissionRequest(id={self.id}, customer_id={self.customer_id}, status={self.status})>"

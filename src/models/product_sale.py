"""
Product sale model with delivery and installment recovery tracking.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import BaseModel
from src.models.customer import CommissionStatus, PaymentMethod

if TYPE_CHECKING:
    from src.models.customer import Customer
    from src.models.user import User


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    DELIVERED = "delivered"


class RecoveryStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class ProductSale(BaseModel):
    """
    A product sold against a customer's token.

    Cash sales pay commission at sale time. Installment sales pay a share
    of the installment commission every time an installment is recovered.
    """

    __tablename__ = "product_sales"

    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
        index=True,
    )
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    product_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLAlchemyEnum(
            PaymentMethod,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    shop_manager_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    commission_status: Mapped[CommissionStatus] = mapped_column(
        SQLAlchemyEnum(
            CommissionStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CommissionStatus.PENDING,
        nullable=False,
    )

    # Installment plan
    installments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    monthly_installment: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    paid_installments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    arrears: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
        comment="Number of missed installment payments",
    )

    # Delivery
    delivery_status: Mapped[DeliveryStatus] = mapped_column(
        SQLAlchemyEnum(
            DeliveryStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=DeliveryStatus.PENDING,
        nullable=False,
    )
    assigned_to_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Recovery
    recovery_status: Mapped[Optional[RecoveryStatus]] = mapped_column(
        SQLAlchemyEnum(
            RecoveryStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )
    recovery_officer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )

    # Relationships
    customer: Mapped["Customer"] = relationship("Customer")
    shop_manager: Mapped["User"] = relationship("User", foreign_keys=[shop_manager_id])

    @property
    def remaining_installments(self) -> int:
        if self.payment_method != PaymentMethod.INSTALLMENTS or not self.installments:
            return 0
        return self.installments - (self.paid_installments or 0)

    def __repr__(self) -> str:
        return f"<ProductSale(id={self.id}, product='{self.product_name}', price={self.price})>"

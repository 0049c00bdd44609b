"""Token and product sale schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.customer import CommissionStatus, PaymentMethod
from src.models.product_sale import DeliveryStatus, RecoveryStatus


class TokenRegistration(BaseModel):
    """Customer registered by a salesman against a new token."""

    name: str = Field(..., min_length=1, max_length=150)
    nic: Optional[str] = Field(None, max_length=20)
    contact_info: str = Field(..., min_length=7, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    token_serial: str = Field(..., min_length=1, max_length=50)
    payment_method: PaymentMethod = PaymentMethod.CASH
    down_payment: Optional[Decimal] = Field(None, ge=0)


class ProductSaleCreate(BaseModel):
    """Product sold against an available customer token."""

    token_serial: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1, max_length=200)
    product_code: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: PaymentMethod
    discount_value: Optional[Decimal] = Field(None, ge=0)
    down_payment: Optional[Decimal] = Field(None, ge=0)
    installments: Optional[int] = Field(None, ge=1, le=120)
    monthly_installment: Optional[Decimal] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_plan(self) -> "ProductSaleCreate":
        if self.payment_method == PaymentMethod.INSTALLMENTS:
            if not self.installments:
                raise ValueError("Installment sales need the number of installments")
        else:
            self.installments = None
            self.monthly_installment = None
        return self


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    token_serial: str
    token_is_available: bool
    salesman_id: int
    branch: Optional[str] = None
    payment_method: PaymentMethod
    sale_date: datetime
    commission_status: CommissionStatus


class CommissionRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    salesman_id: int
    token_serial: str
    request_date: datetime
    status: CommissionStatus
    approver_id: Optional[int] = None
    processed_date: Optional[datetime] = None


class ProductSaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    product_name: str
    product_code: Optional[str] = None
    price: Decimal
    payment_method: PaymentMethod
    sale_date: datetime
    commission_status: CommissionStatus
    installments: Optional[int] = None
    monthly_installment: Optional[Decimal] = None
    paid_installments: Optional[int] = None
    arrears: int = 0
    delivery_status: DeliveryStatus
    assigned_to_id: Optional[int] = None
    recovery_status: Optional[RecoveryStatus] = None
    recovery_officer_id: Optional[int] = None


class AssignRequest(BaseModel):
    """Assign a delivery boy or recovery officer to a sale."""

    user_id: int = Field(..., gt=0)

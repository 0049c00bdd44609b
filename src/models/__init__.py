"""
Database models for Salesdesk.

All models are exported here for convenient imports:
    from src.models import User, Customer, IncomeRecord, etc.
"""

from src.models.audit import AuditAction, AuditLog
from src.models.base import Base, BaseModel, TimestampMixin
from src.models.change_request import ChangeRequest, RequestStatus, SettingsDomain
from src.models.customer import CommissionRequest, CommissionStatus, Customer, PaymentMethod
from src.models.income import IncomeRecord, IncomeSource
from src.models.payroll import AdhocPayment, MonthlySalaryPayout
from src.models.product_sale import DeliveryStatus, ProductSale, RecoveryStatus
from src.models.settings import SystemSetting
from src.models.user import SalesmanStage, User, UserRole

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # User
    "User",
    "UserRole",
    "SalesmanStage",
    # Sales
    "Customer",
    "CommissionRequest",
    "CommissionStatus",
    "PaymentMethod",
    "ProductSale",
    "DeliveryStatus",
    "RecoveryStatus",
    # Ledger
    "IncomeRecord",
    "IncomeSource",
    # Payroll
    "MonthlySalaryPayout",
    "AdhocPayment",
    # Settings
    "SystemSetting",
    "ChangeRequest",
    "RequestStatus",
    "SettingsDomain",
    # Audit
    "AuditLog",
    "AuditAction",
]

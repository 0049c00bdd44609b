"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    "userrole": (
        "Salesman",
        "Team Operation Manager",
        "Group Operation Manager",
        "Head Group Manager",
        "Regional Director",
        "Admin",
        "Super Admin",
        "HR",
        "Branch Admin",
        "Shop Manager",
        "Store Keeper",
        "Delivery Boy",
        "Recovery Officer",
        "Recovery Admin",
        "Call Centre Operator",
        "Technical Officer",
    ),
    "salesmanstage": ("BUSINESS PROMOTER (stage 01)", "MARKETING EXECUTIVE (stage 02)"),
    "paymentmethod": ("cash", "installments"),
    "commissionstatus": ("pending", "approved", "rejected"),
    "deliverystatus": ("pending", "assigned", "delivered"),
    "recoverystatus": ("pending", "assigned", "completed"),
    "incomesource": ("token_sale", "product_sale", "salary", "incentive", "adhoc"),
    "requeststatus": ("pending", "approved", "rejected"),
    "settingsdomain": ("commission", "product_commission", "salary", "incentive", "signup_roles"),
    "auditaction": (
        "login",
        "logout",
        "signup",
        "verify_user",
        "register_token",
        "record_product_sale",
        "approve_commission",
        "reject_commission",
        "record_installment",
        "record_arrear",
        "assign_recovery",
        "assign_delivery",
        "mark_delivered",
        "update_settings",
        "request_settings_change",
        "approve_settings_change",
        "reject_settings_change",
        "process_payroll",
        "reverse_payroll",
        "request_adhoc_payment",
        "approve_adhoc_payment",
        "reject_adhoc_payment",
    ),
}


def _enum(name: str):
    # Types are created once up front; several tables share them
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""
    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(bind, checkfirst=True)

    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("mobile_number", sa.String(30), nullable=True),
        sa.Column("role", _enum("userrole"), nullable=False),
        sa.Column("salesman_stage", _enum("salesmanstage"), nullable=True),
        sa.Column("referrer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("referral_code", sa.String(6), nullable=True),
        sa.Column("assigned_manager_ids", sa.JSON(), nullable=True),
        sa.Column("branch", sa.String(100), nullable=True),
        sa.Column("total_income", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("is_disabled", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_referral_code", "users", ["referral_code"], unique=True)
    op.create_index("ix_users_referrer_id", "users", ["referrer_id"])
    op.create_index("ix_users_role", "users", ["role"])

    # Settings documents
    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
    )

    # Customers (tokens)
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("nic", sa.String(20), nullable=True),
        sa.Column("contact_info", sa.String(50), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("token_serial", sa.String(50), nullable=False),
        sa.Column("token_is_available", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("salesman_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("branch", sa.String(100), nullable=True),
        sa.Column("payment_method", _enum("paymentmethod"), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("commission_status", _enum("commissionstatus"), nullable=False),
        sa.Column("purchasing_item", sa.String(200), nullable=True),
        sa.Column("total_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("down_payment", sa.Numeric(12, 2), nullable=True),
        sa.Column("installments", sa.Integer(), nullable=True),
        sa.Column("monthly_installment", sa.Numeric(12, 2), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_token_serial", "customers", ["token_serial"], unique=True)
    op.create_index("ix_customers_salesman_id", "customers", ["salesman_id"])
    op.create_index("ix_customers_sale_date", "customers", ["sale_date"])
    op.create_index("ix_customers_commission_status", "customers", ["commission_status"])

    # Token commission approval queue
    op.create_table(
        "commission_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("salesman_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token_serial", sa.String(50), nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("status", _enum("commissionstatus"), nullable=False),
        sa.Column("approver_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("processed_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_commission_requests_customer_id", "commission_requests", ["customer_id"])
    op.create_index("ix_commission_requests_salesman_id", "commission_requests", ["salesman_id"])
    op.create_index("ix_commission_requests_status", "commission_requests", ["status"])

    # Product sales
    op.create_table(
        "product_sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("product_name", sa.String(200), nullable=False),
        sa.Column("product_code", sa.String(50), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", _enum("paymentmethod"), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("shop_manager_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("commission_status", _enum("commissionstatus"), nullable=False),
        sa.Column("installments", sa.Integer(), nullable=True),
        sa.Column("monthly_installment", sa.Numeric(12, 2), nullable=True),
        sa.Column("paid_installments", sa.Integer(), nullable=True),
        sa.Column("arrears", sa.Integer(), server_default="0", nullable=False),
        sa.Column("delivery_status", _enum("deliverystatus"), nullable=False),
        sa.Column("assigned_to_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recovery_status", _enum("recoverystatus"), nullable=True),
        sa.Column("recovery_officer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_product_sales_customer_id", "product_sales", ["customer_id"])

    # Payroll batches
    op.create_table(
        "monthly_salary_payouts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("active_period", sa.String(7), nullable=True, unique=True),
        sa.Column("payout_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("processed_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("total_users_paid", sa.Integer(), nullable=False),
        sa.Column("total_amount_paid", sa.Numeric(14, 2), nullable=False),
        sa.Column("is_reversed", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("reversed_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reversal_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_monthly_salary_payouts_period", "monthly_salary_payouts", ["period"])

    op.create_table(
        "adhoc_payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("requested_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("status", _enum("requeststatus"), nullable=False),
        sa.Column("resolved_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("resolved_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_adhoc_payments_user_id", "adhoc_payments", ["user_id"])
    op.create_index("ix_adhoc_payments_status", "adhoc_payments", ["status"])

    # Income ledger
    op.create_table(
        "income_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("source_type", _enum("incomesource"), nullable=False),
        sa.Column("granted_for_role", sa.String(50), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("salesman_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("commission_request_id", sa.Integer(), sa.ForeignKey("commission_requests.id"), nullable=True),
        sa.Column("product_sale_id", sa.Integer(), sa.ForeignKey("product_sales.id"), nullable=True),
        sa.Column("installment_number", sa.Integer(), nullable=True),
        sa.Column("payout_id", sa.Integer(), sa.ForeignKey("monthly_salary_payouts.id"), nullable=True),
        sa.Column("adhoc_payment_id", sa.Integer(), sa.ForeignKey("adhoc_payments.id"), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_income_records_user_id", "income_records", ["user_id"])
    op.create_index("ix_income_records_source_type", "income_records", ["source_type"])
    op.create_index("ix_income_records_sale_date", "income_records", ["sale_date"])
    op.create_index("ix_income_records_product_sale_id", "income_records", ["product_sale_id"])
    op.create_index("ix_income_records_payout_id", "income_records", ["payout_id"])

    # Settings change requests
    op.create_table(
        "change_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("domain", _enum("settingsdomain"), nullable=False),
        sa.Column("pending_domain", sa.String(30), nullable=True, unique=True),
        sa.Column("requested_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("current_settings", sa.JSON(), nullable=False),
        sa.Column("new_settings", sa.JSON(), nullable=False),
        sa.Column("base_version", sa.Integer(), nullable=False),
        sa.Column("status", _enum("requeststatus"), nullable=False),
        sa.Column("resolved_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("resolved_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_change_requests_domain", "change_requests", ["domain"])
    op.create_index("ix_change_requests_status", "change_requests", ["status"])

    # Audit trail
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("action", _enum("auditaction"), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables and enum types."""
    for table in (
        "audit_logs",
        "change_requests",
        "income_records",
        "adhoc_payments",
        "monthly_salary_payouts",
        "product_sales",
        "commission_requests",
        "customers",
        "system_settings",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).drop(bind, checkfirst=True)

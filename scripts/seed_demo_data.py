"""
Seed a demo sales hierarchy for Salesdesk.

Usage:
    python scripts/seed_demo_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_demo_data.py

This script creates (if missing):
- A Regional Director -> Head Group Manager -> Group Operation Manager
  -> Team Operation Manager -> Salesman chain, plus an Admin, HR,
  Shop Manager, Delivery Boy and Recovery Officer
- A few registered tokens, one approved token commission, one cash
  product sale and one installment product sale

All demo users share the password "demo123".
"""

import asyncio
import logging
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from src.db import get_db_context
from src.main import bootstrap
from src.models import Customer, PaymentMethod, SalesmanStage, User, UserRole
from src.models.user import generate_referral_code
from src.schemas.sales import ProductSaleCreate, TokenRegistration
from src.services.sales import (
    approve_token_commission,
    record_product_sale,
    register_token_sale,
)
from src.utils.password import hash_password

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("seed")

DEMO_PASSWORD = "demo123"

# (username, name, role, referrer username)
DEMO_CHAIN = [
    ("demo_rd", "Nimal Perera", UserRole.REGIONAL_DIRECTOR, None),
    ("demo_hgm", "Kamala Silva", UserRole.HEAD_GROUP_MANAGER, "demo_rd"),
    ("demo_gom", "Ruwan Fernando", UserRole.GROUP_OPERATION_MANAGER, "demo_hgm"),
    ("demo_tom", "Sanduni Jayasinghe", UserRole.TEAM_OPERATION_MANAGER, "demo_gom"),
    ("demo_salesman", "Tharindu Bandara", UserRole.SALESMAN, "demo_tom"),
    ("demo_admin", "Dilani Wickrama", UserRole.ADMIN, None),
    ("demo_hr", "Asanka Herath", UserRole.HR, None),
    ("demo_shop", "Chamara Dias", UserRole.SHOP_MANAGER, "demo_rd"),
    ("demo_delivery", "Pradeep Kumara", UserRole.DELIVERY_BOY, "demo_shop"),
    ("demo_recovery", "Lakmal Rathnayake", UserRole.RECOVERY_OFFICER, "demo_rd"),
]

DEMO_TOKENS = [
    ("DEMO-0001", "Saman Gunawardena", "0771234567"),
    ("DEMO-0002", "Iresha Mendis", "0712345678"),
    ("DEMO-0003", "Mahesh Karunaratne", "0759876543"),
]


async def get_or_create_user(db, username, name, role, referrer) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        username=username,
        password_hash=hash_password(DEMO_PASSWORD),
        name=name,
        role=role,
        salesman_stage=SalesmanStage.BUSINESS_PROMOTER if role == UserRole.SALESMAN else None,
        referrer_id=referrer.id if referrer else None,
        referral_code=generate_referral_code(),
        branch="Colombo",
        is_disabled=False,
    )
    db.add(user)
    await db.flush()
    logger.info(f"Created {role.value}: {username}")
    return user


async def seed() -> None:
    async with get_db_context() as db:
        await bootstrap(db)

        users = {}
        for username, name, role, referrer_name in DEMO_CHAIN:
            users[username] = await get_or_create_user(
                db, username, name, role, users.get(referrer_name)
            )

        salesman = users["demo_salesman"]
        existing = await db.execute(select(Customer).where(Customer.token_serial == DEMO_TOKENS[0][0]))
        if existing.scalar_one_or_none():
            logger.info("Demo sales already present, skipping")
            return

        requests = []
        for serial, customer_name, contact in DEMO_TOKENS:
            _, request = await register_token_sale(
                db,
                salesman,
                TokenRegistration(name=customer_name, contact_info=contact, token_serial=serial),
            )
            requests.append(request)

        records = await approve_token_commission(db, users["demo_admin"], requests[0].id)
        logger.info(f"Approved token commission: {len(records)} income records")

        shop = users["demo_shop"]
        _, cash_records = await record_product_sale(
            db,
            shop,
            ProductSaleCreate(
                token_serial="DEMO-0002",
                product_name="Refrigerator 320L",
                price=Decimal("150000"),
                payment_method=PaymentMethod.CASH,
            ),
        )
        logger.info(f"Cash sale paid {len(cash_records)} commissions")

        await record_product_sale(
            db,
            shop,
            ProductSaleCreate(
                token_serial="DEMO-0003",
                product_name="Smart TV 55in",
                price=Decimal("60000"),
                payment_method=PaymentMethod.INSTALLMENTS,
                installments=12,
                monthly_installment=Decimal("5000"),
            ),
        )
        logger.info("Installment sale recorded")

    logger.info("Demo data seeded")


if __name__ == "__main__":
    asyncio.run(seed())

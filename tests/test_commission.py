"""
Tests for commission calculation and distribution.

Covers:
- select_tier boundaries and gaps
- token / product amounts per role and payment method
- distribute_commission: chain order, skipped zero amounts, admin pool,
  per-installment shares
"""

from decimal import Decimal

import pytest

from src.models import IncomeSource, PaymentMethod, UserRole
from src.schemas.settings import (
    CommissionSettings,
    CommissionValues,
    ProductCommissionSettings,
    ProductCommissionTier,
)
from src.services.commission import (
    ProductSaleEvent,
    TokenSale,
    distribute_commission,
    per_installment,
    product_commission_amount,
    select_tier,
    token_commission_amount,
    total_amount,
)
from src.services.errors import IntegrityWarning

from factories import make_node


def _chain():
    rd = make_node(1, UserRole.REGIONAL_DIRECTOR)
    tom = make_node(2, UserRole.TEAM_OPERATION_MANAGER, referrer_id=1)
    salesman = make_node(3, referrer_id=2)
    admin = make_node(4, UserRole.ADMIN)
    return [rd, tom, salesman, admin]


def _tiers():
    return ProductCommissionSettings(
        tiers=[
            ProductCommissionTier(
                id="low",
                min_price=Decimal("10000"),
                max_price=Decimal("99999.99"),
                commissions={"salesman": CommissionValues(cash=Decimal("1000"), installments=Decimal("600"))},
            ),
            ProductCommissionTier(
                id="mid",
                min_price=Decimal("100000"),
                max_price=Decimal("199999.99"),
                commissions={
                    "salesman": CommissionValues(cash=Decimal("2000"), installments=Decimal("1200")),
                    "team_operation_manager": CommissionValues(cash=Decimal("500"), installments=Decimal("300")),
                    "admin": CommissionValues(cash=Decimal("100"), installments=Decimal("0")),
                },
            ),
            ProductCommissionTier(id="high", min_price=Decimal("300000"), max_price=None),
        ]
    )


# ── select_tier ───────────────────────────────────────────


class TestSelectTier:
    def test_inside_range(self):
        assert select_tier(_tiers().tiers, Decimal("150000")).id == "mid"

    def test_bounds_inclusive(self):
        tiers = _tiers().tiers
        assert select_tier(tiers, Decimal("100000")).id == "mid"
        assert select_tier(tiers, Decimal("199999.99")).id == "mid"

    def test_gap_returns_none(self):
        assert select_tier(_tiers().tiers, Decimal("250000")) is None

    def test_below_first_tier(self):
        assert select_tier(_tiers().tiers, Decimal("500")) is None

    def test_open_ended_last_tier(self):
        assert select_tier(_tiers().tiers, Decimal("9000000")).id == "high"

    def test_default_tiers_cover_150000(self):
        tier = select_tier(ProductCommissionSettings().tiers, Decimal("150000"))
        assert tier.id == "tier5"

    def test_default_tiers_have_no_gap_between_cents(self):
        tiers = ProductCommissionSettings().tiers
        assert select_tier(tiers, Decimal("29999.50")).id == "tier1"
        assert select_tier(tiers, Decimal("29999.99")).id == "tier1"
        assert select_tier(tiers, Decimal("30000.00")).id == "tier2"
        assert select_tier(tiers, Decimal("249999.99")).id == "tier5"


# ── amounts ───────────────────────────────────────────────


class TestAmounts:
    def test_token_amount(self):
        settings = CommissionSettings()
        assert token_commission_amount(settings, "salesman") == Decimal("600")
        assert token_commission_amount(settings, None) == Decimal("0")

    def test_product_amount_by_payment_method(self):
        tier = select_tier(_tiers().tiers, Decimal("150000"))
        assert product_commission_amount(tier, "salesman", PaymentMethod.CASH) == Decimal("2000")
        assert product_commission_amount(tier, "salesman", PaymentMethod.INSTALLMENTS) == Decimal("1200")

    def test_unconfigured_role_is_zero(self):
        tier = select_tier(_tiers().tiers, Decimal("150000"))
        assert product_commission_amount(tier, "regional_director", PaymentMethod.CASH) == Decimal("0")

    def test_per_installment_truncates_to_cents(self):
        assert per_installment(Decimal("1000"), 3) == Decimal("333.33")
        assert per_installment(Decimal("0.05"), 2) == Decimal("0.02")

    def test_final_installment_carries_the_remainder(self):
        assert per_installment(Decimal("1000"), 3, 3) == Decimal("333.34")
        shares = [per_installment(Decimal("1000"), 3, n) for n in range(1, 4)]
        assert sum(shares) == Decimal("1000")

    def test_small_amount_over_many_installments(self):
        shares = [per_installment(Decimal("0.05"), 7, n) for n in range(1, 8)]
        assert all(share >= 0 for share in shares)
        assert sum(shares) == Decimal("0.05")


# ── distribute_commission ─────────────────────────────────


class TestDistributeToken:
    def test_chain_and_admin_pool(self):
        users = _chain()
        settings = CommissionSettings(
            salesman=Decimal("500"),
            team_operation_manager=Decimal("300"),
            regional_director=Decimal("200"),
            admin=Decimal("50"),
        )
        records = distribute_commission(TokenSale(customer_id=9, commission_request_id=7), users[2], users, settings)

        assert [(r.user_id, r.amount) for r in records] == [
            (3, Decimal("500")),
            (2, Decimal("300")),
            (1, Decimal("200")),
            (4, Decimal("50")),
        ]
        assert all(r.source_type == IncomeSource.TOKEN_SALE for r in records)
        assert all(r.commission_request_id == 7 and r.customer_id == 9 for r in records)
        assert all(r.salesman_id == 3 for r in records)
        assert records[1].granted_for_role == UserRole.TEAM_OPERATION_MANAGER.value

    def test_zero_amounts_skipped(self):
        users = _chain()
        settings = CommissionSettings(
            salesman=Decimal("500"),
            team_operation_manager=Decimal("0"),
            regional_director=Decimal("200"),
            admin=Decimal("0"),
        )
        records = distribute_commission(TokenSale(customer_id=9), users[2], users, settings)
        assert [r.user_id for r in records] == [3, 1]
        assert total_amount(records) == Decimal("700")

    def test_disabled_admin_not_paid(self):
        users = _chain()
        users[3].is_disabled = True
        records = distribute_commission(TokenSale(customer_id=9), users[2], users, CommissionSettings())
        assert 4 not in {r.user_id for r in records}


class TestDistributeProduct:
    def test_cash_sale(self):
        users = _chain()
        sale = ProductSaleEvent(
            product_sale_id=5,
            customer_id=9,
            price=Decimal("150000"),
            payment_method=PaymentMethod.CASH,
        )
        records = distribute_commission(sale, users[2], users, _tiers())

        assert [(r.user_id, r.amount) for r in records] == [
            (3, Decimal("2000")),
            (2, Decimal("500")),
            (4, Decimal("100")),
        ]
        assert all(r.source_type == IncomeSource.PRODUCT_SALE for r in records)
        assert all(r.product_sale_id == 5 and r.installment_number is None for r in records)

    def test_installment_share(self):
        users = _chain()
        sale = ProductSaleEvent(
            product_sale_id=5,
            customer_id=9,
            price=Decimal("150000"),
            payment_method=PaymentMethod.INSTALLMENTS,
            installments=12,
            installment_number=3,
        )
        records = distribute_commission(sale, users[2], users, _tiers())

        assert [(r.user_id, r.amount) for r in records] == [
            (3, Decimal("100.00")),
            (2, Decimal("25.00")),
        ]
        assert all(r.installment_number == 3 for r in records)

    def test_no_tier_distributes_nothing(self):
        users = _chain()
        sale = ProductSaleEvent(
            product_sale_id=5,
            customer_id=9,
            price=Decimal("250000"),
            payment_method=PaymentMethod.CASH,
        )
        with pytest.warns(IntegrityWarning):
            records = distribute_commission(sale, users[2], users, _tiers())
        assert records == []

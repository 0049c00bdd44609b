"""
Tests for monthly incentive evaluation and period sales counting.
"""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from src.models import CommissionStatus, UserRole
from src.schemas.settings import IncentiveTier
from src.services.incentive import count_period_sales, evaluate_incentive

from factories import make_node

START = datetime(2026, 3, 1, tzinfo=timezone.utc)
END = datetime(2026, 4, 1, tzinfo=timezone.utc)


def _tiers():
    return [
        IncentiveTier(target=10, incentive=Decimal("1000")),
        IncentiveTier(target=20, incentive=Decimal("2500")),
        IncentiveTier(target=40, incentive=Decimal("6000")),
    ]


def _customer(salesman_id, day=10, status=CommissionStatus.APPROVED, month=3):
    return SimpleNamespace(
        salesman_id=salesman_id,
        commission_status=status,
        sale_date=datetime(2026, month, day, 12, 0, tzinfo=timezone.utc),
    )


class TestEvaluateIncentive:
    def test_below_every_target(self):
        assert evaluate_incentive(_tiers(), 9) is None

    def test_exact_target(self):
        assert evaluate_incentive(_tiers(), 20).incentive == Decimal("2500")

    def test_highest_achieved_wins(self):
        assert evaluate_incentive(_tiers(), 55).incentive == Decimal("6000")

    def test_empty_tiers(self):
        assert evaluate_incentive([], 100) is None

    def test_duplicate_target_later_wins(self):
        tiers = [
            IncentiveTier(target=5, incentive=Decimal("100")),
            IncentiveTier(target=5, incentive=Decimal("200")),
        ]
        assert evaluate_incentive(tiers, 5).incentive == Decimal("200")


class TestCountPeriodSales:
    def setup_method(self):
        self.tom = make_node(1, UserRole.TEAM_OPERATION_MANAGER)
        self.s1 = make_node(2, referrer_id=1)
        self.s2 = make_node(3, referrer_id=1)
        self.outsider = make_node(4)
        self.users = [self.tom, self.s1, self.s2, self.outsider]

    def test_salesman_counts_own_sales(self):
        customers = [_customer(2), _customer(2), _customer(3)]
        assert count_period_sales(self.s1, self.users, customers, START, END) == 2

    def test_manager_counts_downline(self):
        customers = [_customer(2), _customer(3), _customer(4)]
        assert count_period_sales(self.tom, self.users, customers, START, END) == 2

    def test_only_approved(self):
        customers = [
            _customer(2),
            _customer(2, status=CommissionStatus.PENDING),
            _customer(2, status=CommissionStatus.REJECTED),
        ]
        assert count_period_sales(self.s1, self.users, customers, START, END) == 1

    def test_period_is_half_open(self):
        customers = [
            _customer(2, day=1),
            _customer(2, day=1, month=4),
            _customer(2, day=28, month=2),
        ]
        assert count_period_sales(self.s1, self.users, customers, START, END) == 1

    def test_naive_dates_treated_as_utc(self):
        customer = _customer(2)
        customer.sale_date = customer.sale_date.replace(tzinfo=None)
        assert count_period_sales(self.s1, self.users, [customer], START, END) == 1

"""
Tests for monthly payroll, payout reversal and ad-hoc payments.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from src.models import IncomeSource, RequestStatus, SalesmanStage, SettingsDomain, UserRole
from src.schemas.sales import TokenRegistration
from src.schemas.settings import IncentiveSettings, IncentiveTier
from src.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.services.payroll import (
    approve_adhoc_payment,
    current_period,
    list_adhoc_payments,
    list_payouts,
    period_bounds,
    process_salaries,
    records_for_payout,
    reject_adhoc_payment,
    request_adhoc_payment,
    reverse_salary_payout,
)
from src.services.sales import approve_token_commission, register_token_sale
from src.services.settings_store import write_settings

from factories import balance


@pytest_asyncio.fixture
async def team(make_user):
    tom = await make_user(UserRole.TEAM_OPERATION_MANAGER)
    return {
        "tom": tom,
        "salesman": await make_user(UserRole.SALESMAN, referrer=tom),
        "hr": await make_user(UserRole.HR),
        "admin": await make_user(UserRole.ADMIN),
        "super_admin": await make_user(UserRole.SUPER_ADMIN),
    }


class TestPeriods:
    def test_bounds(self):
        start, end = period_bounds("2026-03")
        assert (start.year, start.month, start.day) == (2026, 3, 1)
        assert (end.year, end.month) == (2026, 4)

    def test_december_rolls_over(self):
        _, end = period_bounds("2026-12")
        assert (end.year, end.month) == (2027, 1)

    @pytest.mark.parametrize("period", ["2026-13", "2026-1", "March", ""])
    def test_invalid(self, period):
        with pytest.raises(ValidationError):
            period_bounds(period)


class TestProcessSalaries:
    @pytest.mark.asyncio
    async def test_pays_base_salaries(self, db_session, team):
        result = await process_salaries(db_session, team["hr"])

        assert result.users_paid == 2
        assert result.total_amount == Decimal("61000")
        assert await balance(db_session, team["tom"]) == Decimal("40000")
        assert await balance(db_session, team["salesman"]) == Decimal("21000")
        assert await balance(db_session, team["admin"]) == Decimal("0")

        records = await records_for_payout(db_session, result.payout_id)
        assert {r.source_type for r in records} == {IncomeSource.SALARY}

    @pytest.mark.asyncio
    async def test_incentive_for_reached_target(self, db_session, team):
        await write_settings(
            db_session,
            SettingsDomain.INCENTIVE,
            IncentiveSettings(
                incentives={
                    SalesmanStage.BUSINESS_PROMOTER.value: [
                        IncentiveTier(target=1, incentive=Decimal("1000")),
                        IncentiveTier(target=2, incentive=Decimal("5000")),
                    ]
                }
            ),
        )
        for serial in ("P-1", "P-2"):
            _, request = await register_token_sale(
                db_session,
                team["salesman"],
                TokenRegistration(name="Customer", contact_info="0770000000", token_serial=serial),
            )
            await approve_token_commission(db_session, team["admin"], request.id)
        before = await balance(db_session, team["salesman"])

        result = await process_salaries(db_session, team["hr"])

        assert await balance(db_session, team["salesman"]) - before == Decimal("26000")
        records = await records_for_payout(db_session, result.payout_id)
        incentives = [r for r in records if r.source_type == IncomeSource.INCENTIVE]
        assert [(r.user_id, r.amount) for r in incentives] == [(team["salesman"].id, Decimal("5000"))]

    @pytest.mark.asyncio
    async def test_disabled_users_skipped(self, db_session, team):
        team["tom"].is_disabled = True
        await db_session.flush()

        result = await process_salaries(db_session, team["hr"])

        assert result.users_paid == 1
        assert await balance(db_session, team["tom"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_period_processed_once(self, db_session, team):
        await process_salaries(db_session, team["hr"], "2026-05")

        with pytest.raises(ConflictError):
            await process_salaries(db_session, team["admin"], "2026-05")
        assert await balance(db_session, team["tom"]) == Decimal("40000")

    @pytest.mark.asyncio
    async def test_nobody_eligible(self, db_session, make_user):
        hr = await make_user(UserRole.HR)

        with pytest.raises(ValidationError):
            await process_salaries(db_session, hr)

    @pytest.mark.asyncio
    async def test_salesman_cannot_run_payroll(self, db_session, team):
        with pytest.raises(PermissionDeniedError):
            await process_salaries(db_session, team["salesman"])


class TestReversal:
    @pytest.mark.asyncio
    async def test_reversal_restores_balances(self, db_session, team):
        result = await process_salaries(db_session, team["hr"], "2026-05")

        payout = await reverse_salary_payout(db_session, result.payout_id, team["hr"])

        assert payout.is_reversed is True
        assert payout.active_period is None
        assert await balance(db_session, team["tom"]) == Decimal("0")
        assert await balance(db_session, team["salesman"]) == Decimal("0")
        assert await records_for_payout(db_session, result.payout_id) == []

    @pytest.mark.asyncio
    async def test_reversal_frees_the_period(self, db_session, team):
        first = await process_salaries(db_session, team["hr"], "2026-05")
        await reverse_salary_payout(db_session, first.payout_id, team["hr"])

        second = await process_salaries(db_session, team["hr"], "2026-05")

        assert second.payout_id != first.payout_id
        assert await balance(db_session, team["tom"]) == Decimal("40000")
        assert len(await list_payouts(db_session)) == 2

    @pytest.mark.asyncio
    async def test_reverse_twice_conflicts(self, db_session, team):
        result = await process_salaries(db_session, team["hr"], current_period())
        await reverse_salary_payout(db_session, result.payout_id, team["hr"])

        with pytest.raises(ConflictError):
            await reverse_salary_payout(db_session, result.payout_id, team["hr"])

    @pytest.mark.asyncio
    async def test_other_income_untouched(self, db_session, team):
        _, request = await register_token_sale(
            db_session,
            team["salesman"],
            TokenRegistration(name="Customer", contact_info="0770000000", token_serial="P-9"),
        )
        await approve_token_commission(db_session, team["admin"], request.id)
        commission = await balance(db_session, team["salesman"])

        result = await process_salaries(db_session, team["hr"])
        await reverse_salary_payout(db_session, result.payout_id, team["hr"])

        assert await balance(db_session, team["salesman"]) == commission

    @pytest.mark.asyncio
    async def test_unknown_payout(self, db_session, team):
        with pytest.raises(NotFoundError):
            await reverse_salary_payout(db_session, 404, team["hr"])


class TestAdhocPayments:
    @pytest.mark.asyncio
    async def test_approve_credits_recipient(self, db_session, team):
        payment = await request_adhoc_payment(
            db_session, team["hr"], team["salesman"].id, Decimal("2500"), "Festival bonus"
        )
        assert payment.status == RequestStatus.PENDING

        record = await approve_adhoc_payment(db_session, team["super_admin"], payment.id)

        assert record.source_type == IncomeSource.ADHOC
        assert record.adhoc_payment_id == payment.id
        assert payment.status == RequestStatus.APPROVED
        assert await balance(db_session, team["salesman"]) == Decimal("2500")

        with pytest.raises(ConflictError):
            await approve_adhoc_payment(db_session, team["super_admin"], payment.id)

    @pytest.mark.asyncio
    async def test_reject(self, db_session, team):
        payment = await request_adhoc_payment(
            db_session, team["admin"], team["tom"].id, Decimal("1000"), "Travel"
        )

        await reject_adhoc_payment(db_session, team["super_admin"], payment.id)

        assert payment.status == RequestStatus.REJECTED
        assert await balance(db_session, team["tom"]) == Decimal("0")
        assert await list_adhoc_payments(db_session, RequestStatus.PENDING) == []

    @pytest.mark.asyncio
    async def test_only_super_admin_resolves(self, db_session, team):
        payment = await request_adhoc_payment(
            db_session, team["hr"], team["tom"].id, Decimal("1000"), "Travel"
        )

        with pytest.raises(PermissionDeniedError):
            await approve_adhoc_payment(db_session, team["admin"], payment.id)

    @pytest.mark.asyncio
    async def test_request_validation(self, db_session, team):
        with pytest.raises(PermissionDeniedError):
            await request_adhoc_payment(db_session, team["salesman"], team["tom"].id, Decimal("10"), "x")
        with pytest.raises(ValidationError):
            await request_adhoc_payment(db_session, team["hr"], team["tom"].id, Decimal("0"), "x")
        with pytest.raises(NotFoundError):
            await request_adhoc_payment(db_session, team["hr"], 404, Decimal("10"), "x")

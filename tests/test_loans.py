"""Tests for loan amortization schedules and liability totals."""

import pytest
from cashflow_sim_jp.loans import (
    EQUAL_PRINCIPAL,
    amortize,
    annual_repayments,
    build_balance_schedules,
    build_schedules,
    liability_total,
)
from cashflow_sim_jp.models import LiabilityItem


def _loan(**kw) -> LiabilityItem:
    defaults = dict(
        id="car", name="自動車ローン", original_amount=1200, interest_rate=0,
        term_years=10, start_year=2025, auto_calculate=True,
    )
    defaults.update(kw)
    return LiabilityItem(**defaults)


class TestEqualPayment:
    def test_zero_interest_ten_years(self):
        """1200万・金利0%・10年 → 年120万を10年間"""
        schedules = build_schedules([_loan()])
        repayments = annual_repayments(schedules, 2020, 2040)
        assert sorted(repayments) == list(range(2025, 2035))
        for year in range(2025, 2035):
            assert repayments[year] == pytest.approx(120)
        assert 2024 not in repayments
        assert 2035 not in repayments

    def test_balance_declines_to_zero(self):
        schedule = amortize(_loan())
        assert schedule.outstanding(2025) == pytest.approx(1080)
        assert schedule.outstanding(2034) == pytest.approx(0)
        assert schedule.outstanding(2040) == 0

    def test_interest_increases_total(self):
        schedule = amortize(_loan(interest_rate=2.0))
        assert sum(schedule.payments.values()) > 1200

    def test_window_clips_years(self):
        repayments = annual_repayments(build_schedules([_loan()]), 2025, 2027)
        assert sorted(repayments) == [2025, 2026, 2027]


class TestEqualPrincipal:
    def test_zero_interest(self):
        schedule = amortize(_loan(repayment_type=EQUAL_PRINCIPAL))
        assert schedule.payments[2025] == pytest.approx(120)
        assert schedule.payments[2034] == pytest.approx(120)

    def test_interest_declines(self):
        """元金均等: 月利1%、元金100/月 → 利息12+11+…+1 = 78"""
        schedule = amortize(_loan(original_amount=1200, interest_rate=12, term_years=1,
                                  repayment_type=EQUAL_PRINCIPAL))
        assert schedule.payments[2025] == pytest.approx(1278)


class TestParticipation:
    def test_housing_loan_excluded(self):
        """住宅ローンは住居費で計上するため汎用返済計算に含めない"""
        housing = _loan(id="loan", name="ローン", exclude_from_generic_amortization=True)
        assert build_schedules([housing]) == {}

    def test_housing_loan_balance_only(self):
        housing = _loan(id="loan", name="ローン", auto_calculate=False, exclude_from_generic_amortization=True)
        schedules = build_balance_schedules([housing, _loan()])
        assert list(schedules) == ["loan"]
        assert schedules["loan"].outstanding(2025) == pytest.approx(1080)
        assert annual_repayments(build_schedules([housing]), 2025, 2034) == {}

    def test_manual_liability_excluded(self):
        assert build_schedules([_loan(auto_calculate=False)]) == {}

    def test_incomplete_parameters_excluded(self):
        assert build_schedules([_loan(start_year=None)]) == {}
        assert build_schedules([_loan(original_amount=0)]) == {}


class TestLiabilityTotal:
    def test_amortized_uses_schedule_balance(self):
        loan = _loan()
        schedules = build_schedules([loan])
        assert liability_total([loan], schedules, 2026) == pytest.approx(960)

    def test_manual_uses_absolute_amount(self):
        credit = LiabilityItem(id="credit", name="クレジット残高", kind="credit", amounts={2025: -30})
        assert liability_total([credit], {}, 2025) == pytest.approx(30)
        assert liability_total([credit], {}, 2026) == 0

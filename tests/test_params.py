"""Tests for Parameters, BasicInfo, and helper functions."""

import pytest
from cashflow_sim_jp.params import (
    BasicInfo,
    Parameters,
    SpouseInfo,
    _calc_equal_payment,
    round1,
    validate_horizon,
)


class TestCumulativeFactors:
    def test_inflation_factor_zero_years(self):
        assert Parameters().inflation_factor(0) == 1.0

    def test_inflation_factor(self):
        p = Parameters(inflation_rate=2.0)
        assert p.inflation_factor(10) == pytest.approx(1.02 ** 10, rel=1e-10)

    def test_negative_years_clamped(self):
        assert Parameters(inflation_rate=2.0).inflation_factor(-3) == 1.0

    def test_education_factor(self):
        p = Parameters(education_cost_increase_rate=3.0)
        assert p.education_factor(2) == pytest.approx(1.03 ** 2, rel=1e-10)


class TestBasicInfo:
    def test_simulation_years_inclusive(self):
        info = BasicInfo(current_age=30, death_age=33, start_year=2025)
        assert info.simulation_years() == [2025, 2026, 2027, 2028]

    def test_single_year_horizon(self):
        info = BasicInfo(current_age=80, death_age=80)
        validate_horizon(info)
        assert info.simulation_years() == [2025]

    def test_invalid_horizon(self):
        with pytest.raises(ValueError, match="想定寿命"):
            validate_horizon(BasicInfo(current_age=50, death_age=49))

    def test_age_in(self):
        assert BasicInfo(current_age=30, start_year=2025).age_in(2030) == 35


class TestMarriageYear:
    def test_single(self):
        assert BasicInfo().marriage_year() is None

    def test_married(self):
        assert BasicInfo(marital_status="married", start_year=2025).marriage_year() == 2025

    def test_planning(self):
        info = BasicInfo(current_age=30, start_year=2025, marital_status="planning",
                         spouse_info=SpouseInfo(marriage_age=33))
        assert info.marriage_year() == 2028

    def test_planning_without_age(self):
        info = BasicInfo(marital_status="planning", spouse_info=SpouseInfo())
        assert info.marriage_year() is None


class TestCalcEqualPayment:
    def test_zero_rate(self):
        assert _calc_equal_payment(1200, 0, 120) == 10

    def test_positive_rate(self):
        """1000万円、月利0.1%、12ヶ月"""
        r = 0.001
        expected = 1000 * r * (1 + r) ** 12 / ((1 + r) ** 12 - 1)
        assert _calc_equal_payment(1000, r, 12) == pytest.approx(expected)
        assert _calc_equal_payment(1000, r, 12) * 12 > 1000


class TestRound1:
    def test_half_up(self):
        assert round1(0.25) == 0.3
        assert round1(12.34) == 12.3

    def test_negative(self):
        assert round1(-0.25) == -0.2

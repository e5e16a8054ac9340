"""Tests for withholding and corporate tax calculation functions."""

import pytest
from cashflow_sim_jp.params import CorporateTaxSettings
from cashflow_sim_jp.tax import (
    calc_income_tax,
    calc_salary_deduction,
    corporate_tax,
    employer_cost_for_salary,
    net_income_for_director,
    net_income_from_gross_salary,
)


class TestSalaryDeduction:
    def test_minimum(self):
        """額面100万 → 30%+8 = 38万 < 下限55万"""
        assert calc_salary_deduction(100) == 55

    def test_middle(self):
        """額面400万 → 400×30% + 8 = 128万"""
        assert calc_salary_deduction(400) == 128

    def test_capped(self):
        assert calc_salary_deduction(700) == 195

    def test_above_850(self):
        assert calc_salary_deduction(1200) == 195


class TestIncomeTax:
    def test_lowest_bracket(self):
        """課税所得100万 → 5% = 5万"""
        assert calc_income_tax(100) == 5

    def test_second_bracket(self):
        """課税所得300万 → 30万 - 9.75万 = 20.25万 → 20万"""
        assert calc_income_tax(300) == 20

    def test_zero(self):
        assert calc_income_tax(0) == 0


class TestNetIncomeFromGrossSalary:
    def test_company_employee(self):
        """額面400万: 社保60 + 所得税11 + 住民税21 = 92 → 手取り308"""
        result = net_income_from_gross_salary(400, "company_employee")
        assert result.net_income == pytest.approx(308)
        assert result.breakdown.social_insurance == 60
        assert result.breakdown.income_tax == 11
        assert result.breakdown.resident_tax == 21

    def test_self_employed_passthrough(self):
        result = net_income_from_gross_salary(500, "self_employed")
        assert result.net_income == 500
        assert result.breakdown.total == 0

    def test_homemaker_passthrough(self):
        assert net_income_from_gross_salary(80, "homemaker").net_income == 80

    def test_part_time_without_pension_has_no_social_insurance(self):
        result = net_income_from_gross_salary(400, "part_time_without_pension")
        assert result.breakdown.social_insurance == 0
        assert result.net_income == pytest.approx(356)


class TestDirectorSalary:
    def test_without_social_insurance(self):
        """額面400万・社保なし: 所得税17 + 住民税27 → 356"""
        assert net_income_for_director(400, False).net_income == pytest.approx(356)

    def test_with_social_insurance(self):
        """額面400万・社保14.4%: 57 + 11 + 21 → 311"""
        result = net_income_for_director(400, True)
        assert result.breakdown.social_insurance == 57
        assert result.net_income == pytest.approx(311)

    def test_employer_cost_with_insurance(self):
        """400 + 会社負担57 + 子育て拠出金1 + 労災1 = 459"""
        assert employer_cost_for_salary(400, True) == pytest.approx(459)

    def test_employer_cost_without_insurance(self):
        assert employer_cost_for_salary(400, False) == pytest.approx(400)


class TestCorporateTax:
    def test_low_bracket(self):
        """税引前400万: 法人税60 + 地方法人税6.18 + 均等割7 + 法人税割4.2"""
        result = corporate_tax(400)
        assert result.pretax_profit == pytest.approx(400)
        assert result.corporate_tax == pytest.approx(60)
        assert result.local_corporate_tax == pytest.approx(6.2)
        assert result.resident_tax_equal == pytest.approx(7)
        assert result.resident_tax_proportional == pytest.approx(4.2)
        assert result.total_tax == pytest.approx(77.4)
        assert result.aftertax_profit == pytest.approx(322.6)
        assert result.effective_tax_rate == pytest.approx(19.35, abs=0.02)

    def test_high_bracket(self):
        """800万超の部分は23.2%"""
        result = corporate_tax(1000)
        assert result.corporate_tax == pytest.approx(166.4)

    def test_zero_profit_pays_equal_rate(self):
        result = corporate_tax(0)
        assert result.total_tax == pytest.approx(7)
        assert result.aftertax_profit == pytest.approx(-7)
        assert result.effective_tax_rate == 0

    def test_loss(self):
        result = corporate_tax(-100)
        assert result.corporate_tax == 0
        assert result.aftertax_profit == pytest.approx(-107)

    @pytest.mark.parametrize("pretax", [1, 250, 800, 801, 3000])
    def test_total_plus_aftertax_equals_pretax(self, pretax):
        result = corporate_tax(pretax)
        assert result.total_tax + result.aftertax_profit == pytest.approx(result.pretax_profit, abs=0.11)

    def test_custom_settings(self):
        settings = CorporateTaxSettings(resident_tax_equal_rate=18)
        assert corporate_tax(0, settings).total_tax == pytest.approx(18)

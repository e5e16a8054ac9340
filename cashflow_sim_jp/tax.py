"""Withholding, employer cost, and corporate tax calculations."""

import math
from dataclasses import dataclass

from cashflow_sim_jp.params import DEFAULT_CORPORATE_TAX_SETTINGS, CorporateTaxSettings, round1

# 所得税累進税率テーブル（国税庁）
# (上限課税所得・万円, 税率, 控除額・円)
_INCOME_TAX_BRACKETS: tuple[tuple[float, float, int], ...] = (
    (195, 0.05, 0),
    (330, 0.10, 97_500),
    (695, 0.20, 427_500),
    (900, 0.23, 636_000),
    (1800, 0.33, 1_536_000),
    (4000, 0.40, 2_796_000),
    (float("inf"), 0.45, 4_796_000),
)

RESIDENT_TAX_RATE = 0.10  # 住民税率（一律10%）

# 給与所得控除（万円）
_SALARY_DEDUCTION_MIN = 55
_SALARY_DEDUCTION_MAX = 195
_SALARY_DEDUCTION_RATE = 0.30
_SALARY_DEDUCTION_BASE = 8
_SALARY_DEDUCTION_CAP_INCOME = 850

# 社会保険料率（本人負担）: 年収850万円未満 15%、以上 7.7%（標準報酬上限の簡易反映）
SOCIAL_INSURANCE_THRESHOLD = 850
SOCIAL_INSURANCE_RATE_LOW = 0.15
SOCIAL_INSURANCE_RATE_HIGH = 0.077
# 役員・法人給与: 雇用保険を除いた率
DIRECTOR_SOCIAL_INSURANCE_RATE_LOW = 0.144
DIRECTOR_SOCIAL_INSURANCE_RATE_HIGH = 0.077

CHILD_CARE_LEVY_RATE = 0.0036    # 子ども・子育て拠出金
LABOR_INSURANCE_RATE = 0.003     # 労災保険（目安）

_OCCUPATIONS_WITHOUT_WITHHOLDING = ("self_employed", "homemaker")
_OCCUPATIONS_WITH_SOCIAL_INSURANCE = ("company_employee", "part_time_with_pension")


@dataclass
class Deductions:
    salary_deduction: float = 0.0
    social_insurance: float = 0.0
    income_tax: float = 0.0
    resident_tax: float = 0.0
    total: float = 0.0


@dataclass
class NetIncomeResult:
    net_income: float
    breakdown: Deductions


@dataclass
class CorporateTaxResult:
    pretax_profit: float
    corporate_tax: float
    local_corporate_tax: float
    resident_tax_equal: float
    resident_tax_proportional: float
    total_tax: float
    aftertax_profit: float
    effective_tax_rate: float  # %


def calc_salary_deduction(annual_income: float) -> float:
    """Employment income deduction (給与所得控除, 万円, 切り捨て)."""
    if annual_income > _SALARY_DEDUCTION_CAP_INCOME:
        return _SALARY_DEDUCTION_MAX
    deduction = annual_income * _SALARY_DEDUCTION_RATE + _SALARY_DEDUCTION_BASE
    return math.floor(min(max(deduction, _SALARY_DEDUCTION_MIN), _SALARY_DEDUCTION_MAX))


def calc_income_tax(taxable_income: float) -> float:
    """Progressive national income tax on taxable income (万円, 切り捨て)."""
    for upper, rate, deduction_yen in _INCOME_TAX_BRACKETS:
        if taxable_income <= upper:
            # 円単位で切り捨ててから万円に戻す
            tax_yen = math.floor(taxable_income * 10000 * rate - deduction_yen)
            return math.floor(tax_yen / 10000)
    return 0  # pragma: no cover


def social_insurance_rate(annual_income: float) -> float:
    if annual_income < SOCIAL_INSURANCE_THRESHOLD:
        return SOCIAL_INSURANCE_RATE_LOW
    return SOCIAL_INSURANCE_RATE_HIGH


def director_social_insurance_rate(annual_income: float) -> float:
    if annual_income < SOCIAL_INSURANCE_THRESHOLD:
        return DIRECTOR_SOCIAL_INSURANCE_RATE_LOW
    return DIRECTOR_SOCIAL_INSURANCE_RATE_HIGH


def _withhold(annual_income: float, social_insurance: float) -> NetIncomeResult:
    salary_deduction = calc_salary_deduction(annual_income)
    taxable = max(0, annual_income - (salary_deduction + social_insurance))
    income_tax = calc_income_tax(taxable)
    resident_tax = math.floor(taxable * RESIDENT_TAX_RATE)
    total = social_insurance + income_tax + resident_tax
    return NetIncomeResult(
        net_income=annual_income - total,
        breakdown=Deductions(
            salary_deduction=salary_deduction,
            social_insurance=social_insurance,
            income_tax=income_tax,
            resident_tax=resident_tax,
            total=total,
        ),
    )


def net_income_from_gross_salary(gross: float, occupation: str) -> NetIncomeResult:
    """Take-home pay for ordinary employment (万円/年).

    Self-employed and homemaker incomes are passed through untouched.
    Social insurance is withheld only for occupations enrolled in 厚生年金.
    """
    if occupation in _OCCUPATIONS_WITHOUT_WITHHOLDING:
        return NetIncomeResult(net_income=gross, breakdown=Deductions())
    social_insurance = 0
    if occupation in _OCCUPATIONS_WITH_SOCIAL_INSURANCE:
        social_insurance = math.floor(gross * social_insurance_rate(gross))
    return _withhold(gross, social_insurance)


def net_income_for_director(gross_salary: float, has_social_insurance: bool) -> NetIncomeResult:
    """Take-home pay for a salary paid by the subject's own corporation (雇用保険なし)."""
    social_insurance = 0
    if has_social_insurance:
        social_insurance = math.floor(gross_salary * director_social_insurance_rate(gross_salary))
    return _withhold(gross_salary, social_insurance)


def employer_cost_for_salary(gross_salary: float, has_social_insurance: bool) -> float:
    """Employer-side cost of a salary (万円/年).

    With social insurance: salary + employer share of 健保・厚年
    + 子ども・子育て拠出金 + 労災保険, each floored to 万円.
    """
    total = gross_salary
    if has_social_insurance:
        employer_share = math.floor(gross_salary * director_social_insurance_rate(gross_salary))
        child_levy = math.floor(gross_salary * CHILD_CARE_LEVY_RATE)
        labor_insurance = math.floor(gross_salary * LABOR_INSURANCE_RATE)
        total = gross_salary + employer_share + child_levy + labor_insurance
    return round1(total)


def corporate_tax(
    pretax_profit: float,
    settings: CorporateTaxSettings = DEFAULT_CORPORATE_TAX_SETTINGS,
) -> CorporateTaxResult:
    """Corporate tax on a pretax profit (万円).

    The equal-rate resident tax (均等割) is due even on a loss.
    """
    resident_tax_equal = settings.resident_tax_equal_rate
    if pretax_profit <= 0:
        return CorporateTaxResult(
            pretax_profit=pretax_profit,
            corporate_tax=0,
            local_corporate_tax=0,
            resident_tax_equal=resident_tax_equal,
            resident_tax_proportional=0,
            total_tax=resident_tax_equal,
            aftertax_profit=pretax_profit - resident_tax_equal,
            effective_tax_rate=0,
        )

    threshold = settings.corporate_tax_threshold
    if pretax_profit <= threshold:
        tax = pretax_profit * settings.corporate_tax_rate_low / 100
    else:
        tax = (
            threshold * settings.corporate_tax_rate_low / 100
            + (pretax_profit - threshold) * settings.corporate_tax_rate_high / 100
        )
    local_tax = tax * settings.local_corporate_tax_rate / 100
    resident_tax_proportional = tax * settings.resident_tax_proportional_rate / 100
    total_tax = tax + local_tax + resident_tax_equal + resident_tax_proportional
    aftertax_profit = pretax_profit - total_tax
    effective_rate = total_tax / pretax_profit * 100

    return CorporateTaxResult(
        pretax_profit=round1(pretax_profit),
        corporate_tax=round1(tax),
        local_corporate_tax=round1(local_tax),
        resident_tax_equal=round1(resident_tax_equal),
        resident_tax_proportional=round1(resident_tax_proportional),
        total_tax=round1(total_tax),
        aftertax_profit=round1(aftertax_profit),
        effective_tax_rate=math.floor(effective_rate * 100 + 0.5) / 100,
    )

"""Public pension estimate (老齢基礎年金 + 老齢厚生年金, simplified)."""

from cashflow_sim_jp.models import IncomeData, IncomeRole
from cashflow_sim_jp.params import BasicInfo, round1

# 公的年金計算定数（日本年金機構 簡易版）
KISO_PENSION_ANNUAL = 78.09        # 老齢基礎年金 満額（万円/年）
FULL_CONTRIBUTION_MONTHS = 480     # 40年
KOSEI_RATE_BEFORE_2003 = 7.125 / 1000
KOSEI_RATE_AFTER_2003 = 5.481 / 1000
MAX_MONTHS_BEFORE_2003 = 240
STANDARD_MONTHLY_FLOOR = 8.8       # 標準報酬月額 下限（万円）
STANDARD_MONTHLY_CAP = 65.0        # 標準報酬月額 上限（万円）

STANDARD_PENSION_AGE = 65
EARLY_REDUCTION_PER_MONTH = 0.004  # 繰上げ 0.4%/月
EARLY_REDUCTION_FLOOR = 0.5
LATE_INCREASE_PER_MONTH = 0.007    # 繰下げ 0.7%/月
LATE_INCREASE_MAX_MONTHS = 120

# 在職老齢年金の支給停止基準額（万円/月）
WORKING_PENSION_THRESHOLD = 51.0

_BASIC_ONLY_OCCUPATIONS = ("part_time_without_pension", "self_employed", "homemaker")


def _claiming_adjustment(pension_start_age: int) -> float:
    if pension_start_age < STANDARD_PENSION_AGE:
        early_months = (STANDARD_PENSION_AGE - pension_start_age) * 12
        return max(1.0 - EARLY_REDUCTION_PER_MONTH * early_months, EARLY_REDUCTION_FLOOR)
    if pension_start_age > STANDARD_PENSION_AGE:
        late_months = min((pension_start_age - STANDARD_PENSION_AGE) * 12, LATE_INCREASE_MAX_MONTHS)
        return 1.0 + LATE_INCREASE_PER_MONTH * late_months
    return 1.0


def _standard_monthly_remuneration(monthly_salary: float) -> float:
    if monthly_salary <= 0:
        return 0.0
    return min(max(monthly_salary, STANDARD_MONTHLY_FLOOR), STANDARD_MONTHLY_CAP)


def estimate_annual_pension(
    annual_income: float,
    work_start_age: int,
    work_end_age: int,
    pension_start_age: int = STANDARD_PENSION_AGE,
    occupation: str = "company_employee",
    will_work_after_pension: bool = False,
) -> float:
    """Estimate annual public pension (万円/年) from average face income.

    Occupations outside 厚生年金 receive the basic pension only.
    """
    working_years = max(0, min(work_end_age - work_start_age, 40))
    working_months = working_years * 12
    basic = KISO_PENSION_ANNUAL * min(working_months / FULL_CONTRIBUTION_MONTHS, 1)
    adjustment = _claiming_adjustment(pension_start_age)

    if occupation in _BASIC_ONLY_OCCUPATIONS:
        return round1(basic * adjustment)

    average_monthly = annual_income / 12
    standard = _standard_monthly_remuneration(average_monthly)
    # 2003年4月前後で乗率が異なるため加入期間を半々に分割（簡易）
    months_before = min(working_months / 2, MAX_MONTHS_BEFORE_2003)
    months_after = working_months - months_before
    earnings_related = (
        standard * KOSEI_RATE_BEFORE_2003 * months_before
        + standard * KOSEI_RATE_AFTER_2003 * months_after
    )
    total = (basic + earnings_related) * adjustment

    if will_work_after_pension:
        monthly_pension = total / 12
        excess = max(0.0, average_monthly + monthly_pension - WORKING_PENSION_THRESHOLD)
        suspension = min(earnings_related * adjustment / 12, excess / 2)
        total = (monthly_pension - suspension) * 12

    return round1(total)


def _average_face_income(
    income_data: IncomeData, role: IncomeRole, years: list[int],
) -> float:
    amounts = [
        item.face_amount(year)
        for item in income_data.personal
        if item.role == role
        for year in years
        if item.face_amount(year) > 0
    ]
    if not amounts:
        return 0.0
    return sum(amounts) / len(amounts)


def pension_benefit_for_year(basic_info: BasicInfo, income_data: IncomeData, year: int) -> float:
    """Annual pension of the subject for a calendar year (0 before the start age)."""
    if basic_info.age_in(year) < basic_info.pension_start_age:
        return 0.0
    working_years = [
        y for y in basic_info.simulation_years()
        if basic_info.age_in(y) < basic_info.work_end_age
    ]
    average = _average_face_income(income_data, IncomeRole.PRIMARY_WAGE, working_years)
    return estimate_annual_pension(
        average,
        basic_info.work_start_age,
        basic_info.work_end_age,
        basic_info.pension_start_age,
        basic_info.occupation,
        basic_info.will_work_after_pension,
    )


def spouse_pension_for_year(basic_info: BasicInfo, income_data: IncomeData, year: int) -> float:
    """Annual pension of the spouse (0 when single or the spouse age is unknown)."""
    spouse = basic_info.spouse_info
    if basic_info.marital_status == "single" or spouse is None or spouse.current_age is None:
        return 0.0
    elapsed = year - basic_info.start_year
    if spouse.current_age + elapsed < spouse.pension_start_age:
        return 0.0
    working_years = [
        y for y in basic_info.simulation_years()
        if spouse.current_age + (y - basic_info.start_year) < spouse.work_end_age
    ]
    average = _average_face_income(income_data, IncomeRole.SPOUSE_WAGE, working_years)
    return estimate_annual_pension(
        average,
        spouse.work_start_age,
        spouse.work_end_age,
        spouse.pension_start_age,
        spouse.occupation or "homemaker",
        spouse.will_work_after_pension,
    )

"""Projection helpers that fill per-year amounts from a starting value.

Income: percentage raise compounded by year index, or a fixed increment per
year. Expense: escalated by the inflation or education-cost rate according to
its category. Results are floored to 万円 and capped.
"""

import math
from dataclasses import dataclass

from cashflow_sim_jp.models import ExpenseData, ExpenseItem, ExpenseRole, IncomeItem, IncomeRole
from cashflow_sim_jp.params import BasicInfo, Parameters, round1
from cashflow_sim_jp.tax import net_income_from_gross_salary

RAISE_PERCENTAGE = "percentage"
RAISE_FIXED = "fixed"

# インフレ率を適用するカテゴリ
INFLATION_CATEGORIES = ("living", "housing", "business", "office")
EDUCATION_CATEGORY = "education"

# 手取り換算する収入
_WITHHELD_ROLES = (IncomeRole.PRIMARY_WAGE, IncomeRole.SPOUSE_WAGE)


@dataclass
class IncomeAutofill:
    initial_amount: float
    start_year: int
    end_age: int
    raise_type: str = RAISE_PERCENTAGE
    raise_percentage: float = 0.0
    raise_amount: float = 0.0
    max_amount: float | None = None


@dataclass
class ExpenseAutofill:
    initial_amount: float
    start_year: int
    end_year: int
    category: str = "living"
    max_amount: float | None = None


def _cap(value: float, max_amount: float | None) -> float:
    if max_amount is not None and value > max_amount:
        return max_amount
    return value


def project_income(settings: IncomeAutofill, info: BasicInfo) -> dict[int, float]:
    """Gross amounts per year from start_year up to the year the subject reaches end_age."""
    last_year = info.start_year + (settings.end_age - info.current_age)
    projected: dict[int, float] = {}
    for year in info.simulation_years():
        if year < settings.start_year or year > last_year:
            continue
        index = year - settings.start_year
        if settings.raise_type == RAISE_FIXED:
            amount = settings.initial_amount + settings.raise_amount * index
        else:
            amount = settings.initial_amount * (1 + settings.raise_percentage / 100) ** index
        projected[year] = math.floor(_cap(amount, settings.max_amount))
    return projected


def apply_income_autofill(
    item: IncomeItem, settings: IncomeAutofill, info: BasicInfo,
) -> IncomeItem:
    """Write projected amounts into an income item.

    Wage items of the subject or spouse store the take-home amount in ``amounts``
    and keep the face amount in ``original_amounts``.
    """
    occupation = info.occupation
    if item.role == IncomeRole.SPOUSE_WAGE:
        occupation = (info.spouse_info.occupation if info.spouse_info else None) or "homemaker"
    for year, gross in project_income(settings, info).items():
        if item.role in _WITHHELD_ROLES and not item.is_corporate_salary:
            item.original_amounts[year] = gross
            item.amounts[year] = net_income_from_gross_salary(gross, occupation).net_income
        else:
            item.amounts[year] = gross
    return item


def escalation_rate(category: str, params: Parameters) -> float:
    """Annual escalation (%) applied to an expense category."""
    if category in INFLATION_CATEGORIES:
        return params.inflation_rate
    if category == EDUCATION_CATEGORY:
        return params.education_cost_increase_rate
    return 0.0


def project_expense(settings: ExpenseAutofill, params: Parameters) -> dict[int, float]:
    rate = escalation_rate(settings.category, params)
    projected: dict[int, float] = {}
    for year in range(settings.start_year, settings.end_year + 1):
        amount = settings.initial_amount * (1 + rate / 100) ** (year - settings.start_year)
        projected[year] = math.floor(_cap(amount, settings.max_amount))
    return projected


def apply_expense_autofill(
    item: ExpenseItem, settings: ExpenseAutofill, params: Parameters,
) -> ExpenseItem:
    """Write projected amounts; the unescalated input is kept in ``raw_amounts``."""
    for year, amount in project_expense(settings, params).items():
        item.raw_amounts[year] = settings.initial_amount
        item.amounts[year] = amount
    return item


def _item_rate(item: ExpenseItem, params: Parameters) -> float:
    """Escalation by category, falling back to the kind when the category is not escalated."""
    for category in (item.category, item.kind):
        if category in INFLATION_CATEGORIES or category == EDUCATION_CATEGORY:
            return escalation_rate(category, params)
    if item.role == ExpenseRole.EDUCATION:
        return params.education_cost_increase_rate
    return 0.0


def reinflate_expenses(expense_data: ExpenseData, params: Parameters, start_year: int) -> ExpenseData:
    """Re-derive ``amounts`` from ``raw_amounts`` after a parameter change.

    Linked salary expenses and revenue-proportional costs are derived elsewhere
    and left untouched. Mutates and returns ``expense_data``.
    """
    for section in ("personal", "corporate"):
        for item in expense_data.section(section):
            if item.is_linked_from_income or item.is_revenue_cost:
                continue
            rate = _item_rate(item, params)
            for year, raw in item.raw_amounts.items():
                factor = (1 + rate / 100) ** max(0, year - start_year)
                item.amounts[year] = round1(raw * factor)
    return expense_data

"""Corporate-salary linkage: personal salary ↔ corporate employee cost.

Each personal income item flagged ``is_corporate_salary`` owns exactly one
corporate expense item (``linked_expense_<income id>``) holding the employer-side
cost of that salary for every simulated year.
"""

import logging

from cashflow_sim_jp.models import (
    EMPLOYEE_SALARY_CATEGORY,
    LINKED_EXPENSE_PREFIX,
    ExpenseData,
    ExpenseItem,
    ExpenseRole,
    IncomeData,
    IncomeItem,
)
from cashflow_sim_jp.tax import employer_cost_for_salary

logger = logging.getLogger(__name__)

FULL_TIME = "full-time"
PART_TIME = "part-time"


def linked_expense_id(income_id: str) -> str:
    return f"{LINKED_EXPENSE_PREFIX}{income_id}"


def watch_list_total(item: IncomeItem, personal: list[IncomeItem], year: int) -> float:
    """Sum of face amounts of the items the part-time salary is compared against."""
    watched = set(item.auto_switch_income_ids) - {item.id}
    return sum(other.face_amount(year) for other in personal if other.id in watched)


def resolve_social_insurance(item: IncomeItem, personal: list[IncomeItem], year: int) -> bool:
    """Decide whether the salary is enrolled in social insurance for a year.

    Full-time salaries are enrolled unless a year is explicitly set to False.
    Part-time salaries with auto-switch compare the face salary against the
    watch-list total for years not manually overridden, and store the decision
    in ``social_insurance_by_year``. Otherwise the stored flag is used.
    """
    if item.corporate_salary_type == FULL_TIME:
        return item.social_insurance_by_year.get(year, True)
    if item.auto_switch_enabled and not item.manual_override_years.get(year, False):
        has_insurance = item.face_amount(year) > watch_list_total(item, personal, year)
        item.social_insurance_by_year[year] = has_insurance
        return has_insurance
    return item.social_insurance_by_year.get(year, False)


def _find_or_create_expense(item: IncomeItem, expense_data: ExpenseData) -> ExpenseItem:
    expense_id = linked_expense_id(item.id)
    expense = expense_data.find("corporate", expense_id)
    if expense is None:
        expense = ExpenseItem(
            id=expense_id,
            name=f"{item.name}（人件費）",
            kind="other",
            category=EMPLOYEE_SALARY_CATEGORY,
            role=ExpenseRole.BUSINESS,
            is_linked_from_income=True,
            linked_income_id=item.id,
        )
        expense_data.corporate.append(expense)
        logger.debug("created linked expense %s for income %s", expense_id, item.id)
    return expense


def link_corporate_salaries(
    income_data: IncomeData, expense_data: ExpenseData, years: list[int],
) -> dict[str, dict[int, bool]]:
    """Sync linked corporate expenses for every corporate-salary income item.

    Mutates the given collections (callers pass working copies). Returns the
    resolved social-insurance flags as {income id: {year: bool}}.
    """
    resolved: dict[str, dict[int, bool]] = {}
    for item in income_data.personal:
        if not item.is_corporate_salary:
            continue
        expense = _find_or_create_expense(item, expense_data)
        flags: dict[int, bool] = {}
        for year in years:
            has_insurance = resolve_social_insurance(item, income_data.personal, year)
            flags[year] = has_insurance
            face = item.face_amount(year)
            cost = employer_cost_for_salary(face, has_insurance) if face > 0 else 0.0
            expense.amounts[year] = cost
            expense.raw_amounts[year] = cost
        item.linked_expense_id = expense.id
        resolved[item.id] = flags
    _drop_orphaned_expenses(expense_data, set(resolved))
    return resolved


def _drop_orphaned_expenses(expense_data: ExpenseData, salary_ids: set[str]) -> None:
    """Remove linked expenses whose income item is gone or no longer a corporate salary."""
    kept = []
    for expense in expense_data.corporate:
        if expense.is_linked_from_income and expense.linked_income_id not in salary_ids:
            logger.debug("dropped orphaned linked expense %s", expense.id)
            continue
        kept.append(expense)
    expense_data.corporate[:] = kept

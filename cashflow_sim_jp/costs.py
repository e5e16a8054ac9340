"""Revenue-proportional cost (原価) for corporate expense items."""

import logging
import math

from cashflow_sim_jp.models import CostSettings, ExpenseItem, IncomeItem

logger = logging.getLogger(__name__)


def target_revenue(settings: CostSettings, corporate_income: list[IncomeItem], year: int) -> float:
    """Revenue the cost is proportional to.

    Selected items when target_income_ids is non-empty, else all corporate
    income. Unknown ids contribute zero.
    """
    if not settings.target_income_ids:
        return sum(item.amounts.get(year, 0.0) for item in corporate_income)
    by_id = {item.id: item for item in corporate_income}
    total = 0.0
    for income_id in settings.target_income_ids:
        item = by_id.get(income_id)
        if item is None:
            logger.debug("cost target income %s not found", income_id)
            continue
        total += item.amounts.get(year, 0.0)
    return total


def effective_cost_ratio(settings: CostSettings, years_since_start: int) -> float:
    """Cost ratio (%) escalated linearly by cost_increase_rate points per year."""
    return settings.cost_ratio + settings.cost_increase_rate * years_since_start


def revenue_cost_for_year(
    settings: CostSettings, corporate_income: list[IncomeItem], year: int, start_year: int,
) -> int:
    """Cost for one year, capped at max_cost_amount and floored to 万円."""
    revenue = target_revenue(settings, corporate_income, year)
    if revenue == 0:
        return 0
    cost = revenue * effective_cost_ratio(settings, year - start_year) / 100
    if settings.max_cost_amount is not None and cost > settings.max_cost_amount:
        cost = settings.max_cost_amount
    return math.floor(cost)


def resolve_revenue_cost(
    expense: ExpenseItem, corporate_income: list[IncomeItem], year: int, start_year: int,
) -> int:
    """Recompute a cost item's amount for a year and write it into its amounts."""
    cost = revenue_cost_for_year(expense.cost_settings, corporate_income, year, start_year)
    expense.amounts[year] = cost
    return cost

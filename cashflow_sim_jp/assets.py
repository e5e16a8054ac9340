"""Year-over-year asset growth and income-linked contributions.

Works on the synthesis pass's working copies: ``amounts[year]`` holds the
user-typed value until the pass for that year overwrites it with the derived
balance.
"""

import logging
from typing import Callable

from cashflow_sim_jp.models import AssetItem, IncomeData

logger = logging.getLogger(__name__)


def _return_rate(asset: AssetItem, fallback_return: float) -> float:
    if asset.investment_return is not None:
        return asset.investment_return
    return fallback_return


def grow_ordinary_assets(
    assets: list[AssetItem], year: int, is_first_year: bool, fallback_return: float,
) -> float:
    """Advance every non-income-linked asset to `year`. Returns investment income.

    Investment assets: prev + prev * rate + manual contribution; a manual amount
    on a zero balance becomes the new balance without growth. Other assets carry
    the previous balance forward unless a manual amount is given.
    """
    investment_income = 0.0
    for asset in assets:
        if asset.is_income_linked or is_first_year:
            continue
        previous = asset.amounts.get(year - 1, 0.0)
        manual = asset.amounts.get(year)
        if not asset.is_investment:
            asset.amounts[year] = manual if manual is not None else previous
            continue
        if previous == 0:
            asset.amounts[year] = manual if manual is not None else 0.0
            continue
        growth = previous * _return_rate(asset, fallback_return) / 100
        if previous > 0:
            investment_income += growth
        asset.amounts[year] = previous + growth + (manual or 0.0)
    return investment_income


def contribution_candidate(
    asset: AssetItem, income_data: IncomeData, section: str, year: int,
) -> float | None:
    """New principal requested from the linked income, None when it cannot be resolved."""
    if not asset.linked_income_id:
        return None
    linked_section = asset.linked_income_type or section
    income = income_data.find(linked_section, asset.linked_income_id)
    if income is None:
        logger.debug("asset %s: linked income %s not found", asset.id, asset.linked_income_id)
        return None
    ratio = asset.investment_ratio if asset.investment_ratio is not None else income.investment_ratio
    cap = asset.max_investment_amount if asset.max_investment_amount is not None else float("inf")
    return min(income.amounts.get(year, 0.0) * ratio / 100, cap)


def accumulate_income_linked(
    asset: AssetItem,
    year: int,
    *,
    is_first_year: bool,
    fallback_return: float,
    income_data: IncomeData,
    section: str,
    trial_balance: Callable[[float], float],
) -> tuple[float, float]:
    """Advance one income-linked asset. Returns (investment_income, contribution).

    trial_balance(extra_income) must return the section's tentative balance for
    the year excluding this contribution; the contribution is applied only when
    it is positive.
    """
    previous = 0.0 if is_first_year else asset.amounts.get(year - 1, 0.0)
    investment_income = 0.0
    if previous > 0 and not is_first_year:
        investment_income = previous * _return_rate(asset, fallback_return) / 100

    candidate = contribution_candidate(asset, income_data, section, year)
    contribution = 0.0
    if candidate is not None and candidate > 0 and trial_balance(investment_income) > 0:
        contribution = candidate

    asset.amounts[year] = previous + investment_income + contribution
    return investment_income, contribution

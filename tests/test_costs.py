"""Tests for the revenue-proportional cost resolver."""

from cashflow_sim_jp.costs import resolve_revenue_cost, revenue_cost_for_year, target_revenue
from cashflow_sim_jp.models import CostSettings, ExpenseItem, IncomeItem, IncomeRole

YEARS = range(2025, 2036)


def _revenue(amount=1000, id_="revenue") -> IncomeItem:
    return IncomeItem(id=id_, name="売上", role=IncomeRole.REVENUE, amounts={y: amount for y in YEARS})


class TestRevenueCost:
    def setup_method(self):
        self.income = [_revenue()]

    def test_base_ratio(self):
        settings = CostSettings(cost_ratio=60)
        assert revenue_cost_for_year(settings, self.income, 2025, 2025) == 600

    def test_monotonic_then_capped(self):
        """原価率+5pt/年、上限800 → 600, 650, 700, 750, 800, 800, ..."""
        settings = CostSettings(cost_ratio=60, cost_increase_rate=5, max_cost_amount=800)
        costs = [revenue_cost_for_year(settings, self.income, y, 2025) for y in YEARS]
        assert costs[:5] == [600, 650, 700, 750, 800]
        for prev, cur in zip(costs, costs[1:]):
            assert cur >= prev
        assert all(c == 800 for c in costs[4:])
        assert max(costs) <= 800

    def test_zero_revenue(self):
        settings = CostSettings(cost_ratio=60)
        assert revenue_cost_for_year(settings, [], 2025, 2025) == 0

    def test_floored(self):
        settings = CostSettings(cost_ratio=33.3)
        assert revenue_cost_for_year(settings, [_revenue(10)], 2025, 2025) == 3


class TestTargetRevenue:
    def test_all_income_when_no_targets(self):
        income = [_revenue(1000), _revenue(200, "consulting")]
        assert target_revenue(CostSettings(), income, 2025) == 1200

    def test_selected_targets(self):
        income = [_revenue(1000), _revenue(200, "consulting")]
        settings = CostSettings(target_income_ids=["consulting"])
        assert target_revenue(settings, income, 2025) == 200

    def test_missing_target_contributes_zero(self):
        settings = CostSettings(target_income_ids=["revenue", "deleted"])
        assert target_revenue(settings, [_revenue(1000)], 2025) == 1000


class TestResolveRevenueCost:
    def test_writes_amount(self):
        expense = ExpenseItem(id="cogs", name="原価", category="cost", cost_settings=CostSettings(cost_ratio=50))
        assert resolve_revenue_cost(expense, [_revenue()], 2026, 2025) == 500
        assert expense.amounts[2026] == 500

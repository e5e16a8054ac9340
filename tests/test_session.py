"""Tests for the Simulator session (setters, resynthesis, last-good-table policy)."""

import dataclasses

import pytest
from cashflow_sim_jp.models import (
    ExpenseData,
    ExpenseItem,
    ExpenseRole,
    IncomeData,
    IncomeItem,
    IncomeRole,
    LifeEvent,
)
from cashflow_sim_jp.params import BasicInfo, Parameters
from cashflow_sim_jp.scenario import Scenario
from cashflow_sim_jp.session import Simulator

YEARS = [2025, 2026, 2027]


def _scenario() -> Scenario:
    return Scenario(
        basic_info=BasicInfo(current_age=30, death_age=32, start_year=2025),
        parameters=Parameters(inflation_rate=0),
        income_data=IncomeData(personal=[
            IncomeItem(id="salary", name="給与収入", role=IncomeRole.PRIMARY_WAGE,
                       amounts={y: 400 for y in YEARS}),
        ]),
        expense_data=ExpenseData(personal=[
            ExpenseItem(id="living", name="生活費", category="living", role=ExpenseRole.LIVING,
                        amounts={y: 100 for y in YEARS}, raw_amounts={y: 100 for y in YEARS}),
        ]),
    )


class TestRecompute:
    def setup_method(self):
        self.sim = Simulator(_scenario())

    def test_initial_table(self):
        assert sorted(self.sim.cash_flow) == YEARS
        assert self.sim.cash_flow[2025].personal_balance == pytest.approx(300)

    def test_setter_resynthesizes(self):
        income = IncomeData(personal=[
            IncomeItem(id="salary", name="給与収入", role=IncomeRole.PRIMARY_WAGE,
                       amounts={y: 500 for y in YEARS}),
        ])
        assert self.sim.set_income_data(income)
        assert self.sim.cash_flow[2025].personal_balance == pytest.approx(400)

    def test_invalid_horizon_keeps_previous_table(self):
        """想定寿命 < 現在年齢 → 更新失敗、前回の表を維持"""
        before = self.sim.cash_flow
        info = dataclasses.replace(self.sim.scenario.basic_info, death_age=20)
        assert self.sim.set_basic_info(info) is False
        assert self.sim.cash_flow is before
        assert sorted(self.sim.cash_flow) == YEARS

    def test_synthesis_error_keeps_previous_table(self, monkeypatch, caplog):
        before = self.sim.cash_flow

        def boom(scenario):
            raise RuntimeError("broken")

        monkeypatch.setattr("cashflow_sim_jp.session.synthesize", boom)
        assert self.sim.set_expense_data(ExpenseData()) is False
        assert self.sim.cash_flow is before
        assert "synthesis failed" in caplog.text

    def test_horizon_change(self):
        info = dataclasses.replace(self.sim.scenario.basic_info, death_age=34)
        assert self.sim.set_basic_info(info)
        assert sorted(self.sim.cash_flow) == list(range(2025, 2030))


class TestParameters:
    def test_reinflates_expenses(self):
        """インフレ率10%に変更 → 生活費 100, 110, 121"""
        sim = Simulator(_scenario())
        assert sim.set_parameters(Parameters(inflation_rate=10))
        living = sim.scenario.expense_data.personal[0]
        assert [living.amounts[y] for y in YEARS] == pytest.approx([100, 110, 121])
        assert sim.cash_flow[2027].personal_balance == pytest.approx(279)

    def test_previous_snapshot_untouched(self):
        sim = Simulator(_scenario())
        old = sim.scenario
        sim.set_parameters(Parameters(inflation_rate=10))
        assert old.expense_data.personal[0].amounts[2027] == 100


class TestLifeEvents:
    def test_add_and_remove(self):
        sim = Simulator(_scenario())
        event = LifeEvent(year=2026, description="結婚式", kind="expense", category="wedding", amount=300)
        sim.add_life_event(event)
        assert sim.cash_flow[2026].life_event_expense == pytest.approx(300)
        sim.remove_life_event(0)
        assert sim.scenario.life_events == ()
        assert sim.cash_flow[2026].life_event_expense == 0


class TestManualOverride:
    def test_overwritten_by_recompute(self):
        sim = Simulator(_scenario())
        sim.update_cash_flow_value(2025, "personal_balance", 999)
        assert sim.cash_flow[2025].personal_balance == pytest.approx(300)

    def test_unknown_field(self):
        sim = Simulator(_scenario())
        with pytest.raises(ValueError, match="不明な項目"):
            sim.update_cash_flow_value(2025, "no_such_field", 1)


class TestDerivedLinks:
    def test_linked_expense_folded_back_once(self):
        scenario = dataclasses.replace(_scenario(), income_data=IncomeData(personal=[
            IncomeItem(id="exec", name="役員報酬", is_corporate_salary=True,
                       corporate_salary_type="full-time", amounts={y: 400 for y in YEARS}),
        ]))
        sim = Simulator(scenario)
        sim.recompute()
        assert [e.id for e in sim.scenario.expense_data.corporate] == ["linked_expense_exec"]
        assert sim.scenario.income_data.personal[0].linked_expense_id == "linked_expense_exec"
        # 手取り換算は結果側のみ
        assert sim.scenario.income_data.personal[0].amounts[2025] == 400
        assert sim.cash_flow[2025].corporate_expense == pytest.approx(459)

    def _with_director(self) -> Simulator:
        scenario = dataclasses.replace(_scenario(), income_data=IncomeData(personal=[
            IncomeItem(id="exec", name="役員報酬", is_corporate_salary=True,
                       corporate_salary_type="full-time", amounts={y: 400 for y in YEARS}),
        ]))
        return Simulator(scenario)

    def test_removed_salary_drops_linked_expense(self):
        sim = self._with_director()
        assert sim.set_income_data(IncomeData(personal=[]))
        assert sim.scenario.expense_data.corporate == []
        assert [sim.cash_flow[y].corporate_expense for y in YEARS] == [0, 0, 0]

    def test_unflagged_salary_drops_linked_expense(self):
        sim = self._with_director()
        income = dataclasses.replace(sim.scenario.income_data.personal[0], is_corporate_salary=False)
        assert sim.set_income_data(IncomeData(personal=[income]))
        assert sim.scenario.expense_data.corporate == []
        assert sim.cash_flow[2025].corporate_expense == 0

"""Interactive session over a scenario snapshot.

Every setter replaces one part of the snapshot and resynthesizes the whole
horizon. A failed synthesis is logged and leaves the previous table in place.
"""

import dataclasses
import logging

from cashflow_sim_jp.autofill import reinflate_expenses
from cashflow_sim_jp.models import (
    AssetData,
    CashFlowRecord,
    ExpenseData,
    IncomeData,
    LiabilityData,
    LifeEvent,
    record_fields,
)
from cashflow_sim_jp.params import BasicInfo, Parameters, round1
from cashflow_sim_jp.scenario import Scenario, initialize_scenario, validate_scenario
from cashflow_sim_jp.synthesis import SynthesisResult, synthesize

logger = logging.getLogger(__name__)


class Simulator:
    """Holds the canonical scenario and the last successfully synthesized table."""

    def __init__(self, scenario: Scenario | None = None):
        self.scenario = scenario if scenario is not None else initialize_scenario()
        self.cash_flow: dict[int, CashFlowRecord] = {}
        self.result: SynthesisResult | None = None
        self.recompute()

    def recompute(self) -> bool:
        """Resynthesize the table. Returns False (table unchanged) on failure."""
        try:
            validate_scenario(self.scenario)
            result = synthesize(self.scenario)
        except Exception:
            logger.exception("cash-flow synthesis failed; keeping the previous table")
            return False
        self.scenario = self.scenario.with_derived_links(result)
        self.result = result
        self.cash_flow = result.records
        return True

    def _replace(self, **changes) -> bool:
        self.scenario = dataclasses.replace(self.scenario, **changes)
        return self.recompute()

    def set_basic_info(self, basic_info: BasicInfo) -> bool:
        return self._replace(basic_info=basic_info)

    def set_parameters(self, parameters: Parameters) -> bool:
        """Replace the parameters and re-derive expense amounts from their raw inputs."""
        expense_data = reinflate_expenses(
            dataclasses.replace(
                self.scenario.expense_data,
                personal=[dataclasses.replace(e, amounts=dict(e.amounts))
                          for e in self.scenario.expense_data.personal],
                corporate=[dataclasses.replace(e, amounts=dict(e.amounts))
                           for e in self.scenario.expense_data.corporate],
            ),
            parameters,
            self.scenario.basic_info.start_year,
        )
        return self._replace(parameters=parameters, expense_data=expense_data)

    def set_income_data(self, income_data: IncomeData) -> bool:
        return self._replace(income_data=income_data)

    def set_expense_data(self, expense_data: ExpenseData) -> bool:
        return self._replace(expense_data=expense_data)

    def set_asset_data(self, asset_data: AssetData) -> bool:
        return self._replace(asset_data=asset_data)

    def set_liability_data(self, liability_data: LiabilityData) -> bool:
        return self._replace(liability_data=liability_data)

    def add_life_event(self, event: LifeEvent) -> bool:
        return self._replace(life_events=self.scenario.life_events + (event,))

    def remove_life_event(self, index: int) -> bool:
        events = list(self.scenario.life_events)
        del events[index]
        return self._replace(life_events=tuple(events))

    def update_cash_flow_value(self, year: int, field_name: str, value: float) -> bool:
        """Write a value into the table, then resynthesize.

        The table is fully derived, so the written value is overwritten by the
        recomputation unless the synthesis fails.
        """
        if field_name not in record_fields():
            raise ValueError(f"不明な項目です: {field_name}")
        record = self.cash_flow.get(year)
        if record is not None:
            setattr(record, field_name, round1(value))
        return self.recompute()

    def table(self) -> list[CashFlowRecord]:
        return [self.cash_flow[year] for year in sorted(self.cash_flow)]

"""Year-by-year cash-flow synthesis.

``synthesize(scenario)`` derives the complete cash-flow table from one scenario
snapshot. Input collections are deep-copied first; every derived value (linked
salary expenses, revenue costs, asset balances, resolved social-insurance
flags) lives on those working copies and is returned in the result.

Per simulated year the stages below run in order on a ``YearContext``;
later stages read buckets filled by earlier ones.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Callable

from cashflow_sim_jp.assets import accumulate_income_linked, grow_ordinary_assets
from cashflow_sim_jp.costs import resolve_revenue_cost
from cashflow_sim_jp.linker import link_corporate_salaries
from cashflow_sim_jp.loans import (
    LoanSchedule,
    annual_repayments,
    build_balance_schedules,
    build_schedules,
    liability_total,
)
from cashflow_sim_jp.models import (
    EMPLOYEE_SALARY_CATEGORY,
    SECTIONS,
    AssetData,
    CashFlowRecord,
    ExpenseData,
    ExpenseRole,
    IncomeData,
    IncomeRole,
    LiabilityData,
)
from cashflow_sim_jp.params import round1
from cashflow_sim_jp.pension import pension_benefit_for_year, spouse_pension_for_year
from cashflow_sim_jp.scenario import Scenario
from cashflow_sim_jp.tax import CorporateTaxResult, corporate_tax, net_income_for_director

logger = logging.getLogger(__name__)

# Record fields kept at the tax formula's own precision
_TAX_FIELDS = frozenset({
    "corporate_pretax_profit",
    "corporate_tax",
    "corporate_local_tax",
    "corporate_resident_tax_equal",
    "corporate_resident_tax_proportional",
    "corporate_total_tax",
    "corporate_aftertax_profit",
    "corporate_effective_tax_rate",
})


@dataclass
class SynthesisResult:
    """Cash-flow table plus the derived view of the working collections."""

    records: dict[int, CashFlowRecord]
    income_data: IncomeData
    expense_data: ExpenseData
    asset_data: AssetData
    loan_schedules: dict[str, dict[str, LoanSchedule]]
    social_insurance: dict[str, dict[int, bool]]

    def table(self) -> list[CashFlowRecord]:
        return [self.records[year] for year in sorted(self.records)]


@dataclass
class SynthesisState:
    """Inputs and cross-year accumulators of one synthesis pass."""

    scenario: Scenario
    income_data: IncomeData
    expense_data: ExpenseData
    asset_data: AssetData
    liability_data: LiabilityData
    loan_schedules: dict[str, dict[str, LoanSchedule]]
    repayments: dict[str, dict[int, float]]
    # 住宅ローン等、残高のみ追跡する返済予定
    balance_schedules: dict[str, dict[str, LoanSchedule]] = field(default_factory=dict)
    total_assets: dict[str, float] = field(default_factory=dict)
    tracked_assets: dict[str, float] = field(default_factory=dict)
    # 投資口座ライフイベントの累計
    investment_events: dict[str, float] = field(
        default_factory=lambda: {section: 0.0 for section in SECTIONS}
    )

    @property
    def start_year(self) -> int:
        return self.scenario.basic_info.start_year


@dataclass
class YearContext:
    """Working buckets for one simulated year."""

    year: int
    index: int
    age: int

    # Personal income
    main_income: float = 0.0
    side_income: float = 0.0
    other_income: float = 0.0
    spouse_income: float = 0.0
    pension_income: float = 0.0
    spouse_pension_income: float = 0.0
    investment_income: float = 0.0
    life_event_income: float = 0.0
    # Corporate income
    corporate_income: float = 0.0
    corporate_other_income: float = 0.0
    corporate_investment_income: float = 0.0
    corporate_life_event_income: float = 0.0
    # Personal expense
    living_expense: float = 0.0
    housing_expense: float = 0.0
    education_expense: float = 0.0
    other_expense: float = 0.0
    life_event_expense: float = 0.0
    loan_repayment: float = 0.0
    investment_amount: float = 0.0
    # Corporate expense
    corporate_expense: float = 0.0
    corporate_other_expense: float = 0.0
    corporate_cost: float = 0.0
    corporate_life_event_expense: float = 0.0
    corporate_loan_repayment: float = 0.0
    corporate_investment_amount: float = 0.0
    # Investment-account life events (net, outside the cash balance)
    personal_investment_event: float = 0.0
    corporate_investment_event: float = 0.0
    # Results
    personal_liability_total: float = 0.0
    corporate_liability_total: float = 0.0
    tax: CorporateTaxResult | None = None
    personal_balance: float = 0.0
    corporate_balance: float = 0.0
    personal_investment_assets: float = 0.0
    corporate_investment_assets: float = 0.0
    personal_total_assets: float = 0.0
    corporate_total_assets: float = 0.0

    @property
    def is_first_year(self) -> bool:
        return self.index == 0

    @property
    def personal_total_income(self) -> float:
        return (
            self.main_income + self.side_income + self.other_income + self.spouse_income
            + self.pension_income + self.spouse_pension_income
            + self.investment_income + self.life_event_income
        )

    @property
    def personal_total_expense(self) -> float:
        return (
            self.living_expense + self.housing_expense + self.education_expense
            + self.other_expense + self.investment_amount
            + self.life_event_expense + self.loan_repayment
        )

    @property
    def corporate_pretax_profit(self) -> float:
        income = (
            self.corporate_income + self.corporate_other_income
            + self.corporate_investment_income + self.corporate_life_event_income
        )
        expense = (
            self.corporate_expense + self.corporate_other_expense + self.corporate_cost
            + self.corporate_investment_amount + self.corporate_life_event_expense
            + self.corporate_loan_repayment
        )
        return income - expense

    def trial_balance(self, section: str, extra_income: float, state: SynthesisState) -> float:
        """Tentative section balance with extra_income added, before any further contribution."""
        if section == "personal":
            return self.personal_total_income + extra_income - self.personal_total_expense
        settings = state.scenario.parameters.corporate_tax_settings
        return corporate_tax(self.corporate_pretax_profit + extra_income, settings).aftertax_profit


# ---------------------------------------------------------------------------
# Setup (once per pass)
# ---------------------------------------------------------------------------

def _fill_pension_amounts(scenario: Scenario, income_data: IncomeData, years: list[int]) -> None:
    """Write auto-calculated pension amounts for the whole horizon."""
    info = scenario.basic_info
    for item in income_data.personal:
        if not item.is_auto_calculated:
            continue
        if item.role == IncomeRole.PENSION:
            formula = pension_benefit_for_year
        elif item.role == IncomeRole.SPOUSE_PENSION:
            formula = spouse_pension_for_year
        else:
            continue
        for year in years:
            item.amounts[year] = formula(info, income_data, year)


def _prepare(scenario: Scenario) -> tuple[SynthesisState, dict[str, dict[int, bool]]]:
    info = scenario.basic_info
    years = info.simulation_years()
    income_data = copy.deepcopy(scenario.income_data)
    expense_data = copy.deepcopy(scenario.expense_data)
    asset_data = copy.deepcopy(scenario.asset_data)
    liability_data = copy.deepcopy(scenario.liability_data)

    social_insurance = link_corporate_salaries(income_data, expense_data, years)

    loan_schedules = {s: build_schedules(liability_data.section(s)) for s in SECTIONS}
    repayments = {
        s: annual_repayments(loan_schedules[s], info.start_year, info.end_year)
        for s in SECTIONS
    }

    _fill_pension_amounts(scenario, income_data, years)

    state = SynthesisState(
        scenario=scenario,
        income_data=income_data,
        expense_data=expense_data,
        asset_data=asset_data,
        liability_data=liability_data,
        loan_schedules=loan_schedules,
        repayments=repayments,
        balance_schedules={s: build_balance_schedules(liability_data.section(s)) for s in SECTIONS},
    )
    for section in SECTIONS:
        opening = sum(a.amounts.get(info.start_year, 0.0) for a in asset_data.section(section))
        state.total_assets[section] = opening
        state.tracked_assets[section] = opening
    return state, social_insurance


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def _aggregate_personal_income(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    year = ctx.year
    for item in state.income_data.personal:
        if item.is_corporate_salary:
            face = item.face_amount(year)
            item.original_amounts.setdefault(year, face)
            has_insurance = social_insurance.get(item.id, {}).get(year, False)
            net = net_income_for_director(face, has_insurance).net_income if face > 0 else 0.0
            item.amounts[year] = net
        amount = item.amounts.get(year, 0.0)
        if item.role == IncomeRole.PRIMARY_WAGE:
            ctx.main_income += amount
        elif item.role in (IncomeRole.SIDE, IncomeRole.BUSINESS):
            ctx.side_income += amount
        elif item.role == IncomeRole.SPOUSE_WAGE:
            ctx.spouse_income += amount
        elif item.role == IncomeRole.PENSION:
            ctx.pension_income += amount
        elif item.role == IncomeRole.SPOUSE_PENSION:
            ctx.spouse_pension_income += amount
        else:
            ctx.other_income += amount


def _aggregate_corporate_income(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    for item in state.income_data.corporate:
        amount = item.amounts.get(ctx.year, 0.0)
        if item.role == IncomeRole.REVENUE:
            ctx.corporate_income += amount
        else:
            ctx.corporate_other_income += amount


def _grow_assets(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    fallback = state.scenario.parameters.investment_return
    ctx.investment_income += grow_ordinary_assets(
        state.asset_data.personal, ctx.year, ctx.is_first_year, fallback,
    )
    ctx.corporate_investment_income += grow_ordinary_assets(
        state.asset_data.corporate, ctx.year, ctx.is_first_year, fallback,
    )


def _spouse_living_supplement(ctx: YearContext, state: SynthesisState) -> float:
    info = state.scenario.basic_info
    marriage_year = info.marriage_year()
    if marriage_year is None or info.spouse_info is None or ctx.year < marriage_year:
        return 0.0
    monthly = info.spouse_info.additional_expense or 0.0
    return monthly * 12 * state.scenario.parameters.inflation_factor(ctx.year - info.start_year)


def _aggregate_expenses(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    year = ctx.year
    for item in state.expense_data.personal:
        amount = item.amounts.get(year, 0.0)
        if item.role == ExpenseRole.LIVING:
            ctx.living_expense += amount
        elif item.role == ExpenseRole.HOUSING:
            ctx.housing_expense += amount
        elif item.role == ExpenseRole.EDUCATION:
            ctx.education_expense += amount
        else:
            ctx.other_expense += amount
    ctx.living_expense += _spouse_living_supplement(ctx, state)

    for item in state.expense_data.corporate:
        if item.is_revenue_cost:
            ctx.corporate_cost += resolve_revenue_cost(
                item, state.income_data.corporate, year, state.start_year,
            )
            continue
        amount = item.amounts.get(year, 0.0)
        if item.role == ExpenseRole.BUSINESS or item.category == EMPLOYEE_SALARY_CATEGORY:
            ctx.corporate_expense += amount
        else:
            ctx.corporate_other_expense += amount


def _apply_life_events(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    for event in state.scenario.life_events:
        if event.year != ctx.year:
            continue
        if event.is_investment:
            if event.section == "personal":
                ctx.personal_investment_event += event.signed_amount
            else:
                ctx.corporate_investment_event += event.signed_amount
        elif event.section == "personal":
            if event.kind == "income":
                ctx.life_event_income += event.amount
            else:
                ctx.life_event_expense += event.amount
        elif event.kind == "income":
            ctx.corporate_life_event_income += event.amount
        else:
            ctx.corporate_life_event_expense += event.amount


def _apply_loan_repayment(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    ctx.loan_repayment = state.repayments["personal"].get(ctx.year, 0.0)
    ctx.corporate_loan_repayment = state.repayments["corporate"].get(ctx.year, 0.0)


def _accumulate_income_linked(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    fallback = state.scenario.parameters.investment_return
    for section in SECTIONS:
        trial: Callable[[float], float] = (
            lambda extra, section=section: ctx.trial_balance(section, extra, state)
        )
        for asset in state.asset_data.section(section):
            if not asset.is_income_linked:
                continue
            investment_income, contribution = accumulate_income_linked(
                asset,
                ctx.year,
                is_first_year=ctx.is_first_year,
                fallback_return=fallback,
                income_data=state.income_data,
                section=section,
                trial_balance=trial,
            )
            if section == "personal":
                ctx.investment_income += investment_income
                ctx.investment_amount += contribution
            else:
                ctx.corporate_investment_income += investment_income
                ctx.corporate_investment_amount += contribution


def _total_liabilities(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    totals = {}
    for section in SECTIONS:
        schedules = {**state.balance_schedules.get(section, {}), **state.loan_schedules[section]}
        totals[section] = liability_total(state.liability_data.section(section), schedules, ctx.year)
    ctx.personal_liability_total = totals["personal"]
    ctx.corporate_liability_total = totals["corporate"]


def _apply_corporate_tax(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    settings = state.scenario.parameters.corporate_tax_settings
    ctx.tax = corporate_tax(ctx.corporate_pretax_profit, settings)


def _settle_balances(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    ctx.personal_balance = ctx.personal_total_income - ctx.personal_total_expense
    ctx.corporate_balance = ctx.tax.aftertax_profit


def _accumulate_asset_totals(ctx: YearContext, state: SynthesisState, social_insurance) -> None:
    """Running total = previous + balance + change of the tracked asset balances.

    Investment-account life events add to the invested and total assets only.
    """
    balances = {"personal": ctx.personal_balance, "corporate": ctx.corporate_balance}
    events = {"personal": ctx.personal_investment_event, "corporate": ctx.corporate_investment_event}
    for section in SECTIONS:
        assets = state.asset_data.section(section)
        tracked = sum(a.amounts.get(ctx.year, 0.0) for a in assets)
        delta = tracked - state.tracked_assets[section]
        state.tracked_assets[section] = tracked
        state.investment_events[section] += events[section]
        state.total_assets[section] += balances[section] + delta + events[section]
        investment = state.investment_events[section] + sum(
            a.amounts.get(ctx.year, 0.0) for a in assets if a.is_investment or a.is_income_linked
        )
        if section == "personal":
            ctx.personal_investment_assets = investment
        else:
            ctx.corporate_investment_assets = investment
    ctx.personal_total_assets = state.total_assets["personal"]
    ctx.corporate_total_assets = state.total_assets["corporate"]


Stage = Callable[[YearContext, SynthesisState, dict], None]

STAGES: tuple[tuple[str, Stage], ...] = (
    ("personal_income", _aggregate_personal_income),
    ("corporate_income", _aggregate_corporate_income),
    ("asset_growth", _grow_assets),
    ("expenses", _aggregate_expenses),
    ("life_events", _apply_life_events),
    ("loan_repayment", _apply_loan_repayment),
    ("income_linked_investment", _accumulate_income_linked),
    ("liabilities", _total_liabilities),
    ("corporate_tax", _apply_corporate_tax),
    ("balances", _settle_balances),
    ("asset_totals", _accumulate_asset_totals),
)


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

def _record_values(ctx: YearContext) -> dict[str, float]:
    """Unrounded record fields of a settled year."""
    tax = ctx.tax
    return {
        "main_income": ctx.main_income,
        "side_income": ctx.side_income + ctx.other_income,
        "spouse_income": ctx.spouse_income,
        "pension_income": ctx.pension_income,
        "spouse_pension_income": ctx.spouse_pension_income,
        "investment_income": ctx.investment_income,
        "life_event_income": ctx.life_event_income,
        "living_expense": ctx.living_expense,
        "housing_expense": ctx.housing_expense,
        "education_expense": ctx.education_expense,
        "other_expense": ctx.other_expense,
        "life_event_expense": ctx.life_event_expense,
        "loan_repayment": ctx.loan_repayment,
        "investment_amount": ctx.investment_amount,
        "personal_total_income": ctx.personal_total_income,
        "personal_total_expense": ctx.personal_total_expense,
        "personal_balance": ctx.personal_balance,
        "personal_investment_assets": ctx.personal_investment_assets,
        "personal_total_assets": ctx.personal_total_assets,
        "personal_liability_total": ctx.personal_liability_total,
        "personal_net_assets": ctx.personal_total_assets - ctx.personal_liability_total,
        "corporate_income": ctx.corporate_income,
        "corporate_other_income": ctx.corporate_other_income,
        "corporate_investment_income": ctx.corporate_investment_income,
        "corporate_life_event_income": ctx.corporate_life_event_income,
        "corporate_expense": ctx.corporate_expense,
        "corporate_other_expense": ctx.corporate_other_expense,
        "corporate_cost": ctx.corporate_cost,
        "corporate_life_event_expense": ctx.corporate_life_event_expense,
        "corporate_loan_repayment": ctx.corporate_loan_repayment,
        "corporate_investment_amount": ctx.corporate_investment_amount,
        "corporate_pretax_profit": tax.pretax_profit,
        "corporate_tax": tax.corporate_tax,
        "corporate_local_tax": tax.local_corporate_tax,
        "corporate_resident_tax_equal": tax.resident_tax_equal,
        "corporate_resident_tax_proportional": tax.resident_tax_proportional,
        "corporate_total_tax": tax.total_tax,
        "corporate_aftertax_profit": tax.aftertax_profit,
        "corporate_effective_tax_rate": tax.effective_tax_rate,
        "corporate_balance": ctx.corporate_balance,
        "corporate_investment_assets": ctx.corporate_investment_assets,
        "corporate_total_assets": ctx.corporate_total_assets,
        "corporate_liability_total": ctx.corporate_liability_total,
        "corporate_net_assets": ctx.corporate_total_assets - ctx.corporate_liability_total,
    }


def _build_record(ctx: YearContext) -> CashFlowRecord:
    rounded = {
        name: value if name in _TAX_FIELDS else round1(value)
        for name, value in _record_values(ctx).items()
    }
    return CashFlowRecord(year=ctx.year, age=ctx.age, **rounded)


def synthesize(scenario: Scenario) -> SynthesisResult:
    """Derive the cash-flow table for the whole horizon from a snapshot.

    Pure with respect to ``scenario``: identical snapshots give identical tables.
    """
    info = scenario.basic_info
    state, social_insurance = _prepare(scenario)

    records: dict[int, CashFlowRecord] = {}
    for index, year in enumerate(info.simulation_years()):
        ctx = YearContext(year=year, index=index, age=info.age_in(year))
        for _name, stage in STAGES:
            stage(ctx, state, social_insurance)
        records[year] = _build_record(ctx)

    logger.debug("synthesized %d years (%d-%d)", len(records), info.start_year, info.end_year)
    return SynthesisResult(
        records=records,
        income_data=state.income_data,
        expense_data=state.expense_data,
        asset_data=state.asset_data,
        loan_schedules=state.loan_schedules,
        social_insurance=social_insurance,
    )

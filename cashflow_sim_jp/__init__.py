"""Personal and Corporate Cash-Flow Simulation Package."""

from cashflow_sim_jp.params import (
    BasicInfo,
    Parameters,
    CorporateTaxSettings,
    HousingInfo,
    RentInfo,
    OwnInfo,
    SpouseInfo,
    ChildInfo,
    PlannedChildInfo,
    EducationPlan,
    validate_horizon,
)
from cashflow_sim_jp.models import (
    IncomeItem,
    ExpenseItem,
    AssetItem,
    LiabilityItem,
    LifeEvent,
    CostSettings,
    IncomeData,
    ExpenseData,
    AssetData,
    LiabilityData,
    IncomeRole,
    ExpenseRole,
    CashFlowRecord,
)
from cashflow_sim_jp.scenario import (
    Scenario,
    initialize_scenario,
    validate_scenario,
    load_scenario,
    save_scenario,
)
from cashflow_sim_jp.synthesis import SynthesisResult, synthesize
from cashflow_sim_jp.session import Simulator
from cashflow_sim_jp.tax import (
    net_income_from_gross_salary,
    net_income_for_director,
    employer_cost_for_salary,
    corporate_tax,
)

__all__ = [
    "BasicInfo",
    "Parameters",
    "CorporateTaxSettings",
    "HousingInfo",
    "RentInfo",
    "OwnInfo",
    "SpouseInfo",
    "ChildInfo",
    "PlannedChildInfo",
    "EducationPlan",
    "validate_horizon",
    "IncomeItem",
    "ExpenseItem",
    "AssetItem",
    "LiabilityItem",
    "LifeEvent",
    "CostSettings",
    "IncomeData",
    "ExpenseData",
    "AssetData",
    "LiabilityData",
    "IncomeRole",
    "ExpenseRole",
    "CashFlowRecord",
    "Scenario",
    "initialize_scenario",
    "validate_scenario",
    "load_scenario",
    "save_scenario",
    "SynthesisResult",
    "synthesize",
    "Simulator",
    "net_income_from_gross_salary",
    "net_income_for_director",
    "employer_cost_for_salary",
    "corporate_tax",
]

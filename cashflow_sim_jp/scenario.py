"""Scenario snapshot: default seeding, validation, and JSON persistence.

A ``Scenario`` bundles BasicInfo, Parameters, the four entity collections and
the life events. It is treated as immutable: editing produces a new snapshot
via ``dataclasses.replace`` (see ``session.Simulator``). The cash-flow table is
never persisted; it is regenerated from the snapshot on load.
"""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from cashflow_sim_jp.education import education_expense_for_year
from cashflow_sim_jp.housing import housing_expense_for_year
from cashflow_sim_jp.models import (
    EXPENSE_ROLE_NAMES,
    HOUSING_LOAN_NAMES,
    INCOME_ROLE_NAMES,
    SECTIONS,
    AssetData,
    AssetItem,
    CostSettings,
    ExpenseData,
    ExpenseItem,
    ExpenseRole,
    IncomeData,
    IncomeItem,
    IncomeRole,
    LiabilityData,
    LiabilityItem,
    LifeEvent,
)
from cashflow_sim_jp.params import (
    BasicInfo,
    ChildInfo,
    CorporateTaxSettings,
    EducationPlan,
    HousingInfo,
    OwnInfo,
    Parameters,
    PlannedChildInfo,
    RentInfo,
    SpouseInfo,
    round1,
    validate_horizon,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Scenario:
    basic_info: BasicInfo = field(default_factory=BasicInfo)
    parameters: Parameters = field(default_factory=Parameters)
    income_data: IncomeData = field(default_factory=IncomeData)
    expense_data: ExpenseData = field(default_factory=ExpenseData)
    asset_data: AssetData = field(default_factory=AssetData)
    liability_data: LiabilityData = field(default_factory=LiabilityData)
    life_events: tuple[LifeEvent, ...] = ()

    def with_derived_links(self, result) -> "Scenario":
        """Fold the linker's output back into a new snapshot.

        Only the resolved social-insurance flags, ``linked_expense_id`` and the
        linked corporate expense items are taken from ``result``; every other
        derived value stays in the result.
        """
        income_data = dataclasses.replace(
            self.income_data,
            personal=[dataclasses.replace(item) for item in self.income_data.personal],
        )
        for item in income_data.personal:
            flags = result.social_insurance.get(item.id)
            if flags is None:
                continue
            derived = next(i for i in result.income_data.personal if i.id == item.id)
            item.social_insurance_by_year = dict(derived.social_insurance_by_year)
            item.linked_expense_id = derived.linked_expense_id

        # 給与項目が消えた連動経費は結果側に存在しないため落とす
        linked = {e.id: e for e in result.expense_data.corporate if e.is_linked_from_income}
        corporate = []
        for expense in self.expense_data.corporate:
            if expense.is_linked_from_income:
                if expense.id in linked:
                    corporate.append(linked.pop(expense.id))
                continue
            corporate.append(expense)
        corporate.extend(linked.values())
        expense_data = dataclasses.replace(self.expense_data, corporate=corporate)
        return dataclasses.replace(self, income_data=income_data, expense_data=expense_data)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_scenario(scenario: Scenario) -> None:
    """Reject input the synthesis assumes valid. Raises ValueError."""
    validate_horizon(scenario.basic_info)
    for section in SECTIONS:
        for item in scenario.liability_data.section(section):
            if not item.auto_calculate:
                continue
            if item.term_years is not None and item.term_years <= 0:
                raise ValueError(f"負債「{item.name}」の返済期間は1年以上にしてください: {item.term_years}")
            if item.original_amount is not None and item.original_amount < 0:
                raise ValueError(f"負債「{item.name}」の借入額が負です: {item.original_amount}")


# ---------------------------------------------------------------------------
# Default seeding
# ---------------------------------------------------------------------------

def _default_income(info: BasicInfo, params: Parameters) -> IncomeData:
    def item(id_, name, kind, role, **kw):
        return IncomeItem(
            id=id_, name=name, kind=kind, role=role,
            investment_ratio=params.investment_ratio,
            max_investment_amount=params.max_investment_amount,
            **kw,
        )

    personal = [
        item("salary", "給与収入", "wage", IncomeRole.PRIMARY_WAGE),
        item("business", "事業収入", "profit", IncomeRole.BUSINESS),
        item("side", "副業収入", "side", IncomeRole.SIDE),
        item("pension", "年金収入", "other", IncomeRole.PENSION, is_auto_calculated=True),
    ]
    if info.marital_status != "single":
        personal.append(item("spouse_salary", "配偶者収入", "wage", IncomeRole.SPOUSE_WAGE))
        personal.append(item(
            "spouse_pension", "配偶者年金収入", "other", IncomeRole.SPOUSE_PENSION,
            is_auto_calculated=True,
        ))
    corporate = [
        item("revenue", "売上", "profit", IncomeRole.REVENUE),
        item("corporate_other_income", "その他収入", "other", IncomeRole.OTHER),
    ]
    return IncomeData(personal=personal, corporate=corporate)


def _default_expense(info: BasicInfo, params: Parameters) -> ExpenseData:
    living = ExpenseItem("living", "生活費", kind="living", category="living", role=ExpenseRole.LIVING)
    housing = ExpenseItem("housing", "住居費", kind="housing", category="housing", role=ExpenseRole.HOUSING)
    education = ExpenseItem(
        "education", "教育費", kind="education", category="education", role=ExpenseRole.EDUCATION,
    )
    other = ExpenseItem("personal_other_expense", "その他", kind="other", category="other")

    base_living = info.monthly_living_expense * 12
    for year in info.simulation_years():
        elapsed = year - info.start_year
        living.raw_amounts[year] = base_living
        living.amounts[year] = round1(base_living * params.inflation_factor(elapsed))
        housing_cost = housing_expense_for_year(info.housing_info, year, info.start_year)
        housing.raw_amounts[year] = housing_cost
        housing.amounts[year] = housing_cost
        education_cost = education_expense_for_year(info, year, params.education_cost_increase_rate)
        education.raw_amounts[year] = education_cost
        education.amounts[year] = education_cost

    corporate = [
        ExpenseItem("business_expense", "事業経費", kind="other", category="business", role=ExpenseRole.BUSINESS),
        ExpenseItem("office_expense", "その他経費", kind="other", category="office"),
    ]
    return ExpenseData(personal=[living, housing, education, other], corporate=corporate)


def _default_assets(info: BasicInfo) -> AssetData:
    personal = [
        AssetItem("cash", "現金・預金", kind="cash", investment_return=0.1),
        AssetItem("investment", "投資資産", kind="investment", is_investment=True, investment_return=5.0),
        AssetItem("real_estate", "不動産", kind="property", investment_return=3.0),
    ]
    corporate = [
        AssetItem("corporate_cash", "現金・預金", kind="cash", investment_return=0.1),
        AssetItem(
            "corporate_investment", "投資資産", kind="investment",
            is_investment=True, investment_return=5.0,
        ),
    ]
    own = info.housing_info.own if info.housing_info.type == "own" else None
    if own is not None:
        personal[2].amounts[own.purchase_year] = own.purchase_price
    return AssetData(personal=personal, corporate=corporate)


def _default_liabilities(info: BasicInfo) -> LiabilityData:
    # 住宅ローンの返済は住居費で計上済み
    housing_loan = LiabilityItem(
        "loan", "ローン", kind="loan", interest_rate=1.0, term_years=35,
        exclude_from_generic_amortization=True,
    )
    own = info.housing_info.own if info.housing_info.type == "own" else None
    if own is not None:
        housing_loan.amounts[own.purchase_year] = own.loan_amount
        # 残高推移の計算用（返済額は住居費側）
        housing_loan.original_amount = own.loan_amount
        housing_loan.start_year = own.purchase_year
        housing_loan.term_years = own.loan_term_years
        housing_loan.interest_rate = own.interest_rate
    personal = [housing_loan, LiabilityItem("credit", "クレジット残高", kind="credit")]
    corporate = [
        LiabilityItem("corporate_loan", "借入金", kind="loan", interest_rate=2.0, term_years=10),
        LiabilityItem("accounts_payable", "未払金", kind="other"),
    ]
    return LiabilityData(personal=personal, corporate=corporate)


def initialize_scenario(
    basic_info: BasicInfo | None = None, parameters: Parameters | None = None,
) -> Scenario:
    """Seed a scenario with the default line items for a subject profile."""
    info = basic_info or BasicInfo()
    params = parameters or Parameters()
    validate_horizon(info)
    return Scenario(
        basic_info=info,
        parameters=params,
        income_data=_default_income(info, params),
        expense_data=_default_expense(info, params),
        asset_data=_default_assets(info),
        liability_data=_default_liabilities(info),
    )


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def scenario_to_dict(scenario: Scenario) -> dict:
    data = dataclasses.asdict(scenario)
    data["life_events"] = list(data["life_events"])
    data["version"] = SCHEMA_VERSION
    return data


def _years(raw: dict | None, cast=float) -> dict:
    """JSON object keys are strings; per-year maps are keyed by int."""
    return {int(year): cast(value) for year, value in (raw or {}).items()}


def _known(cls, raw: dict) -> dict:
    names = {f.name for f in dataclasses.fields(cls)}
    unknown = set(raw) - names
    if unknown:
        logger.debug("%s: ignoring unknown fields %s", cls.__name__, sorted(unknown))
    return {k: v for k, v in raw.items() if k in names}


def _basic_info_from_dict(raw: dict) -> BasicInfo:
    raw = _known(BasicInfo, raw)
    housing_raw = raw.pop("housing_info", None) or {}
    housing_type = housing_raw.get("type", "rent")
    rent = housing_raw.get("rent")
    if rent is None and housing_type == "rent":
        rent = {}
    own = housing_raw.get("own")
    housing = HousingInfo(
        type=housing_type,
        rent=RentInfo(**_known(RentInfo, rent)) if rent is not None else None,
        own=OwnInfo(**_known(OwnInfo, own)) if own is not None else None,
    )
    spouse_raw = raw.pop("spouse_info", None)
    spouse = SpouseInfo(**_known(SpouseInfo, spouse_raw)) if spouse_raw is not None else None

    def plan(child: dict) -> EducationPlan:
        return EducationPlan(**_known(EducationPlan, child.get("education_plan") or {}))

    children = [
        ChildInfo(current_age=c.get("current_age", 0), education_plan=plan(c))
        for c in raw.pop("children", None) or []
    ]
    planned = [
        PlannedChildInfo(years_from_now=c.get("years_from_now", 1), education_plan=plan(c))
        for c in raw.pop("planned_children", None) or []
    ]
    return BasicInfo(
        housing_info=housing, spouse_info=spouse, children=children, planned_children=planned, **raw,
    )


def _parameters_from_dict(raw: dict) -> Parameters:
    raw = _known(Parameters, raw)
    tax_raw = raw.pop("corporate_tax_settings", None)
    if tax_raw is None:
        logger.debug("corporate_tax_settings missing; using defaults")
        settings = CorporateTaxSettings()
    else:
        settings = CorporateTaxSettings(**_known(CorporateTaxSettings, tax_raw))
    return Parameters(corporate_tax_settings=settings, **raw)


def _income_from_dict(raw: dict, section: str) -> IncomeItem:
    raw = _known(IncomeItem, raw)
    if "role" in raw:
        role = IncomeRole(raw.pop("role"))
    else:
        role = INCOME_ROLE_NAMES.get(raw.get("name", ""), IncomeRole.OTHER)
        # 法人の売上以外・個人の売上は汎用扱い
        if (role == IncomeRole.REVENUE) != (section == "corporate"):
            role = IncomeRole.OTHER
    for key in ("amounts", "original_amounts"):
        raw[key] = _years(raw.get(key))
    for key in ("social_insurance_by_year", "manual_override_years"):
        raw[key] = _years(raw.get(key), cast=bool)
    return IncomeItem(role=role, **raw)


def _expense_from_dict(raw: dict, section: str) -> ExpenseItem:
    raw = _known(ExpenseItem, raw)
    if "role" in raw:
        role = ExpenseRole(raw.pop("role"))
    else:
        role = EXPENSE_ROLE_NAMES.get(raw.get("name", ""), ExpenseRole.OTHER)
        # 事業経費は法人側のみ
        if (role == ExpenseRole.BUSINESS) != (section == "corporate"):
            role = ExpenseRole.OTHER
    for key in ("amounts", "raw_amounts"):
        raw[key] = _years(raw.get(key))
    cost_raw = raw.pop("cost_settings", None)
    cost = CostSettings(**_known(CostSettings, cost_raw)) if cost_raw is not None else None
    return ExpenseItem(role=role, cost_settings=cost, **raw)


def _asset_from_dict(raw: dict) -> AssetItem:
    raw = _known(AssetItem, raw)
    raw["amounts"] = _years(raw.get("amounts"))
    return AssetItem(**raw)


def _liability_from_dict(raw: dict, section: str) -> LiabilityItem:
    raw = _known(LiabilityItem, raw)
    raw["amounts"] = _years(raw.get("amounts"))
    if "exclude_from_generic_amortization" not in raw:
        raw["exclude_from_generic_amortization"] = (
            section == "personal"
            and raw.get("name") in HOUSING_LOAN_NAMES
            and not raw.get("auto_calculate", False)
        )
    return LiabilityItem(**raw)


def scenario_from_dict(data: dict) -> Scenario:
    """Build a Scenario from its dict form. Missing optional fields get defaults."""
    def sections(key: str, build) -> dict:
        raw = data.get(key) or {}
        return {s: [build(item, s) for item in raw.get(s) or []] for s in SECTIONS}

    return Scenario(
        basic_info=_basic_info_from_dict(data.get("basic_info") or {}),
        parameters=_parameters_from_dict(data.get("parameters") or {}),
        income_data=IncomeData(**sections("income_data", _income_from_dict)),
        expense_data=ExpenseData(**sections("expense_data", _expense_from_dict)),
        asset_data=AssetData(**sections("asset_data", lambda item, s: _asset_from_dict(item))),
        liability_data=LiabilityData(**sections("liability_data", _liability_from_dict)),
        life_events=tuple(
            LifeEvent(**_known(LifeEvent, event)) for event in data.get("life_events") or []
        ),
    )


def load_scenario(path: Path) -> Scenario:
    """Read a scenario JSON document. Raises ValueError on malformed JSON."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"シナリオファイルの形式が不正です: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"シナリオファイルの形式が不正です: {path}")
    return scenario_from_dict(data)


def save_scenario(scenario: Scenario, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(scenario_to_dict(scenario), f, ensure_ascii=False, indent=2)
    return path

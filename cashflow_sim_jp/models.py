"""Entity collections and the cash-flow record.

Amounts are 万円, years are calendar years, rates are percentages (5.0 = 5%).
Every per-year mapping is ``{year: amount}``; a missing year means "no value".
"""

import dataclasses
from dataclasses import dataclass, field
from enum import StrEnum

SECTIONS = ("personal", "corporate")


class IncomeRole(StrEnum):
    """Semantic role of an income line, independent of its display name."""

    PRIMARY_WAGE = "primary_wage"      # 給与収入
    BUSINESS = "business"              # 事業収入
    SIDE = "side"                      # 副業収入
    SPOUSE_WAGE = "spouse_wage"        # 配偶者収入
    PENSION = "pension"                # 年金収入
    SPOUSE_PENSION = "spouse_pension"  # 配偶者年金収入
    REVENUE = "revenue"                # 売上（法人）
    OTHER = "other"


class ExpenseRole(StrEnum):
    LIVING = "living"        # 生活費
    HOUSING = "housing"      # 住居費
    EDUCATION = "education"  # 教育費
    BUSINESS = "business"    # 事業経費（法人）
    OTHER = "other"


# Display names used by the default scenario and for role inference on legacy data
INCOME_ROLE_NAMES: dict[str, IncomeRole] = {
    "給与収入": IncomeRole.PRIMARY_WAGE,
    "事業収入": IncomeRole.BUSINESS,
    "副業収入": IncomeRole.SIDE,
    "配偶者収入": IncomeRole.SPOUSE_WAGE,
    "年金収入": IncomeRole.PENSION,
    "配偶者年金収入": IncomeRole.SPOUSE_PENSION,
    "売上": IncomeRole.REVENUE,
}
EXPENSE_ROLE_NAMES: dict[str, ExpenseRole] = {
    "生活費": ExpenseRole.LIVING,
    "住居費": ExpenseRole.HOUSING,
    "教育費": ExpenseRole.EDUCATION,
    "事業経費": ExpenseRole.BUSINESS,
}
HOUSING_LOAN_NAMES = ("ローン", "loan")

COST_CATEGORY = "cost"
EMPLOYEE_SALARY_CATEGORY = "employee_salary"
LINKED_EXPENSE_PREFIX = "linked_expense_"


@dataclass
class IncomeItem:
    id: str
    name: str
    kind: str = "wage"  # "wage" | "profit" | "side"
    category: str | None = "income"
    role: IncomeRole = IncomeRole.OTHER
    amounts: dict[int, float] = field(default_factory=dict)
    # 額面（源泉徴収前）。手取り換算した年のみ保持
    original_amounts: dict[int, float] = field(default_factory=dict)
    investment_ratio: float = 0.0
    max_investment_amount: float = 0.0
    is_auto_calculated: bool = False
    # 役員報酬・給与（法人から支給）
    is_corporate_salary: bool = False
    corporate_salary_type: str | None = None  # "full-time" | "part-time"
    social_insurance_by_year: dict[int, bool] = field(default_factory=dict)
    linked_expense_id: str | None = None
    auto_switch_income_ids: list[str] = field(default_factory=list)
    auto_switch_enabled: bool = False
    manual_override_years: dict[int, bool] = field(default_factory=dict)

    def face_amount(self, year: int) -> float:
        """Pre-withholding amount, falling back to the stored amount."""
        if year in self.original_amounts:
            return self.original_amounts[year]
        return self.amounts.get(year, 0.0)


@dataclass
class CostSettings:
    """Revenue-proportional cost (原価) settings."""

    cost_ratio: float = 60.0        # 売上に対する原価率（%）
    cost_increase_rate: float = 0.0  # 年あたりの原価率上昇（%ポイント）
    max_cost_amount: float | None = None
    target_income_ids: list[str] = field(default_factory=list)


@dataclass
class ExpenseItem:
    id: str
    name: str
    kind: str = "other"  # "living" | "housing" | "education" | "other"
    category: str | None = None
    role: ExpenseRole = ExpenseRole.OTHER
    amounts: dict[int, float] = field(default_factory=dict)
    # インフレ適用前の入力値
    raw_amounts: dict[int, float] = field(default_factory=dict)
    cost_settings: CostSettings | None = None
    is_linked_from_income: bool = False
    linked_income_id: str | None = None

    @property
    def is_revenue_cost(self) -> bool:
        return self.category == COST_CATEGORY and self.cost_settings is not None


@dataclass
class AssetItem:
    id: str
    name: str
    kind: str = "cash"  # "cash" | "investment" | "property" | "income_investment" | "other"
    amounts: dict[int, float] = field(default_factory=dict)
    is_investment: bool = False
    investment_return: float | None = None
    # 収入連動の積立資産
    is_income_investment: bool = False
    linked_income_id: str | None = None
    linked_income_type: str | None = None  # "personal" | "corporate"
    investment_ratio: float | None = None
    max_investment_amount: float | None = None

    @property
    def is_income_linked(self) -> bool:
        return self.is_income_investment or self.kind == "income_investment"


@dataclass
class LiabilityItem:
    id: str
    name: str
    kind: str = "loan"  # "loan" | "credit" | "other"
    amounts: dict[int, float] = field(default_factory=dict)
    interest_rate: float | None = None
    term_years: int | None = None
    start_year: int | None = None
    repayment_type: str = "equal_payment"  # "equal_payment" | "equal_principal"
    auto_calculate: bool = False
    original_amount: float | None = None
    # 住宅ローン: 返済は住居費側に含まれるため汎用の返済計算から除外
    exclude_from_generic_amortization: bool = False

    @property
    def is_amortizable(self) -> bool:
        return (
            self.auto_calculate
            and not self.exclude_from_generic_amortization
            and bool(self.original_amount)
            and bool(self.term_years)
            and bool(self.start_year)
        )

    @property
    def tracks_housing_balance(self) -> bool:
        """Excluded housing loan whose terms allow a balance-only schedule."""
        return (
            self.exclude_from_generic_amortization
            and bool(self.original_amount)
            and bool(self.term_years)
            and bool(self.start_year)
        )


@dataclass(frozen=True)
class LifeEvent:
    year: int
    description: str
    kind: str  # "income" | "expense"
    category: str
    amount: float
    source: str = "personal"  # "personal" | "corporate" | "personal_investment" | "corporate_investment"

    @property
    def section(self) -> str:
        return "corporate" if self.source.startswith("corporate") else "personal"

    @property
    def is_investment(self) -> bool:
        """Investment-account events move invested assets, not the cash balance."""
        return self.source.endswith("_investment")

    @property
    def signed_amount(self) -> float:
        return self.amount if self.kind == "income" else -self.amount


@dataclass
class IncomeData:
    personal: list[IncomeItem] = field(default_factory=list)
    corporate: list[IncomeItem] = field(default_factory=list)

    def section(self, name: str) -> list[IncomeItem]:
        return getattr(self, name)

    def find(self, section: str, item_id: str) -> IncomeItem | None:
        return next((i for i in self.section(section) if i.id == item_id), None)


@dataclass
class ExpenseData:
    personal: list[ExpenseItem] = field(default_factory=list)
    corporate: list[ExpenseItem] = field(default_factory=list)

    def section(self, name: str) -> list[ExpenseItem]:
        return getattr(self, name)

    def find(self, section: str, item_id: str) -> ExpenseItem | None:
        return next((i for i in self.section(section) if i.id == item_id), None)


@dataclass
class AssetData:
    personal: list[AssetItem] = field(default_factory=list)
    corporate: list[AssetItem] = field(default_factory=list)

    def section(self, name: str) -> list[AssetItem]:
        return getattr(self, name)


@dataclass
class LiabilityData:
    personal: list[LiabilityItem] = field(default_factory=list)
    corporate: list[LiabilityItem] = field(default_factory=list)

    def section(self, name: str) -> list[LiabilityItem]:
        return getattr(self, name)


@dataclass
class CashFlowRecord:
    """One simulated year. Entirely derived by synthesis."""

    year: int
    age: int
    # Personal income
    main_income: float = 0.0
    side_income: float = 0.0
    spouse_income: float = 0.0
    pension_income: float = 0.0
    spouse_pension_income: float = 0.0
    investment_income: float = 0.0
    life_event_income: float = 0.0
    # Personal expense
    living_expense: float = 0.0
    housing_expense: float = 0.0
    education_expense: float = 0.0
    other_expense: float = 0.0
    life_event_expense: float = 0.0
    loan_repayment: float = 0.0
    investment_amount: float = 0.0
    # Personal totals
    personal_total_income: float = 0.0
    personal_total_expense: float = 0.0
    personal_balance: float = 0.0
    personal_investment_assets: float = 0.0
    personal_total_assets: float = 0.0
    personal_liability_total: float = 0.0
    personal_net_assets: float = 0.0
    # Corporate flows
    corporate_income: float = 0.0
    corporate_other_income: float = 0.0
    corporate_investment_income: float = 0.0
    corporate_life_event_income: float = 0.0
    corporate_expense: float = 0.0
    corporate_other_expense: float = 0.0
    corporate_cost: float = 0.0
    corporate_life_event_expense: float = 0.0
    corporate_loan_repayment: float = 0.0
    corporate_investment_amount: float = 0.0
    # Corporate tax breakdown (formula precision)
    corporate_pretax_profit: float = 0.0
    corporate_tax: float = 0.0
    corporate_local_tax: float = 0.0
    corporate_resident_tax_equal: float = 0.0
    corporate_resident_tax_proportional: float = 0.0
    corporate_total_tax: float = 0.0
    corporate_aftertax_profit: float = 0.0
    corporate_effective_tax_rate: float = 0.0
    # Corporate totals
    corporate_balance: float = 0.0
    corporate_investment_assets: float = 0.0
    corporate_total_assets: float = 0.0
    corporate_liability_total: float = 0.0
    corporate_net_assets: float = 0.0

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)


def record_fields() -> list[str]:
    """Numeric field names of CashFlowRecord (excludes year and age)."""
    return [f.name for f in dataclasses.fields(CashFlowRecord) if f.name not in ("year", "age")]

"""Scenario parameters, subject profile, and financial calculation helpers."""

import math
from dataclasses import dataclass, field

OCCUPATIONS = (
    "company_employee",
    "part_time_with_pension",
    "part_time_without_pension",
    "self_employed",
    "homemaker",
)
MARITAL_STATUSES = ("single", "married", "planning")


@dataclass
class CorporateTaxSettings:
    """Corporate tax bracket table (rates in %, amounts in 万円)."""

    corporate_tax_rate_low: float = 15.0       # 800万円以下の税率
    corporate_tax_rate_high: float = 23.2      # 800万円超の税率
    corporate_tax_threshold: float = 800
    local_corporate_tax_rate: float = 10.3     # 地方法人税率
    resident_tax_equal_rate: float = 7         # 法人住民税 均等割（万円/年）
    resident_tax_proportional_rate: float = 7.0  # 法人住民税 法人税割


DEFAULT_CORPORATE_TAX_SETTINGS = CorporateTaxSettings()


@dataclass
class Parameters:

    # Economic parameters (%)
    inflation_rate: float = 1.0
    education_cost_increase_rate: float = 1.0
    investment_return: float = 5.0  # 個別利回り未設定の運用資産に適用

    # Seed values for newly created income items
    investment_ratio: float = 10.0
    max_investment_amount: float = 100.0

    corporate_tax_settings: CorporateTaxSettings = field(
        default_factory=CorporateTaxSettings
    )

    def inflation_factor(self, years: int) -> float:
        """Cumulative inflation factor after `years` years (non-negative)."""
        return (1 + self.inflation_rate / 100) ** max(0, years)

    def education_factor(self, years: int) -> float:
        """Cumulative education-cost escalation after `years` years."""
        return (1 + self.education_cost_increase_rate / 100) ** max(0, years)


@dataclass
class RentInfo:
    monthly_rent: float = 0.0         # 万円/月
    annual_increase_rate: float = 0.0  # %
    renewal_fee: float = 0.0          # 万円/回
    renewal_interval: int = 2         # 年


@dataclass
class OwnInfo:
    purchase_year: int = 0
    purchase_price: float = 0.0        # 万円
    loan_amount: float = 0.0           # 万円
    interest_rate: float = 0.0         # 年利 %
    loan_term_years: int = 35
    maintenance_cost_rate: float = 1.0  # 購入価格に対する % / 年


@dataclass
class HousingInfo:
    type: str = "rent"  # "rent" | "own"
    rent: RentInfo | None = field(default_factory=RentInfo)
    own: OwnInfo | None = None


@dataclass
class SpouseInfo:
    current_age: int | None = None
    marriage_age: int | None = None  # 結婚予定時の本人年齢
    occupation: str | None = None
    additional_expense: float = 0.0  # 配偶者分の生活費上乗せ（万円/月）
    work_start_age: int = 22
    work_end_age: int = 60
    pension_start_age: int = 65
    will_work_after_pension: bool = False


@dataclass
class EducationPlan:
    """School plan per stage: "public", "private", or "none"."""

    nursery: str = "none"
    preschool: str = "public"
    elementary: str = "public"
    junior_high: str = "public"
    high_school: str = "public"
    university: str = "public"


@dataclass
class ChildInfo:
    current_age: int = 0
    education_plan: EducationPlan = field(default_factory=EducationPlan)


@dataclass
class PlannedChildInfo:
    years_from_now: int = 1
    education_plan: EducationPlan = field(default_factory=EducationPlan)


@dataclass
class BasicInfo:
    """Subject profile. Defines the simulation horizon."""

    current_age: int = 30
    start_year: int = 2025
    death_age: int = 80
    gender: str = "male"
    monthly_living_expense: float = 0.0  # 万円/月
    occupation: str = "company_employee"
    marital_status: str = "single"
    housing_info: HousingInfo = field(default_factory=HousingInfo)
    spouse_info: SpouseInfo | None = None
    children: list[ChildInfo] = field(default_factory=list)
    planned_children: list[PlannedChildInfo] = field(default_factory=list)
    work_start_age: int = 22
    work_end_age: int = 60
    pension_start_age: int = 65
    will_work_after_pension: bool = False

    @property
    def end_year(self) -> int:
        return self.start_year + (self.death_age - self.current_age)

    def simulation_years(self) -> list[int]:
        """Inclusive year range [start_year, start_year + death_age - current_age]."""
        return list(range(self.start_year, self.end_year + 1))

    def age_in(self, year: int) -> int:
        return self.current_age + (year - self.start_year)

    def marriage_year(self) -> int | None:
        """Year from which the spouse supplement applies, None when single."""
        if self.marital_status == "married":
            return self.start_year
        if self.marital_status == "planning":
            marriage_age = self.spouse_info.marriage_age if self.spouse_info else None
            if marriage_age is None:
                return None
            return self.start_year + (marriage_age - self.current_age)
        return None


def validate_horizon(info: BasicInfo) -> None:
    """Validate the simulation horizon. Raises ValueError when empty."""
    if info.death_age < info.current_age:
        raise ValueError(
            f"想定寿命{info.death_age}歳が現在年齢{info.current_age}歳未満です"
        )


def _calc_equal_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate monthly loan payment (元利均等返済)"""
    if monthly_rate == 0:
        return principal / months
    r = monthly_rate
    n = months
    return principal * r * (1 + r) ** n / ((1 + r) ** n - 1)


def round1(value: float) -> float:
    """Round half up to one decimal place (表示単位 0.1万円)."""
    return math.floor(value * 10 + 0.5) / 10

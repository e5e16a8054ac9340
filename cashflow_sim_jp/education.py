"""Education cost by school stage (文部科学省 子供の学習費調査ベース, 簡易)."""

from cashflow_sim_jp.params import BasicInfo, EducationPlan, round1

# (stage, first child age, last child age)
_STAGES: tuple[tuple[str, int, int], ...] = (
    ("nursery", 0, 2),
    ("preschool", 3, 5),
    ("elementary", 6, 11),
    ("junior_high", 12, 14),
    ("high_school", 15, 17),
    ("university", 18, 21),
)

# stage → (公立, 私立) 万円/年
_STAGE_COSTS: dict[str, tuple[float, float]] = {
    "nursery": (36, 60),
    "preschool": (17, 31),
    "elementary": (35, 167),
    "junior_high": (54, 144),
    "high_school": (51, 105),
    "university": (104, 152),
}


def annual_cost_for_child_age(child_age: int, plan: EducationPlan) -> float:
    """Base annual cost (万円/年, start-year prices) for a child at a given age."""
    for stage, lo, hi in _STAGES:
        if lo <= child_age <= hi:
            choice = getattr(plan, stage)
            public, private = _STAGE_COSTS[stage]
            if choice == "public":
                return public
            if choice == "private":
                return private
            return 0.0
    return 0.0


def education_expense_for_year(
    basic_info: BasicInfo, year: int, education_cost_increase_rate: float,
) -> float:
    """Total education cost of all current and planned children for a year."""
    elapsed = year - basic_info.start_year
    base = 0.0
    for child in basic_info.children:
        base += annual_cost_for_child_age(child.current_age + elapsed, child.education_plan)
    for planned in basic_info.planned_children:
        child_age = elapsed - planned.years_from_now
        if child_age >= 0:
            base += annual_cost_for_child_age(child_age, planned.education_plan)
    factor = (1 + education_cost_increase_rate / 100) ** max(0, elapsed)
    return round1(base * factor)

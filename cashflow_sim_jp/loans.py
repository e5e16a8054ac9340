"""Loan amortization for auto-calculated liabilities.

Schedules are recomputed from (original_amount, interest_rate, term_years,
start_year, repayment_type) on every synthesis pass and never written back
onto the liability.
"""

from dataclasses import dataclass, field

from cashflow_sim_jp.models import LiabilityItem
from cashflow_sim_jp.params import _calc_equal_payment

EQUAL_PAYMENT = "equal_payment"      # 元利均等返済
EQUAL_PRINCIPAL = "equal_principal"  # 元金均等返済


@dataclass
class LoanSchedule:
    """Per-year repayment and end-of-year outstanding balance of one liability."""

    liability_id: str
    payments: dict[int, float] = field(default_factory=dict)
    balances: dict[int, float] = field(default_factory=dict)

    def outstanding(self, year: int) -> float:
        return self.balances.get(year, 0.0)


def amortize(liability: LiabilityItem) -> LoanSchedule:
    """Expand a liability into its full-term repayment schedule.

    The caller guarantees ``liability.is_amortizable`` (validated input).
    """
    principal = liability.original_amount
    term_years = liability.term_years
    months = term_years * 12
    monthly_rate = (liability.interest_rate or 0) / 12 / 100
    schedule = LoanSchedule(liability_id=liability.id)
    balance = principal

    if liability.repayment_type == EQUAL_PRINCIPAL:
        monthly_principal = principal / months
        for i in range(term_years):
            annual = 0.0
            for _ in range(12):
                interest = balance * monthly_rate
                annual += interest + monthly_principal
                balance = max(0.0, balance - monthly_principal)
            year = liability.start_year + i
            schedule.payments[year] = annual
            schedule.balances[year] = balance
        return schedule

    monthly_payment = _calc_equal_payment(principal, monthly_rate, months)
    for i in range(term_years):
        for _ in range(12):
            interest = balance * monthly_rate
            balance = max(0.0, balance - (monthly_payment - interest))
        year = liability.start_year + i
        schedule.payments[year] = monthly_payment * 12
        schedule.balances[year] = balance
    return schedule


def build_schedules(liabilities: list[LiabilityItem]) -> dict[str, LoanSchedule]:
    """Schedules for every participating liability of one section, keyed by id."""
    return {item.id: amortize(item) for item in liabilities if item.is_amortizable}


def build_balance_schedules(liabilities: list[LiabilityItem]) -> dict[str, LoanSchedule]:
    """Balance-only schedules of housing loans repaid through the housing expense.

    Their payments are never summed into the loan repayment totals.
    """
    return {item.id: amortize(item) for item in liabilities if item.tracks_housing_balance}


def annual_repayments(
    schedules: dict[str, LoanSchedule], first_year: int, last_year: int,
) -> dict[int, float]:
    """Sum repayments of all schedules per year within [first_year, last_year]."""
    totals: dict[int, float] = {}
    for schedule in schedules.values():
        for year, payment in schedule.payments.items():
            if first_year <= year <= last_year:
                totals[year] = totals.get(year, 0.0) + payment
    return totals


def liability_total(
    liabilities: list[LiabilityItem], schedules: dict[str, LoanSchedule], year: int,
) -> float:
    """Outstanding liabilities for a year.

    Amortized liabilities report their schedule balance; others report the
    absolute stored amount for that year.
    """
    total = 0.0
    for item in liabilities:
        schedule = schedules.get(item.id)
        if schedule is not None:
            total += schedule.outstanding(year)
        else:
            total += abs(item.amounts.get(year, 0.0))
    return total

"""Annual housing expense for rent or ownership."""

import math

from cashflow_sim_jp.params import HousingInfo, _calc_equal_payment, round1


def monthly_mortgage(loan_amount: float, interest_rate: float, term_years: int) -> float:
    """Monthly equal-payment mortgage (万円/月, 0.1万円単位).

    interest_rate is the annual rate in %.
    """
    months = max(1, term_years * 12)
    monthly_rate = (interest_rate or 0) / 100 / 12
    return round1(_calc_equal_payment(loan_amount, monthly_rate, months))


def housing_expense_for_year(housing_info: HousingInfo, year: int, start_year: int) -> float:
    """Cash housing cost for a calendar year (万円/年).

    Rent escalates from start_year and adds a renewal fee every renewal_interval
    years (none in year 0). Ownership costs nothing before purchase, the mortgage
    plus maintenance while the loan runs, and maintenance only afterwards.
    """
    if housing_info.type == "rent" and housing_info.rent is not None:
        rent = housing_info.rent
        years_since_start = max(0, year - start_year)
        annual_rent = (rent.monthly_rent or 0) * 12
        annual_rent *= (1 + (rent.annual_increase_rate or 0) / 100) ** years_since_start
        renewal_cost = 0.0
        if (rent.renewal_interval or 0) > 0 and (rent.renewal_fee or 0) > 0:
            renewal_cost = math.floor(years_since_start / rent.renewal_interval) * rent.renewal_fee
        return round1(annual_rent + renewal_cost)

    if housing_info.type == "own" and housing_info.own is not None:
        own = housing_info.own
        if year < own.purchase_year:
            return 0.0
        maintenance = own.purchase_price * own.maintenance_cost_rate / 100
        if year >= own.purchase_year + own.loan_term_years:
            return round1(maintenance)
        annual_mortgage = monthly_mortgage(own.loan_amount, own.interest_rate, own.loan_term_years) * 12
        return round1(annual_mortgage + maintenance)

    return 0.0

"""
Interest and growth calculator tests.

Tests:
1-3.   Interest (periodic growth, tax)
4-6.   Compound interest (discrete, continuous, validation)
7-8.   Simple interest
9-10.  CD and savings
11-13. Future value and present value
14-18. Finance (TVM) solver
19-22. Inflation
23-25. Fractional frequencies and overlong terms
"""

import pytest

from calcsite.calculators.base import CalculatorInputError
from calcsite.calculators.interest import (
    CdCalculator,
    CompoundInterestCalculator,
    FinanceCalculator,
    FutureValueCalculator,
    InflationCalculator,
    InterestCalculator,
    PresentValueCalculator,
    SavingsCalculator,
    SimpleInterestCalculator,
)
from calcsite.reference_tables import CPI_BY_YEAR


# ============================================================
# Interest
# ============================================================

def test_interest_single_year_annual_compounding():
    result = InterestCalculator().calculate({
        "principal": 1000, "annual_contribution": 0, "interest_rate": 10,
        "years": 1, "compound": "annually",
    })
    assert result["ending_balance"] == pytest.approx(1100, abs=0.01)
    assert result["total_interest"] == pytest.approx(100, abs=0.01)
    assert len(result["schedule"]) == 1


def test_interest_tax_reduces_balance():
    result = InterestCalculator().calculate({
        "principal": 1000, "annual_contribution": 0, "interest_rate": 10,
        "years": 1, "compound": 1, "tax_rate": 20,
    })
    assert result["tax"] == pytest.approx(20, abs=0.01)
    assert result["after_tax_balance"] == pytest.approx(1080, abs=0.01)


def test_interest_rejects_zero_time():
    with pytest.raises(CalculatorInputError):
        InterestCalculator().calculate({"years": 0, "months": 0})


# ============================================================
# Compound interest
# ============================================================

def test_compound_interest_annual():
    result = CompoundInterestCalculator().calculate({
        "principal": 1000, "monthly_contribution": 0, "interest_rate": 10,
        "years": 1, "compound": "annually",
    })
    assert result["future_value"] == pytest.approx(1100, abs=0.01)
    assert result["effective_annual_rate"] == pytest.approx(10.0)
    assert result["doubling_time_years"] == pytest.approx(7.2)


def test_compound_interest_continuous():
    result = CompoundInterestCalculator().calculate({
        "principal": 1000, "monthly_contribution": 0, "interest_rate": 10,
        "years": 1, "compound": "continuously",
    })
    assert result["future_value"] == pytest.approx(1105.17, abs=0.01)
    assert result["doubling_time_years"] == pytest.approx(6.93, abs=0.01)


def test_compound_interest_contributions_add_up():
    result = CompoundInterestCalculator().calculate({
        "principal": 10000, "monthly_contribution": 200, "interest_rate": 5, "years": 10,
    })
    assert result["total_contributions"] == 24000
    assert result["future_value"] == pytest.approx(
        10000 + 24000 + result["total_interest"], abs=0.02)
    assert len(result["schedule"]) == 10


# ============================================================
# Simple interest
# ============================================================

def test_simple_interest_years():
    result = SimpleInterestCalculator().calculate({"principal": 1000, "interest_rate": 5, "term": 2})
    assert result["total_interest"] == 100
    assert result["end_balance"] == 1100
    assert len(result["breakdown"]) == 2


def test_simple_interest_months():
    result = SimpleInterestCalculator().calculate({
        "principal": 1000, "interest_rate": 5, "term": 6, "time_unit": "months",
    })
    assert result["years"] == 0.5
    assert result["total_interest"] == 25


# ============================================================
# CD and savings
# ============================================================

def test_cd_annual_compounding_pays_once_a_year():
    result = CdCalculator().calculate({
        "initial_deposit": 10000, "interest_rate": 5, "term_years": 1, "compound": "annually",
    })
    assert result["end_balance"] == pytest.approx(10500, abs=0.01)
    assert len(result["schedule"]) == 12
    assert result["schedule"][0]["interest"] == 0
    assert result["schedule"][-1]["interest"] == pytest.approx(500, abs=0.01)


def test_savings_monthly_compounding():
    result = SavingsCalculator().calculate({
        "initial_deposit": 1000, "monthly_contribution": 0, "interest_rate": 12,
        "years": 1, "compound": "monthly",
    })
    assert result["end_balance"] == pytest.approx(1126.83, abs=0.01)
    assert result["total_contributions"] == 0


# ============================================================
# Future value and present value
# ============================================================

def test_future_value_lump_sum():
    result = FutureValueCalculator().calculate({
        "present_value": 1000, "payment": 0, "interest_rate": 10, "periods": 2,
    })
    assert result["future_value"] == pytest.approx(1210, abs=0.01)
    assert result["schedule"][-1]["ending_balance"] == pytest.approx(1210, abs=0.01)


def test_present_value_lump_sum():
    result = PresentValueCalculator().calculate({
        "future_value": 1210, "interest_rate": 10, "periods": 2,
    })
    assert result["present_value"] == pytest.approx(1000, abs=0.01)


def test_present_value_annuity():
    result = PresentValueCalculator().calculate({
        "mode": "annuity", "payment": 100, "interest_rate": 10, "periods": 2,
    })
    assert result["present_value"] == pytest.approx(173.55, abs=0.01)
    assert result["future_value"] == pytest.approx(210, abs=0.01)


# ============================================================
# Finance (TVM) solver
# ============================================================

GROWTH_12 = 1126.825030


def test_finance_solve_fv():
    result = FinanceCalculator().calculate({
        "solve_for": "FV", "n": 12, "iy": 12, "pv": -1000, "pmt": 0, "periods_per_year": 12,
    })
    assert result["value"] == pytest.approx(1126.83, abs=0.01)


def test_finance_solve_n():
    result = FinanceCalculator().calculate({
        "solve_for": "N", "iy": 12, "pv": -1000, "pmt": 0, "fv": GROWTH_12, "periods_per_year": 12,
    })
    assert result["value"] == pytest.approx(12.0, abs=0.001)


def test_finance_solve_iy():
    result = FinanceCalculator().calculate({
        "solve_for": "IY", "n": 12, "pv": -1000, "pmt": 0, "fv": GROWTH_12, "periods_per_year": 12,
    })
    assert result["value"] == pytest.approx(12.0, abs=0.01)


def test_finance_solve_pmt_zero_rate():
    result = FinanceCalculator().calculate({
        "solve_for": "PMT", "n": 12, "iy": 0, "pv": 1200, "fv": 0,
    })
    assert result["value"] == pytest.approx(-100, abs=0.01)


def test_finance_solve_n_without_solution():
    with pytest.raises(CalculatorInputError, match="No solution"):
        FinanceCalculator().calculate({"solve_for": "N", "iy": 0, "pv": -1000, "pmt": 0, "fv": 500})


# ============================================================
# Inflation
# ============================================================

def test_inflation_cpi_mode_uses_table():
    result = InflationCalculator().calculate({"amount": 100, "start_year": 2000, "end_year": 2020})
    expected = 100 * CPI_BY_YEAR[2020] / CPI_BY_YEAR[2000]
    assert result["equivalent_value"] == pytest.approx(expected, abs=0.01)


def test_inflation_interpolates_between_published_years():
    calc = InflationCalculator()
    assert calc.cpi_for_year(1990) == CPI_BY_YEAR[1990]
    midpoint = calc.cpi_for_year(1993)
    assert CPI_BY_YEAR[1990] < midpoint < CPI_BY_YEAR[1995]


def test_inflation_rejects_bad_years():
    with pytest.raises(CalculatorInputError, match="Start year must be before end year"):
        InflationCalculator().calculate({"start_year": 2010, "end_year": 2000})
    with pytest.raises(CalculatorInputError, match="Year must be between"):
        InflationCalculator().calculate({"start_year": 1980, "end_year": 2000})


def test_inflation_forward_and_backward():
    forward = InflationCalculator().calculate({"mode": "forward", "amount": 1000, "rate": 3, "years": 10})
    assert forward["future_value"] == pytest.approx(1343.92, abs=0.01)
    backward = InflationCalculator().calculate({"mode": "backward", "amount": 1343.92, "rate": 3, "years": 10})
    assert backward["past_value"] == pytest.approx(1000, abs=0.01)


# ============================================================
# Fractional frequencies and overlong terms
# ============================================================

@pytest.mark.parametrize("calculator_class, key", [
    (InterestCalculator, "ending_balance"),
    (CompoundInterestCalculator, "future_value"),
    (SavingsCalculator, "end_balance"),
])
def test_fractional_compounding_falls_back_to_monthly(calculator_class, key):
    fractional = calculator_class().calculate({"compound": "0.5"})
    monthly = calculator_class().calculate({"compound": "12"})
    assert fractional[key] == monthly[key]


def test_finance_fractional_periods_per_year_falls_back_to_monthly():
    fractional = FinanceCalculator().calculate({"solve_for": "FV", "periods_per_year": "0.5"})
    monthly = FinanceCalculator().calculate({"solve_for": "FV", "periods_per_year": 12})
    assert fractional["value"] == monthly["value"]


def test_overlong_terms_rejected():
    with pytest.raises(CalculatorInputError, match="Number of periods cannot be more than 1200"):
        FutureValueCalculator().calculate({"periods": 20000})
    with pytest.raises(CalculatorInputError, match="Number of periods cannot be more than 1200"):
        FinanceCalculator().calculate({"solve_for": "IY", "n": 100000, "pv": -1000, "pmt": 0, "fv": 2000})
    with pytest.raises(CalculatorInputError, match="Term cannot be longer than 100 years"):
        CompoundInterestCalculator().calculate({"years": 100000})

"""
Loan and debt calculator tests.

Tests:
1-6.   Shared helpers (annuity payment, amortize, add_months)
7-10.  Mortgage
11-18. Loan, auto, student, personal, business
19-23. Amortization, refinance, payment, APR, interest rate
24-30. Debt payoff, consolidation, credit card
31-35. Overlong terms and out-of-range values
"""

from datetime import date

import pytest

from calcsite.calculators.base import CalculatorInputError
from calcsite.calculators.debt import (
    CreditCardCalculator,
    DebtConsolidationCalculator,
    DebtPayoffCalculator,
)
from calcsite.calculators.loans import (
    AmortizationCalculator,
    AprCalculator,
    AutoLoanCalculator,
    BusinessLoanCalculator,
    InterestRateCalculator,
    LoanCalculator,
    MortgageCalculator,
    PaymentCalculator,
    PersonalLoanCalculator,
    RefinanceCalculator,
    StudentLoanCalculator,
)

TODAY = "2025-01-15"


# ============================================================
# Shared helpers
# ============================================================

def test_annuity_payment_standard_formula():
    """$200k at 6% for 30 years is the textbook $1,199.10."""
    calc = MortgageCalculator()
    assert calc.annuity_payment(200000, 0.005, 360) == pytest.approx(1199.10, abs=0.01)


def test_annuity_payment_zero_rate_and_zero_periods():
    calc = MortgageCalculator()
    assert calc.annuity_payment(12000, 0.0, 12) == 1000
    assert calc.annuity_payment(12000, 0.01, 0) == 0.0


def test_amortize_principal_sums_to_loan():
    """Final payment is trimmed so principal paid equals the original balance."""
    calc = MortgageCalculator()
    payment = calc.annuity_payment(10000, 0.01, 12)
    rows = calc.amortize(10000, 0.01, payment, 12)
    assert len(rows) == 12
    assert sum(r["principal"] for r in rows) == pytest.approx(10000, abs=0.01)
    assert rows[-1]["balance"] == pytest.approx(0.0, abs=0.01)


def test_amortize_stops_when_payment_does_not_cover_interest():
    calc = MortgageCalculator()
    assert calc.amortize(10000, 0.02, 100, 12) == []


def test_add_months_clamps_to_month_end():
    calc = MortgageCalculator()
    assert calc.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert calc.add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert calc.add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


def test_parse_helpers_fall_back_to_defaults():
    calc = MortgageCalculator()
    assert calc.parse_number("$1,250.50") == 1250.5
    assert calc.parse_number("6.5%") == 6.5
    assert calc.parse_number("abc", default=7) == 7
    assert calc.parse_number("", default=3) == 3
    assert calc.parse_positive("0", default=25) == 25
    assert calc.parse_bool("on") is True
    assert calc.parse_date("not-a-date") is None
    assert calc.parse_choice("METRIC", ("imperial", "metric"), "imperial") == "metric"


# ============================================================
# Mortgage
# ============================================================

def test_mortgage_monthly_payment():
    result = MortgageCalculator().calculate({
        "home_price": 300000, "down_payment": 60000, "loan_term": 30,
        "interest_rate": 6, "property_tax": 0, "home_insurance": 0, "today": TODAY,
    })
    assert result["loan_amount"] == 240000
    assert result["monthly_payment"] == pytest.approx(1438.92, abs=0.01)
    assert len(result["schedule"]) == 360


def test_mortgage_schedule_principal_sums_to_loan():
    result = MortgageCalculator().calculate({
        "home_price": "400,000", "down_payment": "80,000", "loan_term": "15",
        "interest_rate": "5.5", "today": TODAY,
    })
    principal = sum(row["principal"] for row in result["schedule"])
    assert principal == pytest.approx(320000, abs=1.0)
    assert len(result["annual_schedule"]) == 15


def test_mortgage_payoff_date_and_monthly_total():
    result = MortgageCalculator().calculate({
        "home_price": 300000, "down_payment": 60000, "loan_term": 30, "interest_rate": 6,
        "property_tax": 300, "home_insurance": 100, "start_date": "2025-01-01",
    })
    assert result["payoff_date"] == "2055-01-01"
    assert result["total_monthly"] == pytest.approx(1438.92 + 400, abs=0.01)


def test_mortgage_down_payment_must_be_below_price():
    with pytest.raises(CalculatorInputError, match="Down payment must be less than the home price"):
        MortgageCalculator().calculate({"home_price": 300000, "down_payment": 300000})


# ============================================================
# Loan, auto, student, personal, business
# ============================================================

def test_loan_zero_rate_divides_evenly():
    result = LoanCalculator().calculate({
        "loan_amount": 12000, "loan_term_years": 1, "interest_rate": 0,
    })
    assert result["payment"] == 1000
    assert result["payments"] == 12
    assert result["total_interest"] == 0


def test_loan_deferred_and_bond():
    deferred = LoanCalculator().calculate({
        "loan_type": "deferred", "loan_amount": 10000, "loan_term_years": 1,
        "interest_rate": 6, "compound": "annually",
    })
    assert deferred["amount_due_at_maturity"] == pytest.approx(10600, abs=0.01)

    bond = LoanCalculator().calculate({
        "loan_type": "bond", "loan_amount": 10600, "loan_term_years": 1,
        "interest_rate": 6, "compound": "annually",
    })
    assert bond["amount_received"] == pytest.approx(10000, abs=0.01)


def test_auto_loan_rolls_tax_and_fees_into_loan():
    result = AutoLoanCalculator().calculate({
        "auto_price": 30000, "down_payment": 5000, "sales_tax": 10, "other_fees": 500,
        "interest_rate": 0, "loan_term": 60,
    })
    # 30000 - 5000 + 3000 tax + 500 fees
    assert result["total_loan_amount"] == 28500
    assert result["monthly_payment"] == 475


def test_auto_loan_rejects_fully_covered_price():
    with pytest.raises(CalculatorInputError, match="already cover the vehicle price"):
        AutoLoanCalculator().calculate({"auto_price": 10000, "down_payment": 8000,
                                        "trade_in_value": 5000, "include_taxes_fees_in_loan": False})


def test_student_loan_extra_payments_save_time_and_interest():
    base = {"loan_balance": 30000, "remaining_term": 10, "interest_rate": 5, "today": TODAY}
    plain = StudentLoanCalculator().calculate(base)
    extra = StudentLoanCalculator().calculate({**base, "extra_monthly": 200})
    assert plain["months"] == 120
    assert extra["months"] < 120
    assert extra["months_saved"] > 0
    assert extra["interest_savings"] > 0


def test_personal_loan_fee_raises_real_apr():
    result = PersonalLoanCalculator().calculate({
        "loan_amount": 10000, "interest_rate": 10, "loan_term_years": 3,
        "fee_type": "percentage", "origination_fee": 5, "today": TODAY,
    })
    assert result["origination_fee"] == 500
    assert result["net_proceeds"] == 9500
    assert result["real_apr"] > 10


def test_business_loan_interest_only_includes_balloon():
    result = BusinessLoanCalculator().calculate({
        "loan_amount": 50000, "interest_rate": 12, "loan_term_years": 5,
        "payback": "interest-only", "today": TODAY,
    })
    assert result["payment"] == pytest.approx(500, abs=0.01)
    assert result["total_payment"] == pytest.approx(80000, abs=0.01)
    assert result["schedule"][-1]["principal"] == pytest.approx(50000, abs=0.01)


def test_business_loan_rejects_missing_term():
    with pytest.raises(CalculatorInputError):
        BusinessLoanCalculator().calculate({"loan_amount": 50000, "loan_term_years": 0,
                                            "loan_term_months": 0})


# ============================================================
# Amortization, refinance, payment, APR, interest rate
# ============================================================

def test_amortization_extra_monthly_shortens_loan():
    base = {"loan_amount": 200000, "loan_term_years": 30, "interest_rate": 6,
            "start_month": 1, "start_year": 2025}
    plain = AmortizationCalculator().calculate(base)
    extra = AmortizationCalculator().calculate({**base, "extra_monthly": 500})
    assert plain["months"] == 360
    assert plain["schedule"][0]["date"] == "2025-01"
    assert extra["months"] < plain["months"]
    assert extra["total_interest"] < plain["total_interest"]
    assert sum(r["principal"] for r in extra["schedule"]) == pytest.approx(200000, abs=1.0)


def test_refinance_break_even_none_when_no_savings():
    result = RefinanceCalculator().calculate({
        "remaining_balance": 350000, "monthly_payment": 500, "years_remaining": 25,
        "interest_rate": 7, "new_term": 30, "new_rate": 5.5, "today": TODAY,
    })
    assert result["monthly_savings"] < 0
    assert result["break_even_months"] is None
    assert result["break_even_date"] is None


def test_refinance_break_even_months():
    result = RefinanceCalculator().calculate({
        "remaining_balance": 200000, "monthly_payment": 2000, "years_remaining": 20,
        "interest_rate": 8, "new_term": 20, "new_rate": 5, "closing_costs": 3000,
        "today": TODAY,
    })
    assert result["monthly_savings"] > 0
    expected = 3000 / result["monthly_savings"]
    assert result["break_even_months"] == pytest.approx(expected, abs=0.1)


def test_payment_fixed_payment_too_low():
    result = PaymentCalculator().calculate({
        "mode": "fixed-payment", "loan_amount": 200000, "interest_rate": 6, "monthly_payment": 900,
    })
    assert result["payment_too_low"] is True
    assert result["months"] == PaymentCalculator.MAX_MONTHS


def test_apr_equals_nominal_without_fees():
    result = AprCalculator().calculate({
        "loan_amount": 100000, "loan_term_years": 10, "interest_rate": 6,
        "compound": 12, "prepaid_fees": 0, "financed_fees": 0,
    })
    assert result["apr"] == pytest.approx(6.0, abs=0.01)


def test_apr_fees_raise_rate():
    result = AprCalculator().calculate({
        "loan_amount": 100000, "loan_term_years": 10, "interest_rate": 6, "prepaid_fees": 3000,
    })
    assert result["apr"] > 6.0


def test_interest_rate_recovers_rate_from_payment():
    calc = InterestRateCalculator()
    payment = calc.annuity_payment(10000, 0.06 / 12, 12)
    result = calc.calculate({"loan_amount": 10000, "loan_term_years": 1, "monthly_payment": payment})
    assert result["interest_rate"] == pytest.approx(6.0, abs=0.01)


def test_interest_rate_rejects_payment_too_low():
    with pytest.raises(CalculatorInputError, match="too low"):
        InterestRateCalculator().calculate({"loan_amount": 10000, "loan_term_years": 1,
                                            "monthly_payment": 100})


# ============================================================
# Debt payoff, consolidation, credit card
# ============================================================

def test_debt_payoff_zero_rate_single_debt():
    result = DebtPayoffCalculator().calculate({
        "debts": [{"name": "Card", "balance": 1000, "min_payment": 100, "rate": 0}],
        "extra_monthly": 0, "extra_yearly": 0, "today": TODAY,
    })
    assert result["payoff_months"] == 10
    assert result["total_interest"] == 0
    assert result["paid_off"] is True


def test_debt_payoff_avalanche_beats_minimums():
    result = DebtPayoffCalculator().calculate({"today": TODAY})
    assert result["paid_off"] is True
    assert result["payoff_months"] <= result["baseline_months"]
    assert result["interest_saved"] >= 0
    months = [d["payoff_month"] for d in result["payoff_order"]]
    assert months == sorted(months)


def test_debt_payoff_requires_a_debt():
    with pytest.raises(CalculatorInputError, match="at least one debt"):
        DebtPayoffCalculator().calculate({"debts": []})


def test_debt_consolidation_total_savings_subtracts_fee():
    result = DebtConsolidationCalculator().calculate({"loan_rate": 9.5, "fee": 3})
    expected = (result["current_total_interest"]
                - result["consolidation_total_interest"] - result["consolidation_loan_fee"])
    assert result["total_savings"] == pytest.approx(expected, abs=0.02)
    assert result["current_total_debt"] == 25000


def test_credit_card_payment_below_minimum_rejected():
    with pytest.raises(CalculatorInputError, match="Monthly payment must be at least"):
        CreditCardCalculator().calculate({"balance": 5000, "interest_rate": 18.5, "monthly_payment": 100})


def test_credit_card_amount_mode_pays_off():
    result = CreditCardCalculator().calculate({
        "balance": 5000, "interest_rate": 18.5, "monthly_payment": 200, "today": TODAY,
    })
    assert result["paid_off"] is True
    assert result["minimum_payment"] == pytest.approx(127.08, abs=0.01)
    assert result["total_paid"] == pytest.approx(5000 + result["total_interest"], abs=0.02)


def test_credit_card_timeframe_mode():
    result = CreditCardCalculator().calculate({
        "balance": 3600, "interest_rate": 0.0001, "mode": "timeframe", "payoff_years": 3,
    })
    assert result["months_to_payoff"] == 36
    assert result["monthly_payment"] == pytest.approx(100, abs=0.01)


# ============================================================
# Overlong terms and out-of-range values
# ============================================================

def test_mortgage_rejects_term_past_one_hundred_years():
    with pytest.raises(CalculatorInputError, match="Term cannot be longer than 100 years"):
        MortgageCalculator().calculate({"loan_term": 100000, "today": TODAY})


@pytest.mark.parametrize("calculator_class, fields", [
    (LoanCalculator, {"loan_term_years": 500}),
    (AutoLoanCalculator, {"loan_term": 1201}),
    (StudentLoanCalculator, {"remaining_term": 101}),
    (RefinanceCalculator, {"new_term": 1000}),
    (AprCalculator, {"loan_term_years": 100000}),
])
def test_loan_terms_are_capped(calculator_class, fields):
    with pytest.raises(CalculatorInputError, match="Term cannot be longer"):
        calculator_class().calculate({**fields, "today": TODAY})


def test_growth_too_large_for_a_float_rejected():
    calc = LoanCalculator()
    assert calc.growth(0.01, 12) == pytest.approx(1.126825, abs=1e-6)
    with pytest.raises(CalculatorInputError, match="too large to calculate"):
        calc.growth(0.5, 100000)
    with pytest.raises(CalculatorInputError, match="too large to calculate"):
        calc.exp_growth(100000)


def test_add_months_rejects_dates_past_year_9999():
    calc = MortgageCalculator()
    assert calc.add_months(date(9999, 1, 15), 11) == date(9999, 12, 15)
    with pytest.raises(CalculatorInputError, match="out of range"):
        calc.add_months(date(9999, 1, 15), 12)


def test_parse_number_ignores_values_too_large_for_a_float():
    calc = MortgageCalculator()
    assert calc.parse_number(10 ** 400, default=5) == 5
    assert calc.parse_number("1e400", default=5) == 5
    assert calc.parse_periods_per_year("0.5") == 12
    assert calc.parse_periods_per_year("365") == 365

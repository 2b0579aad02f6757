"""
Housing calculators: how much house you can afford, how much rent, and the
cash needed up front for a purchase.
"""

import logging

from .base import BaseCalculator

logger = logging.getLogger(__name__)


class HouseAffordabilityCalculator(BaseCalculator):
    """
    Searches for the highest price whose principal, interest, property tax (and
    maintenance in budget mode) fit the monthly room left after HOA and insurance.
    """

    START_PRICE = 100000.0
    START_STEP = 50000.0
    TOLERANCE = 10.0
    MAX_ITERATIONS = 100

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("income", "budget"), "income")
        years = self.parse_positive(fields.get("loan_term"), default=30)
        rate = self.parse_positive(fields.get("interest_rate"), default=7.0) / 100
        down_pct = self.parse_positive(fields.get("down_payment_percent"), default=20) / 100
        tax_pct = self.parse_positive(fields.get("property_tax_percent"), default=1.2) / 100
        hoa = self.parse_positive(fields.get("hoa_fee"), default=100)
        insurance = self.parse_positive(fields.get("insurance"), default=150)

        result = {"mode": mode}
        if mode == "income":
            income = self.parse_positive(fields.get("annual_income"), default=85000)
            debt = self.parse_positive(fields.get("monthly_debt"), default=500)
            back_end = self.parse_positive(fields.get("dti_ratio"), default=36) / 100
            front_end = self.parse_positive(fields.get("front_end_ratio"), default=28) / 100
            gross_monthly = income / 12
            max_payment = min(gross_monthly * front_end, gross_monthly * back_end - debt)
            maintenance_pct = 0.0
            result.update({
                "monthly_gross_income": self.round_money(gross_monthly),
                "max_monthly_payment": self.round_money(max_payment),
            })
        else:
            max_payment = self.parse_positive(fields.get("monthly_budget"), default=2500)
            maintenance_pct = self.parse_positive(fields.get("maintenance_percent"), default=1.0) / 100

        room = max_payment - hoa - insurance
        if room <= 0:
            self.reject("Your budget does not leave room for a mortgage payment!")
        self.check_months(years * 12)

        monthly_rate = rate / 12
        payments = int(round(years * 12))

        def housing_cost(price):
            principal_interest = self.annuity_payment(price * (1 - down_pct), monthly_rate, payments)
            return principal_interest, price * tax_pct / 12, price * maintenance_pct / 12

        price = self.START_PRICE
        step = self.START_STEP
        for _ in range(self.MAX_ITERATIONS):
            cost = sum(housing_cost(price))
            if abs(cost - room) < self.TOLERANCE:
                break
            if cost > room:
                price -= step
                step /= 2
            else:
                price += step

        principal_interest, tax, maintenance = housing_cost(price)
        total_payment = principal_interest + tax + maintenance + hoa + insurance
        result.update({
            "max_home_price": self.round_money(price),
            "down_payment": self.round_money(price * down_pct),
            "loan_amount": self.round_money(price * (1 - down_pct)),
            "monthly_principal_interest": self.round_money(principal_interest),
            "monthly_property_tax": self.round_money(tax),
            "monthly_hoa": self.round_money(hoa),
            "monthly_insurance": self.round_money(insurance),
            "monthly_maintenance": self.round_money(maintenance),
            "total_monthly_payment": self.round_money(total_payment),
        })
        if mode == "income":
            result["front_end_ratio"] = round(total_payment / gross_monthly * 100, 2)
            result["back_end_ratio"] = round((total_payment + debt) / gross_monthly * 100, 2)
        return result


class RentCalculator(BaseCalculator):

    SHARES = (25, 30, 33)

    def calculate(self, fields: dict) -> dict:
        income = self.parse_number(fields.get("income"), default=75000)
        income_type = self.parse_choice(fields.get("income_type"), ("annual", "monthly"), "annual")
        debt = self.parse_number(fields.get("monthly_debt"), default=500)

        if income <= 0:
            self.reject("Please enter a valid income!")

        monthly = income / 12 if income_type == "annual" else income
        result = {
            "monthly_income": self.round_money(monthly),
            "monthly_debt": self.round_money(debt),
            "income_after_debt": self.round_money(monthly - debt),
            "debt_to_income_ratio": round(debt / monthly * 100, 2),
        }
        for share in self.SHARES:
            rent = monthly * share / 100
            result[f"max_rent_at_{share}"] = self.round_money(rent)
            result[f"remaining_at_{share}"] = self.round_money(monthly - rent - debt)
        return result


class DownPaymentCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        price = self.parse_positive(fields.get("home_price"), default=450000)
        down_pct = self.parse_positive(fields.get("down_payment_percent"), default=20)
        closing_pct = self.parse_positive(fields.get("closing_costs_percent"), default=3)
        rate = self.parse_positive(fields.get("interest_rate"), default=6.5)
        years = self.parse_positive(fields.get("loan_term"), default=30)

        if down_pct >= 100:
            self.reject("Down payment must be less than the home price!")
        self.check_months(years * 12)

        down = price * down_pct / 100
        closing = price * closing_pct / 100
        loan = price - down
        payment = self.annuity_payment(loan, rate / 100 / 12, int(round(years * 12)))
        return {
            "home_price": self.round_money(price),
            "down_payment": self.round_money(down),
            "down_payment_percent": down_pct,
            "closing_costs": self.round_money(closing),
            "loan_amount": self.round_money(loan),
            "monthly_payment": self.round_money(payment),
            "total_upfront_cash": self.round_money(down + closing),
        }

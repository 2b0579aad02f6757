"""
Income and spending calculators: income tax, sales tax, salary conversion,
monthly budget, sales commission and discounts.
"""

import logging

from .base import BaseCalculator
from ..reference_tables import (
    ADDITIONAL_MEDICARE_RATE,
    ADDITIONAL_MEDICARE_THRESHOLD,
    MEDICARE_RATE,
    SOCIAL_SECURITY_RATE,
    SOCIAL_SECURITY_WAGE_BASE,
    STANDARD_DEDUCTION_2024,
    TAX_BRACKETS_2024,
)

logger = logging.getLogger(__name__)


class IncomeTaxCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        income = self.parse_positive(fields.get("annual_income"), default=85000)
        status = self.parse_choice(fields.get("filing_status"), tuple(TAX_BRACKETS_2024), "single")
        deductions = self.parse_number(fields.get("deductions"), default=0)
        if deductions <= 0:
            deductions = STANDARD_DEDUCTION_2024[status]
        state_rate = self.parse_number(fields.get("state_tax_rate"), default=5.0) / 100
        pre_tax = self.parse_number(fields.get("pre_tax_contributions"), default=0)

        if income <= 0:
            self.reject("Please enter a valid income!")

        taxable = max(0.0, income - pre_tax - deductions)
        federal, marginal, brackets = self.federal_tax(taxable, status)
        state = max(0.0, income - pre_tax) * state_rate
        social_security = min(income, SOCIAL_SECURITY_WAGE_BASE) * SOCIAL_SECURITY_RATE
        medicare = income * MEDICARE_RATE
        threshold = ADDITIONAL_MEDICARE_THRESHOLD[status]
        if income > threshold:
            medicare += (income - threshold) * ADDITIONAL_MEDICARE_RATE

        total = federal + state + social_security + medicare
        take_home = income - pre_tax - total
        return {
            "gross_income": self.round_money(income),
            "deductions": self.round_money(deductions),
            "taxable_income": self.round_money(taxable),
            "federal_tax": self.round_money(federal),
            "state_tax": self.round_money(state),
            "social_security": self.round_money(social_security),
            "medicare": self.round_money(medicare),
            "total_tax": self.round_money(total),
            "effective_rate": round(total / income * 100, 2),
            "marginal_rate": round(marginal * 100, 2),
            "take_home_annual": self.round_money(take_home),
            "take_home_monthly": self.round_money(take_home / 12),
            "take_home_biweekly": self.round_money(take_home / 26),
            "brackets": brackets,
        }

    def federal_tax(self, taxable: float, status: str):
        """Progressive tax over the 2024 brackets. Returns (tax, marginal rate, breakdown)."""
        tax = 0.0
        marginal = TAX_BRACKETS_2024[status][0][1]
        breakdown = []
        lower = 0.0
        for limit, rate in TAX_BRACKETS_2024[status]:
            if taxable <= lower:
                break
            amount = min(taxable, limit) - lower
            tax += amount * rate
            marginal = rate
            breakdown.append({
                "rate": round(rate * 100, 2),
                "from": lower,
                "to": None if limit == float("inf") else limit,
                "taxable_amount": self.round_money(amount),
                "tax": self.round_money(amount * rate),
            })
            lower = limit
        return tax, marginal, breakdown


class SalesTaxCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("addTax", "removeTax", "findRate"), "addTax")
        price = self.parse_number(fields.get("price"), default=100)
        rate = self.parse_number(fields.get("tax_rate"), default=7.5)
        total = self.parse_number(fields.get("total"), default=0)

        if mode == "addTax":
            tax = price * rate / 100
            total = price + tax
        elif mode == "removeTax":
            if rate <= -100:
                self.reject("Please enter a valid tax rate!")
            price = total / (1 + rate / 100)
            tax = total - price
        else:
            if price <= 0:
                self.reject("Please enter a valid price before tax!")
            tax = total - price
            rate = tax / price * 100

        return {
            "mode": mode,
            "price_before_tax": self.round_money(price),
            "tax_rate": round(rate, 3),
            "tax_amount": self.round_money(tax),
            "price_after_tax": self.round_money(total),
        }


class SalaryCalculator(BaseCalculator):
    """Converts a pay amount between frequencies, with and without days off."""

    FREQUENCIES = ("hourly", "daily", "weekly", "biweekly", "semimonthly",
                   "monthly", "quarterly", "annual")
    WEEKS_PER_YEAR = 52

    def calculate(self, fields: dict) -> dict:
        amount = self.parse_number(fields.get("amount"), default=30)
        frequency = self.parse_choice(fields.get("pay_frequency"), self.FREQUENCIES, "hourly")
        hours_week = self.parse_positive(fields.get("hours_per_week"), default=40)
        days_week = self.parse_positive(fields.get("days_per_week"), default=5)
        holidays = self.parse_number(fields.get("holidays"), default=10)
        vacation = self.parse_number(fields.get("vacation_days"), default=15)

        if amount < 0:
            self.reject("Please enter a valid salary amount!")

        hours_day = hours_week / days_week
        hours_year = hours_week * self.WEEKS_PER_YEAR
        hourly = {
            "hourly": amount,
            "daily": amount / hours_day,
            "weekly": amount / hours_week,
            "biweekly": amount / (hours_week * 2),
            "semimonthly": amount * 24 / hours_year,
            "monthly": amount * 12 / hours_year,
            "quarterly": amount * 4 / hours_year,
            "annual": amount / hours_year,
        }[frequency]

        working_days = self.WEEKS_PER_YEAR * days_week
        adjusted_days = working_days - holidays - vacation
        annual = hourly * hours_year
        adjusted_annual = hourly * hours_day * adjusted_days
        adjusted_weekly = adjusted_annual / self.WEEKS_PER_YEAR

        return {
            "unadjusted": self._table(hourly, hours_day * hourly, hours_day * hourly * days_week, annual),
            "adjusted": self._table(hourly, hours_day * hourly, adjusted_weekly, adjusted_annual),
            "working_days": working_days,
            "adjusted_working_days": adjusted_days,
        }

    def _table(self, hourly, daily, weekly, annual) -> dict:
        return {
            "hourly": self.round_money(hourly),
            "daily": self.round_money(daily),
            "weekly": self.round_money(weekly),
            "biweekly": self.round_money(weekly * 2),
            "semimonthly": self.round_money(annual / 24),
            "monthly": self.round_money(annual / 12),
            "quarterly": self.round_money(annual / 4),
            "annual": self.round_money(annual),
        }


# Monthly expense lines per budget category, with their form defaults
BUDGET_EXPENSES = {
    "housing": {"mortgage": 2000, "property_tax": 400, "home_insurance": 150,
                "utilities": 250, "home_maintenance": 200},
    "transportation": {"auto_loan": 450, "auto_insurance": 120, "gasoline": 200,
                       "auto_maintenance": 100, "parking": 50},
    "debt": {"credit_cards": 200, "student_loans": 350, "personal_loans": 0},
    "living": {"groceries": 600, "dining_out": 300, "clothing": 150, "household_supplies": 100},
    "healthcare": {"health_insurance": 400, "medical_expenses": 150},
    "children": {"childcare": 0, "tuition": 0, "child_support": 0},
    "savings": {"retirement": 625, "college_savings": 0, "investments": 200, "emergency_fund": 300},
    "misc": {"pets": 100, "gifts": 100, "entertainment": 200, "travel": 150, "other_expenses": 100},
}


class BudgetCalculator(BaseCalculator):

    STATUS_MARGIN = 100

    def calculate(self, fields: dict) -> dict:
        monthly_income = (
            self.parse_number(fields.get("salary"), default=75000) / 12
            + self.parse_number(fields.get("pension"), default=0)
            + self.parse_number(fields.get("investment_income"), default=2400) / 12
            + self.parse_number(fields.get("other_income"), default=0)
        )
        tax_rate = self.parse_number(fields.get("tax_rate"), default=25) / 100
        after_tax = monthly_income * (1 - tax_rate)

        lines = {
            category: {name: self.parse_number(fields.get(name), default=default)
                       for name, default in items.items()}
            for category, items in BUDGET_EXPENSES.items()
        }
        totals = {category: sum(items.values()) for category, items in lines.items()}
        total_expenses = sum(totals.values())
        net = after_tax - total_expenses
        food = lines["living"]["groceries"] + lines["living"]["dining_out"]

        def share(amount, base):
            return round(amount / base * 100, 2) if base > 0 else 0.0

        if net > self.STATUS_MARGIN:
            status = "surplus"
        elif net < -self.STATUS_MARGIN:
            status = "deficit"
        else:
            status = "balanced"

        return {
            "monthly_income": self.round_money(monthly_income),
            "after_tax_income": self.round_money(after_tax),
            "category_totals": {k: self.round_money(v) for k, v in totals.items()},
            "total_expenses": self.round_money(total_expenses),
            "net_income": self.round_money(net),
            "savings_rate": share(totals["savings"], after_tax),
            "housing_percent": share(totals["housing"], monthly_income),
            "transportation_percent": share(totals["transportation"], after_tax),
            "food_percent": share(food, after_tax),
            "status": status,
        }


class CommissionCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        sales = self.parse_number(fields.get("sales"), default=50000)
        rate = self.parse_number(fields.get("rate"), default=5)
        base = self.parse_number(fields.get("base_salary"), default=30000) \
            if self.parse_bool(fields.get("has_base_salary")) else 0.0

        if sales < 0:
            self.reject("Please enter a valid sales amount!")

        if self.parse_bool(fields.get("tiered")) and sales > 0:
            tier1_max = self.parse_number(fields.get("tier1_max"), default=25000)
            tier1_rate = self.parse_number(fields.get("tier1_rate"), default=3)
            tier2_max = self.parse_number(fields.get("tier2_max"), default=50000)
            tier2_rate = self.parse_number(fields.get("tier2_rate"), default=5)
            tier3_rate = self.parse_number(fields.get("tier3_rate"), default=7)
            if sales <= tier1_max:
                commission = sales * tier1_rate / 100
            elif sales <= tier2_max:
                commission = tier1_max * tier1_rate / 100 + (sales - tier1_max) * tier2_rate / 100
            else:
                commission = (tier1_max * tier1_rate / 100
                              + (tier2_max - tier1_max) * tier2_rate / 100
                              + (sales - tier2_max) * tier3_rate / 100)
        else:
            commission = sales * rate / 100

        return {
            "commission": self.round_money(commission),
            "base_salary": self.round_money(base),
            "total_compensation": self.round_money(base + commission),
            "effective_rate": round(commission / sales * 100, 2) if sales > 0 else 0.0,
        }


class DiscountCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        price = self.parse_number(fields.get("original_price"), default=100)
        discount_type = self.parse_choice(fields.get("discount_type"), ("percent", "fixed"), "percent")
        value = self.parse_number(fields.get("discount_value"), default=20)

        if price < 0 or value < 0:
            self.reject("Please enter a valid price and discount!")

        if discount_type == "percent":
            discount = price * value / 100
            percent = value
        else:
            discount = value
            percent = value / price * 100 if price > 0 else 0.0

        return {
            "original_price": self.round_money(price),
            "discount_amount": self.round_money(discount),
            "final_price": self.round_money(max(0.0, price - discount)),
            "discount_percent": round(percent, 2),
            "savings": self.round_money(discount),
        }

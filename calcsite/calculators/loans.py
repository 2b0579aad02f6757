"""
Loan calculators: mortgage, general loan, auto, student, personal, business,
amortization with extra payments, refinance, payment, APR and implied rate.

All of them share the annuity payment formula and the amortize() simulation
from BaseCalculator. Rates arrive as percent numbers (6.5 = 6.5%).
"""

import logging
import math

from .base import BaseCalculator
from ..reference_tables import CONTINUOUS, PERIODS_PER_YEAR

logger = logging.getLogger(__name__)


class MortgageCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        price = self.parse_number(fields.get("home_price"), default=1000000)
        down = self.parse_number(fields.get("down_payment"), default=200000)
        years = self.parse_positive(fields.get("loan_term"), default=25)
        rate = self.parse_number(fields.get("interest_rate"), default=6.5)
        tax = self.parse_number(fields.get("property_tax"), default=800)
        insurance = self.parse_number(fields.get("home_insurance"), default=250)
        start = self.parse_date(fields.get("start_date"), default=self.today(fields))

        if price <= 0:
            self.reject("Please enter a valid home price!")
        if down >= price:
            self.reject("Down payment must be less than the home price!")
        self.check_months(years * 12)

        loan_amount = price - down
        monthly_rate = rate / 100 / 12
        num_payments = int(round(years * 12))
        monthly_payment = self.annuity_payment(loan_amount, monthly_rate, num_payments)

        total_payment = monthly_payment * num_payments
        total_interest = total_payment - loan_amount
        tax_total = tax * num_payments
        insurance_total = insurance * num_payments

        rows = self.amortize(loan_amount, monthly_rate, monthly_payment, num_payments)
        schedule = [
            self.make_schedule_row(
                month=row["period"],
                date=self.add_months(start, row["period"]).isoformat(),
                principal=row["principal"],
                interest=row["interest"],
                balance=row["balance"],
            )
            for row in rows
        ]

        return {
            "loan_amount": self.round_money(loan_amount),
            "monthly_payment": self.round_money(monthly_payment),
            "property_tax_monthly": self.round_money(tax),
            "insurance_monthly": self.round_money(insurance),
            "total_monthly": self.round_money(monthly_payment + tax + insurance),
            "total_payment": self.round_money(total_payment),
            "total_interest": self.round_money(total_interest),
            "property_tax_total": self.round_money(tax_total),
            "insurance_total": self.round_money(insurance_total),
            "total_out_of_pocket": self.round_money(total_payment + tax_total + insurance_total),
            "payoff_date": self.add_months(start, num_payments).isoformat(),
            "schedule": schedule,
            "annual_schedule": self.annual_summary(rows),
        }


class LoanCalculator(BaseCalculator):
    """
    Three loan shapes:
      amortized: periodic level payments
      deferred:  single lump sum due at maturity
      bond:      amount received today for a face value paid at maturity
    """

    LOAN_TYPES = ("amortized", "deferred", "bond")

    def calculate(self, fields: dict) -> dict:
        loan_type = self.parse_choice(fields.get("loan_type"), self.LOAN_TYPES, "amortized")
        principal = self.parse_positive(fields.get("loan_amount"), default=100000)
        years = self.parse_number(fields.get("loan_term_years"), default=10)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        total_years = years + months / 12
        annual_rate = self.parse_number(fields.get("interest_rate"), default=6) / 100
        compounding = self.parse_frequency(fields.get("compound"), default="monthly")

        if principal <= 0 or total_years <= 0:
            self.reject("Please enter a valid loan amount and term!")
        if annual_rate < 0:
            self.reject("Interest rate cannot be negative!")
        self.check_months(total_years * 12)

        if loan_type == "deferred":
            return self._deferred(principal, total_years, annual_rate, compounding)
        if loan_type == "bond":
            return self._bond(principal, total_years, annual_rate, compounding)

        pay_back = self.parse_frequency(fields.get("pay_back"), default="monthly",
                                        allow_continuous=False)
        payments_per_year = PERIODS_PER_YEAR[pay_back]
        total_payments = int(round(total_years * payments_per_year))
        rate = self.rate_per_payment(annual_rate, compounding, payments_per_year)
        payment = self.annuity_payment(principal, rate, total_payments)
        total_paid = payment * total_payments
        total_interest = total_paid - principal

        rows = self.amortize(principal, rate, payment, total_payments)
        return {
            "loan_type": loan_type,
            "payment": self.round_money(payment),
            "payments": total_payments,
            "total_payments": self.round_money(total_paid),
            "total_interest": self.round_money(total_interest),
            "principal_percentage": round(principal / total_paid * 100, 2),
            "interest_percentage": round(total_interest / total_paid * 100, 2),
            "schedule": [self.make_schedule_row(**row) for row in rows],
        }

    def _growth(self, years: float, annual_rate: float, compounding: str) -> float:
        if compounding == CONTINUOUS:
            return self.exp_growth(annual_rate * years)
        per_year = PERIODS_PER_YEAR[compounding]
        return self.growth(annual_rate / per_year, years * per_year)

    def _deferred(self, principal, years, annual_rate, compounding) -> dict:
        amount_due = principal * self._growth(years, annual_rate, compounding)
        interest = amount_due - principal
        return {
            "loan_type": "deferred",
            "amount_due_at_maturity": self.round_money(amount_due),
            "total_interest": self.round_money(interest),
            "principal_percentage": round(principal / amount_due * 100, 2),
            "interest_percentage": round(interest / amount_due * 100, 2),
        }

    def _bond(self, face_value, years, annual_rate, compounding) -> dict:
        amount_received = face_value / self._growth(years, annual_rate, compounding)
        interest = face_value - amount_received
        return {
            "loan_type": "bond",
            "amount_received": self.round_money(amount_received),
            "face_value": self.round_money(face_value),
            "total_interest": self.round_money(interest),
            "principal_percentage": round(amount_received / face_value * 100, 2),
            "interest_percentage": round(interest / face_value * 100, 2),
        }


class AutoLoanCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        price = self.parse_positive(fields.get("auto_price"), default=30000)
        down = self.parse_number(fields.get("down_payment"), default=6000)
        trade_in = self.parse_number(fields.get("trade_in_value"), default=0)
        owed_on_trade = self.parse_number(fields.get("amount_owed_on_trade_in"), default=0)
        tax_rate = self.parse_number(fields.get("sales_tax"), default=8)
        fees = self.parse_number(fields.get("other_fees"), default=300)
        rate = self.parse_number(fields.get("interest_rate"), default=6)
        months = self.parse_int(fields.get("loan_term"), default=60) or 60
        incentives = self.parse_number(fields.get("cash_incentives"), default=0)
        roll_in = self.parse_bool(fields.get("include_taxes_fees_in_loan"), default=True)
        self.check_months(months)

        sales_tax = (price - trade_in) * tax_rate / 100
        loan_amount = price - down - trade_in + owed_on_trade - incentives
        if roll_in:
            loan_amount += sales_tax + fees
        if loan_amount <= 0:
            self.reject("Down payment and trade-in already cover the vehicle price!")
        upfront = down + trade_in - owed_on_trade + (0 if roll_in else sales_tax + fees)

        monthly_rate = rate / 100 / 12
        monthly_payment = self.annuity_payment(loan_amount, monthly_rate, months)
        total_of_payments = monthly_payment * months
        total_interest = total_of_payments - loan_amount

        rows = self.amortize(loan_amount, monthly_rate, monthly_payment, months)
        return {
            "monthly_payment": self.round_money(monthly_payment),
            "total_loan_amount": self.round_money(loan_amount),
            "sales_tax": self.round_money(sales_tax),
            "upfront_payment": self.round_money(upfront),
            "total_of_payments": self.round_money(total_of_payments),
            "total_interest": self.round_money(total_interest),
            "total_cost": self.round_money(upfront + total_of_payments),
            "principal_percentage": round(loan_amount / total_of_payments * 100, 2),
            "interest_percentage": round(total_interest / total_of_payments * 100, 2),
            "schedule": [self.make_schedule_row(**row) for row in rows],
            "annual_schedule": self.annual_summary(rows),
        }


class StudentLoanCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        balance = self.parse_number(fields.get("loan_balance"), default=35000)
        years = self.parse_positive(fields.get("remaining_term"), default=10)
        rate = self.parse_number(fields.get("interest_rate"), default=4.5)
        extra_monthly = self.parse_number(fields.get("extra_monthly"), default=0)
        extra_yearly = self.parse_number(fields.get("extra_yearly"), default=0)
        one_time = self.parse_number(fields.get("one_time"), default=0)
        start = self.today(fields)

        if balance <= 0:
            self.reject("Please enter a valid loan balance!")
        self.check_months(years * 12)

        monthly_rate = rate / 100 / 12
        num_payments = int(round(years * 12))
        monthly_payment = self.annuity_payment(balance, monthly_rate, num_payments)
        standard_interest = monthly_payment * num_payments - balance

        # One-time payment goes in immediately, extras ride on top of the payment
        remaining = balance - one_time
        total_paid = one_time
        total_interest = 0.0
        schedule = []
        month = 0
        while remaining > 0.01 and month < num_payments * 2:
            month += 1
            interest = remaining * monthly_rate
            principal = monthly_payment - interest
            extra = extra_monthly + (extra_yearly if month % 12 == 0 else 0)
            if principal + extra > remaining:
                principal = remaining
                extra = 0.0
            payment = principal + extra + interest
            remaining -= principal + extra
            total_paid += payment
            total_interest += interest
            schedule.append(self.make_schedule_row(
                month=month,
                date=self.add_months(start, month).isoformat(),
                payment=payment,
                principal=principal + extra,
                interest=interest,
                extra_payment=extra,
                balance=max(remaining, 0.0),
            ))

        return {
            "loan_amount": self.round_money(balance),
            "monthly_payment": self.round_money(monthly_payment),
            "standard_months": num_payments,
            "standard_total_interest": self.round_money(standard_interest),
            "standard_payoff_date": self.add_months(start, num_payments).isoformat(),
            "total_paid": self.round_money(total_paid),
            "total_interest": self.round_money(total_interest),
            "months": month,
            "payoff_date": self.add_months(start, month).isoformat(),
            "interest_savings": self.round_money(standard_interest - total_interest),
            "months_saved": num_payments - month,
            "schedule": schedule,
        }


class PersonalLoanCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_number(fields.get("loan_amount"), default=20000)
        annual_rate = self.parse_number(fields.get("interest_rate"), default=7.5)
        years = self.parse_number(fields.get("loan_term_years"), default=5)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        fee_type = self.parse_choice(fields.get("fee_type"), ("percentage", "fixed"), "percentage")
        insurance = self.parse_number(fields.get("insurance_fee"), default=0)
        start = self.today(fields)

        total_months = int(round(years * 12 + months))
        if principal <= 0 or total_months <= 0:
            self.reject("Please enter a valid loan amount and term!")
        self.check_months(total_months)

        if fee_type == "percentage":
            origination_fee = principal * self.parse_number(fields.get("origination_fee"), default=2) / 100
        else:
            origination_fee = self.parse_number(fields.get("origination_fee"), default=0)

        monthly_rate = annual_rate / 100 / 12
        monthly_payment = self.annuity_payment(principal, monthly_rate, total_months)
        total_payment = monthly_payment * total_months
        total_interest = total_payment - principal
        total_insurance = insurance * total_months

        # APR over what the borrower actually receives, on an average-balance basis
        net_proceeds = principal - origination_fee
        real_apr = annual_rate
        if net_proceeds > 0:
            cost_of_credit = total_payment + total_insurance - net_proceeds
            real_apr = (cost_of_credit / total_months) / (net_proceeds / 2) * 12 * 100

        rows = self.amortize(principal, monthly_rate, monthly_payment, total_months)
        return {
            "loan_amount": self.round_money(principal),
            "origination_fee": self.round_money(origination_fee),
            "net_proceeds": self.round_money(net_proceeds),
            "monthly_payment": self.round_money(monthly_payment),
            "total_payment": self.round_money(total_payment),
            "total_interest": self.round_money(total_interest),
            "total_insurance": self.round_money(total_insurance),
            "total_with_fees": self.round_money(total_payment + origination_fee + total_insurance),
            "real_apr": round(real_apr, 3),
            "payoff_date": self.add_months(start, total_months).isoformat(),
            "schedule": [self.make_schedule_row(**row) for row in rows],
        }


class BusinessLoanCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_number(fields.get("loan_amount"), default=50000)
        rate = self.parse_number(fields.get("interest_rate"), default=7.5)
        years = self.parse_number(fields.get("loan_term_years"), default=5)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        compounding = self.parse_frequency(fields.get("compound"), default="monthly")
        payback = str(fields.get("payback") or "monthly").strip().lower()
        interest_only = payback == "interest-only"
        if not interest_only:
            payback = self.parse_frequency(payback, default="monthly", allow_continuous=False)
        total_fees = (
            self.parse_number(fields.get("origination_fee"), default=1250)
            + self.parse_number(fields.get("documentation_fee"), default=500)
            + self.parse_number(fields.get("other_fees"), default=250)
        )
        start = self.today(fields)

        total_months = int(round(years * 12 + months))
        if principal <= 0 or total_months <= 0:
            self.reject("Please enter a valid loan amount and term!")
        self.check_months(total_months)

        monthly_rate = self.rate_per_payment(rate / 100, compounding, 12)

        if interest_only:
            payments_per_year = 12
            payment = principal * monthly_rate
            num_payments = total_months
            total_payment = payment * num_payments + principal  # balloon at maturity
        else:
            payments_per_year = PERIODS_PER_YEAR[payback]
            payment_rate = monthly_rate * 12 / payments_per_year
            num_payments = int(round(total_months * payments_per_year / 12))
            payment = self.annuity_payment(principal, payment_rate, num_payments)
            total_payment = payment * num_payments

        total_interest = total_payment - principal
        effective_amount = principal - total_fees
        real_apr = (total_interest + total_fees) / effective_amount / (total_months / 12) * 100 \
            if effective_amount > 0 else None

        schedule = []
        balance = principal
        monthly_payment = payment * payments_per_year / 12
        for month in range(1, total_months + 1):
            interest = balance * monthly_rate
            if interest_only:
                principal_paid = balance if month == total_months else 0.0
            else:
                principal_paid = min(monthly_payment - interest, balance)
            balance = max(0.0, balance - principal_paid)
            schedule.append(self.make_schedule_row(
                month=month,
                date=self.add_months(start, month).isoformat(),
                payment=interest + principal_paid,
                principal=principal_paid,
                interest=interest,
                balance=balance,
            ))

        return {
            "payment": self.round_money(payment),
            "payments": num_payments,
            "monthly_payment": self.round_money(monthly_payment),
            "total_payment": self.round_money(total_payment),
            "total_interest": self.round_money(total_interest),
            "total_fees": self.round_money(total_fees),
            "interest_plus_fees": self.round_money(total_interest + total_fees),
            "real_apr": round(real_apr, 3) if real_apr is not None else None,
            "payoff_date": self.add_months(start, total_months).isoformat(),
            "schedule": schedule,
        }


class AmortizationCalculator(BaseCalculator):
    """
    Monthly schedule with optional extra payments.

    Extra monthly payments apply from month number `extra_monthly_start`.
    An extra yearly payment lands once a year on the calendar month of
    `extra_yearly_start`, starting the year after it.
    """

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_positive(fields.get("loan_amount"), default=250000)
        years = self.parse_positive(fields.get("loan_term_years"), default=30)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        rate = self.parse_positive(fields.get("interest_rate"), default=6.5)
        today = self.today(fields)
        start_month = self.parse_int(fields.get("start_month"), default=today.month) or 1
        start_year = self.parse_int(fields.get("start_year"), default=today.year) or today.year
        extra_monthly = self.parse_number(fields.get("extra_monthly"), default=0)
        extra_monthly_start = self.parse_int(fields.get("extra_monthly_start"), default=1) or 1
        extra_yearly = self.parse_number(fields.get("extra_yearly"), default=0)
        extra_yearly_start = self.parse_int(fields.get("extra_yearly_start"), default=1) or 1

        start_month = min(max(start_month, 1), 12)
        total_months = int(round(years * 12 + months))
        self.check_months(total_months)
        monthly_rate = rate / 100 / 12
        monthly_payment = self.annuity_payment(principal, monthly_rate, total_months)
        yearly_calendar_month = (extra_yearly_start - 1 + start_month - 1) % 12

        schedule = []
        balance = principal
        total_paid = 0.0
        total_interest = 0.0
        month_num = 1
        while balance > 0.01 and month_num <= total_months * 2:
            interest = balance * monthly_rate
            principal_paid = monthly_payment - interest
            extra = 0.0
            if extra_monthly > 0 and month_num >= extra_monthly_start:
                extra += extra_monthly
            calendar_month = (start_month - 1 + month_num - 1) % 12
            if (extra_yearly > 0 and month_num > extra_yearly_start
                    and calendar_month == yearly_calendar_month):
                extra += extra_yearly
            principal_paid = min(principal_paid + extra, balance)
            balance -= principal_paid
            total_paid += interest + principal_paid
            total_interest += interest

            year = start_year + (start_month - 1 + month_num - 1) // 12
            schedule.append(self.make_schedule_row(
                month=month_num,
                date=f"{year:04d}-{calendar_month + 1:02d}",
                payment=interest + principal_paid,
                principal=principal_paid,
                interest=interest,
                balance=max(balance, 0.0),
            ))
            month_num += 1

        return {
            "monthly_payment": self.round_money(monthly_payment),
            "total_payment": self.round_money(total_paid),
            "total_interest": self.round_money(total_interest),
            "months": len(schedule),
            "months_saved": max(total_months - len(schedule), 0),
            "payoff_date": schedule[-1]["date"] if schedule else None,
            "schedule": schedule,
            "annual_schedule": self._by_calendar_year(schedule),
        }

    def _by_calendar_year(self, schedule: list) -> list:
        years = {}
        for row in schedule:
            year = int(row["date"][:4])
            bucket = years.setdefault(year, {"principal": 0.0, "interest": 0.0, "payment": 0.0})
            bucket["principal"] += row["principal"]
            bucket["interest"] += row["interest"]
            bucket["payment"] += row["payment"]
            bucket["balance"] = row["balance"]
        return [
            self.make_schedule_row(year=year, **totals)
            for year, totals in sorted(years.items())
        ]


class RefinanceCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("balance", "original"), "balance")
        years_left = self.parse_number(fields.get("years_remaining"), default=25)
        months_left = self.parse_number(fields.get("months_remaining"), default=0)
        current_rate = self.parse_positive(fields.get("interest_rate"), default=7.0)
        new_years = self.parse_positive(fields.get("new_term"), default=30)
        new_rate = self.parse_positive(fields.get("new_rate"), default=5.5)
        points = self.parse_number(fields.get("points"), default=0)
        closing_costs = self.parse_number(fields.get("closing_costs"), default=3500)
        cash_out = self.parse_number(fields.get("cash_out"), default=0)
        today = self.today(fields)

        months_remaining = int(round(years_left * 12 + months_left))
        if months_remaining <= 0:
            self.reject("Please enter the time remaining on the current loan!")
        self.check_months(months_remaining)
        self.check_months(new_years * 12)

        if mode == "balance":
            current_balance = self.parse_positive(fields.get("remaining_balance"), default=350000)
            current_payment = self.parse_positive(fields.get("monthly_payment"), default=2500)
        else:
            original_amount = self.parse_positive(fields.get("original_amount"), default=400000)
            original_term = self.parse_positive(fields.get("original_term"), default=30)
            self.check_months(original_term * 12)
            current_monthly_rate = current_rate / 100 / 12
            total_months = int(round(original_term * 12))
            current_payment = self.annuity_payment(original_amount, current_monthly_rate, total_months)
            months_paid = max(total_months - months_remaining, 0)
            rows = self.amortize(original_amount, current_monthly_rate, current_payment, months_paid)
            current_balance = rows[-1]["balance"] if rows else original_amount

        current_total = current_payment * months_remaining
        current_interest = current_total - current_balance

        points_cost = current_balance * points / 100
        total_closing = closing_costs + points_cost
        new_amount = current_balance + cash_out
        new_months = int(round(new_years * 12))
        new_payment = self.annuity_payment(new_amount, new_rate / 100 / 12, new_months)
        new_total = new_payment * new_months
        new_interest = new_total - new_amount

        monthly_savings = current_payment - new_payment
        lifetime_savings = current_total - (new_total + total_closing)
        break_even = total_closing / monthly_savings if monthly_savings > 0 else None

        return {
            "current_monthly_payment": self.round_money(current_payment),
            "current_balance": self.round_money(current_balance),
            "current_total_interest": self.round_money(current_interest),
            "current_payoff_date": self.add_months(today, months_remaining).isoformat(),
            "new_loan_amount": self.round_money(new_amount),
            "new_monthly_payment": self.round_money(new_payment),
            "new_total_payment": self.round_money(new_total),
            "new_total_interest": self.round_money(new_interest),
            "new_payoff_date": self.add_months(today, new_months).isoformat(),
            "monthly_savings": self.round_money(monthly_savings),
            "lifetime_savings": self.round_money(lifetime_savings),
            "points_cost": self.round_money(points_cost),
            "total_closing_costs": self.round_money(total_closing),
            "upfront_cost": self.round_money(total_closing - cash_out),
            "break_even_months": round(break_even, 1) if break_even is not None else None,
            "break_even_date": self.add_months(today, math.ceil(break_even)).isoformat()
            if break_even is not None else None,
        }


class PaymentCalculator(BaseCalculator):
    """Fixed term -> monthly payment, or fixed payment -> time to pay off."""

    MAX_MONTHS = 999

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("fixed-term", "fixed-payment"), "fixed-term")
        principal = self.parse_positive(fields.get("loan_amount"), default=200000)
        rate = self.parse_positive(fields.get("interest_rate"), default=6)
        monthly_rate = rate / 100 / 12

        payment_too_low = False
        if mode == "fixed-term":
            years = self.parse_positive(fields.get("loan_term"), default=15)
            self.check_months(years * 12)
            months = years * 12
            payment = self.annuity_payment(principal, monthly_rate, months)
        else:
            payment = self.parse_positive(fields.get("monthly_payment"), default=2000)
            if monthly_rate == 0:
                months = principal / payment
            elif payment <= principal * monthly_rate:
                months = self.MAX_MONTHS
                payment_too_low = True
            else:
                months = -math.log(1 - monthly_rate * principal / payment) / math.log(1 + monthly_rate)
            if months > self.MAX_MONTHS:
                months = self.MAX_MONTHS
                payment_too_low = True

        total_payment = payment * months
        rows = self.amortize(principal, monthly_rate, payment, math.ceil(months))
        return {
            "mode": mode,
            "monthly_payment": self.round_money(payment),
            "principal": self.round_money(principal),
            "months": round(months, 2),
            "years_to_payoff": int(months // 12),
            "months_remaining": int(round(months % 12)),
            "payment_too_low": payment_too_low,
            "total_payment": self.round_money(total_payment),
            "total_interest": self.round_money(total_payment - principal),
            "schedule": [self.make_schedule_row(**row) for row in rows],
            "annual_schedule": self.annual_summary(rows),
        }


class AprCalculator(BaseCalculator):
    """
    Real APR: the rate at which the payments discount back to what the
    borrower actually receives (loan amount less prepaid fees).
    """

    TOLERANCE = 1e-6
    MAX_ITERATIONS = 100

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_positive(fields.get("loan_amount"), default=100000)
        years = self.parse_number(fields.get("loan_term_years"), default=10)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        rate = self.parse_positive(fields.get("interest_rate"), default=6.0) / 100
        compounds_per_year = self.parse_periods_per_year(fields.get("compound"), default=12)
        financed_fees = self.parse_number(fields.get("financed_fees"), default=0)
        prepaid_fees = self.parse_number(fields.get("prepaid_fees"), default=1500)

        total_months = int(round(years * 12 + months))
        if total_months <= 0:
            self.reject("Please enter a valid loan term!")
        self.check_months(total_months)
        if prepaid_fees >= principal:
            self.reject("Fees cannot exceed the loan amount!")

        financed = principal + financed_fees
        received = principal - prepaid_fees
        monthly_rate = self.growth(rate / compounds_per_year, compounds_per_year / 12) - 1
        payment = self.annuity_payment(financed, monthly_rate, total_months)
        total_paid = payment * total_months

        try:
            apr = self._solve_apr(payment, total_months, received, guess=rate)
        except (OverflowError, ZeroDivisionError):
            self.reject("Could not find an APR for these values!")
        return {
            "apr": round(apr * 100, 3),
            "nominal_rate": round(rate * 100, 3),
            "monthly_payment": self.round_money(payment),
            "payments": total_months,
            "total_paid": self.round_money(total_paid),
            "total_interest": self.round_money(total_paid - financed),
            "total_fees": self.round_money(financed_fees + prepaid_fees),
        }

    def _solve_apr(self, payment: float, months: int, received: float, guess: float) -> float:
        apr = guess if guess > 0 else 0.05
        for _ in range(self.MAX_ITERATIONS):
            monthly = apr / 12
            present_value = 0.0
            derivative = 0.0
            for t in range(1, months + 1):
                factor = math.pow(1 + monthly, t)
                present_value += payment / factor
                derivative -= t * payment / ((1 + monthly) * factor)
            error = present_value - received
            if abs(error) < self.TOLERANCE:
                break
            apr -= error / (derivative / 12)
        return apr


class InterestRateCalculator(BaseCalculator):
    """Implied annual rate from loan amount, term and monthly payment (Newton's method)."""

    INITIAL_GUESS = 0.005
    TOLERANCE = 1e-6
    MAX_ITERATIONS = 100

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_positive(fields.get("loan_amount"), default=250000)
        years = self.parse_number(fields.get("loan_term_years"), default=5)
        months = self.parse_number(fields.get("loan_term_months"), default=0)
        payment = self.parse_positive(fields.get("monthly_payment"), default=4800)

        total_months = int(round(years * 12 + months))
        if total_months <= 0 or principal <= 0 or payment <= 0:
            self.reject("Please enter valid loan amount, term, and payment values!")
        self.check_months(total_months)
        if payment * total_months < principal - 1e-9:
            self.reject("Monthly payment is too low to pay off the loan!")

        rate = self._solve_monthly_rate(principal, payment, total_months)
        total_paid = payment * total_months
        return {
            "interest_rate": round(rate * 12 * 100, 3),
            "monthly_payment": self.round_money(payment),
            "loan_amount": self.round_money(principal),
            "loan_term_months": total_months,
            "total_payments": self.round_money(total_paid),
            "total_interest": self.round_money(total_paid - principal),
        }

    def _solve_monthly_rate(self, principal: float, payment: float, n: int) -> float:
        if abs(payment * n - principal) < 1e-6:
            return 0.0
        rate = self.INITIAL_GUESS
        for _ in range(self.MAX_ITERATIONS):
            power = math.pow(1 + rate, -n)
            f = payment * (1 - power) / rate - principal
            df = payment * (n * power / (rate * (1 + rate)) - (1 - power) / (rate * rate))
            new_rate = rate - f / df
            if new_rate <= 0:
                new_rate = rate / 2
            if abs(new_rate - rate) < self.TOLERANCE:
                return new_rate
            rate = new_rate
        logger.debug("Rate solver hit %d iterations for n=%d", self.MAX_ITERATIONS, n)
        return rate

"""
Debt calculators: multi-debt payoff (avalanche), consolidation loan
comparison and credit card payoff.
"""

import logging
import math

from .base import BaseCalculator

logger = logging.getLogger(__name__)

MAX_PAYOFF_MONTHS = 1200


DEFAULT_PAYOFF_DEBTS = [
    {"name": "Credit Card 1", "balance": 5000, "min_payment": 150, "rate": 18.99},
    {"name": "Credit Card 2", "balance": 3500, "min_payment": 100, "rate": 15.5},
    {"name": "Personal Loan", "balance": 8000, "min_payment": 200, "rate": 12.0},
]

DEFAULT_CONSOLIDATION_DEBTS = [
    {"name": "Credit Card 1", "balance": 8000, "monthly_payment": 200, "rate": 18.99},
    {"name": "Credit Card 2", "balance": 5000, "monthly_payment": 150, "rate": 21.99},
    {"name": "Personal Loan", "balance": 12000, "monthly_payment": 350, "rate": 14.5},
]


class DebtPayoffCalculator(BaseCalculator):
    """
    Avalanche payoff: every debt gets its minimum, then all extra money goes to
    the highest-rate debt still open. Minimums freed by a paid-off debt roll
    into the extra pool.
    """

    def calculate(self, fields: dict) -> dict:
        rows = fields["debts"] if "debts" in fields else DEFAULT_PAYOFF_DEBTS
        extra_monthly = self.parse_number(fields.get("extra_monthly"), default=200)
        extra_yearly = self.parse_number(fields.get("extra_yearly"), default=1000)
        one_time = self.parse_number(fields.get("one_time"), default=0)
        one_time_month = self.parse_int(fields.get("one_time_month"), default=0)
        start = self.today(fields)

        debts = []
        for index, row in enumerate(self.parse_list(rows)):
            balance = self.parse_number(row.get("balance"))
            min_payment = self.parse_number(row.get("min_payment"))
            if balance <= 0 or min_payment <= 0:
                continue
            debts.append({
                "name": str(row.get("name") or "").strip() or f"Debt {index + 1}",
                "balance": balance,
                "min_payment": min_payment,
                "rate": self.parse_number(row.get("rate")),
            })
        if not debts:
            self.reject("Please enter at least one debt with a balance and minimum payment!")

        debts.sort(key=lambda d: d["rate"], reverse=True)
        total_debt = sum(d["balance"] for d in debts)

        baseline = self._simulate(debts, lambda month: 0.0, rollover=False)
        plan = self._simulate(
            debts,
            lambda month: (extra_monthly
                           + (extra_yearly if month % 12 == 1 else 0.0)
                           + (one_time if month == one_time_month else 0.0)),
            rollover=True,
        )

        payoff_order = [
            {
                "name": debt["name"],
                "balance": self.round_money(debt["balance"]),
                "rate": debt["rate"],
                "payoff_month": plan["payoff_months"][i],
                "payoff_date": self.add_months(start, plan["payoff_months"][i]).isoformat()
                if plan["payoff_months"][i] is not None else None,
                "total_interest": self.round_money(plan["interest_by_debt"][i]),
            }
            for i, debt in enumerate(debts)
        ]
        payoff_order.sort(key=lambda d: (d["payoff_month"] is None, d["payoff_month"] or 0))

        return {
            "total_debt": self.round_money(total_debt),
            "total_min_payment": self.round_money(sum(d["min_payment"] for d in debts)),
            "payoff_months": plan["months"],
            "payoff_date": self.add_months(start, plan["months"]).isoformat(),
            "total_interest": self.round_money(plan["interest"]),
            "total_paid": self.round_money(total_debt + plan["interest"]),
            "baseline_months": baseline["months"],
            "baseline_interest": self.round_money(baseline["interest"]),
            "months_saved": max(baseline["months"] - plan["months"], 0),
            "interest_saved": self.round_money(max(baseline["interest"] - plan["interest"], 0.0)),
            "paid_off": plan["paid_off"],
            "payoff_order": payoff_order,
        }

    def _simulate(self, debts: list, extra_for_month, rollover: bool) -> dict:
        balances = [d["balance"] for d in debts]
        interest_by_debt = [0.0] * len(debts)
        payoff_months = [None] * len(debts)
        month = 0

        while any(b > 0.005 for b in balances) and month < MAX_PAYOFF_MONTHS:
            month += 1
            available = extra_for_month(month)
            for i, debt in enumerate(debts):
                if balances[i] <= 0.005:
                    if rollover:
                        available += debt["min_payment"]
                    continue
                interest = balances[i] * debt["rate"] / 100 / 12
                interest_by_debt[i] += interest
                principal = min(debt["min_payment"] - interest, balances[i])
                balances[i] = max(0.0, balances[i] - principal)
                if rollover and principal < debt["min_payment"] - interest:
                    # Leftover from the final minimum payment joins the extra pool
                    available += debt["min_payment"] - interest - principal

            for i in range(len(debts)):
                if available <= 0:
                    break
                if balances[i] <= 0.005:
                    continue
                payment = min(available, balances[i])
                balances[i] -= payment
                available -= payment

            for i in range(len(debts)):
                if payoff_months[i] is None and balances[i] <= 0.005:
                    balances[i] = 0.0
                    payoff_months[i] = month

        return {
            "months": month,
            "interest": sum(interest_by_debt),
            "interest_by_debt": interest_by_debt,
            "payoff_months": payoff_months,
            "paid_off": all(m is not None for m in payoff_months),
        }


class DebtConsolidationCalculator(BaseCalculator):

    MAX_MONTHS = 600

    def calculate(self, fields: dict) -> dict:
        rows = fields["debts"] if "debts" in fields else DEFAULT_CONSOLIDATION_DEBTS
        debts = []
        for row in self.parse_list(rows):
            balance = self.parse_number(row.get("balance"))
            payment = self.parse_number(row.get("monthly_payment"))
            rate = self.parse_number(row.get("rate"))
            if balance > 0 and payment > 0 and rate > 0:
                debts.append({"balance": balance, "payment": payment, "rate": rate})
        if not debts:
            self.reject("Please enter at least one debt with a balance, payment and rate!")

        current_total = sum(d["balance"] for d in debts)
        current_monthly = sum(d["payment"] for d in debts)
        weighted_apr = sum(d["balance"] * d["rate"] for d in debts) / current_total

        current_interest = 0.0
        current_months = 0
        for debt in debts:
            months, interest = self._payoff(debt["balance"], debt["payment"], debt["rate"])
            current_interest += interest
            current_months = max(current_months, months)

        loan_amount = self.parse_number(fields.get("loan_amount"), default=current_total)
        loan_rate = self.parse_number(fields.get("loan_rate"), default=9.5)
        term_months = int(round(
            self.parse_number(fields.get("loan_term_years"), default=5) * 12
            + self.parse_number(fields.get("loan_term_months"), default=0)
        ))
        fee_type = self.parse_choice(fields.get("fee_type"), ("percentage", "dollar"), "percentage")
        fee_value = self.parse_number(fields.get("fee"), default=3)
        loan_fee = loan_amount * fee_value / 100 if fee_type == "percentage" else fee_value

        if loan_amount <= 0 or term_months <= 0:
            self.reject("Please enter a valid consolidation loan amount and term!")
        self.check_months(term_months)

        new_payment = self.annuity_payment(loan_amount, loan_rate / 100 / 12, term_months)
        new_total_paid = new_payment * term_months
        new_interest = new_total_paid - loan_amount
        real_apr = loan_rate
        if loan_fee > 0:
            real_apr = (new_total_paid + loan_fee - loan_amount) / loan_amount / (term_months / 12) * 100

        monthly_savings = current_monthly - new_payment
        return {
            "current_total_debt": self.round_money(current_total),
            "current_monthly_payment": self.round_money(current_monthly),
            "current_total_interest": self.round_money(current_interest),
            "current_payoff_months": current_months,
            "current_weighted_apr": round(weighted_apr, 2),
            "consolidation_monthly_payment": self.round_money(new_payment),
            "consolidation_total_interest": self.round_money(new_interest),
            "consolidation_payoff_months": term_months,
            "consolidation_real_apr": round(real_apr, 2),
            "consolidation_loan_fee": self.round_money(loan_fee),
            "monthly_savings": self.round_money(monthly_savings),
            "total_savings": self.round_money(current_interest - (new_interest + loan_fee)),
            "months_saved": current_months - term_months,
            "is_worthwhile": real_apr < weighted_apr and monthly_savings > 0,
        }

    def _payoff(self, balance: float, payment: float, rate: float):
        """Months and interest to retire one debt at a fixed payment (capped)."""
        monthly_rate = rate / 100 / 12
        months = 0
        interest_total = 0.0
        while balance > 0.01 and months < self.MAX_MONTHS:
            interest = balance * monthly_rate
            principal = min(payment - interest, balance)
            if principal <= 0:
                return self.MAX_MONTHS, interest_total
            interest_total += interest
            balance -= principal
            months += 1
        return months, interest_total


class CreditCardCalculator(BaseCalculator):
    """Payoff time for a fixed payment, or the payment for a target payoff time."""

    MAX_MONTHS = 600
    MINIMUM_PAYMENT_FLOOR = 15.0

    def calculate(self, fields: dict) -> dict:
        balance = self.parse_positive(fields.get("balance"), default=5000)
        rate = self.parse_positive(fields.get("interest_rate"), default=18.5)
        mode = self.parse_choice(fields.get("mode"), ("amount", "timeframe"), "amount")
        start = self.today(fields)

        if balance <= 0 or rate < 0:
            self.reject("Please enter a valid balance and interest rate!")

        monthly_rate = rate / 100 / 12
        minimum = max(self.MINIMUM_PAYMENT_FLOOR, balance * 0.01 + balance * monthly_rate)

        if mode == "amount":
            payment = self.parse_positive(fields.get("monthly_payment"), default=150)
            if payment < minimum:
                self.reject(
                    f"Monthly payment must be at least ${minimum:.2f} "
                    f"to cover interest and pay down principal!"
                )
            rows = self.amortize(balance, monthly_rate, payment, self.MAX_MONTHS)
            months = len(rows)
        else:
            months = int(round(
                self.parse_positive(fields.get("payoff_years"), default=3) * 12
                + self.parse_number(fields.get("payoff_months"), default=0)
            ))
            if months <= 0:
                self.reject("Please enter a valid payoff time!")
            self.check_months(months)
            payment = self.annuity_payment(balance, monthly_rate, months)
            rows = self.amortize(balance, monthly_rate, payment, months)

        total_interest = sum(r["interest"] for r in rows)
        total_paid = sum(r["payment"] for r in rows)
        return {
            "mode": mode,
            "minimum_payment": self.round_money(minimum),
            "monthly_payment": self.round_money(payment),
            "months_to_payoff": months,
            "years_to_payoff": round(months / 12, 2),
            "total_interest": self.round_money(total_interest),
            "total_paid": self.round_money(total_paid),
            "payoff_date": self.add_months(start, months).isoformat(),
            "paid_off": math.isclose(sum(r["principal"] for r in rows), balance, abs_tol=0.01),
        }

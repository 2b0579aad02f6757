"""
Interest and growth calculators: general interest, compound, simple, CD,
savings, future value, present value, time-value-of-money solver and inflation.
"""

import logging
import math

from .base import BaseCalculator
from ..reference_tables import CONTINUOUS, CPI_BY_YEAR

logger = logging.getLogger(__name__)


class InterestCalculator(BaseCalculator):
    """Period-by-period growth with regular contributions, tax and inflation."""

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_number(fields.get("principal"), default=25000)
        annual_add = self.parse_number(fields.get("annual_contribution"), default=5000)
        monthly_add = self.parse_number(fields.get("monthly_contribution"), default=0)
        rate = self.parse_number(fields.get("interest_rate"), default=5) / 100
        total_years = (self.parse_number(fields.get("years"), default=5)
                       + self.parse_number(fields.get("months"), default=0) / 12)
        n = self.parse_periods_per_year(fields.get("compound"), default=12)
        beginning = self.parse_choice(fields.get("contribution_timing"),
                                      ("beginning", "end"), "end") == "beginning"
        tax_rate = self.parse_number(fields.get("tax_rate"), default=0) / 100
        inflation = self.parse_number(fields.get("inflation_rate"), default=0) / 100

        if principal < 0 or rate < 0 or total_years <= 0:
            self.reject("Please enter a valid principal, rate and time period!")
        self.check_months(total_years * 12)

        total_periods = math.ceil(total_years * n)
        contribution = annual_add / n + monthly_add * 12 / n
        rate_per_period = rate / n

        balance = principal
        total_interest = 0.0
        rows = []
        for period in range(1, total_periods + 1):
            if beginning:
                balance += contribution
            interest = balance * rate_per_period
            balance += interest
            total_interest += interest
            if not beginning:
                balance += contribution
            rows.append({"period": period, "deposit": contribution,
                         "interest": interest, "balance": balance})

        tax = total_interest * tax_rate
        after_tax = balance - tax
        yearly = []
        for start in range(0, len(rows), n):
            chunk = rows[start:start + n]
            yearly.append(self.make_schedule_row(
                year=start // n + 1,
                deposit=sum(r["deposit"] for r in chunk),
                interest=sum(r["interest"] for r in chunk),
                balance=chunk[-1]["balance"],
            ))

        return {
            "ending_balance": self.round_money(balance),
            "total_principal": self.round_money(principal),
            "total_contributions": self.round_money(contribution * total_periods),
            "total_interest": self.round_money(total_interest),
            "tax": self.round_money(tax),
            "after_tax_balance": self.round_money(after_tax),
            "inflation_adjusted": self.round_money(after_tax / self.growth(inflation, total_years)),
            "schedule": yearly,
        }


class CompoundInterestCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_number(fields.get("principal"), default=10000)
        monthly = self.parse_number(fields.get("monthly_contribution"), default=200)
        rate_pct = self.parse_number(fields.get("interest_rate"), default=5)
        years = self.parse_int(fields.get("years"), default=10)
        continuous = self.parse_frequency(fields.get("compound"), default="") == CONTINUOUS
        n = self.parse_periods_per_year(fields.get("compound"), default=12)

        rate = rate_pct / 100
        if principal < 0 or rate < 0 or years <= 0:
            self.reject("Please enter a valid principal, rate and number of years!")
        self.check_months(years * 12)

        yearly_contribution = monthly * 12
        schedule = []
        balance = principal
        for year in range(1, years + 1):
            start_balance = balance
            if continuous:
                growth = self.exp_growth(rate)
                added = yearly_contribution * ((growth - 1) / rate if rate else 1.0)
                balance = balance * growth + added
            else:
                per_period = yearly_contribution / n
                for _ in range(n):
                    balance += per_period
                    balance += balance * rate / n
            schedule.append(self.make_schedule_row(
                year=year,
                starting_balance=start_balance,
                contribution=yearly_contribution,
                interest=balance - start_balance - yearly_contribution,
                ending_balance=balance,
            ))

        total_contributions = yearly_contribution * years
        if continuous:
            ear = self.exp_growth(rate) - 1
            doubling = math.log(2) / rate if rate else None
        else:
            ear = self.growth(rate / n, n) - 1
            doubling = 72 / rate_pct if rate_pct else None

        return {
            "future_value": self.round_money(balance),
            "total_principal": self.round_money(principal),
            "total_contributions": self.round_money(total_contributions),
            "total_interest": self.round_money(balance - principal - total_contributions),
            "effective_annual_rate": round(ear * 100, 4),
            "doubling_time_years": round(doubling, 2) if doubling is not None else None,
            "schedule": schedule,
        }


class SimpleInterestCalculator(BaseCalculator):

    TIME_UNITS = {"years": 1.0, "months": 12.0, "days": 365.0}

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_positive(fields.get("principal"), default=20000)
        rate = self.parse_positive(fields.get("interest_rate"), default=3)
        unit = self.parse_choice(fields.get("time_unit"), tuple(self.TIME_UNITS), "years")
        term = self.parse_positive(fields.get("term"), default=10)
        years = term / self.TIME_UNITS[unit]

        if principal < 0 or rate < 0 or years <= 0:
            self.reject("Please enter a valid principal, rate and term!")
        self.check_months(years * 12)

        interest = principal * rate / 100 * years
        breakdown = []
        for year in range(1, math.ceil(years) + 1):
            fraction = min(1.0, years - (year - 1))
            breakdown.append(self.make_schedule_row(
                year=year,
                interest=principal * rate / 100 * fraction,
                balance=principal + principal * rate / 100 * min(year, years),
            ))

        return {
            "principal": self.round_money(principal),
            "rate": rate,
            "years": round(years, 4),
            "total_interest": self.round_money(interest),
            "end_balance": self.round_money(principal + interest),
            "breakdown": breakdown,
        }


class CdCalculator(BaseCalculator):

    COMPOUNDING = ("annually", "semiannually", "quarterly", "monthly", CONTINUOUS)

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_positive(fields.get("initial_deposit"), default=10000)
        rate = self.parse_positive(fields.get("interest_rate"), default=4.89) / 100
        total_months = int(round(
            self.parse_positive(fields.get("term_years"), default=3) * 12
            + self.parse_number(fields.get("term_months"), default=0)
        ))
        compound = self.parse_frequency(fields.get("compound"), default="monthly")
        if compound not in self.COMPOUNDING:
            compound = "monthly"
        tax_rate = self.parse_number(fields.get("tax_rate"), default=0) / 100

        if principal <= 0 or total_months <= 0:
            self.reject("Please enter a valid deposit and term!")
        self.check_months(total_months)

        schedule = []
        balance = principal
        if compound == CONTINUOUS:
            monthly_growth = self.exp_growth(rate / 12)
        else:
            n = {"annually": 1, "semiannually": 2, "quarterly": 4, "monthly": 12}[compound]
            months_per_period = 12 // n
        for month in range(1, total_months + 1):
            previous = balance
            if compound == CONTINUOUS:
                balance *= monthly_growth
            elif month % months_per_period == 0:
                balance *= 1 + rate / n
            schedule.append(self.make_schedule_row(
                month=month,
                year=(month - 1) // 12 + 1,
                interest=balance - previous,
                balance=balance,
            ))

        # Partial compounding periods at the end of the term still accrue at the closed-form rate
        total_years = total_months / 12
        if compound == CONTINUOUS:
            end_balance = principal * self.exp_growth(rate * total_years)
        else:
            end_balance = principal * self.growth(rate / n, n * total_years)

        interest = end_balance - principal
        tax = interest * tax_rate
        return {
            "principal": self.round_money(principal),
            "end_balance": self.round_money(end_balance),
            "total_interest": self.round_money(interest),
            "tax": self.round_money(tax),
            "after_tax_interest": self.round_money(interest - tax),
            "after_tax_balance": self.round_money(principal + interest - tax),
            "effective_annual_rate": round((math.pow(end_balance / principal, 1 / total_years) - 1) * 100, 4),
            "average_monthly_interest": self.round_money(interest / total_months),
            "months": total_months,
            "schedule": schedule,
        }


class SavingsCalculator(BaseCalculator):
    """Monthly deposits that grow by a yearly percentage, compounded n times a year."""

    def calculate(self, fields: dict) -> dict:
        initial = self.parse_number(fields.get("initial_deposit"), default=20000)
        monthly = self.parse_number(fields.get("monthly_contribution"), default=500)
        rate = self.parse_number(fields.get("interest_rate"), default=4.5) / 100
        years = self.parse_int(fields.get("years"), default=10)
        n = self.parse_periods_per_year(fields.get("compound"), default=12)
        increase = self.parse_number(fields.get("annual_increase"), default=0) / 100

        if initial < 0 or monthly < 0 or rate < 0 or years <= 0:
            self.reject("Please enter valid savings values!")
        self.check_months(years * 12)

        monthly_growth = self.growth(rate / n, n / 12)
        balance = initial
        total_contributions = 0.0
        schedule = []
        for year in range(1, years + 1):
            start_balance = balance
            deposit = monthly * self.growth(increase, year - 1)
            for _ in range(12):
                balance += deposit
                balance *= monthly_growth
            total_contributions += deposit * 12
            schedule.append(self.make_schedule_row(
                year=year,
                starting_balance=start_balance,
                contribution=deposit * 12,
                interest=balance - start_balance - deposit * 12,
                ending_balance=balance,
            ))

        total_interest = balance - initial - total_contributions
        share = (lambda part: round(part / balance * 100, 2)) if balance > 0 else (lambda part: 0.0)
        return {
            "end_balance": self.round_money(balance),
            "initial_deposit": self.round_money(initial),
            "total_contributions": self.round_money(total_contributions),
            "total_interest": self.round_money(total_interest),
            "percent_initial": share(initial),
            "percent_contributions": share(total_contributions),
            "percent_interest": share(total_interest),
            "schedule": schedule,
        }


class FutureValueCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        pv = self.parse_number(fields.get("present_value"), default=10000)
        pmt = self.parse_number(fields.get("payment"), default=500)
        rate = self.parse_number(fields.get("interest_rate"), default=6) / 100
        periods = self.parse_int(fields.get("periods"), default=120)
        beginning = self.parse_choice(fields.get("timing"), ("beginning", "end"), "end") == "beginning"

        if periods <= 0:
            self.reject("Please enter a valid number of periods!")
        self.check_periods(periods)

        growth = self.growth(rate, periods)
        if rate == 0:
            fv_payments = pmt * periods
        else:
            fv_payments = pmt * (growth - 1) / rate * ((1 + rate) if beginning else 1)
        future_value = pv * growth + fv_payments

        schedule = []
        balance = pv
        for period in range(1, periods + 1):
            start_balance = balance
            if beginning:
                balance += pmt
            interest = balance * rate
            balance += interest
            if not beginning:
                balance += pmt
            schedule.append(self.make_schedule_row(
                period=period, starting_balance=start_balance, deposit=pmt,
                interest=interest, ending_balance=balance,
            ))

        return {
            "future_value": self.round_money(future_value),
            "present_value": self.round_money(pv),
            "total_deposits": self.round_money(pmt * periods),
            "total_interest": self.round_money(future_value - pv - pmt * periods),
            "periods": periods,
            "schedule": schedule,
        }


class PresentValueCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("lump-sum", "annuity"), "lump-sum")
        rate = self.parse_positive(fields.get("interest_rate"), default=5) / 100
        periods = self.parse_positive(fields.get("periods"), default=10)

        if rate < 0 or periods <= 0:
            self.reject("Please enter a valid rate and number of periods!")
        self.check_periods(periods)

        if mode == "lump-sum":
            fv = self.parse_positive(fields.get("future_value"), default=100000)
            pv = fv / self.growth(rate, periods)
            schedule = [
                self.make_schedule_row(
                    period=i,
                    interest=pv * self.growth(rate, i) - pv * self.growth(rate, i - 1) if i else 0.0,
                    balance=pv * self.growth(rate, i),
                )
                for i in range(int(periods) + 1)
            ]
            return {
                "mode": mode,
                "present_value": self.round_money(pv),
                "future_value": self.round_money(fv),
                "total_interest": self.round_money(fv - pv),
                "schedule": schedule,
            }

        pmt = self.parse_positive(fields.get("payment"), default=1000)
        beginning = self.parse_choice(fields.get("timing"), ("beginning", "end"), "end") == "beginning"
        factor = (1 + rate) if beginning else 1.0
        if rate == 0:
            pv = fv = pmt * periods
        else:
            pv = pmt * (1 - self.growth(rate, -periods)) / rate * factor
            fv = pmt * (self.growth(rate, periods) - 1) / rate * factor

        schedule = []
        balance = 0.0
        for i in range(1, int(periods) + 1):
            if beginning:
                balance += pmt
                interest = balance * rate
                balance += interest
            else:
                interest = balance * rate
                balance += interest + pmt
            schedule.append(self.make_schedule_row(period=i, payment=pmt, interest=interest, balance=balance))

        return {
            "mode": mode,
            "present_value": self.round_money(pv),
            "future_value": self.round_money(fv),
            "total_payments": self.round_money(pmt * periods),
            "total_interest": self.round_money(fv - pmt * periods),
            "schedule": schedule,
        }


class FinanceCalculator(BaseCalculator):
    """
    Time value of money solver. Cash flows are signed: money paid out is
    negative, money received is positive, and

        PV*(1+i)^N + PMT*(1+i*k)*((1+i)^N - 1)/i + FV = 0

    where i is the rate per period and k is 1 for payments at the beginning.
    """

    SOLVE_FOR = ("FV", "PV", "PMT", "N", "IY")

    def calculate(self, fields: dict) -> dict:
        solve_for = self.parse_choice(fields.get("solve_for"), self.SOLVE_FOR, "FV")
        n = self.parse_number(fields.get("n"), default=120)
        iy = self.parse_number(fields.get("iy"), default=6)
        pv = self.parse_number(fields.get("pv"), default=-10000)
        pmt = self.parse_number(fields.get("pmt"), default=-500)
        fv = self.parse_number(fields.get("fv"), default=0)
        per_year = self.parse_periods_per_year(fields.get("periods_per_year"), default=12)
        k = 1 if self.parse_choice(fields.get("timing"), ("beginning", "end"), "end") == "beginning" else 0
        i = iy / 100 / per_year

        if solve_for != "N" and n <= 0:
            self.reject("Please enter a valid number of periods!")
        if solve_for != "N":
            self.check_periods(n)

        if solve_for == "FV":
            fv = -(pv * self._growth(i, n) + pmt * self._annuity_factor(i, n, k))
            value = fv
        elif solve_for == "PV":
            pv = -(fv + pmt * self._annuity_factor(i, n, k)) / self._growth(i, n)
            value = pv
        elif solve_for == "PMT":
            factor = self._annuity_factor(i, n, k)
            if factor == 0:
                self.reject("Please enter a valid number of periods!")
            pmt = -(pv * self._growth(i, n) + fv) / factor
            value = pmt
        elif solve_for == "N":
            n = self._solve_n(i, pv, pmt, fv, k)
            value = n
        else:
            i = self._solve_rate(n, pv, pmt, fv, k)
            iy = i * per_year * 100
            value = iy

        total_payments = pmt * n
        return {
            "solve_for": solve_for,
            "value": round(value, 4) if solve_for in ("N", "IY") else self.round_money(value),
            "n": round(n, 4),
            "iy": round(iy, 4),
            "pv": self.round_money(pv),
            "pmt": self.round_money(pmt),
            "fv": self.round_money(fv),
            "sum_of_payments": self.round_money(total_payments),
            "total_interest": self.round_money(abs(pv + total_payments + fv)),
        }

    def _growth(self, i: float, n: float) -> float:
        return self.growth(i, n)

    def _annuity_factor(self, i: float, n: float, k: int) -> float:
        if i == 0:
            return n
        return (1 + i * k) * (self.growth(i, n) - 1) / i

    def _solve_n(self, i, pv, pmt, fv, k) -> float:
        if i == 0:
            if pmt == 0:
                self.reject("No solution: the payment cannot reach the target value!")
            n = -(pv + fv) / pmt
        else:
            a = pmt * (1 + i * k) / i
            if pv + a == 0:
                self.reject("No solution: the payment cannot reach the target value!")
            ratio = (a - fv) / (pv + a)
            if ratio <= 0:
                self.reject("No solution: the payment cannot reach the target value!")
            n = math.log(ratio) / math.log(1 + i)
        if n <= 0 or math.isinf(n) or math.isnan(n):
            self.reject("No solution: the payment cannot reach the target value!")
        return n

    def _solve_rate(self, n, pv, pmt, fv, k) -> float:
        """Newton's method on the TVM equation with a numeric derivative."""

        def balance(rate):
            growth = math.pow(1 + rate, n)
            annuity = n if rate == 0 else (1 + rate * k) * (growth - 1) / rate
            return pv * growth + pmt * annuity + fv

        guess = 0.01
        try:
            for _ in range(200):
                value = balance(guess)
                if abs(value) < 1e-7:
                    return guess
                delta = 1e-6
                derivative = (balance(guess + delta) - value) / delta
                if derivative == 0:
                    break
                step = guess - value / derivative
                if step <= -1:
                    step = (guess - 1) / 2
                guess = step
            if abs(balance(guess)) < 1e-4:
                return guess
        except (OverflowError, ValueError, ZeroDivisionError):
            logger.debug("Rate solver diverged for n=%s", n)
        self.reject("No solution: these cash flows do not imply an interest rate!")


class InflationCalculator(BaseCalculator):

    FIRST_YEAR = min(CPI_BY_YEAR)
    LAST_YEAR = max(CPI_BY_YEAR)

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("cpi", "forward", "backward"), "cpi")

        if mode == "cpi":
            amount = self.parse_positive(fields.get("amount"), default=100)
            start = self.parse_int(fields.get("start_year"), default=2000)
            end = self.parse_int(fields.get("end_year"), default=2024)
            if start >= end:
                self.reject("Start year must be before end year!")
            if start < self.FIRST_YEAR or end > self.LAST_YEAR:
                self.reject(f"Year must be between {self.FIRST_YEAR} and {self.LAST_YEAR}!")
            start_cpi = self.cpi_for_year(start)
            end_cpi = self.cpi_for_year(end)
            equivalent = amount * end_cpi / start_cpi
            total_inflation = (end_cpi - start_cpi) / start_cpi * 100
            return {
                "mode": mode,
                "equivalent_value": self.round_money(equivalent),
                "value_change": self.round_money(equivalent - amount),
                "total_inflation": round(total_inflation, 2),
                "average_annual_inflation": round(total_inflation / (end - start), 2),
                "start_cpi": round(start_cpi, 2),
                "end_cpi": round(end_cpi, 2),
            }

        amount = self.parse_positive(fields.get("amount"), default=1000)
        rate = self.parse_positive(fields.get("rate"), default=3) / 100
        years = self.parse_positive(fields.get("years"), default=10)
        self.check_months(years * 12)
        growth = self.growth(rate, years)
        if mode == "forward":
            future = amount * growth
            return {
                "mode": mode,
                "future_value": self.round_money(future),
                "total_change": round((future - amount) / amount * 100, 2),
            }
        past = amount / growth
        return {
            "mode": mode,
            "past_value": self.round_money(past),
            "total_change": round((amount - past) / past * 100, 2),
        }

    def cpi_for_year(self, year: int) -> float:
        """CPI for a year, linearly interpolated between the published points."""
        if year in CPI_BY_YEAR:
            return CPI_BY_YEAR[year]
        known = sorted(CPI_BY_YEAR)
        lower = max(y for y in known if y <= year)
        upper = min(y for y in known if y >= year)
        ratio = (year - lower) / (upper - lower)
        return CPI_BY_YEAR[lower] + ratio * (CPI_BY_YEAR[upper] - CPI_BY_YEAR[lower])

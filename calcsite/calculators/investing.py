"""
Investing and retirement calculators.

Balances are projected year by year (or period by period for the general
investment calculator) so every result can ship its schedule.
"""

import logging

from .base import BaseCalculator
from ..reference_tables import (
    COLLEGE_ANNUAL_COST,
    CONTINUOUS,
    IRA_CATCH_UP_AGE,
    IRA_CATCH_UP_LIMIT,
    IRA_CONTRIBUTION_LIMIT,
    PERIODS_PER_YEAR,
    RMD_FLOOR_PERIOD,
    RMD_START_AGE,
    UNIFORM_LIFETIME_TABLE,
)

logger = logging.getLogger(__name__)


def _years_to_retirement(calc: BaseCalculator, current_age: float, retirement_age: float) -> int:
    if retirement_age <= current_age:
        calc.reject("Retirement age must be greater than current age!")
    calc.check_months((retirement_age - current_age) * 12)
    return int(round(retirement_age - current_age))


class InvestmentCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        principal = self.parse_number(fields.get("starting_amount"), default=20000)
        contribution = self.parse_number(fields.get("contribution"), default=1000)
        per_year = self.parse_choice(fields.get("contribution_frequency"),
                                     ("monthly", "annually"), "monthly")
        years = self.parse_int(fields.get("years"), default=10)
        rate = self.parse_number(fields.get("return_rate"), default=6) / 100
        compound = self.parse_frequency(fields.get("compound"), default="annually")
        beginning = self.parse_choice(fields.get("timing"), ("beginning", "end"), "end") == "beginning"

        if principal < 0 or years <= 0:
            self.reject("Please enter a valid starting amount and investment length!")
        self.check_months(years * 12)

        annual_contribution = contribution * 12 if per_year == "monthly" else contribution
        # Continuous growth is simulated monthly with the exact e^(r/12) factor
        n = 12 if compound == CONTINUOUS else PERIODS_PER_YEAR[compound]
        if compound == CONTINUOUS:
            period_growth = self.exp_growth(rate / n) - 1
        else:
            period_growth = rate / n
        deposit = annual_contribution / n

        balance = principal
        schedule = []
        for year in range(1, years + 1):
            start_balance = balance
            year_interest = 0.0
            for _ in range(n):
                if beginning:
                    balance += deposit
                interest = balance * period_growth
                balance += interest
                year_interest += interest
                if not beginning:
                    balance += deposit
            schedule.append(self.make_schedule_row(
                year=year,
                start_balance=start_balance,
                contributions=annual_contribution,
                interest=year_interest,
                end_balance=balance,
            ))

        total_contributions = annual_contribution * years
        return {
            "end_balance": self.round_money(balance),
            "starting_amount": self.round_money(principal),
            "total_contributions": self.round_money(total_contributions),
            "total_interest": self.round_money(balance - principal - total_contributions),
            "schedule": schedule,
        }


class RoiCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        invested = self.parse_positive(fields.get("amount_invested"), default=50000)
        returned = self.parse_positive(fields.get("amount_returned"), default=70000)
        years = self.parse_positive(fields.get("years"), default=2)

        if invested <= 0 or years <= 0:
            self.reject("Please enter a valid investment amount and length!")

        gain = returned - invested
        roi = gain / invested
        annualized = self.growth(roi, 1 / years) - 1 if roi > -1 else -1.0
        return {
            "investment_gain": self.round_money(gain),
            "roi": round(roi * 100, 2),
            "annualized_roi": round(annualized * 100, 2),
            "years": years,
        }


class Retirement401kCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        age = self.parse_positive(fields.get("current_age"), default=30)
        retirement_age = self.parse_positive(fields.get("retirement_age"), default=65)
        balance = self.parse_number(fields.get("current_balance"), default=50000)
        salary = self.parse_positive(fields.get("annual_salary"), default=75000)
        contribution_pct = self.parse_number(fields.get("contribution"), default=6) / 100
        match_pct = self.parse_number(fields.get("employer_match"), default=50) / 100
        match_limit = self.parse_number(fields.get("employer_match_limit"), default=6) / 100
        raise_pct = self.parse_number(fields.get("salary_increase"), default=2.5) / 100
        growth = self.parse_number(fields.get("return_rate"), default=7) / 100
        inflation = self.parse_number(fields.get("inflation_rate"), default=2.5) / 100
        retirement_years = self.parse_positive(fields.get("years_in_retirement"), default=20)

        years = _years_to_retirement(self, age, retirement_age)

        starting_balance = balance
        employee_total = 0.0
        employer_total = 0.0
        schedule = []
        for year in range(1, years + 1):
            employee = salary * contribution_pct
            employer = min(salary * match_limit, employee) * match_pct
            employee_total += employee
            employer_total += employer
            balance = (balance + employee + employer) * (1 + growth)
            schedule.append(self.make_schedule_row(
                year=year,
                age=int(age) + year,
                salary=salary,
                employee_contribution=employee,
                employer_contribution=employer,
                balance=balance,
            ))
            salary *= 1 + raise_pct

        real_monthly = ((1 + growth) / (1 + inflation) - 1) / 12
        months = int(round(retirement_years * 12))
        self.check_months(months)
        return {
            "years_to_retirement": years,
            "retirement_balance": self.round_money(balance),
            "employee_contributions": self.round_money(employee_total),
            "employer_contributions": self.round_money(employer_total),
            "investment_gains": self.round_money(balance - starting_balance - employee_total - employer_total),
            "inflation_adjusted_balance": self.round_money(balance / self.growth(inflation, years)),
            "monthly_retirement_income": self.round_money(
                self.annuity_payment(balance, max(real_monthly, 0.0), months)
            ),
            "schedule": schedule,
        }


class IraCalculator(BaseCalculator):
    """Traditional versus Roth versus taxable account with the same gross contribution."""

    def calculate(self, fields: dict) -> dict:
        balance = self.parse_positive(fields.get("current_balance"), default=50000)
        contribution = self.parse_positive(fields.get("annual_contribution"), default=6500)
        growth = self.parse_positive(fields.get("return_rate"), default=7) / 100
        age = self.parse_positive(fields.get("current_age"), default=35)
        retirement_age = self.parse_positive(fields.get("retirement_age"), default=65)
        tax_now = self.parse_positive(fields.get("current_tax_rate"), default=24) / 100
        tax_later = self.parse_positive(fields.get("retirement_tax_rate"), default=22) / 100

        years = _years_to_retirement(self, age, retirement_age)
        start_year = self.today(fields).year

        traditional = roth = taxable = balance
        schedule = [self.make_schedule_row(age=int(age), year=start_year, traditional=traditional,
                                           roth=roth, taxable=taxable)]
        for year in range(1, years + 1):
            traditional = (traditional + contribution) * (1 + growth)
            roth = (roth + contribution * (1 - tax_now)) * (1 + growth)
            invested = taxable + contribution * (1 - tax_now)
            taxable = invested + invested * growth * (1 - tax_now)
            schedule.append(self.make_schedule_row(age=int(age) + year, year=start_year + year,
                                                   traditional=traditional, roth=roth, taxable=taxable))

        total_contributions = balance + contribution * years
        return {
            "years_to_retirement": years,
            "traditional_balance": self.round_money(traditional),
            "traditional_after_tax": self.round_money(traditional * (1 - tax_later)),
            "roth_balance": self.round_money(roth),
            "taxable_balance": self.round_money(taxable),
            "total_contributions": self.round_money(total_contributions),
            "investment_growth": self.round_money(traditional - total_contributions),
            "tax_savings": self.round_money(traditional * tax_later),
            "schedule": schedule,
        }


class RothIraCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        balance = self.parse_number(fields.get("current_balance"), default=0)
        contribution = self.parse_positive(fields.get("annual_contribution"), default=IRA_CONTRIBUTION_LIMIT)
        growth = self.parse_positive(fields.get("return_rate"), default=8) / 100
        age = self.parse_positive(fields.get("current_age"), default=30)
        retirement_age = self.parse_positive(fields.get("retirement_age"), default=65)
        tax_rate = self.parse_positive(fields.get("tax_rate"), default=22) / 100

        years = _years_to_retirement(self, age, retirement_age)
        if self.parse_bool(fields.get("maximize")):
            contribution = IRA_CATCH_UP_LIMIT if age >= IRA_CATCH_UP_AGE else IRA_CONTRIBUTION_LIMIT

        roth = balance
        taxable = balance
        tax_paid = 0.0
        for _ in range(years):
            roth = roth * (1 + growth) + contribution
            gain = taxable * growth
            tax_paid += gain * tax_rate
            taxable += gain * (1 - tax_rate) + contribution

        principal = balance + contribution * years
        return {
            "years_to_retirement": years,
            "annual_contribution": self.round_money(contribution),
            "roth_balance": self.round_money(roth),
            "roth_principal": self.round_money(principal),
            "roth_earnings": self.round_money(roth - principal),
            "taxable_balance": self.round_money(taxable),
            "taxable_earnings": self.round_money(taxable - principal),
            "taxable_tax_paid": self.round_money(tax_paid),
            "roth_advantage": self.round_money(roth - taxable),
        }


class RmdCalculator(BaseCalculator):

    PROJECTION_YEARS = 46
    UNIFORM = "Uniform Lifetime Table"
    JOINT = "Joint Life and Last Survivor Expectancy Table"

    def calculate(self, fields: dict) -> dict:
        birth_year = self.parse_int(fields.get("birth_year"), default=1951) or 1951
        rmd_year = self.parse_int(fields.get("rmd_year"), default=0) or self.today(fields).year
        balance = self.parse_positive(fields.get("account_balance"), default=500000)
        spouse = self.parse_bool(fields.get("spouse_beneficiary"))
        spouse_birth_year = self.parse_int(fields.get("spouse_birth_year"), default=birth_year) or birth_year
        growth = self.parse_positive(fields.get("return_rate"), default=5) / 100

        age = rmd_year - birth_year
        spouse_age = rmd_year - spouse_birth_year
        if age < RMD_START_AGE:
            return {
                "age": age,
                "rmd_required": False,
                "rmd_start_age": RMD_START_AGE,
                "rmd_amount": 0.0,
                "distribution_period": None,
                "table_used": None,
                "remaining_balance": self.round_money(balance),
                "projections": [],
            }

        period, table = self.distribution_period(age, spouse_age if spouse else None)
        amount = balance / period

        projections = []
        current = balance
        for offset in range(self.PROJECTION_YEARS):
            year_period, _ = self.distribution_period(age + offset, spouse_age + offset if spouse else None)
            withdrawal = current / year_period
            end_balance = (current - withdrawal) * (1 + growth)
            projections.append(self.make_schedule_row(
                age=age + offset,
                year=rmd_year + offset,
                distribution_period=year_period,
                rmd_amount=withdrawal,
                end_balance=end_balance,
            ))
            current = end_balance
            if end_balance <= 0:
                break

        return {
            "age": age,
            "rmd_required": True,
            "rmd_start_age": RMD_START_AGE,
            "rmd_amount": self.round_money(amount),
            "distribution_period": period,
            "table_used": table,
            "remaining_balance": self.round_money(balance - amount),
            "projections": projections,
        }

    def distribution_period(self, age: int, spouse_age: int = None):
        """
        Uniform Lifetime period for the owner's age. A spouse beneficiary more than
        ten years younger stretches the period by half a year per extra year of
        difference (at most twenty).
        """
        base = UNIFORM_LIFETIME_TABLE.get(age, RMD_FLOOR_PERIOD)
        if spouse_age is not None and age - spouse_age >= 10:
            return base + min(age - spouse_age - 10, 20) * 0.5, self.JOINT
        return base, self.UNIFORM


class RetirementCalculator(BaseCalculator):

    MODES = ("need", "save", "withdraw", "longevity")
    MAX_MONTHS = 1200
    SAFE_WITHDRAWAL_RATE = 0.04

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), self.MODES, "need")
        if mode == "longevity":
            return self._longevity(fields)

        age = self.parse_positive(fields.get("current_age"), default=35)
        retirement_age = self.parse_positive(fields.get("retirement_age"), default=65)
        years = _years_to_retirement(self, age, retirement_age)
        savings = self.parse_number(fields.get("current_savings"), default=100000)
        growth = self.parse_positive(fields.get("investment_return"), default=7) / 100

        if mode == "need":
            return self._need(fields, age, retirement_age, years, savings, growth)
        if mode == "save":
            return self._save(fields, years, savings, growth)
        return self._withdraw(fields, age, retirement_age, years, savings, growth)

    def _need(self, fields, age, retirement_age, years, savings, growth) -> dict:
        life_expectancy = self.parse_positive(fields.get("life_expectancy"), default=85)
        income = self.parse_positive(fields.get("current_income"), default=75000)
        income_growth = self.parse_positive(fields.get("income_increase"), default=2) / 100
        replacement = self.parse_positive(fields.get("retirement_income_percent"), default=80) / 100
        inflation = self.parse_positive(fields.get("inflation_rate"), default=3) / 100
        other_monthly = self.parse_number(fields.get("other_income"), default=2000)
        savings_pct = self.parse_positive(fields.get("future_savings_percent"), default=15) / 100

        retirement_years = max(int(round(life_expectancy - retirement_age)), 0)
        self.check_months(retirement_years * 12)
        income_at_retirement = income * self.growth(income_growth, years)
        annual_need = income_at_retirement * replacement
        from_savings = max(0.0, annual_need - other_monthly * 12)
        real_return = (1 + growth) / (1 + inflation) - 1
        total_needed = sum(from_savings / self.growth(real_return, i) for i in range(retirement_years))

        savings_at_retirement = savings * self.growth(growth, years)
        shortfall = max(0.0, total_needed - savings_at_retirement)
        monthly_needed = self._sinking_fund(shortfall, growth / 12, years * 12)

        projected = savings
        annual_saving = income * savings_pct
        for _ in range(years):
            projected = projected * (1 + growth) + annual_saving

        return {
            "mode": "need",
            "years_to_retirement": years,
            "years_in_retirement": retirement_years,
            "annual_income_needed": self.round_money(annual_need),
            "total_needed": self.round_money(total_needed),
            "savings_at_retirement": self.round_money(savings_at_retirement),
            "additional_needed": self.round_money(shortfall),
            "monthly_saving_needed": self.round_money(monthly_needed),
            "projected_fund": self.round_money(projected),
            "on_track": projected >= total_needed,
        }

    def _save(self, fields, years, savings, growth) -> dict:
        target = self.parse_positive(fields.get("amount_needed"), default=1500000)
        savings_at_retirement = savings * self.growth(growth, years)
        shortfall = max(0.0, target - savings_at_retirement)
        monthly = self._sinking_fund(shortfall, growth / 12, years * 12)
        total_contributions = savings + monthly * years * 12
        return {
            "mode": "save",
            "years_to_retirement": years,
            "amount_needed": self.round_money(target),
            "savings_at_retirement": self.round_money(savings_at_retirement),
            "monthly_saving_needed": self.round_money(monthly),
            "annual_saving_needed": self.round_money(monthly * 12),
            "total_contributions": self.round_money(total_contributions),
            "total_interest": self.round_money(max(target, savings_at_retirement) - total_contributions),
        }

    def _withdraw(self, fields, age, retirement_age, years, savings, growth) -> dict:
        life_expectancy = self.parse_positive(fields.get("life_expectancy"), default=85)
        annual = self.parse_number(fields.get("annual_contribution"), default=10000)
        monthly = self.parse_number(fields.get("monthly_contribution"), default=833)

        fund = savings
        for _ in range(years):
            fund = fund * (1 + growth) + annual + monthly * 12
        months = max(int(round((life_expectancy - retirement_age) * 12)), 0)
        self.check_months(months)
        safe_annual = fund * self.SAFE_WITHDRAWAL_RATE
        return {
            "mode": "withdraw",
            "years_to_retirement": years,
            "fund_at_retirement": self.round_money(fund),
            "safe_annual_withdrawal": self.round_money(safe_annual),
            "safe_monthly_withdrawal": self.round_money(safe_annual / 12),
            "annuity_monthly_withdrawal": self.round_money(self.annuity_payment(fund, growth / 12, months)),
        }

    def _longevity(self, fields) -> dict:
        fund = self.parse_positive(fields.get("savings_amount"), default=1000000)
        withdrawal = self.parse_positive(fields.get("monthly_withdrawal"), default=4000)
        monthly_rate = self.parse_positive(fields.get("withdrawal_return"), default=5) / 100 / 12

        balance = fund
        months = 0
        while balance > 0 and months < self.MAX_MONTHS:
            balance = balance * (1 + monthly_rate) - withdrawal
            months += 1
        return {
            "mode": "longevity",
            "months_lasting": months,
            "years": months // 12,
            "months": months % 12,
            "lasts_indefinitely": months >= self.MAX_MONTHS and balance > 0,
        }

    def _sinking_fund(self, target: float, rate: float, periods: int) -> float:
        if periods <= 0:
            return target
        if rate == 0:
            return target / periods
        return target * rate / (self.growth(rate, periods) - 1)


class SocialSecurityCalculator(BaseCalculator):

    EARLY_AGE = 62
    LATE_AGE = 70

    def calculate(self, fields: dict) -> dict:
        birth_year = self.parse_int(fields.get("birth_year"), default=1960) or 1960
        life_expectancy = self.parse_positive(fields.get("life_expectancy"), default=85)
        benefit = self.parse_positive(fields.get("monthly_benefit_at_fra"), default=2000)
        growth = self.parse_positive(fields.get("investment_return"), default=3) / 100
        cola = self.parse_positive(fields.get("cola"), default=2.5) / 100

        self.check_months((life_expectancy - self.EARLY_AGE) * 12)
        fra = self.full_retirement_age(birth_year)
        months_early = (fra - self.EARLY_AGE) * 12
        reduction = min(months_early, 36) * 5 / 9 / 100 + max(months_early - 36, 0) * 5 / 12 / 100
        increase = (self.LATE_AGE - fra) * 12 * 2 / 3 / 100

        at_62 = benefit * (1 - reduction)
        at_70 = benefit * (1 + increase)
        lifetime = {
            "62": self._lifetime(self.EARLY_AGE, at_62, life_expectancy, cola, growth),
            "fra": self._lifetime(fra, benefit, life_expectancy, cola, growth),
            "70": self._lifetime(self.LATE_AGE, at_70, life_expectancy, cola, growth),
        }
        optimal_age, best = self.EARLY_AGE, lifetime["62"]
        if lifetime["fra"] > best:
            optimal_age, best = round(fra), lifetime["fra"]
        if lifetime["70"] > best:
            optimal_age = self.LATE_AGE

        return {
            "full_retirement_age": round(fra, 2),
            "reduction_at_62": round(reduction * 100, 2),
            "increase_at_70": round(increase * 100, 2),
            "monthly_benefit_at_62": self.round_money(at_62),
            "monthly_benefit_at_fra": self.round_money(benefit),
            "monthly_benefit_at_70": self.round_money(at_70),
            "lifetime_benefit_at_62": self.round_money(lifetime["62"]),
            "lifetime_benefit_at_fra": self.round_money(lifetime["fra"]),
            "lifetime_benefit_at_70": self.round_money(lifetime["70"]),
            "break_even_62_vs_fra": round(self._break_even(self.EARLY_AGE, at_62, fra, benefit), 1),
            "break_even_fra_vs_70": round(self._break_even(fra, benefit, self.LATE_AGE, at_70), 1),
            "optimal_age": optimal_age,
        }

    def full_retirement_age(self, birth_year: int) -> float:
        if birth_year < 1943:
            return 65.0
        if birth_year <= 1954:
            return 66.0
        if birth_year < 1960:
            return 66 + (birth_year - 1954) * 2 / 12
        return 67.0

    def _lifetime(self, start_age, monthly, end_age, cola, growth) -> float:
        """Benefits from start_age to end_age with yearly COLA, grown to end_age."""
        months = max(int(round((end_age - start_age) * 12)), 0)
        total = 0.0
        for month in range(1, months + 1):
            amount = monthly * self.growth(cola, month // 12)
            total += amount * self.growth(growth / 12, months - month)
        return total

    def _break_even(self, early_age, early_benefit, late_age, late_benefit) -> float:
        missed = early_benefit * (late_age - early_age) * 12
        return late_age + missed / (late_benefit - early_benefit) / 12


class CollegeCostCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        college_type = self.parse_choice(fields.get("college_type"),
                                         tuple(COLLEGE_ANNUAL_COST) + ("custom",),
                                         "public-4-year-instate")
        if college_type == "custom":
            annual_cost = self.parse_positive(fields.get("custom_cost"),
                                              default=COLLEGE_ANNUAL_COST["public-4-year-instate"])
        else:
            annual_cost = COLLEGE_ANNUAL_COST[college_type]
        cost_inflation = self.parse_positive(fields.get("cost_inflation"), default=5) / 100
        years_until = self.parse_int(fields.get("years_until_college"), default=10)
        duration = self.parse_int(fields.get("years_in_college"), default=4) or 4
        savings = self.parse_number(fields.get("current_savings"), default=50000)
        monthly = self.parse_number(fields.get("monthly_savings"), default=0)
        growth = self.parse_positive(fields.get("return_rate"), default=6) / 100
        tax_rate = self.parse_number(fields.get("tax_rate"), default=0) / 100
        from_savings = self.parse_positive(fields.get("percent_from_savings"), default=75) / 100

        if years_until < 0:
            self.reject("Years until college cannot be negative!")
        self.check_months((years_until + duration) * 12)

        net_growth = growth * (1 - tax_rate)
        months_until = years_until * 12
        savings_at_start = savings * self.growth(net_growth, years_until)
        if net_growth:
            savings_at_start += monthly * (self.growth(net_growth / 12, months_until) - 1) / (net_growth / 12)
        else:
            savings_at_start += monthly * months_until

        start_year = self.today(fields).year + years_until
        remaining = savings_at_start
        total_cost = 0.0
        breakdown = []
        for year in range(duration):
            cost = annual_cost * self.growth(cost_inflation, years_until + year)
            total_cost += cost
            used = min(remaining, cost * from_savings)
            remaining -= used
            breakdown.append(self.make_schedule_row(
                year=year + 1,
                calendar_year=start_year + year,
                cost=cost,
                savings_used=used,
                other_sources=cost - used,
                savings_balance=remaining,
            ))

        target = total_cost * from_savings
        shortfall = max(0.0, target - savings_at_start)
        if months_until <= 0:
            monthly_needed = shortfall
        elif net_growth:
            monthly_needed = shortfall * (net_growth / 12) / (self.growth(net_growth / 12, months_until) - 1)
        else:
            monthly_needed = shortfall / months_until

        covered = min(savings_at_start, target)
        return {
            "annual_cost_today": self.round_money(annual_cost),
            "total_cost_today": self.round_money(annual_cost * duration),
            "total_cost": self.round_money(total_cost),
            "savings_at_start": self.round_money(savings_at_start),
            "percent_covered_by_savings": round(covered / total_cost * 100, 2) if total_cost else 0.0,
            "other_sources_needed": self.round_money(total_cost - covered),
            "shortfall": self.round_money(shortfall),
            "additional_monthly_savings_needed": self.round_money(monthly_needed),
            "breakdown": breakdown,
        }

"""
Abstract base class for all calculators.

Input: raw form fields dict (strings, numbers or missing values)
Output: plain result dict, JSON-serialisable
"""

import calendar
import logging
import math
from abc import ABC, abstractmethod
from datetime import date, datetime

from ..reference_tables import CONTINUOUS, PERIODS_PER_YEAR

logger = logging.getLogger(__name__)


class CalculatorInputError(ValueError):
    """Logically invalid input. The message is shown to the user as-is."""


class BaseCalculator(ABC):
    """All calculators inherit from this."""

    # Longest horizon any calculator will schedule
    MAX_YEARS = 100
    MAX_PERIODS = 1200

    @abstractmethod
    def calculate(self, fields: dict) -> dict:
        """
        Takes the submitted form fields.
        Returns the result dict for the page.
        """
        pass

    # --- Parsing helpers: never raise, fall back to the default ---

    def parse_number(self, value, default: float = 0.0) -> float:
        """Parse a numeric value from user input. Handles '1,000', '$50', '6.5%'."""
        if value is None:
            return default
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, (int, float)):
            raw = value
        else:
            raw = str(value).strip().replace(",", "").lstrip("$").rstrip("%").strip()
            if not raw:
                return default
        try:
            number = float(raw)
        except (ValueError, TypeError, OverflowError):
            return default
        if math.isnan(number) or math.isinf(number):
            return default
        return number

    def parse_positive(self, value, default: float) -> float:
        """
        Parse a number where zero or garbage means "use the default".
        Mirrors the form behaviour of `parseFloat(x) || default`.
        """
        number = self.parse_number(value, default=0.0)
        return number if number != 0 else default

    def parse_int(self, value, default: int = 0) -> int:
        """Parse an integer from user input."""
        number = self.parse_number(value, default=None)
        if number is None:
            return default
        return int(number)

    def parse_bool(self, value, default: bool = False) -> bool:
        """Parse a checkbox / yes-no value."""
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "y", "on", "checked"):
            return True
        if text in ("0", "false", "no", "n", "off", ""):
            return False
        return default

    def parse_date(self, value, default: date = None):
        """Parse an ISO date (YYYY-MM-DD). Returns default when missing or invalid."""
        if value is None:
            return default
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value).strip()
        if not text:
            return default
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return default

    def parse_choice(self, value, choices, default: str) -> str:
        """Normalise a select value. Unknown choices fall back to the default."""
        if value is None:
            return default
        text = str(value).strip()
        if text in choices:
            return text
        lowered = text.lower()
        for choice in choices:
            if choice.lower() == lowered:
                return choice
        return default

    def parse_list(self, value) -> list:
        """Repeating form rows (courses, debts, shifts) arrive as a list of dicts."""
        if not value or not isinstance(value, (list, tuple)):
            return []
        return [row for row in value if isinstance(row, dict)]

    def today(self, fields: dict) -> date:
        """The reference date. Pages use the browser clock; tests pass `today`."""
        return self.parse_date(fields.get("today"), default=date.today())

    def parse_frequency(self, value, default: str = "monthly", allow_continuous: bool = True) -> str:
        """Normalise a frequency select value ("semi-annually" -> "semiannually")."""
        key = str(value or "").strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        if key == CONTINUOUS and allow_continuous:
            return key
        if key in PERIODS_PER_YEAR:
            return key
        return default

    def parse_periods_per_year(self, value, default: int = 12) -> int:
        """Compounding selects post either a count ("12") or a name ("monthly")."""
        count = self.parse_number(value, default=0.0)
        if 1 <= count <= PERIODS_PER_YEAR["daily"]:
            return int(count)
        key = self.parse_frequency(value, default="", allow_continuous=False)
        return PERIODS_PER_YEAR.get(key, default)

    def check_months(self, months: float):
        if months > self.MAX_YEARS * 12:
            self.reject(f"Term cannot be longer than {self.MAX_YEARS} years!")

    def check_periods(self, periods: float):
        if periods > self.MAX_PERIODS:
            self.reject(f"Number of periods cannot be more than {self.MAX_PERIODS}!")

    # --- Date helpers ---

    def add_months(self, start: date, months: int) -> date:
        """Same day-of-month N months later, clamped to the end of short months."""
        month_index = start.month - 1 + months
        year = start.year + month_index // 12
        month = month_index % 12 + 1
        if not 1 <= year <= 9999:
            self.reject("The resulting date is out of range!")
        day = min(start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)

    def add_years(self, start: date, years: int) -> date:
        return self.add_months(start, years * 12)

    def calendar_difference(self, start: date, end: date):
        """
        Whole years and months from start to end (start <= end), then the days
        left over. Month anniversaries on a missing day fall on the month's last day.
        """
        months = (end.year - start.year) * 12 + end.month - start.month
        if self.add_months(start, months) > end:
            months -= 1
        anchor = self.add_months(start, months)
        years, months = divmod(months, 12)
        return years, months, (end - anchor).days

    # --- Finance helpers ---

    def rate_per_payment(self, annual_rate: float, compounding: str, payments_per_year: float) -> float:
        """
        Effective rate for one payment period given how often interest compounds.
        annual_rate is a decimal (0.06 for 6%).
        """
        if compounding == CONTINUOUS:
            return self.exp_growth(annual_rate / payments_per_year) - 1
        compounds_per_year = PERIODS_PER_YEAR.get(compounding, 12)
        return self.growth(annual_rate / compounds_per_year, compounds_per_year / payments_per_year) - 1

    def growth(self, rate: float, periods: float) -> float:
        """(1 + rate) ** periods. Results too large for a float are rejected."""
        if rate <= -1:
            self.reject("Interest rate is out of range!")
        try:
            return math.pow(1 + rate, periods)
        except OverflowError:
            self.reject("The numbers entered are too large to calculate!")

    def exp_growth(self, exponent: float) -> float:
        try:
            return math.exp(exponent)
        except OverflowError:
            self.reject("The numbers entered are too large to calculate!")

    def annuity_payment(self, principal: float, rate_per_period: float, periods: float) -> float:
        """Level payment that amortizes principal over the given number of periods."""
        if periods <= 0:
            return 0.0
        if rate_per_period == 0:
            return principal / periods
        growth = self.growth(rate_per_period, periods)
        return principal * rate_per_period * growth / (growth - 1)

    def amortize(self, principal: float, rate_per_period: float, payment: float,
                 max_periods: int) -> list:
        """
        Simulate a fixed-payment loan. Returns one row per period until the balance
        is paid off or max_periods is reached. The final payment is trimmed so the
        principal column sums to the original principal.
        """
        rows = []
        balance = principal
        period = 0
        while balance > 0.005 and period < max_periods:
            period += 1
            interest = balance * rate_per_period
            principal_paid = payment - interest
            if principal_paid <= 0:
                break
            if principal_paid > balance:
                principal_paid = balance
            balance -= principal_paid
            rows.append({
                "period": period,
                "payment": principal_paid + interest,
                "principal": principal_paid,
                "interest": interest,
                "balance": max(balance, 0.0),
            })
        return rows

    def annual_summary(self, rows: list, periods_per_year: int = 12) -> list:
        """Roll a period schedule up into years."""
        years = []
        for start in range(0, len(rows), periods_per_year):
            chunk = rows[start:start + periods_per_year]
            years.append(self.make_schedule_row(
                year=start // periods_per_year + 1,
                payment=sum(r["payment"] for r in chunk),
                principal=sum(r["principal"] for r in chunk),
                interest=sum(r["interest"] for r in chunk),
                balance=chunk[-1]["balance"],
            ))
        return years

    # --- Output helpers ---

    def round_money(self, value: float) -> float:
        if math.isinf(value) or math.isnan(value):
            self.reject("The numbers entered are too large to calculate!")
        return round(value, 2)

    def make_schedule_row(self, **values) -> dict:
        """Build a schedule row, rounding floats to cents."""
        return {
            key: self.round_money(val) if isinstance(val, float) else val
            for key, val in values.items()
        }

    def format_hms(self, total_seconds: float) -> str:
        """H:MM:SS when there are hours, otherwise M:SS."""
        total = int(round(total_seconds))
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def reject(self, message: str):
        """Raise a user-facing input error."""
        logger.info("%s rejected input: %s", type(self).__name__, message)
        raise CalculatorInputError(message)

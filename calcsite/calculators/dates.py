"""
Date and time calculators: age, date arithmetic, duration arithmetic and a
timesheet with overtime.
"""

import calendar
import logging
from datetime import date, timedelta

from .base import BaseCalculator

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def long_date(value: date) -> str:
    """'January 1, 2025'"""
    return f"{calendar.month_name[value.month]} {value.day}, {value.year}"


class AgeCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        as_of = self.parse_date(fields.get("as_of"), default=self.today(fields))
        birth = self.parse_date(fields.get("birth_date"), default=date(1990, 1, 1))

        if birth > as_of:
            self.reject("Birth date cannot be in the future!")

        years, months, days = self.calendar_difference(birth, as_of)
        total_days = (as_of - birth).days

        next_birthday = self._birthday_in(birth, as_of.year)
        if next_birthday < as_of:
            next_birthday = self._birthday_in(birth, as_of.year + 1)
        days_until = (next_birthday - as_of).days

        return {
            "years": years,
            "months": months,
            "days": days,
            "total_months": years * 12 + months,
            "total_weeks": total_days // 7,
            "total_days": total_days,
            "total_hours": total_days * 24,
            "total_minutes": total_days * MINUTES_PER_DAY,
            "next_birthday": {
                "date": next_birthday.isoformat(),
                "display_date": long_date(next_birthday),
                "day_of_week": calendar.day_name[next_birthday.weekday()],
                "days_until": days_until,
                "turning": years + 1 if days_until else years,
            },
        }

    def _birthday_in(self, birth: date, year: int) -> date:
        # Feb 29 birthdays fall on Feb 28 in common years
        day = min(birth.day, calendar.monthrange(year, birth.month)[1])
        return date(year, birth.month, day)


class DateCalculator(BaseCalculator):

    MODES = ("add", "subtract", "difference")

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), self.MODES, "add")
        today = self.today(fields)

        if mode == "difference":
            start = self.parse_date(fields.get("start_date"), default=today)
            end = self.parse_date(fields.get("end_date"), default=today)
            if start > end:
                self.reject("Start date must be before end date!")
            years, months, days = self.calendar_difference(start, end)
            total_days = (end - start).days
            return {
                "mode": mode,
                "difference": {
                    "years": years,
                    "months": months,
                    "days": days,
                    "total_days": total_days,
                    "total_weeks": total_days // 7,
                    "total_hours": total_days * 24,
                },
            }

        start = self.parse_date(fields.get("date") or fields.get("start_date"), default=today)
        sign = 1 if mode == "add" else -1
        years = self.parse_int(fields.get("years"), default=0)
        months = self.parse_int(fields.get("months"), default=0)
        weeks = self.parse_int(fields.get("weeks"), default=0)
        days = self.parse_int(fields.get("days"), default=30)

        try:
            result = self.add_months(start, sign * (years * 12 + months))
            result += timedelta(weeks=sign * weeks, days=sign * days)
        except (ValueError, OverflowError):
            self.reject("The resulting date is out of range!")

        return {
            "mode": mode,
            "result_date": result.isoformat(),
            "display_date": long_date(result),
            "day_of_week": calendar.day_name[result.weekday()],
        }


class TimeCalculator(BaseCalculator):

    MODES = ("add", "subtract", "convert")
    UNIT_SECONDS = {"seconds": 1, "minutes": 60, "hours": 3600, "days": 86400}
    MAX_SECONDS = 10 ** 15

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), self.MODES, "add")

        if mode == "convert":
            value = self.parse_number(fields.get("value"), default=120)
            unit = self.parse_choice(fields.get("unit"), tuple(self.UNIT_SECONDS), "minutes")
            total = value * self.UNIT_SECONDS[unit]
        else:
            first = self._duration(fields, "1", (2, 30, 0))
            second = self._duration(fields, "2", (1, 45, 30))
            total = first + second if mode == "add" else first - second
        if abs(total) > self.MAX_SECONDS:
            self.reject("The numbers entered are too large to calculate!")

        # A negative difference is shown as its magnitude
        total = abs(total)
        whole = int(total)
        hours, remainder = divmod(whole, 3600)
        minutes, seconds = divmod(remainder, 60)
        return {
            "mode": mode,
            "hours": hours,
            "minutes": minutes,
            "seconds": seconds,
            "total_seconds": round(total, 4),
            "total_minutes": round(total / 60, 4),
            "total_hours": round(total / 3600, 4),
            "formatted": f"{hours:02d}:{minutes:02d}:{seconds:02d}",
        }

    def _duration(self, fields: dict, suffix: str, defaults) -> int:
        h, m, s = defaults
        return (self.parse_int(fields.get("hours" + suffix), default=h) * 3600
                + self.parse_int(fields.get("minutes" + suffix), default=m) * 60
                + self.parse_int(fields.get("seconds" + suffix), default=s))


class HoursCalculator(BaseCalculator):
    """Weekly timesheet. Hours past the threshold are paid at the overtime multiplier."""

    DEFAULT_ENTRY = {"start": "09:00", "end": "17:00", "break_minutes": 30}

    def calculate(self, fields: dict) -> dict:
        entries = self.parse_list(fields.get("entries")) if "entries" in fields else [self.DEFAULT_ENTRY]
        rate = self.parse_number(fields.get("hourly_rate"), default=25)
        threshold = self.parse_positive(fields.get("overtime_threshold"), default=40)
        multiplier = self.parse_positive(fields.get("overtime_multiplier"), default=1.5)

        total_minutes = 0
        worked = []
        for entry in entries:
            start = self._clock_minutes(entry.get("start"))
            end = self._clock_minutes(entry.get("end"))
            if start is None or end is None:
                continue
            if end < start:
                end += MINUTES_PER_DAY
            minutes = max(0, end - start - self.parse_int(entry.get("break_minutes"), default=0))
            total_minutes += minutes
            worked.append({
                "date": entry.get("date"),
                "hours": minutes // 60,
                "minutes": minutes % 60,
                "decimal_hours": round(minutes / 60, 2),
            })

        total_hours = total_minutes / 60
        regular = min(total_hours, threshold)
        overtime = max(0.0, total_hours - threshold)
        regular_pay = regular * rate
        overtime_pay = overtime * rate * multiplier
        return {
            "entries": worked,
            "total_minutes": total_minutes,
            "total_hours": round(total_hours, 2),
            "regular_hours": round(regular, 2),
            "overtime_hours": round(overtime, 2),
            "regular_pay": self.round_money(regular_pay),
            "overtime_pay": self.round_money(overtime_pay),
            "total_pay": self.round_money(regular_pay + overtime_pay),
        }

    def _clock_minutes(self, value):
        """'HH:MM' to minutes after midnight, or None when unparseable."""
        if not value:
            return None
        parts = str(value).strip().split(":")
        if len(parts) < 2:
            return None
        try:
            hours, minutes = int(parts[0]), int(parts[1])
        except ValueError:
            return None
        if not (0 <= hours < 24 and 0 <= minutes < 60):
            return None
        return hours * 60 + minutes

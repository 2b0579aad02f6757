"""
Pregnancy calculators. Every method is reduced to an estimated last menstrual
period (LMP) date; due dates, conception and milestones follow from it.
"""

import logging
from datetime import timedelta

from .base import BaseCalculator

logger = logging.getLogger(__name__)

PREGNANCY_DAYS = 280
STANDARD_CYCLE = 28
LUTEAL_PHASE_DAYS = 14
CONCEPTION_WINDOW_DAYS = 3

MILESTONES = [
    (4, "Pregnancy Test", "Pregnancy can be detected"),
    (8, "First Heartbeat", "Baby's heartbeat can be detected"),
    (12, "End of First Trimester", "Risk of miscarriage decreases"),
    (20, "Halfway Point", "Anatomy scan typically performed"),
    (24, "Viability", "Baby could survive with medical help"),
    (28, "Third Trimester", "Final stretch begins"),
    (37, "Full Term", "Baby is considered full term"),
    (40, "Due Date", "Estimated delivery date"),
]


class PregnancyTimelineMixin:

    def cycle_length(self, fields: dict) -> int:
        cycle = self.parse_int(fields.get("cycle_length"), default=STANDARD_CYCLE)
        if not 20 <= cycle <= 45:
            self.reject("Cycle length must be between 20 and 45 days!")
        return cycle

    def shift(self, start, days: int = 0, weeks: int = 0):
        try:
            return start + timedelta(days=days, weeks=weeks)
        except (OverflowError, ValueError):
            self.reject("The resulting date is out of range!")

    def required_date(self, fields: dict, name: str):
        value = self.parse_date(fields.get(name))
        if value is None:
            self.reject("Please enter a valid date!")
        return value

    def lmp_from_ultrasound(self, fields: dict):
        scan = self.required_date(fields, "ultrasound_date")
        weeks = self.parse_int(fields.get("weeks"), default=0)
        days = self.parse_int(fields.get("days"), default=0)
        if weeks <= 0 and days <= 0:
            self.reject("Please enter the gestational age at the ultrasound!")
        return self.shift(scan, days=-days, weeks=-weeks)

    def progress(self, lmp, today) -> dict:
        elapsed = (today - lmp).days
        return {"current_week": elapsed // 7, "current_day": elapsed % 7}


class ConceptionCalculator(PregnancyTimelineMixin, BaseCalculator):

    METHODS = ("lmp", "duedate", "ultrasound")

    def calculate(self, fields: dict) -> dict:
        method = self.parse_choice(fields.get("method"), self.METHODS, "lmp")
        cycle_offset = self.cycle_length(fields) - STANDARD_CYCLE
        today = self.today(fields)

        if method == "lmp":
            lmp = self.required_date(fields, "lmp_date")
        elif method == "duedate":
            due = self.required_date(fields, "due_date")
            lmp = self.shift(due, days=-(PREGNANCY_DAYS + cycle_offset))
        else:
            lmp = self.lmp_from_ultrasound(fields)
            cycle_offset = 0

        conception = self.shift(lmp, days=STANDARD_CYCLE - LUTEAL_PHASE_DAYS + cycle_offset)
        due = self.shift(lmp, days=PREGNANCY_DAYS + cycle_offset)
        window_start = self.shift(conception, days=-CONCEPTION_WINDOW_DAYS)
        window_end = self.shift(conception, days=CONCEPTION_WINDOW_DAYS)
        return {
            "method": method,
            "conception_date": conception.isoformat(),
            "conception_window_start": window_start.isoformat(),
            "conception_window_end": window_end.isoformat(),
            "due_date": due.isoformat(),
            **self.progress(lmp, today),
        }


class DueDateCalculator(PregnancyTimelineMixin, BaseCalculator):

    METHODS = ("lmp", "conception", "ultrasound")

    def calculate(self, fields: dict) -> dict:
        method = self.parse_choice(fields.get("method"), self.METHODS, "lmp")
        today = self.today(fields)
        cycle_offset = 0

        if method == "lmp":
            lmp = self.required_date(fields, "lmp_date")
            cycle_offset = self.cycle_length(fields) - STANDARD_CYCLE
        elif method == "conception":
            conceived = self.required_date(fields, "conception_date")
            lmp = self.shift(conceived, days=-LUTEAL_PHASE_DAYS)
        else:
            lmp = self.lmp_from_ultrasound(fields)

        # A longer cycle moves ovulation, and with it every date, later
        dated_lmp = self.shift(lmp, days=cycle_offset)
        due = self.shift(dated_lmp, days=PREGNANCY_DAYS)
        conception = self.shift(dated_lmp, days=LUTEAL_PHASE_DAYS)
        progress = self.progress(dated_lmp, today)
        days_remaining = (due - today).days

        return {
            "method": method,
            "due_date": due.isoformat(),
            "conception_date": conception.isoformat(),
            "first_trimester_end": (dated_lmp + timedelta(weeks=13)).isoformat(),
            "second_trimester_end": (dated_lmp + timedelta(weeks=27)).isoformat(),
            "third_trimester_end": due.isoformat(),
            "days_remaining": days_remaining,
            "weeks_remaining": days_remaining // 7,
            **progress,
            "milestones": [
                {
                    "week": week,
                    "title": title,
                    "description": description,
                    "date": (dated_lmp + timedelta(weeks=week)).isoformat(),
                    "passed": progress["current_week"] >= week,
                }
                for week, title, description in MILESTONES
            ],
        }

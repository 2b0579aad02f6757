"""
Health and fitness calculators.

Body measurements come in either unit system:
  imperial: height_feet + height_inches, weight in lb, tape measures in inches
  metric:   height_cm, weight in kg, tape measures in cm
Everything is converted to SI before the formulas run.
"""

import logging
import math

from .base import BaseCalculator
from ..reference_tables import KM_PER_MILE, METERS_PER_MILE, RACE_DISTANCES_KM

logger = logging.getLogger(__name__)

KG_PER_LB = 0.453592
LB_PER_KG = 2.20462
METERS_PER_INCH = 0.0254
CM_PER_INCH = 2.54

HEALTHY_BMI_MIN = 18.5
HEALTHY_BMI_MAX = 24.9

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "lightly": 1.375,
    "moderately": 1.55,
    "very": 1.725,
    "extra": 1.9,
}


class BodyMetricsMixin:
    """Shared unit handling for the body measurement calculators."""

    def unit_system(self, fields: dict) -> str:
        return self.parse_choice(fields.get("unit_system"), ("imperial", "metric"), "imperial")

    def height_cm(self, fields: dict, units: str) -> float:
        if units == "metric":
            return self.parse_number(fields.get("height_cm"), default=178)
        inches = (self.parse_number(fields.get("height_feet"), default=5) * 12
                  + self.parse_number(fields.get("height_inches"), default=10))
        return inches * CM_PER_INCH

    def weight_kg(self, fields: dict, units: str) -> float:
        if units == "metric":
            return self.parse_number(fields.get("weight"), default=82)
        return self.parse_number(fields.get("weight"), default=180) * KG_PER_LB

    def display_weight(self, kg: float, units: str) -> float:
        return round(kg * LB_PER_KG if units == "imperial" else kg, 1)

    def healthy_range(self, height_m: float, units: str) -> dict:
        return {
            "min": self.display_weight(HEALTHY_BMI_MIN * height_m ** 2, units),
            "max": self.display_weight(HEALTHY_BMI_MAX * height_m ** 2, units),
        }

    def mifflin_bmr(self, gender: str, weight_kg: float, height_cm: float, age: float) -> float:
        base = 10 * weight_kg + 6.25 * height_cm - 5 * age
        return base + 5 if gender == "male" else base - 161


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal Weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


class BmiCalculator(BodyMetricsMixin, BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        units = self.unit_system(fields)
        height_m = self.height_cm(fields, units) / 100
        weight = self.weight_kg(fields, units)

        if height_m <= 0 or weight <= 0:
            self.reject("Please enter valid height and weight values!")

        bmi = weight / height_m ** 2
        return {
            "bmi": round(bmi, 1),
            "category": bmi_category(bmi),
            "healthy_weight_range": self.healthy_range(height_m, units),
            "weight_unit": "lb" if units == "imperial" else "kg",
        }


class BmrCalculator(BodyMetricsMixin, BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        units = self.unit_system(fields)
        gender = self.parse_choice(fields.get("gender"), ("male", "female"), "male")
        age = self.parse_number(fields.get("age"), default=30)
        formula = self.parse_choice(fields.get("formula"), ("mifflin", "harris"), "mifflin")
        height = self.height_cm(fields, units)
        weight = self.weight_kg(fields, units)

        if height <= 0 or weight <= 0 or age <= 0:
            self.reject("Please enter valid age, height and weight values!")

        if formula == "mifflin":
            bmr = self.mifflin_bmr(gender, weight, height, age)
        elif gender == "male":
            bmr = 13.397 * weight + 4.799 * height - 5.677 * age + 88.362
        else:
            bmr = 9.247 * weight + 3.098 * height - 4.330 * age + 447.593

        return {
            "formula": formula,
            "bmr": round(bmr),
            "activity_levels": {name: round(bmr * factor) for name, factor in ACTIVITY_MULTIPLIERS.items()},
        }


class CalorieCalculator(BodyMetricsMixin, BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        units = self.unit_system(fields)
        gender = self.parse_choice(fields.get("gender"), ("male", "female"), "male")
        age = self.parse_number(fields.get("age"), default=30)
        activity = self.parse_choice(fields.get("activity_level"), tuple(ACTIVITY_MULTIPLIERS), "moderately")
        height = self.height_cm(fields, units)
        weight = self.weight_kg(fields, units)

        if height <= 0 or weight <= 0 or age <= 0:
            self.reject("Please enter valid age, height and weight values!")

        bmr = self.mifflin_bmr(gender, weight, height, age)
        maintain = bmr * ACTIVITY_MULTIPLIERS[activity]
        return {
            "bmr": round(bmr),
            "activity_level": activity,
            "maintain": round(maintain),
            "mild_weight_loss": round(maintain - 250),
            "weight_loss": round(maintain - 500),
            "extreme_weight_loss": round(maintain - 1000),
            "mild_weight_gain": round(maintain + 250),
            "weight_gain": round(maintain + 500),
            "extreme_weight_gain": round(maintain + 1000),
            "activity_levels": {name: round(bmr * factor) for name, factor in ACTIVITY_MULTIPLIERS.items()},
        }


# Body fat % category upper bounds, per gender
BODY_FAT_CATEGORIES = {
    "male": [(6, "Essential Fat"), (14, "Athletes"), (18, "Fitness"), (25, "Average")],
    "female": [(14, "Essential Fat"), (21, "Athletes"), (25, "Fitness"), (32, "Average")],
}


class BodyFatCalculator(BodyMetricsMixin, BaseCalculator):
    """US Navy circumference method."""

    def calculate(self, fields: dict) -> dict:
        units = self.unit_system(fields)
        gender = self.parse_choice(fields.get("gender"), ("male", "female"), "male")
        to_inches = 1 / CM_PER_INCH if units == "metric" else 1.0
        height = self.height_cm(fields, units) / CM_PER_INCH
        weight_kg = self.weight_kg(fields, units)
        neck = self.parse_number(fields.get("neck"), default=15 / to_inches) * to_inches
        waist = self.parse_number(fields.get("waist"), default=32 / to_inches) * to_inches
        hip = self.parse_number(fields.get("hip"), default=38 / to_inches) * to_inches

        if height <= 0 or weight_kg <= 0:
            self.reject("Please enter valid height and weight values!")

        if gender == "male":
            girth = waist - neck
        else:
            girth = waist + hip - neck
        if girth <= 0:
            self.reject("Invalid measurements: waist must be larger than neck!")

        if gender == "male":
            density = 1.0324 - 0.19077 * math.log10(girth) + 0.15456 * math.log10(height)
        else:
            density = 1.29579 - 0.35004 * math.log10(girth) + 0.22100 * math.log10(height)
        body_fat = 495 / density - 450

        category = "Obese"
        for limit, name in BODY_FAT_CATEGORIES[gender]:
            if body_fat < limit:
                category = name
                break

        fat_kg = weight_kg * body_fat / 100
        return {
            "body_fat_percent": round(body_fat, 1),
            "category": category,
            "fat_mass": self.display_weight(fat_kg, units),
            "lean_mass": self.display_weight(weight_kg - fat_kg, units),
            "weight_unit": "lb" if units == "imperial" else "kg",
        }


# (base kg at 5 ft, kg per inch over 5 ft) for each formula
IDEAL_WEIGHT_FORMULAS = {
    "robinson": {"male": (52, 1.9), "female": (49, 1.7)},
    "miller": {"male": (56.2, 1.41), "female": (53.1, 1.36)},
    "devine": {"male": (50, 2.3), "female": (45.5, 2.3)},
    "hamwi": {"male": (48, 2.7), "female": (45.5, 2.2)},
}


class IdealWeightCalculator(BodyMetricsMixin, BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        units = self.unit_system(fields)
        gender = self.parse_choice(fields.get("gender"), ("male", "female"), "male")
        height_cm = self.height_cm(fields, units)

        if height_cm <= 0:
            self.reject("Please enter a valid height!")

        inches_over_five_feet = height_cm / CM_PER_INCH - 60
        weights = {}
        for name, by_gender in IDEAL_WEIGHT_FORMULAS.items():
            base, per_inch = by_gender[gender]
            weights[name] = self.display_weight(base + per_inch * inches_over_five_feet, units)

        return {
            **weights,
            "average": round(sum(weights.values()) / len(weights), 1),
            "healthy_bmi_range": self.healthy_range(height_cm / 100, units),
            "weight_unit": "lb" if units == "imperial" else "kg",
        }


class PaceCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        distance = self.parse_number(fields.get("distance"), default=5)
        unit = self.parse_choice(fields.get("distance_unit"), ("miles", "km", "meters"), "miles")
        total_seconds = (self.parse_number(fields.get("hours"), default=0) * 3600
                         + self.parse_number(fields.get("minutes"), default=30) * 60
                         + self.parse_number(fields.get("seconds"), default=0))

        if distance <= 0 or total_seconds <= 0:
            self.reject("Please enter valid distance and time values!")

        if unit == "miles":
            miles, km = distance, distance * KM_PER_MILE
        elif unit == "km":
            miles, km = distance / KM_PER_MILE, distance
        else:
            miles, km = distance / METERS_PER_MILE, distance / 1000

        hours = total_seconds / 3600
        return {
            "pace_per_mile": self.format_hms(total_seconds / miles),
            "pace_per_km": self.format_hms(total_seconds / km),
            "speed_mph": round(miles / hours, 2),
            "speed_kmh": round(km / hours, 2),
            "projected_times": {
                race: self.format_hms(race_km / km * total_seconds)
                for race, race_km in RACE_DISTANCES_KM.items()
            },
        }

"""
Health, fitness and pregnancy calculator tests.

Tests:
1-3.   BMI (imperial, metric, validation)
4-6.   BMR, calorie, body fat
7-8.   Ideal weight and pace
9-13.  Due date
14-16. Conception
17-18. Dates pushed out of range
"""

import pytest

from calcsite.calculators.base import CalculatorInputError
from calcsite.calculators.health import (
    BmiCalculator,
    BmrCalculator,
    BodyFatCalculator,
    CalorieCalculator,
    IdealWeightCalculator,
    PaceCalculator,
    bmi_category,
)
from calcsite.calculators.pregnancy import ConceptionCalculator, DueDateCalculator


# ============================================================
# BMI
# ============================================================

def test_bmi_imperial():
    """180 lb at 5'10" is 25.8, overweight."""
    result = BmiCalculator().calculate({
        "unit_system": "imperial", "height_feet": 5, "height_inches": 10, "weight": 180,
    })
    assert result["bmi"] == 25.8
    assert result["category"] == "Overweight"
    assert result["weight_unit"] == "lb"
    assert result["healthy_weight_range"]["min"] < result["healthy_weight_range"]["max"]


def test_bmi_metric():
    result = BmiCalculator().calculate({"unit_system": "metric", "height_cm": 175, "weight": 70})
    assert result["bmi"] == 22.9
    assert result["category"] == "Normal Weight"


def test_bmi_category_bounds_and_validation():
    assert bmi_category(18.4) == "Underweight"
    assert bmi_category(24.9) == "Normal Weight"
    assert bmi_category(30) == "Obese"
    with pytest.raises(CalculatorInputError):
        BmiCalculator().calculate({"unit_system": "metric", "height_cm": 175, "weight": -5})


# ============================================================
# BMR, calorie, body fat
# ============================================================

def test_bmr_mifflin_male():
    result = BmrCalculator().calculate({
        "unit_system": "metric", "gender": "male", "age": 30, "height_cm": 180, "weight": 80,
    })
    assert result["bmr"] == 1780
    assert result["activity_levels"]["sedentary"] == 2136


def test_calorie_goals_offset_maintenance():
    result = CalorieCalculator().calculate({
        "unit_system": "metric", "gender": "male", "age": 30, "height_cm": 180, "weight": 80,
        "activity_level": "moderately",
    })
    assert result["maintain"] == 2759
    assert result["weight_loss"] == 2259
    assert result["extreme_weight_gain"] == 3759


def test_body_fat_navy_method():
    result = BodyFatCalculator().calculate({
        "gender": "male", "height_feet": 5, "height_inches": 10, "weight": 180, "neck": 15, "waist": 32,
    })
    assert result["body_fat_percent"] == pytest.approx(7.1, abs=0.2)
    assert result["category"] == "Athletes"
    with pytest.raises(CalculatorInputError, match="waist must be larger than neck"):
        BodyFatCalculator().calculate({"gender": "male", "neck": 15, "waist": 10})


# ============================================================
# Ideal weight and pace
# ============================================================

def test_ideal_weight_at_five_feet_is_formula_base():
    result = IdealWeightCalculator().calculate({
        "unit_system": "metric", "gender": "male", "height_cm": 152.4,
    })
    assert result["robinson"] == 52.0
    assert result["devine"] == 50.0
    assert result["weight_unit"] == "kg"


def test_pace_ten_km_in_fifty_minutes():
    result = PaceCalculator().calculate({"distance": 10, "distance_unit": "km", "minutes": 50})
    assert result["pace_per_km"] == "5:00"
    assert result["speed_kmh"] == 12.0
    assert result["projected_times"]["5K"] == "25:00"
    assert result["projected_times"]["10K"] == "50:00"


# ============================================================
# Due date
# ============================================================

def test_due_date_from_lmp():
    result = DueDateCalculator().calculate({"lmp_date": "2025-01-01", "today": "2025-02-01"})
    assert result["due_date"] == "2025-10-08"
    assert result["conception_date"] == "2025-01-15"
    assert result["current_week"] == 4
    assert result["current_day"] == 3
    assert len(result["milestones"]) == 8
    assert result["milestones"][0]["passed"] is True
    assert result["milestones"][1]["passed"] is False


def test_due_date_long_cycle_shifts_dates():
    result = DueDateCalculator().calculate({"lmp_date": "2025-01-01", "cycle_length": 35,
                                            "today": "2025-02-01"})
    assert result["due_date"] == "2025-10-15"


def test_due_date_from_conception():
    result = DueDateCalculator().calculate({"method": "conception", "conception_date": "2025-01-15",
                                            "today": "2025-02-01"})
    assert result["due_date"] == "2025-10-08"


def test_due_date_rejects_cycle_out_of_range():
    with pytest.raises(CalculatorInputError, match="Cycle length"):
        DueDateCalculator().calculate({"lmp_date": "2025-01-01", "cycle_length": 50})


def test_due_date_requires_a_date():
    with pytest.raises(CalculatorInputError, match="valid date"):
        DueDateCalculator().calculate({"lmp_date": "not a date"})


# ============================================================
# Conception
# ============================================================

def test_conception_from_lmp():
    result = ConceptionCalculator().calculate({"lmp_date": "2025-01-01", "today": "2025-02-01"})
    assert result["conception_date"] == "2025-01-15"
    assert result["conception_window_start"] == "2025-01-12"
    assert result["conception_window_end"] == "2025-01-18"
    assert result["due_date"] == "2025-10-08"


def test_conception_from_due_date():
    result = ConceptionCalculator().calculate({"method": "duedate", "due_date": "2025-10-08",
                                               "today": "2025-02-01"})
    assert result["conception_date"] == "2025-01-15"


def test_conception_from_ultrasound():
    result = ConceptionCalculator().calculate({
        "method": "ultrasound", "ultrasound_date": "2025-03-01", "weeks": 8, "days": 0,
        "today": "2025-03-01",
    })
    assert result["due_date"] == "2025-10-11"
    assert result["current_week"] == 8
    with pytest.raises(CalculatorInputError, match="gestational age"):
        ConceptionCalculator().calculate({"method": "ultrasound", "ultrasound_date": "2025-03-01"})


# ============================================================
# Dates pushed out of range
# ============================================================

@pytest.mark.parametrize("calculator_class", [DueDateCalculator, ConceptionCalculator])
@pytest.mark.parametrize("weeks", [1e9, -1e9, 10 ** 30])
def test_ultrasound_weeks_out_of_range_rejected(calculator_class, weeks):
    with pytest.raises(CalculatorInputError, match="out of range"):
        calculator_class().calculate({
            "method": "ultrasound", "ultrasound_date": "2025-03-01", "weeks": weeks, "days": 3,
            "today": "2025-03-01",
        })


def test_due_date_outside_years_1_to_9999_rejected():
    with pytest.raises(CalculatorInputError, match="out of range"):
        DueDateCalculator().calculate({"lmp_date": "9999-06-01", "today": "2025-02-01"})
    with pytest.raises(CalculatorInputError, match="out of range"):
        DueDateCalculator().calculate({"method": "conception", "conception_date": "0001-01-05"})

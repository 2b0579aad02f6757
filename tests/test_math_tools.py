"""
Math calculator tests.

Tests:
1-4.   Fractions
5-7.   Percentages
8-10.  Random numbers
11-14. Triangles
15-16. Standard deviation
17-21. Scientific expressions
22-25. Oversized expressions, non-numeric seeds, flat triangles
"""

import pytest

from calcsite.calculators.base import CalculatorInputError
from calcsite.calculators.math_tools import (
    FractionCalculator,
    PercentageCalculator,
    RandomNumberCalculator,
    ScientificCalculator,
    StandardDeviationCalculator,
    TriangleCalculator,
)


# ============================================================
# Fractions
# ============================================================

def test_fraction_addition():
    result = FractionCalculator().calculate({"num1": 1, "den1": 2, "num2": 1, "den2": 3, "operation": "+"})
    assert result["simplified"] == {"numerator": 5, "denominator": 6}
    assert result["mixed"] is None
    assert result["decimal"] == pytest.approx(0.8333333333)
    assert "Find common denominator: LCM(2, 3) = 6" in result["steps"]


def test_fraction_multiply_simplifies():
    result = FractionCalculator().calculate({"num1": 1, "den1": 2, "num2": 2, "den2": 3, "operation": "×"})
    assert (result["numerator"], result["denominator"]) == (2, 6)
    assert result["simplified"] == {"numerator": 1, "denominator": 3}


def test_fraction_mixed_number_and_sign():
    result = FractionCalculator().calculate({"num1": 7, "den1": 4, "num2": 3, "den2": 4})
    assert result["simplified"] == {"numerator": 5, "denominator": 2}
    assert result["mixed"] == {"whole": 2, "numerator": 1, "denominator": 2}

    negative = FractionCalculator().calculate({"num1": 1, "den1": -2, "num2": 0, "den2": 1})
    assert negative["simplified"] == {"numerator": -1, "denominator": 2}


def test_fraction_rejects_zero_denominator_and_division_by_zero():
    with pytest.raises(CalculatorInputError, match="Denominators cannot be zero"):
        FractionCalculator().calculate({"num1": 1, "den1": 0})
    with pytest.raises(CalculatorInputError, match="Cannot divide by zero"):
        FractionCalculator().calculate({"num1": 1, "den1": 2, "num2": 0, "den2": 5, "operation": "÷"})


# ============================================================
# Percentages
# ============================================================

def test_percentage_what_is():
    result = PercentageCalculator().calculate({"mode": "what-is", "percentage": 25, "of_value": 200})
    assert result["result"] == 50
    assert result["formula"] == "(25 ÷ 100) × 200 = 50"
    assert result["explanation"] == "25% of 200 equals 50"


def test_percentage_change_and_decrease():
    change = PercentageCalculator().calculate({"mode": "percent-change", "old_value": 100, "new_value": 150})
    assert change["result"] == 50
    assert change["explanation"].startswith("An increase of 50.00%")
    decrease = PercentageCalculator().calculate({"mode": "decrease", "base_value": 100, "percent_change": 20})
    assert decrease["result"] == 80


def test_percentage_rejects_zero_base():
    with pytest.raises(CalculatorInputError, match="Cannot divide by zero"):
        PercentageCalculator().calculate({"mode": "is-what-percent", "part": 5, "total": 0})


# ============================================================
# Random numbers
# ============================================================

def test_random_numbers_are_reproducible_with_seed():
    fields = {"min": 1, "max": 100, "quantity": 20, "seed": 42}
    first = RandomNumberCalculator().calculate(fields)
    second = RandomNumberCalculator().calculate(fields)
    assert first["numbers"] == second["numbers"]
    assert all(1 <= n <= 100 for n in first["numbers"])
    assert first["statistics"]["sum"] == sum(first["numbers"])


def test_random_numbers_unique_and_sorted():
    result = RandomNumberCalculator().calculate({
        "min": 1, "max": 10, "quantity": 10, "allow_duplicates": False, "sort": True,
    })
    assert result["numbers"] == list(range(1, 11))


def test_random_numbers_validation():
    with pytest.raises(CalculatorInputError, match="Cannot generate 11 unique numbers"):
        RandomNumberCalculator().calculate({"min": 1, "max": 10, "quantity": 11, "allow_duplicates": False})
    with pytest.raises(CalculatorInputError, match="Minimum value cannot be greater"):
        RandomNumberCalculator().calculate({"min": 10, "max": 1})
    with pytest.raises(CalculatorInputError, match="Quantity must be between"):
        RandomNumberCalculator().calculate({"quantity": 0})


# ============================================================
# Triangles
# ============================================================

def test_triangle_sss_right_triangle():
    result = TriangleCalculator().calculate({"mode": "sss", "side_a": 3, "side_b": 4, "side_c": 5})
    assert result["area"] == pytest.approx(6.0)
    assert result["perimeter"] == pytest.approx(12.0)
    assert result["angles"]["C"] == pytest.approx(90.0, abs=0.001)
    assert result["type"] == "Scalene Right"


def test_triangle_rejects_impossible_sides():
    with pytest.raises(CalculatorInputError, match="cannot form a valid triangle"):
        TriangleCalculator().calculate({"mode": "sss", "side_a": 1, "side_b": 2, "side_c": 3})


def test_triangle_asa_equilateral():
    result = TriangleCalculator().calculate({"mode": "asa", "angle_a": 60, "side_ab": 5, "angle_b": 60})
    assert result["sides"]["a"] == pytest.approx(5.0)
    assert result["type"] == "Equilateral Acute"
    with pytest.raises(CalculatorInputError):
        TriangleCalculator().calculate({"mode": "asa", "angle_a": 100, "angle_b": 90})


def test_triangle_base_height_assumes_right_angle():
    result = TriangleCalculator().calculate({"mode": "base-height", "base": 4, "height": 3})
    assert result["area"] == 6
    assert result["sides"]["c"] == 5
    assert result["angles"]["C"] == 90


# ============================================================
# Standard deviation
# ============================================================

def test_standard_deviation_population_and_sample():
    result = StandardDeviationCalculator().calculate({"data": "2, 4, 4, 4, 5, 5, 7, 9"})
    assert result["count"] == 8
    assert result["mean"] == 5
    assert result["population_standard_deviation"] == pytest.approx(2.0)
    assert result["variance"] == pytest.approx(32 / 7)
    assert result["mode"] == [4]
    assert result["median"] == 4.5


def test_standard_deviation_requires_numbers():
    with pytest.raises(CalculatorInputError, match="valid numerical data"):
        StandardDeviationCalculator().calculate({"data": "a, b, c"})


# ============================================================
# Scientific expressions
# ============================================================

def test_scientific_arithmetic_and_functions():
    calc = ScientificCalculator()
    assert calc.calculate({"expression": "2^10 + sqrt(16)"})["result"] == 1028
    assert calc.calculate({"expression": "2 × 3 ÷ 4"})["result"] == 1.5
    assert calc.calculate({"expression": "fact(5)"})["result"] == 120
    assert calc.calculate({"expression": "log(1000) + ln(e)"})["result"] == pytest.approx(4.0)


def test_scientific_angle_modes():
    calc = ScientificCalculator()
    assert calc.calculate({"expression": "sin(30)", "angle_mode": "deg"})["result"] == pytest.approx(0.5)
    assert calc.calculate({"expression": "cos(π)", "angle_mode": "rad"})["result"] == pytest.approx(-1.0)


def test_scientific_division_by_zero_shows_zero():
    assert ScientificCalculator().calculate({"expression": "5/0"})["result"] == 0


@pytest.mark.parametrize("expression", [
    "1 +",
    "sqrt(-1)",
    "__import__('os')",
    "x + 1",
    "10^400",
    "fact(200)",
    "",
])
def test_scientific_invalid_expressions(expression):
    with pytest.raises(CalculatorInputError, match="Invalid expression"):
        ScientificCalculator().calculate({"expression": expression})


# ============================================================
# Oversized expressions, non-numeric seeds, flat triangles
# ============================================================

@pytest.mark.parametrize("expression", [
    "1" + "0" * 400,
    "-" * 5000 + "1",
    "(" * 300 + "1" + ")" * 300,
])
def test_scientific_rejects_oversized_expressions(expression):
    with pytest.raises(CalculatorInputError, match="Invalid expression"):
        ScientificCalculator().calculate({"expression": expression})


def test_scientific_rejects_results_too_large_for_a_float():
    with pytest.raises(CalculatorInputError, match="Invalid expression"):
        ScientificCalculator().calculate({"expression": "cube(" + "9" * 110 + ")"})
    assert ScientificCalculator().calculate({"expression": "-" * 200 + "1"})["result"] == 1


@pytest.mark.parametrize("seed", [[1, 2], {"a": 1}, "abc"])
def test_random_numbers_ignore_non_numeric_seed(seed):
    result = RandomNumberCalculator().calculate({"min": 1, "max": 6, "quantity": 5, "seed": seed})
    assert len(result["numbers"]) == 5
    assert all(1 <= n <= 6 for n in result["numbers"])


@pytest.mark.parametrize("sides", [(1, 1, 1.9999999), (1, 1e8, 1e8), (2e-9, 1, 1)])
def test_triangle_sss_nearly_flat(sides):
    a, b, c = sides
    result = TriangleCalculator().calculate({"mode": "sss", "side_a": a, "side_b": b, "side_c": c})
    assert sum(result["angles"].values()) == pytest.approx(180.0)
    assert result["area"] >= 0

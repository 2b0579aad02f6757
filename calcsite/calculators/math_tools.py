"""
Math calculators: fractions, percentages, random numbers, triangles,
descriptive statistics and a scientific expression evaluator.
"""

import ast
import logging
import math
import operator
import random
import re
import statistics

from .base import BaseCalculator

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    """Render whole floats without the trailing .0 ("3" not "3.0")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(round(value, 10))


class FractionCalculator(BaseCalculator):

    OPERATIONS = ("+", "-", "*", "/")

    def calculate(self, fields: dict) -> dict:
        n1 = self.parse_int(fields.get("num1"), default=1)
        d1 = self.parse_int(fields.get("den1"), default=2)
        n2 = self.parse_int(fields.get("num2"), default=1)
        d2 = self.parse_int(fields.get("den2"), default=3)
        op = str(fields.get("operation") or "+").strip()
        op = {"×": "*", "x": "*", "÷": "/", "−": "-"}.get(op, op)
        if op not in self.OPERATIONS:
            op = "+"

        if d1 == 0 or d2 == 0:
            self.reject("Denominators cannot be zero!")
        if op == "/" and n2 == 0:
            self.reject("Cannot divide by zero!")

        steps = [f"Operation: {n1}/{d1} {op} {n2}/{d2}"]
        if op in ("+", "-"):
            common = math.lcm(d1, d2)
            a, b = n1 * (common // d1), n2 * (common // d2)
            num = a + b if op == "+" else a - b
            den = common
            verb = "Add" if op == "+" else "Subtract"
            steps.append(f"Find common denominator: LCM({d1}, {d2}) = {common}")
            steps.append(f"Convert fractions: {a}/{common} {op} {b}/{common}")
            steps.append(f"{verb} numerators: {a} {op} {b} = {num}")
        elif op == "*":
            num, den = n1 * n2, d1 * d2
            steps.append(f"Multiply numerators: {n1} × {n2} = {num}")
            steps.append(f"Multiply denominators: {d1} × {d2} = {den}")
        else:
            num, den = n1 * d2, d1 * n2
            steps.append(f"Flip the second fraction: {n2}/{d2} → {d2}/{n2}")
            steps.append(f"Multiply: {n1}/{d1} × {d2}/{n2} = {num}/{den}")

        divisor = math.gcd(num, den) or 1
        simple_num, simple_den = num // divisor, den // divisor
        if simple_den < 0:
            simple_num, simple_den = -simple_num, -simple_den
        if divisor > 1:
            steps.append(f"Simplify by dividing by GCD({abs(num)}, {abs(den)}) = {divisor}")
            steps.append(f"Final result: {simple_num}/{simple_den}")

        whole, remainder = divmod(abs(simple_num), simple_den)
        mixed = None
        if whole:
            mixed = {
                "whole": -whole if simple_num < 0 else whole,
                "numerator": remainder,
                "denominator": simple_den,
            }

        return {
            "numerator": num,
            "denominator": den,
            "simplified": {"numerator": simple_num, "denominator": simple_den},
            "mixed": mixed,
            "decimal": round(simple_num / simple_den, 10),
            "steps": steps,
        }


class PercentageCalculator(BaseCalculator):

    MODES = ("what-is", "is-what-percent", "percent-change", "increase", "decrease")

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), self.MODES, "what-is")

        if mode == "what-is":
            pct = self.parse_number(fields.get("percentage"), default=25)
            of = self.parse_number(fields.get("of_value"), default=200)
            result = pct / 100 * of
            formula = f"({_format_number(pct)} ÷ 100) × {_format_number(of)} = {_format_number(result)}"
            explanation = f"{_format_number(pct)}% of {_format_number(of)} equals {_format_number(result)}"
        elif mode == "is-what-percent":
            part = self.parse_number(fields.get("part"), default=50)
            total = self.parse_number(fields.get("total"), default=200)
            if total == 0:
                self.reject("Cannot divide by zero!")
            result = part / total * 100
            formula = f"({_format_number(part)} ÷ {_format_number(total)}) × 100 = {result:.2f}%"
            explanation = f"{_format_number(part)} is {result:.2f}% of {_format_number(total)}"
        elif mode == "percent-change":
            old = self.parse_number(fields.get("old_value"), default=100)
            new = self.parse_number(fields.get("new_value"), default=150)
            if old == 0:
                self.reject("Cannot divide by zero!")
            result = (new - old) / old * 100
            formula = f"(({_format_number(new)} - {_format_number(old)}) ÷ {_format_number(old)}) × 100 = {result:.2f}%"
            direction = "An increase" if result >= 0 else "A decrease"
            explanation = f"{direction} of {abs(result):.2f}% from {_format_number(old)} to {_format_number(new)}"
        else:
            base = self.parse_number(fields.get("base_value"), default=100)
            change = self.parse_number(fields.get("percent_change"), default=20)
            sign = 1 if mode == "increase" else -1
            result = base + sign * base * change / 100
            symbol = "+" if sign > 0 else "-"
            formula = (f"{_format_number(base)} {symbol} ({_format_number(base)} × {_format_number(change)} ÷ 100)"
                       f" = {_format_number(result)}")
            verb = "increased" if sign > 0 else "decreased"
            explanation = f"{_format_number(base)} {verb} by {_format_number(change)}% equals {_format_number(result)}"

        return {
            "mode": mode,
            "result": round(result, 10),
            "formula": formula,
            "explanation": explanation,
        }


class RandomNumberCalculator(BaseCalculator):

    MAX_QUANTITY = 10000

    def calculate(self, fields: dict) -> dict:
        low = self.parse_int(fields.get("min"), default=1)
        high = self.parse_int(fields.get("max"), default=100)
        count = self.parse_int(fields.get("quantity"), default=1)
        duplicates = self.parse_bool(fields.get("allow_duplicates"), default=True)
        ordered = self.parse_bool(fields.get("sort"), default=False)
        seed = self.parse_int(fields.get("seed"), default=None)

        if low > high:
            self.reject("Minimum value cannot be greater than maximum value!")
        if not 1 <= count <= self.MAX_QUANTITY:
            self.reject(f"Quantity must be between 1 and {self.MAX_QUANTITY}!")
        span = high - low + 1
        if not duplicates and count > span:
            self.reject(f"Cannot generate {count} unique numbers from a range of {span} numbers!")

        rng = random.Random(seed) if seed is not None else random.SystemRandom()
        if duplicates:
            numbers = [rng.randint(low, high) for _ in range(count)]
        else:
            numbers = rng.sample(range(low, high + 1), count)
        if ordered:
            numbers.sort()

        return {
            "numbers": numbers,
            "statistics": {
                "sum": sum(numbers),
                "average": round(statistics.fmean(numbers), 4),
                "min": min(numbers),
                "max": max(numbers),
                "median": statistics.median(numbers),
            },
        }


class TriangleCalculator(BaseCalculator):

    MODES = ("sss", "sas", "asa", "base-height")

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), self.MODES, "sss")
        steps = []

        if mode == "sss":
            a = self.parse_number(fields.get("side_a"), default=3)
            b = self.parse_number(fields.get("side_b"), default=4)
            c = self.parse_number(fields.get("side_c"), default=5)
            steps.append(f"Given three sides: a = {_format_number(a)}, b = {_format_number(b)}, c = {_format_number(c)}")
            if min(a, b, c) <= 0 or a + b <= c or a + c <= b or b + c <= a:
                self.reject("These sides cannot form a valid triangle!")
            cos_a = max(-1.0, min(1.0, (b * b + c * c - a * a) / (2 * b * c)))
            cos_b = max(-1.0, min(1.0, (a * a + c * c - b * b) / (2 * a * c)))
            angle_a = math.degrees(math.acos(cos_a))
            angle_b = math.degrees(math.acos(cos_b))
            angle_c = 180 - angle_a - angle_b
            steps.append("Using Law of Cosines to find angles:")
            steps.append(f"Angle A = arccos((b² + c² - a²) / (2bc)) = {angle_a:.2f}°")
            steps.append(f"Angle B = arccos((a² + c² - b²) / (2ac)) = {angle_b:.2f}°")
            steps.append(f"Angle C = 180° - A - B = {angle_c:.2f}°")
            s = (a + b + c) / 2
            area = math.sqrt(max(0.0, s * (s - a) * (s - b) * (s - c)))
            steps.append(f"Using Heron's Formula: s = (a + b + c) / 2 = {s:.2f}")
            steps.append(f"Area = √(s(s-a)(s-b)(s-c)) = {area:.2f}")

        elif mode == "sas":
            a = self.parse_number(fields.get("side1"), default=5)
            angle_c = self.parse_number(fields.get("angle"), default=60)
            b = self.parse_number(fields.get("side2"), default=5)
            if a <= 0 or b <= 0 or not 0 < angle_c < 180:
                self.reject("These sides cannot form a valid triangle!")
            steps.append(f"Given two sides and included angle: a = {_format_number(a)}, "
                         f"angle C = {_format_number(angle_c)}°, b = {_format_number(b)}")
            c = math.sqrt(a * a + b * b - 2 * a * b * math.cos(math.radians(angle_c)))
            steps.append(f"Using Law of Cosines: c = √(a² + b² - 2ab·cos(C)) = {c:.2f}")
            cos_a = max(-1.0, min(1.0, (b * b + c * c - a * a) / (2 * b * c)))
            angle_a = math.degrees(math.acos(cos_a))
            angle_b = 180 - angle_a - angle_c
            steps.append(f"Angle A = {angle_a:.2f}°")
            steps.append(f"Angle B = 180° - A - C = {angle_b:.2f}°")
            area = 0.5 * a * b * math.sin(math.radians(angle_c))
            steps.append(f"Area = (1/2) × a × b × sin(C) = {area:.2f}")

        elif mode == "asa":
            angle_a = self.parse_number(fields.get("angle_a"), default=60)
            c = self.parse_number(fields.get("side_ab"), default=5)
            angle_b = self.parse_number(fields.get("angle_b"), default=60)
            angle_c = 180 - angle_a - angle_b
            if angle_c <= 0:
                self.reject("The sum of two angles cannot be >= 180°!")
            if angle_a <= 0 or angle_b <= 0 or c <= 0:
                self.reject("These sides cannot form a valid triangle!")
            steps.append(f"Given two angles and included side: A = {_format_number(angle_a)}°, "
                         f"c = {_format_number(c)}, B = {_format_number(angle_b)}°")
            steps.append(f"Angle C = 180° - A - B = {angle_c:.2f}°")
            sin_c = math.sin(math.radians(angle_c))
            a = c * math.sin(math.radians(angle_a)) / sin_c
            b = c * math.sin(math.radians(angle_b)) / sin_c
            steps.append("Using Law of Sines:")
            steps.append(f"a = c × sin(A) / sin(C) = {a:.2f}")
            steps.append(f"b = c × sin(B) / sin(C) = {b:.2f}")
            area = 0.5 * a * b * sin_c
            steps.append(f"Area = (1/2) × a × b × sin(C) = {area:.2f}")

        else:
            a = self.parse_number(fields.get("base"), default=4)
            b = self.parse_number(fields.get("height"), default=3)
            if a <= 0 or b <= 0:
                self.reject("These sides cannot form a valid triangle!")
            steps.append(f"Given base = {_format_number(a)} and height = {_format_number(b)}")
            area = 0.5 * a * b
            steps.append(f"Area = (1/2) × base × height = {area:.2f}")
            c = math.hypot(a, b)
            steps.append(f"Assuming right triangle: hypotenuse c = √(a² + b²) = {c:.2f}")
            angle_a = math.degrees(math.atan(b / a))
            angle_b = math.degrees(math.atan(a / b))
            angle_c = 90.0
            steps.append(f"Angle A = arctan(b/a) = {angle_a:.2f}°")
            steps.append(f"Angle B = arctan(a/b) = {angle_b:.2f}°")
            steps.append("Angle C = 90°")

        perimeter = a + b + c
        steps.append(f"Perimeter = a + b + c = {perimeter:.2f}")
        return {
            "mode": mode,
            "sides": {"a": round(a, 4), "b": round(b, 4), "c": round(c, 4)},
            "angles": {"A": round(angle_a, 4), "B": round(angle_b, 4), "C": round(angle_c, 4)},
            "area": round(area, 4),
            "perimeter": round(perimeter, 4),
            "type": self.classify((a, b, c), (angle_a, angle_b, angle_c)),
            "steps": steps,
        }

    def classify(self, sides, angles) -> str:
        s = sorted(sides)
        if abs(s[0] - s[1]) < 0.01 and abs(s[1] - s[2]) < 0.01:
            kind = "Equilateral"
        elif abs(s[0] - s[1]) < 0.01 or abs(s[1] - s[2]) < 0.01 or abs(s[0] - s[2]) < 0.01:
            kind = "Isosceles"
        else:
            kind = "Scalene"
        if any(abs(angle - 90) < 0.1 for angle in angles):
            return kind + " Right"
        if any(angle > 90 for angle in angles):
            return kind + " Obtuse"
        return kind + " Acute"


class StandardDeviationCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        raw = fields.get("data", "2, 4, 6, 8, 10")
        if isinstance(raw, (list, tuple)):
            tokens = raw
        else:
            tokens = re.split(r"[,\s]+", str(raw))
        data = [v for v in (self.parse_number(t, default=None) for t in tokens) if v is not None]

        if not data:
            self.reject("Please enter valid numerical data!")

        n = len(data)
        mean = statistics.fmean(data)
        squared = sum((x - mean) ** 2 for x in data)
        sample_variance = squared / (n - 1) if n > 1 else 0.0
        population_variance = squared / n

        counts = {}
        for x in data:
            counts[x] = counts.get(x, 0) + 1
        top = max(counts.values())
        modes = sorted(x for x, c in counts.items() if c == top) if top > 1 else []

        return {
            "count": n,
            "sum": round(sum(data), 10),
            "mean": round(mean, 10),
            "median": statistics.median(data),
            "mode": modes,
            "range": round(max(data) - min(data), 10),
            "variance": round(sample_variance, 10),
            "standard_deviation": round(math.sqrt(sample_variance), 10),
            "population_variance": round(population_variance, 10),
            "population_standard_deviation": round(math.sqrt(population_variance), 10),
            "min": min(data),
            "max": max(data),
            "sorted_data": sorted(data),
        }


class ScientificCalculator(BaseCalculator):
    """
    Evaluates an expression such as "2^10 + sqrt(16) * sin(30)" by walking its
    Python AST. Only numbers, the listed operators, functions and constants
    are accepted.
    """

    MAX_FACTORIAL = 170
    MAX_LENGTH = 256

    BINARY_OPS = {
        ast.Add: operator.add,
        ast.Sub: operator.sub,
        ast.Mult: operator.mul,
        ast.Pow: math.pow,
    }
    CONSTANTS = {"pi": math.pi, "e": math.e}

    def calculate(self, fields: dict) -> dict:
        expression = str(fields.get("expression") or "").strip()
        degrees = self.parse_choice(fields.get("angle_mode"), ("deg", "rad"), "deg") == "deg"
        if not expression or len(expression) > self.MAX_LENGTH:
            self.reject("Invalid expression!")

        normalized = (expression.replace("×", "*").replace("÷", "/").replace("−", "-")
                      .replace("^", "**").replace("π", "pi"))
        try:
            tree = ast.parse(normalized, mode="eval")
            value = float(self._eval(tree.body, degrees))
        except (SyntaxError, ValueError, TypeError, OverflowError, ZeroDivisionError,
                KeyError, RecursionError):
            self.reject("Invalid expression!")

        if math.isnan(value) or math.isinf(value):
            self.reject("Invalid expression!")
        return {
            "expression": expression,
            "angle_mode": "deg" if degrees else "rad",
            "result": round(value, 12),
        }

    def _functions(self, degrees: bool) -> dict:
        to_rad = math.radians if degrees else (lambda x: x)
        from_rad = math.degrees if degrees else (lambda x: x)
        return {
            "sin": lambda x: math.sin(to_rad(x)),
            "cos": lambda x: math.cos(to_rad(x)),
            "tan": lambda x: math.tan(to_rad(x)),
            "asin": lambda x: from_rad(math.asin(x)),
            "acos": lambda x: from_rad(math.acos(x)),
            "atan": lambda x: from_rad(math.atan(x)),
            "log": math.log10,
            "ln": math.log,
            "sqrt": math.sqrt,
            "square": lambda x: x * x,
            "cube": lambda x: x ** 3,
            "fact": self._factorial,
            "recip": lambda x: 1 / x if x != 0 else 0.0,
            "exp": math.exp,
        }

    def _factorial(self, x):
        n = math.floor(x)
        if n < 0 or n > self.MAX_FACTORIAL:
            raise ValueError("factorial out of range")
        return float(math.factorial(n))

    def _eval(self, node, degrees: bool):
        if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) \
                and not isinstance(node.value, bool):
            return node.value
        if isinstance(node, ast.Name):
            return self.CONSTANTS[node.id]
        if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.UAdd, ast.USub)):
            operand = self._eval(node.operand, degrees)
            return -operand if isinstance(node.op, ast.USub) else operand
        if isinstance(node, ast.BinOp):
            left = self._eval(node.left, degrees)
            right = self._eval(node.right, degrees)
            if isinstance(node.op, ast.Div):
                # The keypad showed 0 rather than an error for x / 0
                return left / right if right != 0 else 0.0
            op = self.BINARY_OPS.get(type(node.op))
            if op is None:
                raise ValueError("unsupported operator")
            return op(left, right)
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) \
                and len(node.args) == 1 and not node.keywords:
            func = self._functions(degrees)[node.func.id]
            return func(self._eval(node.args[0], degrees))
        raise ValueError("unsupported expression")

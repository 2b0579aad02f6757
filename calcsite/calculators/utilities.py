"""
Everyday tools that are not finance, health or date related: password
generator, GPA and course grade, concrete estimate, IPv4 subnets and unit
conversion.
"""

import ipaddress
import logging
import math
import re
import secrets

from .base import BaseCalculator
from ..reference_tables import (
    CONCRETE_BAG_PRICES,
    CONCRETE_BAG_YIELD_CU_FT,
    CONCRETE_READY_MIX_PER_YARD,
    GRADE_POINTS,
    LETTER_GRADE_CUTOFFS,
    TEMPERATURE_UNITS,
    UNIT_FACTORS,
)

logger = logging.getLogger(__name__)


class PasswordCalculator(BaseCalculator):

    MIN_LENGTH = 4
    MAX_LENGTH = 128

    UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
    NUMBERS = "0123456789"
    SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
    SIMILAR = "il1Lo0OI"
    AMBIGUOUS = "{}[]()/\\'\"`~,;:.<>"

    STRENGTH_LABELS = [
        (2, "Weak", "This password is too weak. Add more characters and variety."),
        (4, "Fair", "This password is okay but could be stronger. Try adding more character types."),
        (6, "Good", "This is a good password. Consider making it longer for extra security."),
        (7, "Excellent", "This is an excellent, strong password! Keep it safe."),
    ]

    def calculate(self, fields: dict) -> dict:
        length = self.parse_int(fields.get("length"), default=16)
        length = min(max(length, self.MIN_LENGTH), self.MAX_LENGTH)
        exclude_similar = self.parse_bool(fields.get("exclude_similar"), default=True)
        exclude_ambiguous = self.parse_bool(fields.get("exclude_ambiguous"), default=False)

        pools = []
        for name, chars in (("uppercase", self.UPPERCASE), ("lowercase", self.LOWERCASE),
                            ("numbers", self.NUMBERS), ("symbols", self.SYMBOLS)):
            if not self.parse_bool(fields.get(name), default=True):
                continue
            if exclude_similar:
                chars = "".join(c for c in chars if c not in self.SIMILAR)
            if exclude_ambiguous and name == "symbols":
                chars = "".join(c for c in chars if c not in self.AMBIGUOUS)
            if chars:
                pools.append(chars)

        if not pools:
            self.reject("Please select at least one character type!")

        charset = "".join(pools)
        password = [secrets.choice(pool) for pool in pools]
        password += [secrets.choice(charset) for _ in range(length - len(password))]
        secrets.SystemRandom().shuffle(password)
        password = "".join(password)

        score, label, feedback = self.strength(password)
        return {
            "password": password,
            "length": length,
            "charset_size": len(charset),
            "entropy_bits": round(length * math.log2(len(charset)), 1),
            "strength": {"score": score, "label": label, "feedback": feedback},
        }

    def strength(self, password: str):
        checks = [
            len(password) >= 8,
            len(password) >= 12,
            len(password) >= 16,
            re.search(r"[a-z]", password),
            re.search(r"[A-Z]", password),
            re.search(r"[0-9]", password),
            re.search(r"[^a-zA-Z0-9]", password),
        ]
        score = sum(1 for passed in checks if passed)
        for limit, label, feedback in self.STRENGTH_LABELS:
            if score <= limit:
                return score, label, feedback
        return score, self.STRENGTH_LABELS[-1][1], self.STRENGTH_LABELS[-1][2]


# (minimum GPA on the 4.0 scale, letter, classification)
GPA_CLASSIFICATIONS = [
    (3.7, "A", "Excellent"),
    (3.3, "B+", "Very Good"),
    (3.0, "B", "Good"),
    (2.7, "B-", "Above Average"),
    (2.0, "C", "Average"),
    (1.0, "D", "Below Average"),
]


class GpaCalculator(BaseCalculator):

    DEFAULT_COURSES = [
        {"name": "Course 1", "grade": "A", "credits": 3},
        {"name": "Course 2", "grade": "B", "credits": 3},
        {"name": "Course 3", "grade": "A-", "credits": 4},
    ]

    def calculate(self, fields: dict) -> dict:
        courses = self.parse_list(fields.get("courses")) if "courses" in fields else self.DEFAULT_COURSES
        scale = self.parse_choice(fields.get("scale"), ("4.0", "5.0"), "4.0")
        column = 0 if scale == "4.0" else 1

        total_credits = 0.0
        quality_points = 0.0
        rows = []
        for course in courses:
            grade = str(course.get("grade") or "").strip().upper()
            credits = self.parse_number(course.get("credits"), default=0)
            if grade not in GRADE_POINTS or credits <= 0:
                continue
            points = GRADE_POINTS[grade][column]
            total_credits += credits
            quality_points += points * credits
            rows.append({"name": course.get("name"), "grade": grade,
                         "credits": credits, "quality_points": round(points * credits, 2)})

        if total_credits <= 0:
            self.reject("Please enter at least one course with credits!")

        gpa = quality_points / total_credits
        # The weighted 5.0 scale sits one point above the 4.0 scale
        letter, classification = self.classify(gpa - 1 if column else gpa)
        return {
            "gpa": round(gpa, 2),
            "scale": scale,
            "total_credits": round(total_credits, 2),
            "quality_points": round(quality_points, 2),
            "letter": letter,
            "classification": classification,
            "courses": rows,
        }

    def classify(self, gpa: float):
        for minimum, letter, classification in GPA_CLASSIFICATIONS:
            if gpa >= minimum:
                return letter, classification
        return "F", "Failing"


def letter_grade(percent: float) -> str:
    for cutoff, letter in LETTER_GRADE_CUTOFFS:
        if percent >= cutoff:
            return letter
    return "F"


class GradeCalculator(BaseCalculator):
    """Weighted course grade so far, and what the final exam needs to reach a target."""

    DEFAULT_ASSIGNMENTS = [
        {"name": "Homework", "score": 85, "max_score": 100, "weight": 20},
        {"name": "Midterm Exam", "score": 78, "max_score": 100, "weight": 30},
        {"name": "Project", "score": 92, "max_score": 100, "weight": 25},
    ]

    def calculate(self, fields: dict) -> dict:
        assignments = (self.parse_list(fields.get("assignments"))
                       if "assignments" in fields else self.DEFAULT_ASSIGNMENTS)
        final_weight = self.parse_number(fields.get("final_weight"), default=25)
        target = self.parse_number(fields.get("target_grade"), default=90)

        if final_weight < 0:
            self.reject("Final exam weight cannot be negative!")

        weighted = 0.0
        total_weight = 0.0
        earned = 0.0
        possible = 0.0
        for row in assignments:
            max_score = self.parse_number(row.get("max_score"), default=100)
            if max_score <= 0:
                continue
            score = self.parse_number(row.get("score"), default=0)
            weight = self.parse_number(row.get("weight"), default=0)
            weighted += score / max_score * 100 * weight / 100
            total_weight += weight
            earned += score
            possible += max_score

        if total_weight <= 0:
            self.reject("Please enter at least one graded assignment with a weight!")

        current = weighted / total_weight * 100

        def needed(goal: float) -> float:
            if final_weight <= 0:
                return 0.0
            return round((goal - weighted) / final_weight * 100, 2)

        needed_for_target = needed(target)
        return {
            "current_grade": round(current, 2),
            "letter": letter_grade(current),
            "weighted_points": round(weighted, 2),
            "points_earned": round(earned, 2),
            "points_possible": round(possible, 2),
            "percentage_complete": round(total_weight / (total_weight + final_weight) * 100, 2),
            "target_grade": target,
            "needed_for_target": min(100.0, max(0.0, needed_for_target)),
            "target_achievable": needed_for_target <= 100,
            "needed_on_final": {
                "A": min(100.0, max(0.0, needed(93))),
                "B": min(100.0, max(0.0, needed(83))),
                "C": min(100.0, max(0.0, needed(73))),
            },
        }


CUBIC_FEET_PER_YARD = 27
CUBIC_METERS_PER_FOOT = 0.0283168
FEET_PER_METER = 3.28084


class ConcreteCalculator(BaseCalculator):
    """
    Volume in cubic feet. In feet mode plan dimensions are feet and small
    dimensions (thickness, column diameter, stair steps) are inches. In
    meters mode everything is meters.
    """

    SHAPES = ("slab", "footing", "column", "stairs")

    def calculate(self, fields: dict) -> dict:
        shape = self.parse_choice(fields.get("shape"), self.SHAPES, "slab")
        unit = self.parse_choice(fields.get("unit"), ("feet", "meters"), "feet")
        metric = unit == "meters"

        def plan(name, default):
            value = self.parse_number(fields.get(name), default=default)
            return value * FEET_PER_METER if metric else value

        def detail(name, default):
            value = self.parse_number(fields.get(name), default=default)
            return value * FEET_PER_METER if metric else value / 12

        if shape in ("slab", "footing"):
            cubic_feet = plan("length", 20) * plan("width", 10) * detail("thickness", 4)
        elif shape == "column":
            radius = detail("diameter", 12) / 2
            cubic_feet = math.pi * radius ** 2 * plan("height", 8)
        else:
            steps = self.parse_number(fields.get("steps"), default=10)
            step = detail("step_width", 36) * detail("step_depth", 11) * detail("step_height", 7)
            # Step n is n risers tall
            cubic_feet = step * steps * (steps + 1) / 2

        if cubic_feet <= 0:
            self.reject("Please enter valid dimensions!")

        waste = self.parse_number(fields.get("waste_percent"), default=10)
        cubic_feet *= 1 + waste / 100
        if math.isinf(cubic_feet):
            self.reject("The numbers entered are too large to calculate!")
        cubic_yards = cubic_feet / CUBIC_FEET_PER_YARD

        bags = {size: math.ceil(cubic_feet / yield_cu_ft)
                for size, yield_cu_ft in CONCRETE_BAG_YIELD_CU_FT.items()}
        ready_mix_price = self.parse_number(fields.get("ready_mix_price"), default=CONCRETE_READY_MIX_PER_YARD)
        bag_prices = {size: self.parse_number(fields.get(f"bag_{size}_price"), default=price)
                      for size, price in CONCRETE_BAG_PRICES.items()}

        return {
            "shape": shape,
            "cubic_feet": round(cubic_feet, 2),
            "cubic_yards": round(cubic_yards, 2),
            "cubic_meters": round(cubic_feet * CUBIC_METERS_PER_FOOT, 2),
            "bags": {f"{size}lb": count for size, count in bags.items()},
            "estimated_cost": {
                "ready_mix": self.round_money(cubic_yards * ready_mix_price),
                **{f"bags_{size}lb": self.round_money(bags[size] * price)
                   for size, price in bag_prices.items()},
            },
        }


class SubnetCalculator(BaseCalculator):

    PRIVATE_NETWORKS = [
        ipaddress.IPv4Network("10.0.0.0/8"),
        ipaddress.IPv4Network("172.16.0.0/12"),
        ipaddress.IPv4Network("192.168.0.0/16"),
    ]
    LOOPBACK = ipaddress.IPv4Network("127.0.0.0/8")

    def calculate(self, fields: dict) -> dict:
        address = self._address(fields.get("ip_address") or "192.168.1.100", "Invalid IP address format")

        if fields.get("cidr") not in (None, ""):
            prefix = self.parse_int(fields.get("cidr"), default=-1)
            if not 0 <= prefix <= 32:
                self.reject("CIDR notation must be between 0 and 32")
        else:
            mask = self._address(fields.get("subnet_mask") or "255.255.255.0", "Invalid subnet mask format")
            try:
                prefix = ipaddress.IPv4Network(f"0.0.0.0/{mask}").prefixlen
            except ValueError:
                self.reject("Invalid subnet mask format")

        network = ipaddress.IPv4Network(f"{address}/{prefix}", strict=False)
        total = network.num_addresses
        usable = max(0, total - 2)
        first_octet = int(str(address).split(".")[0])

        return {
            "ip_address": str(address),
            "network_address": str(network.network_address),
            "broadcast_address": str(network.broadcast_address),
            "first_usable": str(network.network_address + 1) if usable else None,
            "last_usable": str(network.broadcast_address - 1) if usable else None,
            "total_hosts": total,
            "usable_hosts": usable,
            "subnet_mask": str(network.netmask),
            "wildcard_mask": str(network.hostmask),
            "binary_subnet_mask": ".".join(f"{int(octet):08b}" for octet in str(network.netmask).split(".")),
            "cidr": f"/{prefix}",
            "ip_class": self.address_class(first_octet),
            "ip_type": self.address_type(address),
        }

    def _address(self, value, message: str) -> ipaddress.IPv4Address:
        try:
            return ipaddress.IPv4Address(str(value).strip())
        except ValueError:
            self.reject(message)

    def address_class(self, first_octet: int) -> str:
        if 1 <= first_octet <= 126:
            return "A"
        if 128 <= first_octet <= 191:
            return "B"
        if 192 <= first_octet <= 223:
            return "C"
        if 224 <= first_octet <= 239:
            return "D (Multicast)"
        if first_octet >= 240:
            return "E (Reserved)"
        return "N/A"

    def address_type(self, address: ipaddress.IPv4Address) -> str:
        if any(address in net for net in self.PRIVATE_NETWORKS):
            return "Private"
        if address in self.LOOPBACK:
            return "Loopback"
        return "Public"


class ConversionCalculator(BaseCalculator):

    CATEGORIES = tuple(UNIT_FACTORS) + ("temperature",)
    DEFAULT_UNITS = {"temperature": ("celsius", "fahrenheit")}

    def calculate(self, fields: dict) -> dict:
        category = self.parse_choice(fields.get("category"), self.CATEGORIES, "length")
        value = self.parse_number(fields.get("value"), default=1)
        units = TEMPERATURE_UNITS if category == "temperature" else tuple(UNIT_FACTORS[category])
        default_from, default_to = self.DEFAULT_UNITS.get(category, (units[0], units[1]))
        from_unit = self._unit(fields.get("from_unit"), units, default_from, category)
        to_unit = self._unit(fields.get("to_unit"), units, default_to, category)

        if category == "temperature":
            result = self.from_celsius(self.to_celsius(value, from_unit), to_unit)
            formula = self.temperature_formula(value, from_unit, to_unit, result)
        else:
            factors = UNIT_FACTORS[category]
            ratio = factors[from_unit] / factors[to_unit]
            result = value * ratio
            formula = f"{value:g} × {ratio:.6f} = {result:.6f}"

        return {
            "category": category,
            "from_unit": from_unit,
            "to_unit": to_unit,
            "value": value,
            "result": round(result, 10),
            "formula": formula,
        }

    def _unit(self, value, units, default: str, category: str) -> str:
        if value in (None, ""):
            return default
        for unit in units:
            if unit.lower() == str(value).strip().lower():
                return unit
        self.reject(f"Unknown unit for {category}: {value}")

    def to_celsius(self, value: float, unit: str) -> float:
        if unit == "fahrenheit":
            return (value - 32) * 5 / 9
        if unit == "kelvin":
            return value - 273.15
        return value

    def from_celsius(self, value: float, unit: str) -> float:
        if unit == "fahrenheit":
            return value * 9 / 5 + 32
        if unit == "kelvin":
            return value + 273.15
        return value

    def temperature_formula(self, value, from_unit, to_unit, result) -> str:
        templates = {
            ("celsius", "fahrenheit"): "({v} × 9/5) + 32 = {r:.2f}",
            ("fahrenheit", "celsius"): "({v} - 32) × 5/9 = {r:.2f}",
            ("celsius", "kelvin"): "{v} + 273.15 = {r:.2f}",
            ("kelvin", "celsius"): "{v} - 273.15 = {r:.2f}",
        }
        template = templates.get((from_unit, to_unit), "Conversion: {v} → {r:.6f}")
        return template.format(v=f"{value:g}", r=result)

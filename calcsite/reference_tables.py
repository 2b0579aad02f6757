# Reference tables shared by the calculators: published rates, limits and unit factors

# US CPI-U annual averages (1982-84 = 100)
CPI_BY_YEAR = {
    1990: 130.7,
    1995: 152.4,
    2000: 172.2,
    2005: 195.3,
    2010: 218.1,
    2015: 237.0,
    2020: 258.8,
    2021: 271.0,
    2022: 292.7,
    2023: 304.7,
    2024: 315.2,
}

# 2024 federal income tax brackets: (upper limit of bracket, rate)
TAX_BRACKETS_2024 = {
    "single": [
        (11600, 0.10),
        (47150, 0.12),
        (100525, 0.22),
        (191950, 0.24),
        (243725, 0.32),
        (609350, 0.35),
        (float("inf"), 0.37),
    ],
    "married": [
        (23200, 0.10),
        (94300, 0.12),
        (201050, 0.22),
        (383900, 0.24),
        (487450, 0.32),
        (731200, 0.35),
        (float("inf"), 0.37),
    ],
    "head": [
        (16550, 0.10),
        (63100, 0.12),
        (100500, 0.22),
        (191950, 0.24),
        (243700, 0.32),
        (609350, 0.35),
        (float("inf"), 0.37),
    ],
}

STANDARD_DEDUCTION_2024 = {
    "single": 14600,
    "married": 29200,
    "head": 21900,
}

# FICA, 2024
SOCIAL_SECURITY_RATE = 0.062
SOCIAL_SECURITY_WAGE_BASE = 168600
MEDICARE_RATE = 0.0145
ADDITIONAL_MEDICARE_RATE = 0.009
ADDITIONAL_MEDICARE_THRESHOLD = {
    "single": 200000,
    "married": 250000,
    "head": 200000,
}

# IRS Uniform Lifetime Table, age -> distribution period (years)
UNIFORM_LIFETIME_TABLE = {
    72: 27.4, 73: 26.5, 74: 25.5, 75: 24.6, 76: 23.7, 77: 22.9, 78: 22.0, 79: 21.1,
    80: 20.2, 81: 19.4, 82: 18.5, 83: 17.7, 84: 16.8, 85: 16.0, 86: 15.2, 87: 14.4,
    88: 13.7, 89: 12.9, 90: 12.2, 91: 11.5, 92: 10.8, 93: 10.1, 94: 9.5, 95: 8.9,
    96: 8.4, 97: 7.8, 98: 7.3, 99: 6.8, 100: 6.4, 101: 6.0, 102: 5.6, 103: 5.2,
    104: 4.9, 105: 4.6, 106: 4.3, 107: 4.1, 108: 3.9, 109: 3.7, 110: 3.5,
    111: 3.4, 112: 3.3, 113: 3.1, 114: 3.0, 115: 2.9, 116: 2.8, 117: 2.7, 118: 2.5,
    119: 2.3, 120: 2.0,
}
RMD_START_AGE = 72
RMD_FLOOR_PERIOD = 2.0  # ages past the end of the table

# IRA contribution limits, 2024
IRA_CONTRIBUTION_LIMIT = 7000
IRA_CATCH_UP_LIMIT = 8000
IRA_CATCH_UP_AGE = 50

# Average published annual cost of attendance
COLLEGE_ANNUAL_COST = {
    "public-4-year-instate": 29910,
    "public-4-year-outstate": 49080,
    "private-4-year": 62990,
    "public-2-year": 20570,
}

# Letter grade → (4.0 scale points, 5.0 scale points)
GRADE_POINTS = {
    "A+": (4.0, 5.0),
    "A": (4.0, 5.0),
    "A-": (3.7, 4.7),
    "B+": (3.3, 4.3),
    "B": (3.0, 4.0),
    "B-": (2.7, 3.7),
    "C+": (2.3, 3.3),
    "C": (2.0, 3.0),
    "C-": (1.7, 2.7),
    "D+": (1.3, 2.3),
    "D": (1.0, 2.0),
    "D-": (0.7, 1.7),
    "F": (0.0, 0.0),
}

# Percentage cutoffs for course letter grades, highest first
LETTER_GRADE_CUTOFFS = [
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
]

# Race distances in kilometres
RACE_DISTANCES_KM = {
    "5K": 5.0,
    "10K": 10.0,
    "Half Marathon": 21.0975,
    "Marathon": 42.195,
}
KM_PER_MILE = 1.60934
METERS_PER_MILE = 1609.34

# Unit conversion factors: multiply by the factor to reach the category's base unit
# (length: meters, weight: kilograms, area: m², volume: liters, speed: m/s,
#  time: seconds, data: bytes). Temperature is handled separately.
UNIT_FACTORS = {
    "length": {
        "meters": 1.0,
        "kilometers": 1000.0,
        "centimeters": 0.01,
        "millimeters": 0.001,
        "miles": 1609.344,
        "yards": 0.9144,
        "feet": 0.3048,
        "inches": 0.0254,
    },
    "weight": {
        "kilograms": 1.0,
        "grams": 0.001,
        "milligrams": 0.000001,
        "pounds": 0.453592,
        "ounces": 0.0283495,
        "tons": 1000.0,
    },
    "area": {
        "squareMeters": 1.0,
        "squareKilometers": 1000000.0,
        "squareFeet": 0.092903,
        "squareYards": 0.836127,
        "acres": 4046.86,
        "hectares": 10000.0,
    },
    "volume": {
        "liters": 1.0,
        "milliliters": 0.001,
        "gallons": 3.78541,
        "quarts": 0.946353,
        "pints": 0.473176,
        "cups": 0.236588,
        "cubicMeters": 1000.0,
    },
    "speed": {
        "metersPerSecond": 1.0,
        "kilometersPerHour": 1 / 3.6,
        "milesPerHour": 0.44704,
        "knots": 0.514444,
    },
    "time": {
        "seconds": 1.0,
        "minutes": 60.0,
        "hours": 3600.0,
        "days": 86400.0,
        "weeks": 604800.0,
        "months": 2592000.0,    # 30 days
        "years": 31536000.0,    # 365 days
    },
    "data": {
        "bytes": 1.0,
        "kilobytes": 1024.0,
        "megabytes": 1048576.0,
        "gigabytes": 1073741824.0,
        "terabytes": 1099511627776.0,
    },
}
TEMPERATURE_UNITS = ("celsius", "fahrenheit", "kelvin")

# Concrete: yield per bag (ft³) and default prices
CONCRETE_BAG_YIELD_CU_FT = {
    80: 0.6,
    60: 0.45,
    40: 0.3,
}
CONCRETE_READY_MIX_PER_YARD = 125.0
CONCRETE_BAG_PRICES = {
    80: 5.0,
    60: 4.0,
}

# Compounding / payment frequencies, periods per year
PERIODS_PER_YEAR = {
    "annually": 1,
    "yearly": 1,
    "semiannually": 2,
    "quarterly": 4,
    "monthly": 12,
    "semimonthly": 24,
    "biweekly": 26,
    "weekly": 52,
    "daily": 365,
}
CONTINUOUS = "continuously"

"""
Site catalog: every calculator's title, category and blurb, plus the
informational pages. Drives the listing endpoints and the sitemap.
"""

from dataclasses import asdict, dataclass

FINANCIAL = "Financial"
HEALTH = "Health & Fitness"
MATH = "Math"
DATE_TIME = "Date & Time"
OTHER = "Other"
PREDICTION_MARKETS = "Prediction Markets"

CATEGORIES = [FINANCIAL, HEALTH, MATH, DATE_TIME, OTHER, PREDICTION_MARKETS]

INFO_PAGES = ["about", "contact", "privacy", "terms", "sitemap"]

# Featured on the home page
POPULAR_SLUGS = ["bmi", "mortgage", "percentage"]


@dataclass(frozen=True)
class CatalogEntry:
    slug: str
    title: str
    category: str
    description: str

    def to_dict(self) -> dict:
        return asdict(self)


_ENTRIES = [
    # Loans and debt
    ("mortgage", "Mortgage Calculator", FINANCIAL, "Plan your home loan payments with taxes, insurance and extra payments"),
    ("loan", "Loan Calculator", FINANCIAL, "Payments for amortized, deferred and bond loans"),
    ("auto-loan", "Auto Loan Calculator", FINANCIAL, "Monthly car payment including trade-in, fees and sales tax"),
    ("student-loan", "Student Loan Calculator", FINANCIAL, "Repayment plan and the effect of extra payments"),
    ("personal-loan", "Personal Loan Calculator", FINANCIAL, "Payment, total cost and real APR with origination fees"),
    ("business-loan", "Business Loan Calculator", FINANCIAL, "Business loan payments, fees and effective APR"),
    ("amortization", "Amortization Calculator", FINANCIAL, "Full amortization schedule with extra payments"),
    ("refinance", "Refinance Calculator", FINANCIAL, "Compare your current loan against a refinance"),
    ("debt-payoff", "Debt Payoff Calculator", FINANCIAL, "Avalanche payoff plan across several debts"),
    ("debt-consolidation", "Debt Consolidation Calculator", FINANCIAL, "Is rolling your debts into one loan worth it?"),
    ("credit-card", "Credit Card Calculator", FINANCIAL, "How long to pay off a card balance, or what to pay monthly"),
    # Investment and retirement
    ("retirement", "Retirement Calculator", FINANCIAL, "How much you need, how much to save, and how long it lasts"),
    ("401k", "401K Calculator", FINANCIAL, "401(k) balance at retirement with employer match"),
    ("ira", "IRA Calculator", FINANCIAL, "Compare a traditional IRA with a taxable account"),
    ("roth-ira", "Roth IRA Calculator", FINANCIAL, "Tax-free Roth IRA growth versus a taxable account"),
    ("investment", "Investment Calculator", FINANCIAL, "Growth of an investment with regular contributions"),
    ("roi", "ROI Calculator", FINANCIAL, "Return on investment and annualized return"),
    ("rmd", "RMD Calculator", FINANCIAL, "Required minimum distributions from retirement accounts"),
    ("social-security", "Social Security Calculator", FINANCIAL, "When to claim Social Security benefits"),
    ("savings", "Savings Calculator", FINANCIAL, "Grow your savings with deposits and compound interest"),
    ("cd", "CD Calculator", FINANCIAL, "Certificate of deposit value at maturity"),
    ("college-cost", "College Cost Calculator", FINANCIAL, "Future college costs and the savings needed"),
    ("present-value", "Present Value Calculator", FINANCIAL, "What a future amount is worth today"),
    ("future-value", "Future Value Calculator", FINANCIAL, "What money today is worth in the future"),
    # Interest and finance
    ("interest", "Interest Calculator", FINANCIAL, "Compound interest with contributions, tax and inflation"),
    ("compound-interest", "Compound Interest Calculator", FINANCIAL, "Compound growth at any compounding frequency"),
    ("simple-interest", "Simple Interest Calculator", FINANCIAL, "Simple interest over years, months or days"),
    ("interest-rate", "Interest Rate Calculator", FINANCIAL, "Find the rate behind a loan payment"),
    ("apr", "APR Calculator", FINANCIAL, "Real annual percentage rate including fees"),
    ("finance", "Finance Calculator", FINANCIAL, "Time value of money: solve for FV, PV, PMT, N or I/Y"),
    ("payment", "Payment Calculator", FINANCIAL, "Monthly payment or loan term for a loan"),
    ("inflation", "Inflation Calculator", FINANCIAL, "Buying power over time from CPI data"),
    # Tax, income and spending
    ("income-tax", "Income Tax Calculator", FINANCIAL, "Federal, state and FICA taxes on your income"),
    ("sales-tax", "Sales Tax Calculator", FINANCIAL, "Add, remove or find the sales tax on a price"),
    ("salary", "Salary Calculator", FINANCIAL, "Convert pay between hourly, weekly, monthly and annual"),
    ("house-affordability", "House Affordability Calculator", FINANCIAL, "How much house you can afford"),
    ("rent", "Rent Calculator", FINANCIAL, "How much rent you can afford on your income"),
    ("down-payment", "Down Payment Calculator", FINANCIAL, "Down payment, closing costs and the loan amount"),
    ("budget", "Budget Calculator", FINANCIAL, "Monthly budget by expense category"),
    ("commission", "Commission Calculator", FINANCIAL, "Flat or tiered sales commission"),
    ("discount", "Discount Calculator", FINANCIAL, "Sale price after a percent or fixed discount"),
    # Prediction markets
    ("polymarket-ev", "Polymarket EV Calculator", PREDICTION_MARKETS, "Expected value of a prediction market position"),
    ("polymarket-arbitrage", "Polymarket Arbitrage Calculator", PREDICTION_MARKETS, "Lock in profit when YES plus NO costs less than $1"),
    ("polymarket-kelly", "Kelly Criterion Calculator", PREDICTION_MARKETS, "Optimal bet size for your edge"),
    ("polymarket-probability", "Implied Probability Calculator", PREDICTION_MARKETS, "Convert share prices to probabilities and odds"),
    # Health and fitness
    ("bmi", "BMI Calculator", HEALTH, "Calculate your Body Mass Index instantly"),
    ("calorie", "Calorie Calculator", HEALTH, "Daily calories to maintain, lose or gain weight"),
    ("body-fat", "Body Fat Calculator", HEALTH, "Body fat percentage by the US Navy method"),
    ("bmr", "BMR Calculator", HEALTH, "Basal metabolic rate and daily calorie needs"),
    ("ideal-weight", "Ideal Weight Calculator", HEALTH, "Ideal body weight by four popular formulas"),
    ("pace", "Pace Calculator", HEALTH, "Running pace, speed and race time predictions"),
    ("conception", "Conception Calculator", HEALTH, "Estimate when conception happened"),
    ("due-date", "Due Date Calculator", HEALTH, "Estimated due date and pregnancy milestones"),
    # Math
    ("scientific", "Scientific Calculator", MATH, "Trigonometry, logarithms, powers and more"),
    ("fraction", "Fraction Calculator", MATH, "Add, subtract, multiply and divide fractions"),
    ("percentage", "Percentage Calculator", MATH, "Quick percentage calculations"),
    ("random-number", "Random Number Generator", MATH, "Random numbers in a range, with or without repeats"),
    ("triangle", "Triangle Calculator", MATH, "Solve a triangle from sides and angles"),
    ("standard-deviation", "Standard Deviation Calculator", MATH, "Mean, variance and standard deviation of a data set"),
    # Date and time
    ("age", "Age Calculator", DATE_TIME, "Your exact age and your next birthday"),
    ("date", "Date Calculator", DATE_TIME, "Add to a date or count the days between dates"),
    ("time", "Time Calculator", DATE_TIME, "Add, subtract and convert durations"),
    ("hours", "Hours Calculator", DATE_TIME, "Timesheet hours, overtime and pay"),
    # Other
    ("gpa", "GPA Calculator", OTHER, "Grade point average from your courses"),
    ("grade", "Grade Calculator", OTHER, "Current grade and what you need on the final"),
    ("concrete", "Concrete Calculator", OTHER, "Concrete volume, bags and cost"),
    ("subnet", "Subnet Calculator", OTHER, "IPv4 network, broadcast and host range"),
    ("password", "Password Generator", OTHER, "Strong random passwords"),
    ("conversion", "Conversion Calculator", OTHER, "Convert length, weight, temperature and more"),
]

CATALOG: dict[str, CatalogEntry] = {slug: CatalogEntry(slug, *rest) for slug, *rest in _ENTRIES}


def get_entry(slug: str) -> CatalogEntry:
    """Returns the catalog entry for a slug, or raises ValueError."""
    if slug not in CATALOG:
        raise ValueError(f"Unknown calculator: {slug}")
    return CATALOG[slug]


def list_entries(category: str = None) -> list[CatalogEntry]:
    if category is None:
        return list(CATALOG.values())
    return [entry for entry in CATALOG.values() if entry.category == category]


def search(query: str) -> list[CatalogEntry]:
    """Case-insensitive match on title, slug or category, like the home page search box."""
    needle = (query or "").strip().lower()
    if not needle:
        return list_entries()
    return [
        entry for entry in CATALOG.values()
        if needle in entry.title.lower() or needle in entry.slug or needle in entry.category.lower()
    ]


def grouped() -> list[dict]:
    """Categories in site order, each with its calculators. Empty categories are left out."""
    groups = []
    for category in CATEGORIES:
        entries = list_entries(category)
        if entries:
            groups.append({"category": category, "calculators": [e.to_dict() for e in entries]})
    return groups


def sitemap_entries(base_url: str) -> list[str]:
    """Absolute URLs of the home page, every calculator and the info pages."""
    base = base_url.rstrip("/")
    urls = [base + "/"]
    urls += [f"{base}/{slug}" for slug in CATALOG]
    urls += [f"{base}/{page}" for page in INFO_PAGES]
    return urls

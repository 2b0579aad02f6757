"""
Calculator registry: maps page slugs to calculator classes.
"""

from .base import BaseCalculator
from .dates import AgeCalculator, DateCalculator, HoursCalculator, TimeCalculator
from .debt import CreditCardCalculator, DebtConsolidationCalculator, DebtPayoffCalculator
from .health import (
    BmiCalculator,
    BmrCalculator,
    BodyFatCalculator,
    CalorieCalculator,
    IdealWeightCalculator,
    PaceCalculator,
)
from .housing import DownPaymentCalculator, HouseAffordabilityCalculator, RentCalculator
from .income import (
    BudgetCalculator,
    CommissionCalculator,
    DiscountCalculator,
    IncomeTaxCalculator,
    SalaryCalculator,
    SalesTaxCalculator,
)
from .interest import (
    CdCalculator,
    CompoundInterestCalculator,
    FinanceCalculator,
    FutureValueCalculator,
    InflationCalculator,
    InterestCalculator,
    PresentValueCalculator,
    SavingsCalculator,
    SimpleInterestCalculator,
)
from .investing import (
    CollegeCostCalculator,
    IraCalculator,
    InvestmentCalculator,
    Retirement401kCalculator,
    RetirementCalculator,
    RmdCalculator,
    RoiCalculator,
    RothIraCalculator,
    SocialSecurityCalculator,
)
from .loans import (
    AmortizationCalculator,
    AprCalculator,
    AutoLoanCalculator,
    BusinessLoanCalculator,
    InterestRateCalculator,
    LoanCalculator,
    MortgageCalculator,
    PaymentCalculator,
    PersonalLoanCalculator,
    RefinanceCalculator,
    StudentLoanCalculator,
)
from .math_tools import (
    FractionCalculator,
    PercentageCalculator,
    RandomNumberCalculator,
    ScientificCalculator,
    StandardDeviationCalculator,
    TriangleCalculator,
)
from .prediction_markets import (
    PolymarketArbitrageCalculator,
    PolymarketEvCalculator,
    PolymarketKellyCalculator,
    PolymarketProbabilityCalculator,
)
from .pregnancy import ConceptionCalculator, DueDateCalculator
from .utilities import (
    ConcreteCalculator,
    ConversionCalculator,
    GpaCalculator,
    GradeCalculator,
    PasswordCalculator,
    SubnetCalculator,
)

CALCULATOR_REGISTRY: dict[str, type] = {
    # Loans
    "mortgage": MortgageCalculator,
    "loan": LoanCalculator,
    "auto-loan": AutoLoanCalculator,
    "student-loan": StudentLoanCalculator,
    "personal-loan": PersonalLoanCalculator,
    "business-loan": BusinessLoanCalculator,
    "amortization": AmortizationCalculator,
    "refinance": RefinanceCalculator,
    "payment": PaymentCalculator,
    "apr": AprCalculator,
    "interest-rate": InterestRateCalculator,
    # Debt
    "debt-payoff": DebtPayoffCalculator,
    "debt-consolidation": DebtConsolidationCalculator,
    "credit-card": CreditCardCalculator,
    # Interest and time value of money
    "interest": InterestCalculator,
    "compound-interest": CompoundInterestCalculator,
    "simple-interest": SimpleInterestCalculator,
    "cd": CdCalculator,
    "savings": SavingsCalculator,
    "future-value": FutureValueCalculator,
    "present-value": PresentValueCalculator,
    "finance": FinanceCalculator,
    "inflation": InflationCalculator,
    # Investing and retirement
    "investment": InvestmentCalculator,
    "roi": RoiCalculator,
    "401k": Retirement401kCalculator,
    "ira": IraCalculator,
    "roth-ira": RothIraCalculator,
    "rmd": RmdCalculator,
    "retirement": RetirementCalculator,
    "social-security": SocialSecurityCalculator,
    "college-cost": CollegeCostCalculator,
    # Housing
    "house-affordability": HouseAffordabilityCalculator,
    "rent": RentCalculator,
    "down-payment": DownPaymentCalculator,
    # Income and spending
    "income-tax": IncomeTaxCalculator,
    "sales-tax": SalesTaxCalculator,
    "salary": SalaryCalculator,
    "budget": BudgetCalculator,
    "commission": CommissionCalculator,
    "discount": DiscountCalculator,
    # Prediction markets
    "polymarket-probability": PolymarketProbabilityCalculator,
    "polymarket-ev": PolymarketEvCalculator,
    "polymarket-kelly": PolymarketKellyCalculator,
    "polymarket-arbitrage": PolymarketArbitrageCalculator,
    # Health and fitness
    "bmi": BmiCalculator,
    "bmr": BmrCalculator,
    "calorie": CalorieCalculator,
    "body-fat": BodyFatCalculator,
    "ideal-weight": IdealWeightCalculator,
    "pace": PaceCalculator,
    "conception": ConceptionCalculator,
    "due-date": DueDateCalculator,
    # Math
    "fraction": FractionCalculator,
    "percentage": PercentageCalculator,
    "random-number": RandomNumberCalculator,
    "triangle": TriangleCalculator,
    "standard-deviation": StandardDeviationCalculator,
    "scientific": ScientificCalculator,
    # Date and time
    "age": AgeCalculator,
    "date": DateCalculator,
    "time": TimeCalculator,
    "hours": HoursCalculator,
    # Other
    "password": PasswordCalculator,
    "gpa": GpaCalculator,
    "grade": GradeCalculator,
    "concrete": ConcreteCalculator,
    "subnet": SubnetCalculator,
    "conversion": ConversionCalculator,
}


def get_calculator(slug: str) -> BaseCalculator:
    """Returns an instance of the calculator for a slug, or raises ValueError."""
    if slug not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for slug: {slug}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[slug]()


def has_calculator(slug: str) -> bool:
    """Check if a calculator exists for a slug."""
    return slug in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator slugs."""
    return list(CALCULATOR_REGISTRY.keys())

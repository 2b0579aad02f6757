"""
Prediction market calculators. A YES share costs `price` dollars and pays $1
if the event happens, so the price doubles as the market's implied probability.
"""

import logging
import math
import re

from .base import BaseCalculator

logger = logging.getLogger(__name__)

MIN_PRICE = 0.01
MAX_PRICE = 0.99


def clamp_price(value: float) -> float:
    return min(max(value, MIN_PRICE), MAX_PRICE)


def kelly_fraction(price: float, probability: float) -> float:
    """Full Kelly stake as a fraction of bankroll for buying YES at `price`."""
    b = (1 - price) / price
    return (b * probability - (1 - probability)) / b


class PolymarketProbabilityCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        mode = self.parse_choice(fields.get("mode"), ("priceToProb", "probToPrice"), "priceToProb")
        if mode == "priceToProb":
            price = clamp_price(self.parse_positive(fields.get("market_price"), default=0.65))
        else:
            probability = self.parse_positive(fields.get("probability"), default=65)
            price = clamp_price(probability / 100)

        result = {"mode": mode, **self.price_summary(price)}
        result["batch"] = [
            {**self.price_summary(p), "fair_value": f"${p:.2f}"}
            for p in self._batch_prices(fields.get("batch"))
        ]
        return result

    def price_summary(self, price: float) -> dict:
        numerator = round((1 - price) * 100)
        denominator = round(price * 100)
        divisor = math.gcd(numerator, denominator) or 1
        implied = price * 100
        return {
            "price": round(price, 4),
            "implied_probability": round(implied, 2),
            "fractional_odds": f"{numerator // divisor}/{denominator // divisor}",
            "decimal_odds": round(1 / price, 4),
            "no_side_probability": round(100 - implied, 2),
            "break_even_win_rate": round(implied, 2),
        }

    def _batch_prices(self, value) -> list:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            parts = value
        else:
            parts = re.split(r"[,\n]+", str(value))
        prices = [self.parse_number(p, default=None) for p in parts]
        return [p for p in prices if p is not None and MIN_PRICE <= p <= MAX_PRICE]


class PolymarketEvCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        price = clamp_price(self.parse_positive(fields.get("market_price"), default=0.65))
        probability = clamp_price(self.parse_positive(fields.get("true_probability"), default=0.75))
        size = self.parse_positive(fields.get("position_size"), default=100)

        shares = size / price
        profit = shares * (1 - price)
        ev = probability * profit - (1 - probability) * size
        return {
            "shares": round(shares, 4),
            "profit_if_yes": self.round_money(profit),
            "loss_if_no": self.round_money(size),
            "roi_if_wins": round((1 - price) / price * 100, 2),
            "expected_value": self.round_money(ev),
            "edge": round((probability - price) * 100, 2),
            "kelly_fraction": round(max(0.0, kelly_fraction(price, probability)) * 100, 2),
        }


class PolymarketKellyCalculator(BaseCalculator):

    def calculate(self, fields: dict) -> dict:
        bankroll = self.parse_positive(fields.get("bankroll"), default=10000)
        price = clamp_price(self.parse_positive(fields.get("market_price"), default=0.60))
        p = clamp_price(self.parse_positive(fields.get("true_probability"), default=0.70))

        b = (1 - price) / price
        fraction = kelly_fraction(price, p)
        has_edge = fraction > 0
        full_bet = fraction * bankroll if has_edge else 0.0
        growth = 0.0
        if has_edge and fraction < 1:
            growth = p * math.log(1 + fraction * b) + (1 - p) * math.log(1 - fraction)

        return {
            "odds": round(b, 4),
            "kelly_fraction": round(fraction * 100, 2),
            "has_edge": has_edge,
            "full_kelly_bet": self.round_money(full_bet),
            "half_kelly_bet": self.round_money(full_bet / 2),
            "quarter_kelly_bet": self.round_money(full_bet / 4),
            "edge": round((p - price) * 100, 2),
            "expected_growth_rate": round(growth, 6),
        }


class PolymarketArbitrageCalculator(BaseCalculator):
    """Buying both sides for less than $1 total locks in a profit either way."""

    def calculate(self, fields: dict) -> dict:
        yes = self.parse_positive(fields.get("yes_price"), default=0.52)
        no = self.parse_positive(fields.get("no_price"), default=0.52)
        investment = self.parse_positive(fields.get("investment"), default=1000)

        if yes <= 0 or no <= 0 or yes >= 1 or no >= 1:
            self.reject("Prices must be between 0 and 1!")

        total = yes + no
        yes_allocation = investment * yes / total
        no_allocation = investment * no / total
        payout = investment / total
        return {
            "total_cost": round(total, 4),
            "has_arbitrage": total < 1.0,
            "yes_allocation": self.round_money(yes_allocation),
            "no_allocation": self.round_money(no_allocation),
            "yes_shares": round(yes_allocation / yes, 4),
            "no_shares": round(no_allocation / no, 4),
            "guaranteed_payout": self.round_money(payout),
            "guaranteed_profit": self.round_money(payout - investment),
            "roi": round((1 / total - 1) * 100, 2),
        }

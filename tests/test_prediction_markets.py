"""
Prediction market calculator tests.

Tests:
1-2. Implied probability
3.   Expected value
4-5. Kelly criterion
6-7. Arbitrage
"""

import pytest

from calcsite.calculators.base import CalculatorInputError
from calcsite.calculators.prediction_markets import (
    PolymarketArbitrageCalculator,
    PolymarketEvCalculator,
    PolymarketKellyCalculator,
    PolymarketProbabilityCalculator,
    clamp_price,
)


# ============================================================
# Implied probability
# ============================================================

def test_probability_from_price():
    result = PolymarketProbabilityCalculator().calculate({"market_price": 0.65})
    assert result["implied_probability"] == 65.0
    assert result["fractional_odds"] == "7/13"
    assert result["decimal_odds"] == pytest.approx(1.5385, abs=0.0001)
    assert result["no_side_probability"] == 35.0


def test_probability_batch_skips_out_of_range_prices():
    result = PolymarketProbabilityCalculator().calculate({"market_price": 0.5, "batch": "0.25, 0.5\n2"})
    assert [row["price"] for row in result["batch"]] == [0.25, 0.5]
    assert result["batch"][0]["fair_value"] == "$0.25"
    assert clamp_price(1.5) == 0.99
    assert clamp_price(0) == 0.01


# ============================================================
# Expected value
# ============================================================

def test_ev_positive_edge():
    result = PolymarketEvCalculator().calculate({
        "market_price": 0.5, "true_probability": 0.6, "position_size": 100,
    })
    assert result["shares"] == 200
    assert result["profit_if_yes"] == 100
    assert result["expected_value"] == pytest.approx(20, abs=0.01)
    assert result["edge"] == pytest.approx(10.0)
    assert result["kelly_fraction"] == pytest.approx(20.0)


# ============================================================
# Kelly criterion
# ============================================================

def test_kelly_bet_sizes():
    result = PolymarketKellyCalculator().calculate({
        "bankroll": 1000, "market_price": 0.5, "true_probability": 0.6,
    })
    assert result["has_edge"] is True
    assert result["full_kelly_bet"] == pytest.approx(200, abs=0.01)
    assert result["half_kelly_bet"] == pytest.approx(100, abs=0.01)
    assert result["expected_growth_rate"] > 0


def test_kelly_without_edge_bets_nothing():
    result = PolymarketKellyCalculator().calculate({
        "bankroll": 1000, "market_price": 0.5, "true_probability": 0.4,
    })
    assert result["has_edge"] is False
    assert result["full_kelly_bet"] == 0


# ============================================================
# Arbitrage
# ============================================================

def test_arbitrage_locks_in_profit():
    result = PolymarketArbitrageCalculator().calculate({
        "yes_price": 0.45, "no_price": 0.5, "investment": 950,
    })
    assert result["has_arbitrage"] is True
    assert result["guaranteed_payout"] == pytest.approx(1000, abs=0.01)
    assert result["guaranteed_profit"] == pytest.approx(50, abs=0.01)
    assert result["roi"] == pytest.approx(5.26, abs=0.01)


def test_arbitrage_rejects_prices_outside_unit_interval():
    with pytest.raises(CalculatorInputError, match="between 0 and 1"):
        PolymarketArbitrageCalculator().calculate({"yes_price": 1.2, "no_price": 0.5})

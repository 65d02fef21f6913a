"""Tests for the pure portfolio valuation functions."""

import pytest
from decimal import Decimal

from conftest import make_investment
from finledger.engine import diversification_score, normalize_prices, value_portfolio
from finledger.models import InvestmentType


class TestValuePortfolio:
    """Tests for value_portfolio."""

    def test_empty_portfolio(self):
        analytics = value_portfolio([])
        assert analytics.total_value == Decimal("0")
        assert analytics.total_gain_loss_percentage == 0.0
        assert analytics.best_performer is None
        assert analytics.worst_performer is None
        assert analytics.diversification_score == 0.0

    def test_totals_and_performers(self):
        winner = make_investment("WIN", current_price=150)
        loser = make_investment("LOSE", current_price=50, investment_type=InvestmentType.CRYPTO)
        analytics = value_portfolio([winner, loser])

        assert analytics.total_value == Decimal("2000")
        assert analytics.total_cost == Decimal("2000")
        assert analytics.total_gain_loss == Decimal("0")
        assert analytics.total_gain_loss_percentage == 0.0
        assert analytics.best_performer.symbol == "WIN"
        assert analytics.worst_performer.symbol == "LOSE"
        assert analytics.type_breakdown == {
            InvestmentType.STOCK: Decimal("1500"),
            InvestmentType.CRYPTO: Decimal("500"),
        }

    def test_zero_cost_portfolio(self):
        analytics = value_portfolio([make_investment("FREE", purchase_price=0, current_price=10)])
        assert analytics.total_gain_loss == Decimal("100")
        assert analytics.total_gain_loss_percentage == 0.0

    def test_price_overrides_do_not_mutate(self):
        holding = make_investment("AAPL")
        analytics = value_portfolio([holding], {"AAPL": Decimal("110")})
        assert analytics.total_gain_loss_percentage == pytest.approx(10.0)
        assert holding.current_price == Decimal("100")


class TestDiversification:
    """Tests for diversification_score."""

    def test_one_type(self):
        score = diversification_score([make_investment("A"), make_investment("B")])
        assert score == pytest.approx(100 / len(InvestmentType))

    def test_every_type(self):
        holdings = [make_investment(t.value.upper(), investment_type=t) for t in InvestmentType]
        assert diversification_score(holdings) == pytest.approx(100.0)


class TestNormalizePrices:
    """Tests for normalize_prices."""

    def test_keys_uppercased_and_prices_decimal(self):
        assert normalize_prices({" brk.b ": 401.25}) == {"BRK.B": Decimal("401.25")}

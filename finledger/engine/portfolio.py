"""
Portfolio Valuation

Pure functions over a list of holdings. Nothing here mutates an
Investment or touches storage, so these are safe to call from any
thread at any time.

Price overrides let callers value the portfolio at hypothetical prices
(e.g. a fresh quote batch) without writing those prices back.
"""

from decimal import Decimal
from typing import Mapping, Optional, Sequence

from finledger.models.investment import Investment, InvestmentType, PortfolioAnalytics


def normalize_prices(prices: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """Key a symbol -> price map the way Investment stores symbols (trimmed, uppercase)."""
    return {symbol.strip().upper(): Decimal(str(price)) for symbol, price in prices.items()}


def _priced(
    investments: Sequence[Investment],
    price_overrides: Optional[Mapping[str, Decimal]],
) -> list[Investment]:
    if not price_overrides:
        return list(investments)
    prices = normalize_prices(price_overrides)
    return [
        inv.model_copy(update={"current_price": prices[inv.symbol]})
        if inv.symbol in prices
        else inv
        for inv in investments
    ]


def value_portfolio(
    investments: Sequence[Investment],
    price_overrides: Optional[Mapping[str, Decimal]] = None,
) -> PortfolioAnalytics:
    """
    Compute portfolio-level metrics.

    Args:
        investments: Current holdings
        price_overrides: Optional symbol -> price map used instead of
            each holding's current_price

    Returns:
        PortfolioAnalytics. Best/worst performer are None for an empty
        portfolio; percentages are 0 when total cost is not positive.
    """
    holdings = _priced(investments, price_overrides)

    total_value = sum((inv.total_value for inv in holdings), Decimal("0"))
    total_cost = sum((inv.total_cost for inv in holdings), Decimal("0"))
    total_gain_loss = total_value - total_cost
    total_gain_loss_percentage = (
        float(total_gain_loss / total_cost * 100) if total_cost > 0 else 0.0
    )

    type_breakdown: dict[InvestmentType, Decimal] = {}
    for inv in holdings:
        type_breakdown[inv.type] = type_breakdown.get(inv.type, Decimal("0")) + inv.total_value

    best = max(holdings, key=lambda inv: inv.gain_loss_percentage, default=None)
    worst = min(holdings, key=lambda inv: inv.gain_loss_percentage, default=None)

    return PortfolioAnalytics(
        total_value=total_value,
        total_cost=total_cost,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percentage=total_gain_loss_percentage,
        best_performer=best,
        worst_performer=worst,
        type_breakdown=type_breakdown,
        diversification_score=diversification_score(holdings),
    )


def diversification_score(investments: Sequence[Investment]) -> float:
    """Percentage of all investment types represented in the portfolio."""
    present = {inv.type for inv in investments}
    return len(present) / len(InvestmentType) * 100


def top_performers(investments: Sequence[Investment], n: int = 3) -> list[Investment]:
    return sorted(investments, key=lambda inv: inv.gain_loss_percentage, reverse=True)[:n]


def recent_activity(investments: Sequence[Investment], n: int = 5) -> list[Investment]:
    return sorted(investments, key=lambda inv: inv.purchase_date, reverse=True)[:n]

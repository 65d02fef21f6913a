"""
Engine Package

The ledger, budget engine, alert generator and portfolio valuator.
"""

from finledger.engine.alerts import AlertGenerator
from finledger.engine.budget import BudgetEngine, project_spent
from finledger.engine.ledger import LedgerEngine
from finledger.engine.portfolio import (
    diversification_score,
    normalize_prices,
    recent_activity,
    top_performers,
    value_portfolio,
)

__all__ = [
    "AlertGenerator",
    "BudgetEngine",
    "LedgerEngine",
    "diversification_score",
    "normalize_prices",
    "project_spent",
    "recent_activity",
    "top_performers",
    "value_portfolio",
]

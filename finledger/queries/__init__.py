"""List filtering and sorting for the presentation layer."""

from finledger.queries.listing import (
    BudgetSortOption,
    ExpenseSortOption,
    InvestmentSortOption,
    filter_budgets,
    filter_expenses,
    filter_investments,
)

__all__ = [
    "BudgetSortOption",
    "ExpenseSortOption",
    "InvestmentSortOption",
    "filter_budgets",
    "filter_expenses",
    "filter_investments",
]

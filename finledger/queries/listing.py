"""
Listing Queries

Filter, search and sort helpers for the presentation layer's lists.
They run over snapshots returned by the engines (list_expenses(),
list_budgets(), list_investments()) and never touch engine state.

Search is case-insensitive substring matching over the displayed text
fields.
"""

from enum import Enum
from typing import Optional, Sequence

from finledger.models.budget import Budget, BudgetPeriod
from finledger.models.expense import Expense, ExpenseCategory
from finledger.models.investment import Investment, InvestmentType


class ExpenseSortOption(str, Enum):
    DATE_DESCENDING = "date_descending"
    DATE_ASCENDING = "date_ascending"
    AMOUNT_DESCENDING = "amount_descending"
    AMOUNT_ASCENDING = "amount_ascending"
    TITLE_ASCENDING = "title_ascending"
    TITLE_DESCENDING = "title_descending"
    CATEGORY = "category"


class BudgetSortOption(str, Enum):
    PERCENTAGE_USED = "percentage_used"
    REMAINING = "remaining"
    SPENT = "spent"
    LIMIT = "limit"
    END_DATE = "end_date"
    NAME = "name"
    CATEGORY = "category"
    STATUS = "status"


class InvestmentSortOption(str, Enum):
    GAIN_LOSS_PERCENTAGE = "gain_loss_percentage"
    GAIN_LOSS_AMOUNT = "gain_loss_amount"
    TOTAL_VALUE = "total_value"
    SYMBOL = "symbol"
    NAME = "name"
    PURCHASE_DATE = "purchase_date"
    TYPE = "type"


def _matches(search: Optional[str], *fields: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(field and needle in field.lower() for field in fields)


# (key, reverse) per sort option
_EXPENSE_SORTS = {
    ExpenseSortOption.DATE_DESCENDING: (lambda e: e.date, True),
    ExpenseSortOption.DATE_ASCENDING: (lambda e: e.date, False),
    ExpenseSortOption.AMOUNT_DESCENDING: (lambda e: e.amount, True),
    ExpenseSortOption.AMOUNT_ASCENDING: (lambda e: e.amount, False),
    ExpenseSortOption.TITLE_ASCENDING: (lambda e: e.title, False),
    ExpenseSortOption.TITLE_DESCENDING: (lambda e: e.title, True),
    ExpenseSortOption.CATEGORY: (lambda e: e.category.value, False),
}

_BUDGET_SORTS = {
    BudgetSortOption.PERCENTAGE_USED: (lambda b: b.percentage_used, True),
    BudgetSortOption.REMAINING: (lambda b: b.remaining, True),
    BudgetSortOption.SPENT: (lambda b: b.spent, True),
    BudgetSortOption.LIMIT: (lambda b: b.limit, True),
    BudgetSortOption.END_DATE: (lambda b: b.end_date, False),
    BudgetSortOption.NAME: (lambda b: b.name, False),
    BudgetSortOption.CATEGORY: (lambda b: b.category.value, False),
    BudgetSortOption.STATUS: (lambda b: b.status.value, False),
}

_INVESTMENT_SORTS = {
    InvestmentSortOption.GAIN_LOSS_PERCENTAGE: (lambda i: i.gain_loss_percentage, True),
    InvestmentSortOption.GAIN_LOSS_AMOUNT: (lambda i: i.gain_loss, True),
    InvestmentSortOption.TOTAL_VALUE: (lambda i: i.total_value, True),
    InvestmentSortOption.SYMBOL: (lambda i: i.symbol, False),
    InvestmentSortOption.NAME: (lambda i: i.name, False),
    InvestmentSortOption.PURCHASE_DATE: (lambda i: i.purchase_date, True),
    InvestmentSortOption.TYPE: (lambda i: i.type.value, False),
}


def filter_expenses(
    expenses: Sequence[Expense],
    category: Optional[ExpenseCategory] = None,
    search: Optional[str] = None,
    sort: ExpenseSortOption = ExpenseSortOption.DATE_DESCENDING,
) -> list[Expense]:
    """Filter by category and title/description search, then sort."""
    filtered = [
        e for e in expenses
        if (category is None or e.category == category)
        and _matches(search, e.title, e.description)
    ]
    key, reverse = _EXPENSE_SORTS[sort]
    return sorted(filtered, key=key, reverse=reverse)


def filter_budgets(
    budgets: Sequence[Budget],
    active_only: bool = True,
    category: Optional[ExpenseCategory] = None,
    period: Optional[BudgetPeriod] = None,
    search: Optional[str] = None,
    sort: BudgetSortOption = BudgetSortOption.PERCENTAGE_USED,
) -> list[Budget]:
    """Filter by active flag, category, period and name/category search, then sort."""
    filtered = [
        b for b in budgets
        if (not active_only or b.is_active)
        and (category is None or b.category == category)
        and (period is None or b.period == period)
        and _matches(search, b.name, b.category.display_name)
    ]
    key, reverse = _BUDGET_SORTS[sort]
    return sorted(filtered, key=key, reverse=reverse)


def filter_investments(
    investments: Sequence[Investment],
    investment_type: Optional[InvestmentType] = None,
    search: Optional[str] = None,
    sort: InvestmentSortOption = InvestmentSortOption.GAIN_LOSS_PERCENTAGE,
) -> list[Investment]:
    """Filter by type and symbol/name search, then sort."""
    filtered = [
        i for i in investments
        if (investment_type is None or i.type == investment_type)
        and _matches(search, i.symbol, i.name)
    ]
    key, reverse = _INVESTMENT_SORTS[sort]
    return sorted(filtered, key=key, reverse=reverse)

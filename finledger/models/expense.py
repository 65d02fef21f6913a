"""
Expense Models

An Expense is a single spending record. Expenses are the source of truth
for budget consumption: every Budget.spent value is derived from them.

DESIGN DECISION: Amounts are Decimal and are NOT range-checked here.
Rejecting non-positive amounts is the job of the boundary validator
(finledger.validation). The engine must keep working if a zero or
negative value slips through.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ExpenseCategory(str, Enum):
    """
    The fixed set of spending categories.

    Budgets are keyed by these, so free-text categories are not allowed.
    """
    FOOD = "food"
    TRANSPORTATION = "transportation"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    TRAVEL = "travel"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    ExpenseCategory.FOOD: "Food & Dining",
    ExpenseCategory.TRANSPORTATION: "Transportation",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.BILLS: "Bills & Utilities",
    ExpenseCategory.HEALTHCARE: "Healthcare",
    ExpenseCategory.EDUCATION: "Education",
    ExpenseCategory.TRAVEL: "Travel",
    ExpenseCategory.OTHER: "Other",
}


class RecurringFrequency(str, Enum):
    """How often a recurring expense repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Expense(BaseModel):
    """A single spending record."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    title: str = Field(
        ...,
        max_length=200,
        description="Short title shown in lists"
    )
    amount: Decimal = Field(
        ...,
        description="Amount spent (expected to be non-negative)"
    )
    category: ExpenseCategory
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the money was spent"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None


# =============================================================================
# READ MODELS
# =============================================================================

class MonthlyExpense(BaseModel):
    """Spending total for one calendar month."""

    month: str = Field(
        ...,
        description="Display label, e.g. 'Jan 2024'"
    )
    amount: Decimal
    date: datetime = Field(
        ...,
        description="First instant of the month"
    )


class CategoryAmount(BaseModel):
    category: ExpenseCategory
    amount: Decimal


class ExpenseAnalytics(BaseModel):
    """
    Aggregate view over every known expense.

    average_per_expense is total / count, not a per-day figure.
    """

    total_spent: Decimal = Decimal("0")
    expense_count: int = Field(default=0, ge=0)
    category_breakdown: dict[ExpenseCategory, Decimal] = Field(default_factory=dict)
    monthly_trend: list[MonthlyExpense] = Field(default_factory=list)
    average_per_expense: Decimal = Decimal("0")
    top_categories: list[CategoryAmount] = Field(default_factory=list)

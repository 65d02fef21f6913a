"""
Budget Models

A Budget caps spending in one expense category over a recurring date
window. Its `spent` value is a cached projection of the expense
collection, not an independently authoritative number: the budget engine
overwrites it from scratch whenever expenses change.

DESIGN DECISION: Derived values clamp instead of raising. A budget with
a zero or negative limit reports 0% used and status GOOD, so a bad limit
can never produce a division error or a false alert.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator

from finledger.models.expense import ExpenseCategory


# Status thresholds, in percent of limit used
EXCEEDED_THRESHOLD = 100.0
WARNING_THRESHOLD = 80.0
ON_TRACK_THRESHOLD = 50.0


class BudgetPeriod(str, Enum):
    """Length of one budget window."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    def advance(self, start: datetime) -> datetime:
        """
        Return `start` moved forward by exactly one period.

        Calendar-aware: month arithmetic clamps to the last day of the
        target month (Jan 31 + 1 month = Feb 28/29).
        """
        return start + _PERIOD_DELTAS[self]


_PERIOD_DELTAS = {
    BudgetPeriod.WEEKLY: relativedelta(weeks=1),
    BudgetPeriod.MONTHLY: relativedelta(months=1),
    BudgetPeriod.QUARTERLY: relativedelta(months=3),
    BudgetPeriod.YEARLY: relativedelta(years=1),
}


class BudgetStatus(str, Enum):
    """Health of a budget, ordered from best to worst."""
    GOOD = "good"
    ON_TRACK = "on_track"
    WARNING = "warning"
    EXCEEDED = "exceeded"


class Budget(BaseModel):
    """
    A spending limit for one category over one period.

    end_date is derived from start_date and period when not supplied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique budget ID"
    )
    name: str = Field(
        ...,
        max_length=200,
    )
    category: ExpenseCategory
    limit: Decimal = Field(
        ...,
        description="Spending cap for the period (expected to be positive)"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        description="Cached sum of matching expenses; recomputed, never edited by hand"
    )
    period: BudgetPeriod
    start_date: datetime = Field(default_factory=datetime.now)
    end_date: Optional[datetime] = Field(
        default=None,
        description="start_date advanced by one period"
    )
    is_active: bool = True
    notifications: bool = True

    @model_validator(mode='after')
    def derive_end_date(self) -> 'Budget':
        if self.end_date is None:
            self.end_date = self.period.advance(self.start_date)
        return self

    def covers(self, moment: datetime) -> bool:
        """True if `moment` lies in [start_date, end_date], both ends inclusive."""
        return self.start_date <= moment <= self.end_date

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self.limit - self.spent)

    @property
    def overspend(self) -> Decimal:
        """Amount spent beyond the limit (unclamped, never negative)."""
        return max(Decimal("0"), self.spent - self.limit)

    @property
    def percentage_used(self) -> float:
        """Share of the limit used, clamped to [.., 100]. 0 when limit <= 0."""
        if self.limit <= 0:
            return 0.0
        return min(100.0, float(self.spent / self.limit * 100))

    @property
    def status(self) -> BudgetStatus:
        percentage = self.percentage_used
        if percentage >= EXCEEDED_THRESHOLD:
            return BudgetStatus.EXCEEDED
        elif percentage >= WARNING_THRESHOLD:
            return BudgetStatus.WARNING
        elif percentage >= ON_TRACK_THRESHOLD:
            return BudgetStatus.ON_TRACK
        return BudgetStatus.GOOD

    def remaining_days(self, now: datetime) -> int:
        """Whole days left until end_date (0 once expired)."""
        return max(0, (self.end_date - now).days)

    def is_expiring_soon(self, now: datetime, within_days: int = 3) -> bool:
        return self.remaining_days(now) <= within_days


# =============================================================================
# ALERTS
# =============================================================================

class AlertType(str, Enum):
    """
    Alert taxonomy.

    Only APPROACHING and EXCEEDED are emitted by the threshold evaluator.
    RENEWED is emitted on budget renewal; ACHIEVEMENT is reserved.
    """
    APPROACHING = "approaching"
    EXCEEDED = "exceeded"
    RENEWED = "renewed"
    ACHIEVEMENT = "achievement"


class BudgetAlert(BaseModel):
    """
    A notification about a budget.

    Frozen: the only permitted change is marking it read, which produces
    a copy (see mark_read).
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    budget_id: UUID = Field(
        ...,
        description="Budget this alert is about (reference, not ownership)"
    )
    type: AlertType
    message: str
    date: datetime = Field(default_factory=datetime.now)
    is_read: bool = False

    def mark_read(self) -> 'BudgetAlert':
        return self.model_copy(update={"is_read": True})


# =============================================================================
# READ MODELS
# =============================================================================

class BudgetPerformance(BaseModel):
    category: ExpenseCategory
    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: float
    status: BudgetStatus


class BudgetAnalytics(BaseModel):
    """Aggregate view over the budget collection (totals cover active budgets)."""

    total_budgets: int = 0
    active_budgets: int = 0
    total_limit: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    total_remaining: Decimal = Decimal("0")
    average_usage: float = 0.0
    budgets_exceeded: int = 0
    budgets_at_risk: int = 0
    budgets_on_track: int = 0
    category_performance: dict[ExpenseCategory, BudgetPerformance] = Field(
        default_factory=dict
    )

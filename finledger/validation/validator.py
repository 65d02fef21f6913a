"""
Boundary Validation

DESIGN DECISION: The engine accepts whatever it is given and degrades
gracefully (a zero limit means 0% used, never a crash). Rejecting bad
input is the caller's job, and this module is the tool for it: forms run
a record through RecordValidator and only pass it on when is_valid.

Checks are split into errors (the record must not be saved) and warnings
(probably a typo; show it to the user and let them decide).

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from finledger.models.budget import Budget
from finledger.models.expense import Expense
from finledger.models.investment import Investment
from finledger.models.validation import ValidationIssue, ValidationResult


# Dates further ahead than this are flagged as probable typos
FUTURE_DATE_TOLERANCE = timedelta(days=7)


def _error(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=fix,
    )


def _warning(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
        suggested_fix=fix,
    )


class RecordValidator:
    """Validates expenses, investments and budgets before they reach the engine."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def validate_expense(self, expense: Expense) -> ValidationResult:
        issues = []

        if expense.amount <= 0:
            issues.append(_error(
                "amount", "invalid_value",
                "Amount must be greater than zero",
                "Enter the amount you spent",
            ))
        if not expense.title:
            issues.append(_error("title", "missing", "Title is required"))
        if expense.is_recurring and expense.recurring_frequency is None:
            issues.append(_warning(
                "recurring_frequency", "missing",
                "Recurring expense has no frequency",
                "Pick how often this expense repeats",
            ))
        if not expense.is_recurring and expense.recurring_frequency is not None:
            issues.append(_warning(
                "recurring_frequency", "inconsistent",
                "Frequency is set but the expense is not marked recurring",
            ))
        if expense.date > self._clock() + FUTURE_DATE_TOLERANCE:
            issues.append(_warning(
                "date", "future_date",
                f"Expense date ({expense.date:%d %b %Y}) is in the future",
                "Please verify the date is correct",
            ))

        return ValidationResult(record_type="expense", record_id=expense.id, issues=issues)

    def validate_investment(self, investment: Investment) -> ValidationResult:
        issues = []

        if investment.shares <= 0:
            issues.append(_error("shares", "invalid_value", "Shares must be greater than zero"))
        if investment.purchase_price <= 0:
            issues.append(_error(
                "purchase_price", "invalid_value", "Purchase price must be greater than zero"
            ))
        if investment.current_price < 0:
            issues.append(_error(
                "current_price", "invalid_value", "Current price cannot be negative"
            ))
        if not investment.name:
            issues.append(_error("name", "missing", "Name is required"))
        if not all(c.isalnum() or c in ".-" for c in investment.symbol):
            issues.append(_warning(
                "symbol", "suspicious_value",
                f"Symbol '{investment.symbol}' contains unusual characters",
                "Tickers are usually letters and digits only",
            ))
        if investment.purchase_date > self._clock() + FUTURE_DATE_TOLERANCE:
            issues.append(_warning(
                "purchase_date", "future_date",
                "Purchase date is in the future",
            ))

        return ValidationResult(record_type="investment", record_id=investment.id, issues=issues)

    def validate_budget(self, budget: Budget) -> ValidationResult:
        issues = []

        if budget.limit <= 0:
            issues.append(_error(
                "limit", "invalid_value",
                "Budget limit must be greater than zero",
                "Enter how much you want to spend at most",
            ))
        if not budget.name:
            issues.append(_error("name", "missing", "Budget name is required"))
        if budget.end_date < budget.start_date:
            issues.append(_error("end_date", "inconsistent", "Budget ends before it starts"))
        if budget.spent < Decimal("0"):
            issues.append(_warning(
                "spent", "suspicious_value",
                "Spent is negative; a recompute will correct it",
            ))

        return ValidationResult(record_type="budget", record_id=budget.id, issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text summary for forms."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)

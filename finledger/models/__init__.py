"""
Data Models Package

This package contains all Pydantic models used in finledger.
All data flowing through the engine must conform to these schemas.
"""

from finledger.models.expense import (
    CategoryAmount,
    Expense,
    ExpenseAnalytics,
    ExpenseCategory,
    MonthlyExpense,
    RecurringFrequency,
)
from finledger.models.investment import (
    Investment,
    InvestmentType,
    MarketQuote,
    PortfolioAnalytics,
)
from finledger.models.budget import (
    AlertType,
    Budget,
    BudgetAlert,
    BudgetAnalytics,
    BudgetPerformance,
    BudgetPeriod,
    BudgetStatus,
)
from finledger.models.validation import ValidationIssue, ValidationResult
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CategoryAmount",
    "Expense",
    "ExpenseAnalytics",
    "ExpenseCategory",
    "MonthlyExpense",
    "RecurringFrequency",
    # Investment models
    "Investment",
    "InvestmentType",
    "MarketQuote",
    "PortfolioAnalytics",
    # Budget models
    "AlertType",
    "Budget",
    "BudgetAlert",
    "BudgetAnalytics",
    "BudgetPerformance",
    "BudgetPeriod",
    "BudgetStatus",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

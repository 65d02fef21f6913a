"""
Ledger Engine

Owns the Expense and Investment collections and exposes their read
models. Expense mutations drive the BudgetEngine:

    add_expense     -> incremental budget update -> alerts
    update_expense  -> full recompute            -> alerts
    delete_expense  -> full recompute            -> alerts

An edit can move an expense to another category or date, so only a full
recompute is guaranteed to keep every budget's spent correct.

Locking: expenses and budgets share one re-entrant lock (recompute reads
expenses). Investments have their own lock, so the periodic price
refresh never waits on a budget recompute.
"""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional, Sequence
from uuid import UUID

from finledger.audit import AuditLogger, create_correlation_id
from finledger.engine.budget import BudgetEngine
from finledger.engine.portfolio import (
    normalize_prices,
    recent_activity,
    top_performers,
    value_portfolio,
)
from finledger.models.audit import AuditEventType
from finledger.models.expense import (
    CategoryAmount,
    Expense,
    ExpenseAnalytics,
    ExpenseCategory,
    MonthlyExpense,
)
from finledger.models.investment import Investment, InvestmentType, PortfolioAnalytics
from finledger.services.storage import (
    EXPENSES_KEY,
    INVESTMENTS_KEY,
    RecordStoreInterface,
    StorageError,
)


def _month_start(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1)


class LedgerEngine:
    """
    Expense and investment ledger.

    Pass the BudgetEngine at construction: the ledger adopts its lock and
    registers itself as the budget engine's expense source.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        budget_engine: Optional[BudgetEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
        investment_lock: Optional[threading.RLock] = None,
    ):
        self._store = store
        self._budget_engine = budget_engine
        self._audit = audit_logger or AuditLogger()
        self._lock = budget_engine.lock if budget_engine else threading.RLock()
        self._investment_lock = investment_lock or threading.RLock()

        self._expenses: list[Expense] = self._load(EXPENSES_KEY, Expense)
        self._investments: list[Investment] = self._load(INVESTMENTS_KEY, Investment)

        if budget_engine is not None:
            budget_engine.bind_expense_source(self._current_expenses)

    @property
    def budget_engine(self) -> Optional[BudgetEngine]:
        return self._budget_engine

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, expense: Expense) -> Expense:
        with self._lock:
            correlation_id = create_correlation_id()
            stored = expense.model_copy()
            self._expenses.append(stored)
            self._audit.log_record_changed(
                AuditEventType.EXPENSE_ADDED,
                "expense",
                stored.id,
                f"Expense added: {stored.title}",
                details={
                    "amount": str(stored.amount),
                    "category": stored.category.value,
                    "date": stored.date.isoformat(),
                },
                correlation_id=correlation_id,
            )
            self._save_expenses(correlation_id)

            if self._budget_engine is not None:
                self._budget_engine.apply_expense(stored, correlation_id)
                self._budget_engine.evaluate_alerts(correlation_id=correlation_id)
            return stored.model_copy()

    def update_expense(self, expense: Expense) -> bool:
        """Replace an expense by id. Unknown ids are ignored."""
        with self._lock:
            index = self._expense_index(expense.id)
            if index is None:
                self._audit.log_not_found("expense", expense.id, "update")
                return False

            correlation_id = create_correlation_id()
            self._expenses[index] = expense.model_copy()
            self._audit.log_record_changed(
                AuditEventType.EXPENSE_UPDATED,
                "expense",
                expense.id,
                f"Expense updated: {expense.title}",
                details={
                    "amount": str(expense.amount),
                    "category": expense.category.value,
                    "date": expense.date.isoformat(),
                },
                correlation_id=correlation_id,
            )
            self._save_expenses(correlation_id)
            self._recompute_budgets(correlation_id)
            return True

    def delete_expense(self, expense: Expense) -> bool:
        with self._lock:
            index = self._expense_index(expense.id)
            if index is None:
                self._audit.log_not_found("expense", expense.id, "delete")
                return False

            correlation_id = create_correlation_id()
            removed = self._expenses.pop(index)
            self._audit.log_record_changed(
                AuditEventType.EXPENSE_DELETED,
                "expense",
                removed.id,
                f"Expense deleted: {removed.title}",
                correlation_id=correlation_id,
            )
            self._save_expenses(correlation_id)
            self._recompute_budgets(correlation_id)
            return True

    def list_expenses(self) -> list[Expense]:
        with self._lock:
            return [expense.model_copy() for expense in self._expenses]

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        with self._lock:
            index = self._expense_index(expense_id)
            return None if index is None else self._expenses[index].model_copy()

    def expenses_for_category(self, category: ExpenseCategory) -> list[Expense]:
        return [e for e in self.list_expenses() if e.category == category]

    def expenses_in_range(self, start: datetime, end: datetime) -> list[Expense]:
        """Expenses dated within [start, end], both ends inclusive."""
        return [e for e in self.list_expenses() if start <= e.date <= end]

    def total_for_month(self, moment: datetime) -> Decimal:
        """Total spent in the calendar month containing `moment`."""
        return sum(
            (
                e.amount for e in self.list_expenses()
                if e.date.year == moment.year and e.date.month == moment.month
            ),
            Decimal("0"),
        )

    def expense_analytics(self) -> ExpenseAnalytics:
        expenses = self.list_expenses()
        if not expenses:
            return ExpenseAnalytics()

        total = sum((e.amount for e in expenses), Decimal("0"))

        breakdown: dict[ExpenseCategory, Decimal] = {}
        monthly: dict[datetime, Decimal] = {}
        for expense in expenses:
            breakdown[expense.category] = breakdown.get(expense.category, Decimal("0")) + expense.amount
            month = _month_start(expense.date)
            monthly[month] = monthly.get(month, Decimal("0")) + expense.amount

        monthly_trend = [
            MonthlyExpense(month=month.strftime("%b %Y"), amount=amount, date=month)
            for month, amount in sorted(monthly.items())
        ]
        top_categories = [
            CategoryAmount(category=category, amount=amount)
            for category, amount in sorted(breakdown.items(), key=lambda item: item[1], reverse=True)
        ]

        return ExpenseAnalytics(
            total_spent=total,
            expense_count=len(expenses),
            category_breakdown=breakdown,
            monthly_trend=monthly_trend,
            average_per_expense=total / len(expenses),
            top_categories=top_categories,
        )

    # -------------------------------------------------------------------------
    # Investments
    # -------------------------------------------------------------------------

    def add_investment(self, investment: Investment) -> Investment:
        with self._investment_lock:
            stored = investment.model_copy()
            self._investments.append(stored)
            self._audit.log_record_changed(
                AuditEventType.INVESTMENT_ADDED,
                "investment",
                stored.id,
                f"Investment added: {stored.symbol}",
                details={
                    "shares": str(stored.shares),
                    "purchase_price": str(stored.purchase_price),
                    "type": stored.type.value,
                },
            )
            self._save_investments()
            return stored.model_copy()

    def update_investment(self, investment: Investment) -> bool:
        with self._investment_lock:
            index = self._investment_index(investment.id)
            if index is None:
                self._audit.log_not_found("investment", investment.id, "update")
                return False
            self._investments[index] = investment.model_copy()
            self._audit.log_record_changed(
                AuditEventType.INVESTMENT_UPDATED,
                "investment",
                investment.id,
                f"Investment updated: {investment.symbol}",
            )
            self._save_investments()
            return True

    def delete_investment(self, investment: Investment) -> bool:
        with self._investment_lock:
            index = self._investment_index(investment.id)
            if index is None:
                self._audit.log_not_found("investment", investment.id, "delete")
                return False
            removed = self._investments.pop(index)
            self._audit.log_record_changed(
                AuditEventType.INVESTMENT_DELETED,
                "investment",
                removed.id,
                f"Investment deleted: {removed.symbol}",
            )
            self._save_investments()
            return True

    def update_prices(self, prices: Mapping[str, Decimal]) -> int:
        """
        Set current_price for every holding whose symbol is in `prices`.

        Symbols match case-insensitively; symbols with no matching holding
        are ignored. Returns the number of holdings updated.
        """
        prices = normalize_prices(prices)
        with self._investment_lock:
            updated = 0
            for investment in self._investments:
                if investment.symbol in prices:
                    investment.current_price = prices[investment.symbol]
                    updated += 1
            self._audit.log_prices_updated(prices, updated)
            self._save_investments()
            return updated

    def list_investments(self) -> list[Investment]:
        with self._investment_lock:
            return [investment.model_copy() for investment in self._investments]

    def get_investment(self, investment_id: UUID) -> Optional[Investment]:
        with self._investment_lock:
            index = self._investment_index(investment_id)
            return None if index is None else self._investments[index].model_copy()

    def investments_for_type(self, investment_type: InvestmentType) -> list[Investment]:
        return [i for i in self.list_investments() if i.type == investment_type]

    def symbols(self) -> list[str]:
        return sorted({i.symbol for i in self.list_investments()})

    def investment_analytics(
        self,
        price_overrides: Optional[Mapping[str, Decimal]] = None,
    ) -> PortfolioAnalytics:
        return value_portfolio(self.list_investments(), price_overrides)

    def top_performers(self, n: int = 3) -> list[Investment]:
        return top_performers(self.list_investments(), n)

    def recent_activity(self, n: int = 5) -> list[Investment]:
        return recent_activity(self.list_investments(), n)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _current_expenses(self) -> Sequence[Expense]:
        # Called by the budget engine while it holds the shared lock
        return tuple(self._expenses)

    def _recompute_budgets(self, correlation_id: UUID) -> None:
        if self._budget_engine is None:
            return
        self._budget_engine.recompute_all(correlation_id=correlation_id)
        self._budget_engine.evaluate_alerts(correlation_id=correlation_id)

    def _expense_index(self, expense_id: UUID) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def _investment_index(self, investment_id: UUID) -> Optional[int]:
        for index, investment in enumerate(self._investments):
            if investment.id == investment_id:
                return index
        return None

    def _load(self, key: str, model: type) -> list:
        try:
            return self._store.load_collection(key, model)
        except StorageError as e:
            self._audit.log_load_failed(key, str(e))
            return []

    def _save_expenses(self, correlation_id: Optional[UUID] = None) -> None:
        self._save(EXPENSES_KEY, self._expenses, correlation_id)

    def _save_investments(self) -> None:
        self._save(INVESTMENTS_KEY, self._investments, None)

    def _save(self, key: str, records: list, correlation_id: Optional[UUID]) -> None:
        try:
            self._store.save_collection(key, records)
        except StorageError as e:
            # Non-fatal: memory stays the source of truth until the next successful save
            self._audit.log_save_failed(key, str(e), correlation_id)

"""
Budget Engine

Owns the Budget and BudgetAlert collections.

DESIGN DECISION: Budget.spent is a projection of the expense collection.
recompute_all() rebuilds it from scratch for every budget and is the only
authoritative way to set it; the incremental apply_expense() exists so
adding one expense does not rescan everything, and it produces exactly
what a full recompute would.

GUARANTEES:
- After recompute_all(), every budget's spent equals the sum of matching
  expenses (same category, date within [start_date, end_date])
- recompute_all() is idempotent
- Unknown ids are silent no-ops
- A failed save is logged and never raised; in-memory state stays authoritative
"""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence
from uuid import UUID

from finledger.audit import AuditLogger, create_correlation_id
from finledger.engine.alerts import AlertGenerator
from finledger.models.audit import AuditEventType
from finledger.models.budget import (
    Budget,
    BudgetAlert,
    BudgetAnalytics,
    BudgetPerformance,
    BudgetPeriod,
    BudgetStatus,
)
from finledger.models.expense import Expense, ExpenseCategory
from finledger.services.storage import (
    ALERTS_KEY,
    BUDGETS_KEY,
    RecordStoreInterface,
    StorageError,
)


ExpenseSource = Callable[[], Sequence[Expense]]


def project_spent(budget: Budget, expenses: Sequence[Expense]) -> Decimal:
    """Sum of expenses that count against `budget`."""
    return sum(
        (
            expense.amount
            for expense in expenses
            if expense.category == budget.category and budget.covers(expense.date)
        ),
        Decimal("0"),
    )


class BudgetEngine:
    """
    Budget and alert state, recomputed from expenses.

    The engine shares its lock with the LedgerEngine that feeds it
    expenses; see LedgerEngine.__init__.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        expense_source: Optional[ExpenseSource] = None,
        alert_generator: Optional[AlertGenerator] = None,
        audit_logger: Optional[AuditLogger] = None,
        lock: Optional[threading.RLock] = None,
        clock: Callable[[], datetime] = datetime.now,
        expiring_soon_days: int = 3,
    ):
        self._store = store
        self._expense_source: ExpenseSource = expense_source or tuple
        self._clock = clock
        self._alert_generator = alert_generator or AlertGenerator(clock)
        self._audit = audit_logger or AuditLogger()
        self._lock = lock or threading.RLock()
        self._expiring_soon_days = expiring_soon_days

        self._budgets: list[Budget] = self._load(BUDGETS_KEY, Budget)
        self._alerts: list[BudgetAlert] = self._load(ALERTS_KEY, BudgetAlert)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def bind_expense_source(self, source: ExpenseSource) -> None:
        """Attach the callable that returns the current expense collection."""
        with self._lock:
            self._expense_source = source

    # -------------------------------------------------------------------------
    # Budget mutations
    # -------------------------------------------------------------------------

    def add_budget(
        self,
        name: str,
        category: ExpenseCategory,
        limit: Decimal,
        period: BudgetPeriod,
        start_date: Optional[datetime] = None,
        notifications: bool = True,
    ) -> Budget:
        """
        Create a budget and immediately project its spent value.

        Expenses that predate the budget but fall inside its window count.
        """
        with self._lock:
            correlation_id = create_correlation_id()
            budget = Budget(
                name=name,
                category=category,
                limit=limit,
                period=period,
                start_date=start_date or self._clock(),
                notifications=notifications,
            )
            self._budgets.append(budget)
            self._audit.log_record_changed(
                AuditEventType.BUDGET_ADDED,
                "budget",
                budget.id,
                f"Budget added: {budget.name}",
                details={
                    "category": budget.category.value,
                    "limit": str(budget.limit),
                    "period": budget.period.value,
                },
                correlation_id=correlation_id,
            )
            self._save_budgets(correlation_id)
            self.recompute_all(correlation_id=correlation_id)
            self.evaluate_alerts(correlation_id=correlation_id)
            return self._budgets[self._index(budget.id)].model_copy()

    def update_budget(self, budget: Budget) -> bool:
        """
        Replace a budget by id.

        spent is NOT recomputed; call recompute_all() after editing limit,
        category or dates.
        """
        with self._lock:
            index = self._index(budget.id)
            if index is None:
                self._audit.log_not_found("budget", budget.id, "update")
                return False
            self._budgets[index] = budget.model_copy()
            self._audit.log_record_changed(
                AuditEventType.BUDGET_UPDATED,
                "budget",
                budget.id,
                f"Budget updated: {budget.name}",
            )
            self._save_budgets()
            return True

    def delete_budget(self, budget: Budget) -> bool:
        with self._lock:
            index = self._index(budget.id)
            if index is None:
                self._audit.log_not_found("budget", budget.id, "delete")
                return False
            removed = self._budgets.pop(index)
            self._audit.log_record_changed(
                AuditEventType.BUDGET_DELETED,
                "budget",
                removed.id,
                f"Budget deleted: {removed.name}",
            )
            self._save_budgets()
            return True

    def toggle_active(self, budget: Budget) -> Optional[Budget]:
        """Flip is_active. Returns the updated budget, or None for an unknown id."""
        with self._lock:
            index = self._index(budget.id)
            if index is None:
                self._audit.log_not_found("budget", budget.id, "toggle")
                return None
            current = self._budgets[index]
            current.is_active = not current.is_active
            self._audit.log_record_changed(
                AuditEventType.BUDGET_TOGGLED,
                "budget",
                current.id,
                f"Budget {'activated' if current.is_active else 'deactivated'}: {current.name}",
                details={"is_active": current.is_active},
            )
            self._save_budgets()
            return current.model_copy()

    def renew_budget(self, budget: Budget) -> Optional[Budget]:
        """
        Roll a budget over to a fresh window starting now.

        Budgets never roll over on their own; an expired budget stays
        visible with its final numbers until renewed. The new window's
        spent is projected from expenses, which is 0 unless future-dated
        expenses exist.
        """
        with self._lock:
            index = self._index(budget.id)
            if index is None:
                self._audit.log_not_found("budget", budget.id, "renew")
                return None

            correlation_id = create_correlation_id()
            now = self._clock()
            current = self._budgets[index]
            current.start_date = now
            current.end_date = current.period.advance(now)
            current.is_active = True
            current.spent = project_spent(current, self._expense_source())

            self._audit.log_record_changed(
                AuditEventType.BUDGET_RENEWED,
                "budget",
                current.id,
                f"Budget renewed: {current.name}",
                details={
                    "start_date": current.start_date.isoformat(),
                    "end_date": current.end_date.isoformat(),
                },
                correlation_id=correlation_id,
            )
            self._save_budgets(correlation_id)

            alert = self._alert_generator.renewal_alert(current, self._alerts, now)
            if alert is not None:
                self._append_alerts([alert], correlation_id)

            return current.model_copy()

    # -------------------------------------------------------------------------
    # Recompute
    # -------------------------------------------------------------------------

    def recompute_all(self, correlation_id: Optional[UUID] = None) -> list[Budget]:
        """
        Rebuild spent for every budget from the full expense collection.

        Idempotent: calling it again without an expense change yields the
        same values.
        """
        with self._lock:
            expenses = self._expense_source()
            changed: dict[str, str] = {}
            for budget in self._budgets:
                spent = project_spent(budget, expenses)
                if spent != budget.spent:
                    changed[str(budget.id)] = f"{budget.spent} -> {spent}"
                budget.spent = spent

            self._audit.log_budgets_recomputed(
                budget_count=len(self._budgets),
                expense_count=len(expenses),
                changed=changed,
                correlation_id=correlation_id,
            )
            self._save_budgets(correlation_id)
            return self.list_budgets()

    def apply_expense(self, expense: Expense, correlation_id: Optional[UUID] = None) -> int:
        """
        Add one new expense to every budget it counts against.

        Returns the number of budgets touched. Only valid for an expense
        that was just appended; edits and deletes need recompute_all().
        """
        with self._lock:
            touched = 0
            for budget in self._budgets:
                if budget.category == expense.category and budget.covers(expense.date):
                    budget.spent += expense.amount
                    touched += 1
            if touched:
                self._save_budgets(correlation_id)
            return touched

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    def evaluate_alerts(
        self,
        today: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[BudgetAlert]:
        """Run the alert generator over every budget and store what it emits."""
        with self._lock:
            new_alerts = self._alert_generator.check_alerts(
                self._budgets, self._alerts, today or self._clock()
            )
            if new_alerts:
                self._append_alerts(new_alerts, correlation_id)
            return [alert.model_copy() for alert in new_alerts]

    def list_alerts(self) -> list[BudgetAlert]:
        with self._lock:
            return list(self._alerts)

    def unread_alerts(self) -> list[BudgetAlert]:
        with self._lock:
            return [alert for alert in self._alerts if not alert.is_read]

    def alerts_for_budget(self, budget_id: UUID) -> list[BudgetAlert]:
        with self._lock:
            return [alert for alert in self._alerts if alert.budget_id == budget_id]

    def mark_alert_read(self, alert: BudgetAlert) -> Optional[BudgetAlert]:
        with self._lock:
            for index, current in enumerate(self._alerts):
                if current.id == alert.id:
                    updated = current.mark_read()
                    self._alerts[index] = updated
                    self._audit.log_record_changed(
                        AuditEventType.ALERT_READ,
                        "alert",
                        updated.id,
                        "Alert marked as read",
                    )
                    self._save_alerts()
                    return updated
            self._audit.log_not_found("alert", alert.id, "mark_read")
            return None

    # -------------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------------

    def list_budgets(self) -> list[Budget]:
        with self._lock:
            return [budget.model_copy() for budget in self._budgets]

    def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        with self._lock:
            index = self._index(budget_id)
            return None if index is None else self._budgets[index].model_copy()

    def active_budgets(self) -> list[Budget]:
        return [budget for budget in self.list_budgets() if budget.is_active]

    def budgets_for_category(self, category: ExpenseCategory) -> list[Budget]:
        return [b for b in self.active_budgets() if b.category == category]

    def budgets_for_status(self, status: BudgetStatus) -> list[Budget]:
        return [b for b in self.active_budgets() if b.status == status]

    def expiring_budgets(self, now: Optional[datetime] = None) -> list[Budget]:
        now = now or self._clock()
        return [
            b for b in self.active_budgets()
            if b.is_expiring_soon(now, self._expiring_soon_days)
        ]

    def budget_analytics(self) -> BudgetAnalytics:
        """Totals and per-category performance over the active budgets."""
        budgets = self.list_budgets()
        active = [b for b in budgets if b.is_active]

        category_performance = {
            b.category: BudgetPerformance(
                category=b.category,
                budgeted=b.limit,
                spent=b.spent,
                remaining=b.remaining,
                percentage_used=b.percentage_used,
                status=b.status,
            )
            for b in active
        }

        return BudgetAnalytics(
            total_budgets=len(budgets),
            active_budgets=len(active),
            total_limit=sum((b.limit for b in active), Decimal("0")),
            total_spent=sum((b.spent for b in active), Decimal("0")),
            total_remaining=sum((b.remaining for b in active), Decimal("0")),
            average_usage=(
                sum(b.percentage_used for b in active) / len(active) if active else 0.0
            ),
            budgets_exceeded=sum(1 for b in active if b.status == BudgetStatus.EXCEEDED),
            budgets_at_risk=sum(1 for b in active if b.status == BudgetStatus.WARNING),
            budgets_on_track=sum(
                1 for b in active if b.status in (BudgetStatus.GOOD, BudgetStatus.ON_TRACK)
            ),
            category_performance=category_performance,
        )

    def category_performance(self) -> list[tuple[ExpenseCategory, float]]:
        """
        Spent/limit percentage per category, summed over active budgets.

        Unclamped, highest first. Categories whose total limit is not
        positive are left out.
        """
        totals: dict[ExpenseCategory, list[Decimal]] = {}
        for budget in self.active_budgets():
            limit_spent = totals.setdefault(budget.category, [Decimal("0"), Decimal("0")])
            limit_spent[0] += budget.limit
            limit_spent[1] += budget.spent

        performance = [
            (category, float(spent / limit * 100))
            for category, (limit, spent) in totals.items()
            if limit > 0
        ]
        performance.sort(key=lambda item: item[1], reverse=True)
        return performance

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _index(self, budget_id: UUID) -> Optional[int]:
        for index, budget in enumerate(self._budgets):
            if budget.id == budget_id:
                return index
        return None

    def _append_alerts(self, alerts: list[BudgetAlert], correlation_id: Optional[UUID]) -> None:
        self._alerts.extend(alerts)
        for alert in alerts:
            self._audit.log_alert_emitted(
                alert_id=alert.id,
                budget_id=alert.budget_id,
                alert_type=alert.type.value,
                message=alert.message,
                correlation_id=correlation_id,
            )
        self._save_alerts(correlation_id)

    def _load(self, key: str, model: type) -> list:
        try:
            return self._store.load_collection(key, model)
        except StorageError as e:
            self._audit.log_load_failed(key, str(e))
            return []

    def _save_budgets(self, correlation_id: Optional[UUID] = None) -> None:
        self._save(BUDGETS_KEY, self._budgets, correlation_id)

    def _save_alerts(self, correlation_id: Optional[UUID] = None) -> None:
        self._save(ALERTS_KEY, self._alerts, correlation_id)

    def _save(self, key: str, records: list, correlation_id: Optional[UUID]) -> None:
        try:
            self._store.save_collection(key, records)
        except StorageError as e:
            # Non-fatal: memory stays the source of truth until the next successful save
            self._audit.log_save_failed(key, str(e), correlation_id)

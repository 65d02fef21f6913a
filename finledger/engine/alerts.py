"""
Budget Alert Generator

Evaluates threshold rules over budgets and returns the alerts that should
be emitted. It never mutates anything itself: the budget engine appends
the returned alerts to its collection and persists them.

Rules (active budgets with notifications enabled only):
- 80% <= used < 100%  -> one APPROACHING alert per budget per calendar day
- used >= 100%        -> one EXCEEDED alert per budget per calendar day

The two checks are independent, so a budget that was approaching in the
morning and crosses its limit in the afternoon gets both alerts that day.
A budget that sits at 85% for a week gets one APPROACHING alert per day
it is evaluated on.
"""

from datetime import datetime
from typing import Callable, Iterable, Optional
from uuid import UUID

from finledger.models.budget import (
    EXCEEDED_THRESHOLD,
    WARNING_THRESHOLD,
    AlertType,
    Budget,
    BudgetAlert,
)


class AlertGenerator:
    """
    Idempotent threshold evaluator.

    Running check_alerts twice on the same day with the same state
    yields nothing the second time, because every emitted alert is
    looked up by (budget_id, type, day) first.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def check_alerts(
        self,
        budgets: Iterable[Budget],
        existing_alerts: Iterable[BudgetAlert],
        today: Optional[datetime] = None,
    ) -> list[BudgetAlert]:
        """
        Return the new alerts triggered by `budgets`.

        Args:
            budgets: Budgets to evaluate (inactive/muted ones are skipped)
            existing_alerts: Alerts already emitted, used for de-duplication
            today: Evaluation moment; defaults to the generator's clock

        Returns:
            New alerts, dated `today`. Empty if nothing crossed a threshold.
        """
        today = today or self._clock()
        seen = list(existing_alerts)
        new_alerts: list[BudgetAlert] = []

        for budget in budgets:
            if not (budget.is_active and budget.notifications):
                continue

            percentage = budget.percentage_used

            if WARNING_THRESHOLD <= percentage < EXCEEDED_THRESHOLD:
                if not self.already_emitted(seen, budget.id, AlertType.APPROACHING, today):
                    alert = BudgetAlert(
                        budget_id=budget.id,
                        type=AlertType.APPROACHING,
                        message=f"You've used {int(percentage)}% of your {budget.name} budget",
                        date=today,
                    )
                    seen.append(alert)
                    new_alerts.append(alert)

            if percentage >= EXCEEDED_THRESHOLD:
                if not self.already_emitted(seen, budget.id, AlertType.EXCEEDED, today):
                    alert = BudgetAlert(
                        budget_id=budget.id,
                        type=AlertType.EXCEEDED,
                        message=(
                            f"You've exceeded your {budget.name} budget "
                            f"by ${budget.spent - budget.limit:.2f}"
                        ),
                        date=today,
                    )
                    seen.append(alert)
                    new_alerts.append(alert)

        return new_alerts

    def renewal_alert(
        self,
        budget: Budget,
        existing_alerts: Iterable[BudgetAlert],
        today: Optional[datetime] = None,
    ) -> Optional[BudgetAlert]:
        """Build the RENEWED notice for `budget`, or None if muted or already sent today."""
        today = today or self._clock()
        if not budget.notifications:
            return None
        if self.already_emitted(existing_alerts, budget.id, AlertType.RENEWED, today):
            return None
        return BudgetAlert(
            budget_id=budget.id,
            type=AlertType.RENEWED,
            message=(
                f"Your {budget.name} budget was renewed until "
                f"{budget.end_date.strftime('%d %b %Y')}"
            ),
            date=today,
        )

    @staticmethod
    def already_emitted(
        alerts: Iterable[BudgetAlert],
        budget_id: UUID,
        alert_type: AlertType,
        day: datetime,
    ) -> bool:
        """True if an alert of this type exists for the budget on day's calendar date."""
        target = day.date()
        return any(
            alert.budget_id == budget_id
            and alert.type == alert_type
            and alert.date.date() == target
            for alert in alerts
        )

"""Tests for AlertGenerator threshold rules and daily de-duplication."""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from conftest import NOW, make_expense
from finledger.engine import AlertGenerator
from finledger.models import AlertType, Budget, BudgetAlert, BudgetPeriod, ExpenseCategory


def _budget(spent, limit="100", **kwargs):
    return Budget(
        name=kwargs.pop("name", "Groceries"),
        category=ExpenseCategory.FOOD,
        limit=Decimal(limit),
        spent=Decimal(spent),
        period=BudgetPeriod.MONTHLY,
        start_date=datetime(2024, 1, 1),
        **kwargs,
    )


class TestThresholds:
    """Which percentages produce which alerts."""

    def test_below_warning_emits_nothing(self):
        generator = AlertGenerator(lambda: NOW)
        assert generator.check_alerts([_budget("79.99")], []) == []

    def test_approaching_at_warning_threshold(self):
        generator = AlertGenerator(lambda: NOW)
        alerts = generator.check_alerts([_budget("80")], [])
        assert [a.type for a in alerts] == [AlertType.APPROACHING]
        assert alerts[0].date == NOW
        assert alerts[0].is_read is False

    def test_approaching_message_truncates_percentage(self):
        generator = AlertGenerator(lambda: NOW)
        alerts = generator.check_alerts([_budget("89.99")], [])
        assert alerts[0].message == "You've used 89% of your Groceries budget"

    def test_exceeded_at_limit(self):
        generator = AlertGenerator(lambda: NOW)
        alerts = generator.check_alerts([_budget("100")], [])
        assert [a.type for a in alerts] == [AlertType.EXCEEDED]
        assert alerts[0].message == "You've exceeded your Groceries budget by $0.00"

    def test_exceeded_message_uses_raw_overspend(self):
        generator = AlertGenerator(lambda: NOW)
        alerts = generator.check_alerts([_budget("142.5")], [])
        assert alerts[0].message == "You've exceeded your Groceries budget by $42.50"

    def test_inactive_and_muted_budgets_skipped(self):
        generator = AlertGenerator(lambda: NOW)
        budgets = [
            _budget("95", is_active=False),
            _budget("150", notifications=False),
        ]
        assert generator.check_alerts(budgets, []) == []

    def test_zero_limit_never_alerts(self):
        generator = AlertGenerator(lambda: NOW)
        assert generator.check_alerts([_budget("500", limit="0")], []) == []


class TestDeduplication:
    """One alert per (budget, type, calendar day)."""

    def test_second_run_same_day_emits_nothing(self):
        generator = AlertGenerator(lambda: NOW)
        budget = _budget("90")
        first = generator.check_alerts([budget], [])
        second = generator.check_alerts([budget], first, today=NOW + timedelta(hours=6))
        assert len(first) == 1
        assert second == []

    def test_next_day_emits_again(self):
        generator = AlertGenerator(lambda: NOW)
        budget = _budget("90")
        first = generator.check_alerts([budget], [])
        next_day = generator.check_alerts([budget], first, today=NOW + timedelta(days=1))
        assert [a.type for a in next_day] == [AlertType.APPROACHING]

    def test_both_types_on_same_day(self):
        generator = AlertGenerator(lambda: NOW)
        budget = _budget("90")
        morning = generator.check_alerts([budget], [])
        budget.spent = Decimal("120")
        afternoon = generator.check_alerts([budget], morning)
        assert [a.type for a in afternoon] == [AlertType.EXCEEDED]

    def test_other_budgets_alerts_do_not_suppress(self):
        generator = AlertGenerator(lambda: NOW)
        existing = [BudgetAlert(budget_id=uuid4(), type=AlertType.APPROACHING, message="x", date=NOW)]
        alerts = generator.check_alerts([_budget("85")], existing)
        assert len(alerts) == 1

    def test_read_alerts_still_count(self):
        """Acknowledging an alert does not re-arm it for the same day."""
        generator = AlertGenerator(lambda: NOW)
        budget = _budget("85")
        first = generator.check_alerts([budget], [])
        assert generator.check_alerts([budget], [first[0].mark_read()]) == []


class TestAlertsThroughEngine:
    """Daily behavior when driven through the budget engine."""

    def test_hovering_budget_alerts_once_per_day(self, ledger, budget_engine, clock):
        budget_engine.add_budget(
            name="Groceries",
            category=ExpenseCategory.FOOD,
            limit=Decimal("100"),
            period=BudgetPeriod.MONTHLY,
            start_date=datetime(2024, 1, 1),
        )
        ledger.add_expense(make_expense(85, 5))
        assert budget_engine.evaluate_alerts() == []

        clock.advance(days=1)
        assert [a.type for a in budget_engine.evaluate_alerts()] == [AlertType.APPROACHING]
        assert len(budget_engine.list_alerts()) == 2

    def test_renewal_alert_respects_notifications(self):
        generator = AlertGenerator(lambda: NOW)
        assert generator.renewal_alert(_budget("0", notifications=False), []) is None
        budget = _budget("0")
        alert = generator.renewal_alert(budget, [])
        assert alert.type == AlertType.RENEWED
        assert generator.renewal_alert(budget, [alert]) is None

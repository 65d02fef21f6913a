"""Tests for RecordValidator boundary checks."""

from datetime import datetime, timedelta
from decimal import Decimal

from conftest import NOW, make_expense, make_investment
from finledger.models import Budget, BudgetPeriod, Expense, ExpenseCategory, RecurringFrequency
from finledger.validation import RecordValidator


def _validator():
    return RecordValidator(clock=lambda: NOW)


class TestExpenseValidation:
    """Tests for validate_expense."""

    def test_valid_expense(self):
        result = _validator().validate_expense(make_expense(10, 5))
        assert result.is_valid
        assert result.issues == []

    def test_non_positive_amount_is_error(self):
        for amount in (0, -3):
            result = _validator().validate_expense(make_expense(amount, 5))
            assert not result.is_valid
            assert result.issues[0].field == "amount"

    def test_empty_title_is_error(self):
        expense = Expense(title="   ", amount=Decimal("5"), category=ExpenseCategory.FOOD, date=NOW)
        result = _validator().validate_expense(expense)
        assert [i.field for i in result.issues] == ["title"]

    def test_recurring_consistency_warnings(self):
        missing = Expense(
            title="Rent", amount=Decimal("900"), category=ExpenseCategory.BILLS,
            date=NOW, is_recurring=True,
        )
        stray = Expense(
            title="Rent", amount=Decimal("900"), category=ExpenseCategory.BILLS,
            date=NOW, recurring_frequency=RecurringFrequency.MONTHLY,
        )
        assert _validator().validate_expense(missing).warnings == ["Recurring expense has no frequency"]
        assert _validator().validate_expense(stray).is_valid
        assert len(_validator().validate_expense(stray).warnings) == 1

    def test_far_future_date_warns(self):
        expense = make_expense(10, 5).model_copy(update={"date": NOW + timedelta(days=30)})
        result = _validator().validate_expense(expense)
        assert result.is_valid
        assert result.issues[0].issue_type == "future_date"


class TestInvestmentValidation:
    """Tests for validate_investment."""

    def test_valid_investment(self):
        assert _validator().validate_investment(make_investment("BRK.B")).issues == []

    def test_bad_numbers_are_errors(self):
        investment = make_investment("AAPL", shares=0, purchase_price=-1, current_price=-2)
        result = _validator().validate_investment(investment)
        assert result.error_count == 3
        assert {i.field for i in result.issues} == {"shares", "purchase_price", "current_price"}

    def test_unusual_symbol_warns(self):
        result = _validator().validate_investment(make_investment("AA PL$"))
        assert result.is_valid
        assert result.issues[0].field == "symbol"


class TestBudgetValidation:
    """Tests for validate_budget."""

    def _budget(self, **overrides):
        fields = dict(
            name="Groceries",
            category=ExpenseCategory.FOOD,
            limit=Decimal("100"),
            period=BudgetPeriod.MONTHLY,
            start_date=datetime(2024, 1, 1),
        )
        fields.update(overrides)
        return Budget(**fields)

    def test_valid_budget(self):
        assert _validator().validate_budget(self._budget()).is_valid

    def test_zero_limit_is_error(self):
        result = _validator().validate_budget(self._budget(limit=Decimal("0")))
        assert not result.is_valid
        assert result.issues[0].field == "limit"

    def test_end_before_start_is_error(self):
        result = _validator().validate_budget(self._budget(end_date=datetime(2023, 12, 1)))
        assert [i.field for i in result.issues] == ["end_date"]


class TestSummary:
    """Tests for the user-facing summary text."""

    def test_clean_summary(self):
        validator = _validator()
        result = validator.validate_expense(make_expense(10, 5))
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_summary_lists_errors_and_fixes(self):
        validator = _validator()
        result = validator.validate_expense(make_expense(0, 5))
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following:" in summary
        assert "Amount must be greater than zero" in summary
        assert "Enter the amount you spent" in summary

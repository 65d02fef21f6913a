"""Shared fixtures: a controllable clock and engines wired over in-memory storage."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from finledger.audit import AuditLogger
from finledger.engine import AlertGenerator, BudgetEngine, LedgerEngine
from finledger.models import Expense, ExpenseCategory, Investment, InvestmentType
from finledger.services.storage import InMemoryAuditStorage, InMemoryRecordStore


NOW = datetime(2024, 1, 20, 12, 0)


class FakeClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_expense(amount, day, category=ExpenseCategory.FOOD, title="Groceries", month=1, year=2024):
    return Expense(
        title=title,
        amount=Decimal(str(amount)),
        category=category,
        date=datetime(year, month, day),
    )


def make_investment(symbol="AAPL", shares=10, purchase_price=100, current_price=100,
                    investment_type=InvestmentType.STOCK, purchase_date=None):
    return Investment(
        symbol=symbol,
        name=f"{symbol} Holding",
        shares=Decimal(str(shares)),
        purchase_price=Decimal(str(purchase_price)),
        current_price=Decimal(str(current_price)),
        purchase_date=purchase_date or datetime(2023, 6, 1),
        type=investment_type,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def budget_engine(store, clock, audit_logger):
    return BudgetEngine(
        store,
        alert_generator=AlertGenerator(clock),
        audit_logger=audit_logger,
        clock=clock,
    )


@pytest.fixture
def ledger(store, budget_engine, audit_logger):
    return LedgerEngine(store, budget_engine=budget_engine, audit_logger=audit_logger)

"""Tests for engine composition and configuration."""

from datetime import datetime
from decimal import Decimal

import pytest

from conftest import FakeClock, make_expense
from finledger.config import get_settings, validate_all_settings
from finledger.models import BudgetPeriod, ExpenseCategory
from finledger.orchestrator import create_engine
from finledger.services.storage import InMemoryRecordStore, JsonFileRecordStore


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Point settings at a temp data dir with the market feed off."""
    monkeypatch.setenv("FINLEDGER_STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FINLEDGER_MARKET_ENABLED", "false")
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


class TestCreateEngine:
    """Tests for create_engine."""

    def test_json_backend_by_default(self, env):
        with create_engine(clock=FakeClock()) as engine:
            assert isinstance(engine.store, JsonFileRecordStore)
            assert engine.store.data_dir == env
            assert not engine.market_feed.is_running
        assert engine.is_disposed

    def test_memory_backend(self, env, monkeypatch):
        monkeypatch.setenv("FINLEDGER_STORAGE_BACKEND", "memory")
        engine = create_engine()
        assert isinstance(engine.store, InMemoryRecordStore)
        engine.dispose()

    def test_data_survives_restart(self, env):
        clock = FakeClock()
        with create_engine(clock=clock) as engine:
            budget = engine.budgets.add_budget(
                name="Groceries",
                category=ExpenseCategory.FOOD,
                limit=Decimal("100"),
                period=BudgetPeriod.MONTHLY,
                start_date=datetime(2024, 1, 1),
            )
            engine.ledger.add_expense(make_expense(85, 10))

        assert (env / "expenses.json").exists()
        assert (env / "audit.jsonl").exists()

        with create_engine(clock=clock) as engine:
            assert engine.budgets.get_budget(budget.id).spent == Decimal("85")
            assert len(engine.budgets.list_alerts()) == 1
            assert len(engine.ledger.list_expenses()) == 1

    def test_startup_recomputes_stale_spent(self, env):
        store = InMemoryRecordStore()
        with create_engine(store=store, clock=FakeClock()) as engine:
            budget = engine.budgets.add_budget(
                name="Groceries",
                category=ExpenseCategory.FOOD,
                limit=Decimal("100"),
                period=BudgetPeriod.MONTHLY,
                start_date=datetime(2024, 1, 1),
            )
            engine.ledger.add_expense(make_expense(40, 10))
            stale = engine.budgets.get_budget(budget.id).model_copy(update={"spent": Decimal("0")})
            engine.budgets.update_budget(stale)

        with create_engine(store=store, clock=FakeClock()) as engine:
            assert engine.budgets.get_budget(budget.id).spent == Decimal("40")

    def test_market_feed_starts_when_asked(self, env):
        engine = create_engine(start_market_feed=True)
        try:
            assert engine.market_feed.is_running
        finally:
            engine.dispose()
        assert not engine.market_feed.is_running

    def test_dispose_is_idempotent(self, env):
        engine = create_engine()
        engine.dispose()
        engine.dispose()
        assert engine.is_disposed


class TestSettings:
    """Tests for settings validation."""

    def test_defaults(self, env):
        settings = get_settings()
        assert settings.market.refresh_interval_seconds == 30
        assert settings.market.max_change_percent == 5.0
        assert settings.app.expiring_soon_days == 3

    def test_log_level_normalized(self, env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert get_settings().app.log_level == "DEBUG"

    def test_invalid_backend_reported(self, env, monkeypatch):
        monkeypatch.setenv("FINLEDGER_STORAGE_BACKEND", "postgres")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
        assert results["market"] is True

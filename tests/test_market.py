"""Tests for the simulated market data and the periodic refresh."""

import random
import threading
from decimal import Decimal

from apscheduler.schedulers.background import BackgroundScheduler

from conftest import NOW, make_investment
from finledger.models import AuditEventType
from finledger.services.market import MarketDataFeed, MarketDataSimulator
from finledger.services.market.feed import JOB_ID


class TestMarketDataSimulator:
    """Tests for quote generation."""

    def test_move_is_bounded(self):
        simulator = MarketDataSimulator(5.0, rng=random.Random(7), clock=lambda: NOW)
        for _ in range(200):
            quote = simulator.quote("AAPL", Decimal("100"))
            assert Decimal("94.99") <= quote.current_price <= Decimal("105.01")
            assert -5.0 <= quote.change_percentage <= 5.0
            assert quote.change == quote.current_price - Decimal("100")
            assert quote.last_updated == NOW

    def test_seeded_rng_is_reproducible(self):
        first = MarketDataSimulator(rng=random.Random(42)).quote("VTI", Decimal("200"))
        second = MarketDataSimulator(rng=random.Random(42)).quote("VTI", Decimal("200"))
        assert first.current_price == second.current_price

    def test_zero_change_keeps_price(self):
        simulator = MarketDataSimulator(0.0, rng=random.Random(1))
        assert simulator.quote("BND", Decimal("80")).current_price == Decimal("80")

    def test_one_quote_per_symbol(self):
        simulator = MarketDataSimulator(rng=random.Random(3))
        quotes = simulator.generate([
            make_investment("AAPL"),
            make_investment("AAPL"),
            make_investment("VTI"),
        ])
        assert sorted(quotes) == ["AAPL", "VTI"]


class TestMarketDataFeed:
    """Tests for the periodic refresh."""

    def test_refresh_updates_ledger(self, ledger):
        investment = ledger.add_investment(make_investment("AAPL"))
        feed = MarketDataFeed(ledger, MarketDataSimulator(rng=random.Random(5)))

        quotes = feed.refresh()

        assert ledger.get_investment(investment.id).current_price == quotes["AAPL"].current_price
        assert feed.latest_quotes == quotes

    def test_refresh_with_no_holdings(self, ledger):
        feed = MarketDataFeed(ledger)
        assert feed.refresh() == {}

    def test_start_and_stop(self, ledger):
        scheduler = BackgroundScheduler(daemon=True)
        feed = MarketDataFeed(ledger, interval_seconds=3600, scheduler=scheduler)

        feed.start()
        try:
            assert feed.is_running
            job = scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.max_instances == 1
        finally:
            feed.stop()

        assert not feed.is_running

    def test_no_refresh_after_stop(self, ledger):
        investment = ledger.add_investment(make_investment("AAPL"))
        feed = MarketDataFeed(ledger, MarketDataSimulator(rng=random.Random(9)))
        feed.stop()

        feed._run_refresh()

        assert ledger.get_investment(investment.id).current_price == Decimal("100")

    def test_failed_refresh_is_contained(self, ledger, audit_logger, audit_storage):
        class BrokenSimulator(MarketDataSimulator):
            def generate(self, investments):
                raise RuntimeError("feed down")

        ledger.add_investment(make_investment("AAPL"))
        feed = MarketDataFeed(ledger, BrokenSimulator(), audit_logger=audit_logger)
        feed._run_refresh()

        assert feed.latest_quotes == {}
        errors = [
            e for e in audit_storage.get_recent_events()
            if e.event_type == AuditEventType.SYSTEM_ERROR
        ]
        assert [e.error_message for e in errors] == ["feed down"]


class TestStopDuringRefresh:
    """A tick that is still generating quotes when the feed stops is discarded."""

    def test_in_flight_refresh_not_applied_after_stop(self, ledger):
        generating = threading.Event()
        release = threading.Event()

        class SlowSimulator(MarketDataSimulator):
            def generate(self, investments):
                generating.set()
                release.wait(5)
                return super().generate(investments)

        investment = ledger.add_investment(make_investment("AAPL"))
        feed = MarketDataFeed(ledger, SlowSimulator(rng=random.Random(11)))

        tick = threading.Thread(target=feed._run_refresh)
        tick.start()
        assert generating.wait(5)

        feed.stop()
        release.set()
        tick.join(5)

        assert not tick.is_alive()
        assert ledger.get_investment(investment.id).current_price == Decimal("100")
        assert feed.latest_quotes == {}

    def test_manual_refresh_still_applies(self, ledger):
        investment = ledger.add_investment(make_investment("AAPL"))
        feed = MarketDataFeed(ledger, MarketDataSimulator(rng=random.Random(11)))
        quotes = feed.refresh()
        assert ledger.get_investment(investment.id).current_price == quotes["AAPL"].current_price

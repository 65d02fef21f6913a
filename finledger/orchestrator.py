"""
Engine Composition

This module wires the components together. There is no process-wide
singleton: create_engine() builds a FinanceEngine from explicit parts
and callers hold on to it (and dispose of it) themselves.

Wiring:
    RecordStore ──> BudgetEngine <── AlertGenerator
         │              ▲  (shared lock, expense source)
         └────────> LedgerEngine <── MarketDataFeed (periodic, own lock)
"""

from datetime import datetime
from typing import Callable, Optional

from finledger.audit import AuditLogger, configure_logging
from finledger.config import Settings, get_settings
from finledger.engine import AlertGenerator, BudgetEngine, LedgerEngine
from finledger.services.market import MarketDataFeed, MarketDataSimulator
from finledger.services.storage import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    JsonLinesAuditStorage,
    RecordStoreInterface,
)


class FinanceEngine:
    """
    The assembled engine.

    Use as a context manager, or call dispose() on teardown so the market
    feed stops and no refresh fires afterwards.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        ledger: LedgerEngine,
        budgets: BudgetEngine,
        market_feed: MarketDataFeed,
        audit_logger: AuditLogger,
    ):
        self.store = store
        self.ledger = ledger
        self.budgets = budgets
        self.market_feed = market_feed
        self.audit_logger = audit_logger
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self.market_feed.stop()
        self._disposed = True

    def __enter__(self) -> "FinanceEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


def create_store(settings: Settings) -> RecordStoreInterface:
    storage = settings.storage
    if storage.backend == "memory":
        return InMemoryRecordStore()
    return JsonFileRecordStore(storage.data_path)


def create_engine(
    settings: Optional[Settings] = None,
    store: Optional[RecordStoreInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
    clock: Callable[[], datetime] = datetime.now,
    start_market_feed: Optional[bool] = None,
) -> FinanceEngine:
    """
    Factory function to create a fully wired FinanceEngine.

    Args:
        settings: Settings to read; defaults to get_settings()
        store: Record store; defaults to the configured backend
        audit_logger: Audit logger; defaults to one persisting next to
            the JSON store (or local-only for the memory backend)
        clock: Source of "now" for budget windows and alert days
        start_market_feed: Override MarketSettings.enabled

    Returns:
        FinanceEngine with budgets already recomputed from the stored expenses
    """
    settings = settings or get_settings()
    app = settings.app
    market = settings.market

    configure_logging(app.log_level, app.log_json)

    if store is None:
        store = create_store(settings)

    if audit_logger is None:
        if isinstance(store, JsonFileRecordStore):
            audit_logger = AuditLogger(JsonLinesAuditStorage(store.data_dir / "audit.jsonl"))
        else:
            audit_logger = AuditLogger()

    budgets = BudgetEngine(
        store,
        alert_generator=AlertGenerator(clock),
        audit_logger=audit_logger,
        clock=clock,
        expiring_soon_days=app.expiring_soon_days,
    )
    ledger = LedgerEngine(store, budget_engine=budgets, audit_logger=audit_logger)

    # Stored spent values may predate the last expense change
    budgets.recompute_all()

    feed = MarketDataFeed(
        ledger,
        MarketDataSimulator(market.max_change_percent, clock=clock),
        interval_seconds=market.refresh_interval_seconds,
        audit_logger=audit_logger,
    )
    if market.enabled if start_market_feed is None else start_market_feed:
        feed.start()

    return FinanceEngine(
        store=store,
        ledger=ledger,
        budgets=budgets,
        market_feed=feed,
        audit_logger=audit_logger,
    )

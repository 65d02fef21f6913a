"""
Periodic Market Price Refresh

Runs the simulator on a background scheduler and pushes the resulting
prices into the ledger through LedgerEngine.update_prices, which takes
the investment lock, so a refresh never interleaves with an investment
mutation.

The job is registered with max_instances=1 and coalesce=True: a slow
refresh is never overlapped by the next tick, and missed ticks collapse
into one run.
"""

import threading
from decimal import Decimal
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from finledger.audit import AuditLogger, get_logger
from finledger.engine.ledger import LedgerEngine
from finledger.models.investment import MarketQuote
from finledger.services.market.simulator import MarketDataSimulator


JOB_ID = "market_refresh"

logger = get_logger("finledger.market")


class MarketDataFeed:
    """Cancellable periodic price refresh for a LedgerEngine."""

    def __init__(
        self,
        ledger: LedgerEngine,
        simulator: Optional[MarketDataSimulator] = None,
        interval_seconds: int = 30,
        scheduler: Optional[BackgroundScheduler] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._simulator = simulator or MarketDataSimulator()
        self._interval = interval_seconds
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)
        self._audit = audit_logger or AuditLogger()
        self._latest: dict[str, MarketQuote] = {}
        self._stopped = False
        self._apply_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._scheduler.running

    @property
    def latest_quotes(self) -> dict[str, MarketQuote]:
        return dict(self._latest)

    def refresh(self) -> dict[str, MarketQuote]:
        """Generate one batch of quotes and apply it to the ledger."""
        self._apply(self._simulator.generate(self._ledger.list_investments()))
        return self.latest_quotes

    def _apply(self, quotes: dict[str, MarketQuote]) -> None:
        if quotes:
            prices: dict[str, Decimal] = {
                symbol: quote.current_price for symbol, quote in quotes.items()
            }
            self._ledger.update_prices(prices)
        self._latest = quotes

    def start(self) -> None:
        if self.is_running:
            return
        self._stopped = False
        self._scheduler.add_job(
            self._run_refresh,
            "interval",
            seconds=self._interval,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("market_feed_started", interval_seconds=self._interval)

    def stop(self) -> None:
        """Stop the schedule. No refresh is applied after this returns."""
        # Waits for a tick that is already applying prices
        with self._apply_lock:
            self._stopped = True
        if self.is_running:
            self._scheduler.remove_job(JOB_ID)
            self._scheduler.shutdown(wait=False)
            logger.info("market_feed_stopped")

    def _run_refresh(self) -> None:
        if self._stopped:
            return
        try:
            quotes = self._simulator.generate(self._ledger.list_investments())
            with self._apply_lock:
                if self._stopped:
                    logger.debug("market_refresh_discarded", symbols=len(quotes))
                    return
                self._apply(quotes)
            logger.debug("market_refresh_completed", symbols=len(quotes))
        except Exception as e:
            # A failed tick must not kill the schedule
            logger.exception("market_refresh_failed")
            self._audit.log_error("market_refresh_failed", str(e))

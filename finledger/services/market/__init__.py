"""Simulated market data package."""

from finledger.services.market.feed import MarketDataFeed
from finledger.services.market.simulator import MarketDataSimulator

__all__ = ["MarketDataFeed", "MarketDataSimulator"]

"""
Simulated Market Data

There is no real market feed. Each refresh moves every held symbol's
price by a random percentage within ±max_change_percent, the same way a
demo ticker would.

Pass a seeded random.Random for reproducible quotes in tests.
"""

import random
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence

from finledger.models.investment import Investment, MarketQuote


PRICE_QUANTUM = Decimal("0.0001")


class MarketDataSimulator:
    """Random-walk quote generator."""

    def __init__(
        self,
        max_change_percent: float = 5.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._max_change = max_change_percent
        self._rng = rng or random.Random()
        self._clock = clock

    def quote(self, symbol: str, current_price: Decimal) -> MarketQuote:
        change_percentage = round(self._rng.uniform(-self._max_change, self._max_change), 4)
        new_price = (
            current_price * (1 + Decimal(str(change_percentage)) / 100)
        ).quantize(PRICE_QUANTUM)
        return MarketQuote(
            symbol=symbol,
            current_price=new_price,
            change=new_price - current_price,
            change_percentage=change_percentage,
            volume=self._rng.randint(100_000, 10_000_000),
            market_cap=Decimal(self._rng.randint(1_000_000_000, 1_000_000_000_000)),
            last_updated=self._clock(),
        )

    def generate(self, investments: Sequence[Investment]) -> dict[str, MarketQuote]:
        """
        One quote per distinct symbol.

        When a symbol is held more than once, the first holding's price
        is the base for the move.
        """
        quotes: dict[str, MarketQuote] = {}
        for investment in investments:
            if investment.symbol not in quotes:
                quotes[investment.symbol] = self.quote(investment.symbol, investment.current_price)
        return quotes

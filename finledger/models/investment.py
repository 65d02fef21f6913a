"""
Investment Models

Holdings and the market quotes that move their prices.

Derived values (total_value, gain_loss, ...) are properties, never stored.
Only current_price changes over time, and only through market updates or
explicit edits.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvestmentType(str, Enum):
    """Asset classes a holding can belong to."""
    STOCK = "stock"
    ETF = "etf"
    BOND = "bond"
    CRYPTO = "crypto"
    MUTUAL_FUND = "mutual_fund"
    REIT = "reit"
    COMMODITY = "commodity"
    OTHER = "other"


class Investment(BaseModel):
    """A position in a single ticker."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique investment ID"
    )
    symbol: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Ticker symbol, stored uppercase"
    )
    name: str = Field(
        ...,
        max_length=200,
    )
    shares: Decimal
    purchase_price: Decimal
    current_price: Decimal
    purchase_date: datetime = Field(default_factory=datetime.now)
    type: InvestmentType
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('symbol')
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.upper()

    @property
    def total_value(self) -> Decimal:
        return self.shares * self.current_price

    @property
    def total_cost(self) -> Decimal:
        return self.shares * self.purchase_price

    @property
    def gain_loss(self) -> Decimal:
        return self.total_value - self.total_cost

    @property
    def gain_loss_percentage(self) -> float:
        """Gain/loss relative to cost, in percent. 0 when cost is not positive."""
        cost = self.total_cost
        if cost <= 0:
            return 0.0
        return float(self.gain_loss / cost * 100)


class MarketQuote(BaseModel):
    """One simulated market data point for a symbol."""

    symbol: str
    current_price: Decimal
    change: Decimal
    change_percentage: float
    volume: int = Field(ge=0)
    market_cap: Optional[Decimal] = None
    last_updated: datetime = Field(default_factory=datetime.now)


class PortfolioAnalytics(BaseModel):
    """
    Portfolio-level metrics.

    Computed by finledger.engine.portfolio.value_portfolio; never persisted.
    """

    total_value: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    total_gain_loss_percentage: float = 0.0
    best_performer: Optional[Investment] = None
    worst_performer: Optional[Investment] = None
    type_breakdown: dict[InvestmentType, Decimal] = Field(default_factory=dict)
    diversification_score: float = Field(default=0.0, ge=0.0, le=100.0)

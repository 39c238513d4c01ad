"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Tuple


class AssetClass(str, Enum):
    """Asset class categorization"""
    EQUITY = "STOCK"
    CRYPTO = "CRYPTO"
    COMMODITY = "COMMODITY"
    CURRENCY = "CURRENCY"
    PRIVATE_EQUITY = "PRIVATE_EQUITY"
    REAL_ESTATE = "REAL_ESTATE"


class CurrencyCode(str, Enum):
    """Display currencies supported by the conversion table"""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CNY = "CNY"


class DiversificationStatus(str, Enum):
    """Diversification verdict returned by an insight provider"""
    POOR = "Poor"
    MODERATE = "Moderate"
    EXCELLENT = "Excellent"
    OVER_DIVERSIFIED = "Over-Diversified"


class StreamState(str, Enum):
    """Market stream lifecycle"""
    DISCONNECTED = "disconnected"
    STREAMING = "streaming"


@dataclass(frozen=True)
class PositionDraft:
    """User input for a new position - everything except id and timestamp"""
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: float
    avg_cost: float
    current_price: float
    change_24h: float = 0.0
    currency: str = "USD"


@dataclass
class Position:
    """
    A single holding. Mutable, owned by the PositionStore.

    Prices are per unit in USD.
    """
    id: str
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: float
    avg_cost: float
    current_price: float
    change_24h: float
    last_updated: datetime
    currency: str = "USD"

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.avg_cost


@dataclass(frozen=True)
class AllocationSlice:
    asset_class: AssetClass
    value: float


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Derived portfolio metrics. Recomputed on every read, never stored.
    """
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float
    allocation: Tuple[AllocationSlice, ...] = ()


@dataclass(frozen=True)
class MarketUpdate:
    """Single simulated trade print for one symbol"""
    symbol: str
    price: float
    absolute_change: float
    percent_change: float
    timestamp: datetime


@dataclass(frozen=True)
class MarketIndex:
    """Index panel entry; changes are measured from the session base value"""
    name: str
    value: float
    absolute_change: float
    percent_change: float


@dataclass(frozen=True)
class InsightReport:
    """Narrative assessment produced by an external insight provider"""
    risk_score: int
    summary: str
    recommendations: List[str] = field(default_factory=list)
    diversification_status: DiversificationStatus = DiversificationStatus.MODERATE

    def __post_init__(self):
        if not 0 <= self.risk_score <= 100:
            raise ValueError("Risk score must be between 0 and 100")

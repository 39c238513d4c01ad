"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AssetClass,
    CurrencyCode,
    DiversificationStatus,
    StreamState,

    # Entities
    AllocationSlice,
    InsightReport,
    MarketIndex,
    MarketUpdate,
    PortfolioSummary,
    Position,
    PositionDraft,
)

__all__ = [
    # Enums
    "AssetClass",
    "CurrencyCode",
    "DiversificationStatus",
    "StreamState",

    # Entities
    "AllocationSlice",
    "InsightReport",
    "MarketIndex",
    "MarketUpdate",
    "PortfolioSummary",
    "Position",
    "PositionDraft",
]

"""
PORTFOLIO AGGREGATOR

Pure derivation of portfolio metrics from a position snapshot.
No storage access. No market data.
"""

from typing import Dict, Iterable

from titan_terminal.domain.models import AllocationSlice, AssetClass, PortfolioSummary, Position


def summarize(positions: Iterable[Position]) -> PortfolioSummary:
    """
    Single pass over ``positions``.

    Allocation keeps the order in which each asset class is first seen.
    An empty portfolio yields all zeros and no allocation.
    """
    total_value = 0.0
    total_cost = 0.0
    by_class: Dict[AssetClass, float] = {}

    for position in positions:
        value = position.quantity * position.current_price
        total_value += value
        total_cost += position.quantity * position.avg_cost
        by_class[position.asset_class] = by_class.get(position.asset_class, 0.0) + value

    total_gain_loss = total_value - total_cost
    if total_cost > 0:
        total_gain_loss_percent = (total_gain_loss / total_cost) * 100.0
    else:
        total_gain_loss_percent = 0.0

    return PortfolioSummary(
        total_value=total_value,
        total_cost=total_cost,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_percent,
        allocation=tuple(
            AllocationSlice(asset_class=asset_class, value=value)
            for asset_class, value in by_class.items()
        ),
    )

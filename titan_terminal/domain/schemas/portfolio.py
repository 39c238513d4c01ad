from pydantic import BaseModel
from typing import List

from titan_terminal.domain.models import PortfolioSummary


class AllocationSchema(BaseModel):
    name: str
    value: float


class PortfolioSummarySchema(BaseModel):
    currency: str
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float
    allocation: List[AllocationSchema]
    formatted_total_value: str
    formatted_total_gain_loss: str

    @classmethod
    def from_summary(
        cls,
        summary: PortfolioSummary,
        currency: str,
        formatted_total_value: str,
        formatted_total_gain_loss: str,
    ) -> "PortfolioSummarySchema":
        return cls(
            currency=currency,
            total_value=summary.total_value,
            total_cost=summary.total_cost,
            total_gain_loss=summary.total_gain_loss,
            total_gain_loss_percent=summary.total_gain_loss_percent,
            allocation=[
                AllocationSchema(name=item.asset_class.value, value=item.value)
                for item in summary.allocation
            ],
            formatted_total_value=formatted_total_value,
            formatted_total_gain_loss=formatted_total_gain_loss,
        )


class InsightSchema(BaseModel):
    risk_score: int
    summary: str
    recommendations: List[str]
    diversification_status: str

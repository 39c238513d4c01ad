"""
Portfolio API Routes
Holdings, derived summary and narrative insight
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from typing import List, Optional
import logging

from titan_terminal.api.dependencies import get_runtime
from titan_terminal.config import settings
from titan_terminal.domain.exceptions import InsightUnavailable, InvalidPosition, UnsupportedCurrency
from titan_terminal.domain.models import AssetClass
from titan_terminal.domain.schemas.portfolio import InsightSchema, PortfolioSummarySchema
from titan_terminal.domain.schemas.position import PositionCreateSchema, PositionSchema
from titan_terminal.domain.services.currency_service import convert_summary, format_amount, get_currency
from titan_terminal.domain.services.portfolio_aggregator import summarize
from titan_terminal.realtime.runtime import TerminalRuntime

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/positions", response_model=List[PositionSchema])
async def list_positions(
    q: Optional[str] = Query(None, description="Case-insensitive match on symbol or name"),
    asset_class: Optional[AssetClass] = Query(None),
    runtime: TerminalRuntime = Depends(get_runtime),
):
    positions = runtime.store.filter(query=q, asset_class=asset_class)
    return [PositionSchema.from_position(p) for p in positions]


@router.post("/positions", response_model=PositionSchema, status_code=201)
async def add_position(
    payload: PositionCreateSchema,
    runtime: TerminalRuntime = Depends(get_runtime),
):
    try:
        position = await runtime.store.add(payload.to_draft())
    except InvalidPosition as e:
        raise HTTPException(status_code=422, detail=str(e))
    return PositionSchema.from_position(position)


@router.delete("/positions/{position_id}", status_code=204)
async def delete_position(position_id: str, runtime: TerminalRuntime = Depends(get_runtime)):
    removed = await runtime.store.remove(position_id)
    if not removed:
        logger.info("Delete for unknown position %s ignored", position_id)
    return Response(status_code=204)


@router.get("/summary", response_model=PortfolioSummarySchema)
async def get_summary(
    currency: str = Query(settings.DEFAULT_CURRENCY),
    runtime: TerminalRuntime = Depends(get_runtime),
):
    """Portfolio totals and allocation, converted into ``currency``."""
    try:
        info = get_currency(currency)
    except UnsupportedCurrency as e:
        raise HTTPException(status_code=400, detail=str(e))

    summary = convert_summary(summarize(runtime.store.snapshot()), info.code)
    return PortfolioSummarySchema.from_summary(
        summary,
        currency=info.code.value,
        formatted_total_value=format_amount(summary.total_value, info.code),
        formatted_total_gain_loss=format_amount(summary.total_gain_loss, info.code),
    )


@router.post("/insight", response_model=InsightSchema)
async def get_insight(runtime: TerminalRuntime = Depends(get_runtime)):
    try:
        report = await runtime.insights.analyze(runtime.store)
    except InsightUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return InsightSchema(
        risk_score=report.risk_score,
        summary=report.summary,
        recommendations=list(report.recommendations),
        diversification_status=report.diversification_status.value,
    )

"""
Market data routes - simulated quotes, indices and stream status.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from titan_terminal.api.dependencies import get_runtime
from titan_terminal.realtime.runtime import TerminalRuntime

router = APIRouter()


@router.get("/status")
async def market_data_status(runtime: TerminalRuntime = Depends(get_runtime)):
    """Return simulated stream state and quote freshness."""
    status = runtime.get_status()
    status["quotes"] = runtime.quote_board.get_status()
    return status


@router.get("/quotes")
async def list_quotes(runtime: TerminalRuntime = Depends(get_runtime)):
    """Latest price per tracked symbol; symbols without a tick yet show their opening quote."""
    board = runtime.quote_board
    quotes = []
    for symbol in runtime.simulator.symbols():
        quote = board.get_last_quote(symbol)
        if quote is None:
            price, change = runtime.simulator.opening_quote(symbol)
            quotes.append({
                "symbol": symbol,
                "price": price,
                # change is relative to the previous close
                "absolute_change": price - price / (1 + change / 100.0),
                "percent_change": change,
                "timestamp": None,
            })
            continue
        quotes.append({
            "symbol": quote.symbol,
            "price": quote.price,
            "absolute_change": quote.absolute_change,
            "percent_change": quote.percent_change,
            "timestamp": quote.timestamp.isoformat(),
        })
    return quotes


@router.get("/indices")
async def list_indices(runtime: TerminalRuntime = Depends(get_runtime)):
    return [
        {
            "name": index.name,
            "value": index.value,
            "absolute_change": index.absolute_change,
            "percent_change": index.percent_change,
        }
        for index in runtime.simulator.indices()
    ]


@router.get("/bars/{symbol}")
async def recent_bars(
    symbol: str,
    limit: int = Query(60, ge=1, le=1000),
    runtime: TerminalRuntime = Depends(get_runtime),
):
    if symbol.upper() not in runtime.simulator.symbols():
        raise HTTPException(status_code=404, detail=f"{symbol} is not tracked")
    bars = runtime.quote_board.get_recent_bars(symbol, limit=limit)
    return [bar.to_dict() for bar in bars]
